"""chatkit data models.

Request options and response payloads for the chat completion endpoint.
Messages and response formats are tagged unions defined in ``wire``.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from .decoding import Timestamp
from .wire import Message, ResponseFormat


class Model(str, Enum):
    """Well-known chat model identifiers. Any model id string is accepted."""

    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4O_SEARCH_PREVIEW = "gpt-4o-search-preview"
    GPT_4O_MINI_SEARCH_PREVIEW = "gpt-4o-mini-search-preview"
    GPT_4_1 = "gpt-4.1"
    GPT_4_1_MINI = "gpt-4.1-mini"
    O3_MINI = "o3-mini"


class FinishReason(str, Enum):
    """Why the model stopped generating."""

    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    TOOL_CALLS = "tool_calls"
    FUNCTION_CALL = "function_call"


class SearchContextSize(str, Enum):
    """How much search context the model may retrieve."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ApproximateLocation(BaseModel):
    """Approximate user location used to localize web search results."""

    model_config = ConfigDict(frozen=True)

    city: str | None = None
    country: str | None = None
    region: str | None = None
    timezone: str | None = None
    type: str | None = "approximate"


class UserLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    approximate: ApproximateLocation


class WebSearchOptions(BaseModel):
    """Options for search-enabled models."""

    model_config = ConfigDict(frozen=True)

    search_context_size: SearchContextSize | None = None
    user_location: UserLocation | None = None

    def to_wire(self) -> dict[str, Any]:
        """Encode with absent fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class Usage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class Choice(BaseModel):
    """One completion alternative."""

    index: int
    message: Message
    finish_reason: FinishReason | None = None


class Chat(BaseModel):
    """Chat completion response."""

    id: str
    object: str
    created: Timestamp
    model: str
    choices: list[Choice]
    usage: Usage
    response_format: ResponseFormat | None = None
    web_search_options: WebSearchOptions | None = None
    conversation_id: str | None = None
    message_id: str | None = None

    @property
    def content(self) -> str:
        """Content of the first choice, or an empty string."""
        if self.choices:
            return self.choices[0].message.content
        return ""


class Delta(BaseModel):
    """Incremental message content carried by one stream event."""

    content: str | None = None
    role: str | None = None


class StreamChoice(BaseModel):
    index: int
    finish_reason: FinishReason | None = None
    delta: Delta


class ChatStream(BaseModel):
    """One server-sent event of a streamed chat completion."""

    id: str
    object: str
    created: Timestamp
    model: str
    choices: list[StreamChoice]
    response_format: ResponseFormat | None = None
    web_search_options: WebSearchOptions | None = None
    conversation_id: str | None = None
    message_id: str | None = None

    @property
    def content(self) -> str:
        """Concatenated delta content of all choices in this event."""
        return "".join(choice.delta.content or "" for choice in self.choices)
