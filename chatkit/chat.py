"""Chat completion endpoint."""

from collections.abc import Mapping, Sequence

from .handler import RequestHandler
from .models import Chat, ChatStream, Model, WebSearchOptions
from .request import create_chat_request
from .stream import EventStream
from .wire import Message, ResponseFormat


class ChatProvider:
    """Creates chat completions, in full or as a stream of deltas.

    ``POST /v1/chat/completions``
    """

    def __init__(self, handler: RequestHandler):
        self._handler = handler

    async def create(
        self,
        model: str | Model,
        messages: Sequence[Message] = (),
        temperature: float | None = None,
        top_p: float | None = None,
        n: int | None = None,
        stops: Sequence[str] | None = None,
        max_tokens: int | None = None,
        presence_penalty: float | None = None,
        frequency_penalty: float | None = None,
        logit_bias: Mapping[str, int] | None = None,
        user: str | None = None,
        response_format: ResponseFormat | None = None,
        web_search_options: WebSearchOptions | None = None,
        parent_message_id: str | None = None,
        conversation_id: str | None = None,
    ) -> Chat:
        """Create a chat completion.

        Args:
            model: Model id.
            messages: Conversation so far.
            temperature: Sampling temperature, server default 1.0.
            top_p: Nucleus sampling mass, server default 1.0.
            n: Number of choices to generate, server default 1.
            stops: Up to four sequences that end generation. Sent as ``stop``.
            max_tokens: Upper bound on generated tokens.
            presence_penalty: Server default 0.0.
            frequency_penalty: Server default 0.0.
            logit_bias: Token id to bias value.
            user: End-user identifier for abuse monitoring.
            response_format: Text, JSON mode or JSON Schema output.
            web_search_options: Options for search-enabled models.
            parent_message_id: Passthrough id for threaded conversations.
            conversation_id: Passthrough id for threaded conversations.

        Returns:
            The completed Chat.
        """
        request = create_chat_request(
            stream=False,
            model=model,
            messages=messages,
            temperature=temperature,
            top_p=top_p,
            n=n,
            stops=stops,
            max_tokens=max_tokens,
            presence_penalty=presence_penalty,
            frequency_penalty=frequency_penalty,
            logit_bias=logit_bias,
            user=user,
            response_format=response_format,
            web_search_options=web_search_options,
            parent_message_id=parent_message_id,
            conversation_id=conversation_id,
        )
        return await self._handler.perform(request, Chat)

    async def stream(
        self,
        model: str | Model,
        messages: Sequence[Message] = (),
        temperature: float | None = None,
        top_p: float | None = None,
        n: int | None = None,
        stops: Sequence[str] | None = None,
        max_tokens: int | None = None,
        presence_penalty: float | None = None,
        frequency_penalty: float | None = None,
        logit_bias: Mapping[str, int] | None = None,
        user: str | None = None,
        response_format: ResponseFormat | None = None,
        web_search_options: WebSearchOptions | None = None,
        parent_message_id: str | None = None,
        conversation_id: str | None = None,
    ) -> EventStream[ChatStream]:
        """Create a chat completion delivered as server-sent events.

        Takes the same arguments as create(). Partial message deltas arrive
        as ``data:`` frames as they are generated; the server ends the
        stream with ``data: [DONE]``.
        """
        request = create_chat_request(
            stream=True,
            model=model,
            messages=messages,
            temperature=temperature,
            top_p=top_p,
            n=n,
            stops=stops,
            max_tokens=max_tokens,
            presence_penalty=presence_penalty,
            frequency_penalty=frequency_penalty,
            logit_bias=logit_bias,
            user=user,
            response_format=response_format,
            web_search_options=web_search_options,
            parent_message_id=parent_message_id,
            conversation_id=conversation_id,
        )
        return await self._handler.stream(request, ChatStream)
