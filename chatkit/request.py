"""Request values and the chat completion request builder."""

import json
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

from .decoding import DecodingOptions
from .models import Model, WebSearchOptions
from .wire import encode_message, encode_response_format

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"

# Header map copied into a read-only view when the request is built
ReadOnlyHeaders = Annotated[
    Mapping[str, str],
    AfterValidator(lambda headers: MappingProxyType(dict(headers))),
    PlainSerializer(dict),
]


class Request(BaseModel):
    """A fully built request, immutable once created.

    The body is already serialized; the handler only sends it and uses the
    decoding options to read the response.
    """

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    path: str
    body: bytes | None = None
    headers: ReadOnlyHeaders = Field(default_factory=dict, validate_default=True)
    decoding: DecodingOptions = Field(default_factory=DecodingOptions)


def encode_chat_body(
    *,
    model: str | Model,
    messages: Sequence[Any] = (),
    temperature: float | None = None,
    top_p: float | None = None,
    n: int | None = None,
    stream: bool | None = None,
    stops: Sequence[str] | None = None,
    max_tokens: int | None = None,
    presence_penalty: float | None = None,
    frequency_penalty: float | None = None,
    logit_bias: Mapping[str, int] | None = None,
    user: str | None = None,
    response_format: Any | None = None,
    web_search_options: WebSearchOptions | None = None,
    parent_message_id: str | None = None,
    conversation_id: str | None = None,
) -> dict[str, Any]:
    """Build the JSON object sent to the chat completion endpoint.

    Optional values that are None are omitted. ``messages``, ``stop`` and
    ``logit_bias`` are omitted when empty as well.
    """
    body: dict[str, Any] = {"model": model.value if isinstance(model, Model) else model}

    optional = {
        "temperature": temperature,
        "top_p": top_p,
        "n": n,
        "stream": stream,
        "max_tokens": max_tokens,
        "presence_penalty": presence_penalty,
        "frequency_penalty": frequency_penalty,
        "user": user,
        "parent_message_id": parent_message_id,
        "conversation_id": conversation_id,
    }
    body.update({key: value for key, value in optional.items() if value is not None})

    if response_format is not None:
        body["response_format"] = encode_response_format(response_format)
    if web_search_options is not None:
        body["web_search_options"] = web_search_options.to_wire()

    if messages:
        body["messages"] = [encode_message(m) for m in messages]
    if stops:
        body["stop"] = list(stops)
    if logit_bias:
        body["logit_bias"] = dict(logit_bias)

    return body


def create_chat_request(*, stream: bool, **params: Any) -> Request:
    """Build a POST request for the chat completion endpoint.

    Accepts the keyword arguments of encode_chat_body() except ``stream``.
    """
    body = encode_chat_body(stream=stream, **params)
    return Request(
        method="POST",
        path=CHAT_COMPLETIONS_PATH,
        body=json.dumps(body).encode("utf-8"),
    )
