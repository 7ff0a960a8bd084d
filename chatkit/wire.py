"""Tagged-union wire model for chat messages and response formats.

The wire shape is not a field-by-field mirror of the variants (the role or
type tag lives on the class, the schema variant nests its fields), so
encoding and decoding are written out by hand and keyed on the
discriminator string.
"""

import re
from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer

from .errors import MalformedPayload

_SCHEMA_NAME = re.compile(r"[A-Za-z0-9_-]{1,64}")


# --- Messages ---------------------------------------------------------------


class _BaseMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: ClassVar[str]
    content: str


class SystemMessage(_BaseMessage):
    """Instructions that steer the assistant."""

    role: ClassVar[str] = "system"


class UserMessage(_BaseMessage):
    """A message written by the end user."""

    role: ClassVar[str] = "user"


class AssistantMessage(_BaseMessage):
    """A message produced by the model."""

    role: ClassVar[str] = "assistant"


MESSAGE_TYPES: dict[str, type[_BaseMessage]] = {
    cls.role: cls for cls in (SystemMessage, UserMessage, AssistantMessage)
}


def encode_message(message: _BaseMessage) -> dict[str, str]:
    """Encode a message as ``{"role": <tag>, "content": <text>}``."""
    return {"role": message.role, "content": message.content}


def decode_message(obj: Any) -> _BaseMessage:
    """Decode a wire object into the message variant named by its role.

    Raises:
        MalformedPayload: The object is not a mapping, lacks a string role
            or content, or names an unknown role.
    """
    if isinstance(obj, _BaseMessage):
        return obj
    if not isinstance(obj, Mapping):
        raise MalformedPayload(f"Message must be an object, got {type(obj).__name__}")

    role = obj.get("role")
    content = obj.get("content")
    if not isinstance(role, str):
        raise MalformedPayload("Message is missing a string 'role'")
    if not isinstance(content, str):
        raise MalformedPayload("Message is missing a string 'content'")

    try:
        message_type = MESSAGE_TYPES[role]
    except KeyError:
        raise MalformedPayload(f"Unknown message role: {role!r}") from None
    return message_type(content=content)


Message = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage],
    BeforeValidator(decode_message),
    PlainSerializer(encode_message),
]


# --- Response formats -------------------------------------------------------


class _BaseResponseFormat(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ClassVar[str]


class TextFormat(_BaseResponseFormat):
    """Instructs the model to produce text only."""

    type: ClassVar[str] = "text"


class JSONObjectFormat(_BaseResponseFormat):
    """JSON mode: the generated message is valid JSON.

    The prompt itself must still ask for JSON, otherwise the model may emit
    whitespace until it reaches the token limit.
    """

    type: ClassVar[str] = "json_object"


class JSONSchemaFormat(_BaseResponseFormat):
    """Structured output constrained by a JSON Schema document.

    ``name`` must match ``[A-Za-z0-9_-]`` and be at most 64 characters. The
    server enforces this; use is_valid_name() to check before sending.
    """

    type: ClassVar[str] = "json_schema"

    name: str
    description: str | None = None
    json_schema: dict[str, Any] | None = None
    strict: bool | None = None

    def is_valid_name(self) -> bool:
        return _SCHEMA_NAME.fullmatch(self.name) is not None


def encode_response_format(response_format: _BaseResponseFormat) -> dict[str, Any]:
    """Encode a response format.

    The schema variant nests its fields under ``json_schema``; optional
    fields that are None are left out rather than sent as null.
    """
    encoded: dict[str, Any] = {"type": response_format.type}
    if isinstance(response_format, JSONSchemaFormat):
        nested: dict[str, Any] = {"name": response_format.name}
        if response_format.description is not None:
            nested["description"] = response_format.description
        if response_format.json_schema is not None:
            nested["schema"] = response_format.json_schema
        if response_format.strict is not None:
            nested["strict"] = response_format.strict
        encoded["json_schema"] = nested
    return encoded


def decode_response_format(obj: Any) -> _BaseResponseFormat:
    """Decode a wire object into the response format named by its type.

    Raises:
        MalformedPayload: Unknown type, or a json_schema format without its
            nested object or name.
    """
    if isinstance(obj, _BaseResponseFormat):
        return obj
    if not isinstance(obj, Mapping):
        raise MalformedPayload(f"Response format must be an object, got {type(obj).__name__}")

    kind = obj.get("type")
    if kind == TextFormat.type:
        return TextFormat()
    if kind == JSONObjectFormat.type:
        return JSONObjectFormat()
    if kind == JSONSchemaFormat.type:
        nested = obj.get("json_schema")
        if not isinstance(nested, Mapping) or not isinstance(nested.get("name"), str):
            raise MalformedPayload("json_schema response format requires a nested object with a name")
        return JSONSchemaFormat(
            name=nested["name"],
            description=nested.get("description"),
            json_schema=nested.get("schema"),
            strict=nested.get("strict"),
        )
    raise MalformedPayload(f"Unknown response format type: {kind!r}")


ResponseFormat = Annotated[
    Union[TextFormat, JSONObjectFormat, JSONSchemaFormat],
    BeforeValidator(decode_response_format),
    PlainSerializer(encode_response_format),
]
