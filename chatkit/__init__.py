"""Async client for a chat completion API.

Builds typed requests, sends them over HTTP and decodes both complete and
streamed (server-sent event) responses into typed values. Server errors are
normalized into APIError whatever envelope the server used.
"""

from .chat import ChatProvider
from .client import ChatClient
from .configuration import Configuration
from .decoding import DateDecodingStrategy, DecodingOptions, KeyDecodingStrategy, decode
from .error_decoder import decode_api_error
from .errors import (
    APIError,
    ChatKitError,
    ErrorParsingFailed,
    InvalidURLGenerated,
    MalformedPayload,
    RequestHandlerError,
    ResponseBodyMissing,
)
from .handler import RequestHandler
from .models import (
    ApproximateLocation,
    Chat,
    ChatStream,
    Choice,
    Delta,
    FinishReason,
    Model,
    SearchContextSize,
    StreamChoice,
    Usage,
    UserLocation,
    WebSearchOptions,
)
from .request import Request, create_chat_request, encode_chat_body
from .stream import EventStream, FrameDecoder
from .transport import HTTPXTransport, Transport
from .wire import (
    AssistantMessage,
    JSONObjectFormat,
    JSONSchemaFormat,
    Message,
    ResponseFormat,
    SystemMessage,
    TextFormat,
    UserMessage,
    decode_message,
    decode_response_format,
    encode_message,
    encode_response_format,
)

__all__ = [
    "ChatClient",
    "ChatProvider",
    "Configuration",
    "RequestHandler",
    "Request",
    "create_chat_request",
    "encode_chat_body",
    "EventStream",
    "FrameDecoder",
    "Transport",
    "HTTPXTransport",
    "DecodingOptions",
    "KeyDecodingStrategy",
    "DateDecodingStrategy",
    "decode",
    "decode_api_error",
    "Message",
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "ResponseFormat",
    "TextFormat",
    "JSONObjectFormat",
    "JSONSchemaFormat",
    "encode_message",
    "decode_message",
    "encode_response_format",
    "decode_response_format",
    "Chat",
    "ChatStream",
    "Choice",
    "StreamChoice",
    "Delta",
    "Usage",
    "FinishReason",
    "Model",
    "WebSearchOptions",
    "SearchContextSize",
    "UserLocation",
    "ApproximateLocation",
    "ChatKitError",
    "APIError",
    "MalformedPayload",
    "RequestHandlerError",
    "InvalidURLGenerated",
    "ResponseBodyMissing",
    "ErrorParsingFailed",
]
