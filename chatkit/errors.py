"""chatkit error hierarchy.

Every failure the client surfaces derives from ChatKitError. Server-reported
errors are normalized into APIError whatever envelope the server used.
"""


class ChatKitError(Exception):
    """Base exception for chatkit operations."""


class MalformedPayload(ChatKitError, ValueError):
    """A payload has a valid shape but a discriminator outside the known set.

    Subclasses ValueError so decode paths treat it like any other decode
    failure (invalid JSON, schema mismatch).
    """


class APIError(ChatKitError):
    """Normalized error reported by the server.

    All wire-level error envelopes collapse into this one shape.
    """

    def __init__(
        self,
        message: str,
        type: str | None = None,
        param: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.type = type
        self.param = param
        self.code = code
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.append(f"code={self.code}")
        if self.status_code is not None:
            parts.append(f"status_code={self.status_code}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"APIError(message={self.message!r}, type={self.type!r}, "
            f"param={self.param!r}, code={self.code!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, APIError):
            return NotImplemented
        return (self.message, self.type, self.param, self.code) == (
            other.message,
            other.type,
            other.param,
            other.code,
        )

    __hash__ = None  # type: ignore[assignment]


class RequestHandlerError(ChatKitError):
    """Failure while executing a request, before any server error is known."""


class InvalidURLGenerated(RequestHandlerError):
    """Base URL and request path did not combine into an absolute URL."""

    pass


class ResponseBodyMissing(RequestHandlerError):
    """Transport returned no body where one was required.

    Non-retryable at this layer.
    """

    pass


class ErrorParsingFailed(RequestHandlerError):
    """None of the known error envelopes matched the error body.

    Carries the body text (or a byte-count placeholder when it is not valid
    UTF-8) for diagnostics.
    """

    def __init__(self, body: str):
        super().__init__(f"Failed to parse error response: {body}")
        self.body = body
