"""Error envelope decoding.

The service has wrapped error details in several envelopes over time. Each
envelope gets its own parser; the parsers run in a fixed order and the first
one that matches structurally produces the normalized APIError.
"""

import json
import logging
from collections.abc import Callable
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, StrictStr, ValidationError

from .errors import APIError, ErrorParsingFailed

logger = logging.getLogger(__name__)

# Marker found in bot-protection interstitial pages served instead of JSON
CLOUDFLARE_CHALLENGE_MARKER = "cf_chl_opt"
CLOUDFLARE_CHALLENGE_CODE = "cloudflare_challenge"
CLOUDFLARE_CHALLENGE_MESSAGE = (
    "The request was blocked by a bot-protection challenge page. "
    "The service is refusing automated traffic from this network; try again later."
)


def _code_to_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ErrorDetail(BaseModel):
    """Error details as the server reports them."""

    message: StrictStr
    type: StrictStr | None = None
    param: StrictStr | None = None
    code: Annotated[StrictStr | None, BeforeValidator(_code_to_str)] = None

    def to_error(self) -> APIError:
        return APIError(self.message, type=self.type, param=self.param, code=self.code)


class DetailEnvelope(BaseModel):
    detail: ErrorDetail


class StringDetailEnvelope(BaseModel):
    detail: StrictStr


class ErrorEnvelope(BaseModel):
    error: ErrorDetail


def parse_detail_object(payload: Any) -> APIError:
    """``{"detail": {"message": ..., "type": ..., "param": ..., "code": ...}}``"""
    return DetailEnvelope.model_validate(payload).detail.to_error()


def parse_detail_string(payload: Any) -> APIError:
    """``{"detail": "<text>"}``

    A bot-protection interstitial gets a fixed, readable error; any other
    text becomes both message and code.
    """
    detail = StringDetailEnvelope.model_validate(payload).detail
    if CLOUDFLARE_CHALLENGE_MARKER in detail:
        return APIError(CLOUDFLARE_CHALLENGE_MESSAGE, code=CLOUDFLARE_CHALLENGE_CODE)
    return APIError(detail, code=detail)


def parse_error_object(payload: Any) -> APIError:
    """``{"error": {"message": ..., "type": ..., "param": ..., "code": ...}}``"""
    return ErrorEnvelope.model_validate(payload).error.to_error()


# Order matters: the string form must be tried before falling through to the
# "error" envelope, and "detail" objects take precedence over "error" ones.
ERROR_SHAPES: tuple[tuple[str, Callable[[Any], APIError]], ...] = (
    ("detail_object", parse_detail_object),
    ("detail_string", parse_detail_string),
    ("error_object", parse_error_object),
)


def describe_body(body: bytes) -> str:
    """Body as text, or a byte-count placeholder when it is not valid UTF-8."""
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        return f"<{len(body)} bytes of undecodable data>"


def decode_api_error(body: bytes) -> APIError:
    """Decode an error body into a normalized APIError.

    Args:
        body: Raw bytes the server returned for a failed request.

    Returns:
        The APIError built by the first envelope shape that matches. The
        caller decides whether to raise it.

    Raises:
        ErrorParsingFailed: No known envelope matched.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        raise ErrorParsingFailed(describe_body(body)) from None

    for shape, parse in ERROR_SHAPES:
        try:
            error = parse(payload)
        except ValidationError:
            continue
        logger.debug("Decoded error response", extra={"shape": shape, "code": error.code})
        return error

    raise ErrorParsingFailed(describe_body(body))
