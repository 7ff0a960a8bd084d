"""Response decoding.

Turns raw response bytes into typed values. The key and date strategies
travel with each Request so one handler can serve endpoints with different
wire conventions.
"""

import json
import re
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, TypeAdapter, ValidationInfo

T = TypeVar("T")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class KeyDecodingStrategy(str, Enum):
    """How object keys in a payload map onto model field names."""

    USE_DEFAULT_KEYS = "use_default_keys"
    CONVERT_FROM_CAMEL_CASE = "convert_from_camel_case"


class DateDecodingStrategy(str, Enum):
    """How timestamp fields are represented on the wire."""

    SECONDS_SINCE_1970 = "seconds_since_1970"
    MILLISECONDS_SINCE_1970 = "milliseconds_since_1970"
    ISO8601 = "iso8601"


class DecodingOptions(BaseModel):
    """Decoding configuration attached to a request."""

    model_config = ConfigDict(frozen=True)

    key_strategy: KeyDecodingStrategy = KeyDecodingStrategy.USE_DEFAULT_KEYS
    date_strategy: DateDecodingStrategy = DateDecodingStrategy.SECONDS_SINCE_1970


def _parse_timestamp(value: Any, info: ValidationInfo) -> Any:
    if isinstance(value, datetime):
        return value

    strategy = DateDecodingStrategy.SECONDS_SINCE_1970
    if info.context:
        strategy = info.context.get("date_strategy", strategy)

    if strategy is DateDecodingStrategy.ISO8601:
        if not isinstance(value, str):
            raise ValueError(f"expected an ISO 8601 string, got {type(value).__name__}")
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a numeric timestamp, got {type(value).__name__}")
    if strategy is DateDecodingStrategy.MILLISECONDS_SINCE_1970:
        value = value / 1000
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"timestamp {value!r} is out of range") from e


# Timestamp field whose wire representation follows the request's date strategy
Timestamp = Annotated[datetime, BeforeValidator(_parse_timestamp)]


def camel_to_snake(key: str) -> str:
    """Convert a camelCase key to snake_case ("messageId" -> "message_id")."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _convert_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {camel_to_snake(k): _convert_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_convert_keys(item) for item in value]
    return value


@lru_cache(maxsize=None)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def decode(model: type[T], data: bytes | str, options: DecodingOptions | None = None) -> T:
    """Decode a JSON document into an instance of ``model``.

    Args:
        model: Target type, usually a pydantic model class.
        data: Raw JSON bytes or text.
        options: Key and date strategies. Defaults to DecodingOptions().

    Returns:
        The validated value.

    Raises:
        ValueError: Invalid UTF-8, invalid JSON, or a payload that does not
            validate against ``model`` (pydantic.ValidationError and
            MalformedPayload are both ValueError subclasses).
    """
    options = options or DecodingOptions()
    payload = json.loads(data)
    if options.key_strategy is KeyDecodingStrategy.CONVERT_FROM_CAMEL_CASE:
        payload = _convert_keys(payload)
    return _adapter(model).validate_python(
        payload, context={"date_strategy": options.date_strategy}
    )
