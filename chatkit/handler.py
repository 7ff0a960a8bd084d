"""Request execution.

RequestHandler sends built requests through a transport and decodes the
responses. It performs no retries; transport errors propagate unchanged.
"""

import logging
from collections.abc import Mapping
from typing import TypeVar

from .configuration import Configuration
from .decoding import decode
from .error_decoder import decode_api_error
from .errors import ResponseBodyMissing
from .request import Request
from .stream import DEFAULT_MAX_BUFFERED_EVENTS, EventStream, FrameDecoder
from .transport.base import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


def merge_headers(base: Mapping[str, str], overrides: Mapping[str, str]) -> dict[str, str]:
    """Merge header maps; names compare case-insensitively and overrides win."""
    merged = dict(base)
    for name, value in overrides.items():
        for existing in [key for key in merged if key.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


class RequestHandler:
    """Executes requests against the API described by a Configuration."""

    def __init__(
        self,
        transport: Transport,
        configuration: Configuration,
        max_buffered_events: int = DEFAULT_MAX_BUFFERED_EVENTS,
    ):
        self._transport = transport
        self._configuration = configuration
        self._max_buffered_events = max_buffered_events

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    async def perform(self, request: Request, model: type[T]) -> T:
        """Run a single request/response exchange.

        The body is decoded as ``model`` first. Only if that fails is it read
        as an error envelope; the status code is not consulted beforehand.

        Args:
            request: Built request.
            model: Expected success type.

        Returns:
            The decoded success value.

        Raises:
            InvalidURLGenerated: The request path does not form a valid URL.
            ResponseBodyMissing: The response had no body.
            APIError: The body held a server-reported error.
            ErrorParsingFailed: The body was neither ``model`` nor a known
                error envelope.
        """
        url = self._configuration.url_for(request.path)
        headers = merge_headers(self._configuration.headers, request.headers)

        logger.debug(
            "Sending request",
            extra={"method": request.method, "path": request.path},
        )
        response = await self._transport.execute(request.method, url, headers, request.body)

        if response.body is None:
            raise ResponseBodyMissing(
                f"{request.method} {request.path} returned no body "
                f"(status {response.status_code})"
            )

        try:
            return decode(model, response.body, request.decoding)
        except ValueError:
            error = decode_api_error(response.body)
            error.status_code = response.status_code
            logger.debug(
                "Request failed: %s",
                error,
                extra={"path": request.path, "status_code": response.status_code},
            )
            raise error

    async def stream(
        self,
        request: Request,
        model: type[T],
        max_buffered_events: int | None = None,
    ) -> EventStream[T]:
        """Open a streaming exchange.

        A non-2xx status is reported before any event: the body is read in
        full, the response is closed and the normalized error is raised.

        Returns:
            EventStream yielding ``model`` values in arrival order.

        Raises:
            InvalidURLGenerated: The request path does not form a valid URL.
            APIError: The server answered with an error status.
            ErrorParsingFailed: The error body matched no known envelope.
        """
        url = self._configuration.url_for(request.path)
        headers = merge_headers(self._configuration.headers, request.headers)

        logger.debug(
            "Opening stream",
            extra={"method": request.method, "path": request.path},
        )
        response = await self._transport.stream(request.method, url, headers, request.body)

        if not response.is_success:
            try:
                body = await response.aread()
            finally:
                await response.aclose()
            error = decode_api_error(body)
            error.status_code = response.status_code
            logger.debug(
                "Stream rejected: %s",
                error,
                extra={"path": request.path, "status_code": response.status_code},
            )
            raise error

        if max_buffered_events is None:
            max_buffered_events = self._max_buffered_events
        options = request.decoding
        decoder = FrameDecoder(lambda frame: decode(model, frame, options))
        return EventStream(response, decoder, max_buffered_events=max_buffered_events)
