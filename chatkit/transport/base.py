"""Abstract HTTP transport.

Defines the two exchanges the request handler needs from an HTTP stack: a
single request/response round trip and a response whose body arrives as a
sequence of byte chunks.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class HTTPResponse:
    """A fully received response. ``body`` is None when the server sent none."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None


class StreamingHTTPResponse(ABC):
    """A response whose body is read incrementally.

    Implementations must make aclose() idempotent.
    """

    status_code: int
    headers: Mapping[str, str]

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @abstractmethod
    def aiter_chunks(self) -> AsyncIterator[bytes]:
        """Iterate over body chunks as they arrive."""
        ...

    @abstractmethod
    async def aread(self) -> bytes:
        """Read the remaining body in full."""
        ...

    @abstractmethod
    async def aclose(self) -> None:
        """Release the underlying connection."""
        ...


class Transport(ABC):
    """Base interface for HTTP transports."""

    @abstractmethod
    async def execute(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None,
    ) -> HTTPResponse:
        """Send a request and read the whole response.

        Raises:
            Transport-specific errors for connection failures and timeouts.
        """
        ...

    @abstractmethod
    async def stream(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None,
    ) -> StreamingHTTPResponse:
        """Send a request and return as soon as the response headers arrive."""
        ...

    async def aclose(self) -> None:
        """Release transport resources. No-op by default."""
        return None
