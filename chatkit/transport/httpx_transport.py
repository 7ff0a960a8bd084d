"""httpx transport implementation."""

from collections.abc import AsyncIterator, Mapping

import httpx

from .base import HTTPResponse, StreamingHTTPResponse, Transport

DEFAULT_TIMEOUT = 60.0


class HTTPXStreamingResponse(StreamingHTTPResponse):
    """Streaming response backed by an ``httpx.Response`` opened with stream=True."""

    def __init__(self, response: httpx.Response):
        self._response = response
        self.status_code = response.status_code
        self.headers = response.headers

    def aiter_chunks(self) -> AsyncIterator[bytes]:
        return self._response.aiter_bytes()

    async def aread(self) -> bytes:
        return await self._response.aread()

    async def aclose(self) -> None:
        await self._response.aclose()


class HTTPXTransport(Transport):
    """Transport over ``httpx.AsyncClient``.

    Pass an existing client to share its connection pool; it is then left
    open by aclose(). Without one, the transport creates and owns a client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def execute(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None,
    ) -> HTTPResponse:
        response = await self._client.request(method, url, headers=dict(headers), content=body)
        return HTTPResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=response.content or None,
        )

    async def stream(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None,
    ) -> StreamingHTTPResponse:
        request = self._client.build_request(method, url, headers=dict(headers), content=body)
        response = await self._client.send(request, stream=True)
        return HTTPXStreamingResponse(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
