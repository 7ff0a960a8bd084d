"""Pytest fixtures for testing."""

import asyncio
import json
from collections.abc import AsyncIterator, Iterable, Mapping
from typing import Any

import pytest
from pydantic import BaseModel

from chatkit.configuration import Configuration
from chatkit.handler import RequestHandler
from chatkit.transport.base import HTTPResponse, StreamingHTTPResponse, Transport


class Event(BaseModel):
    """Minimal stream payload used by decoder tests."""

    id: str
    object: str


class FakeStreamingResponse(StreamingHTTPResponse):
    """Streaming response that replays canned chunks."""

    def __init__(
        self,
        status_code: int = 200,
        chunks: Iterable[bytes] = (),
        error: Exception | None = None,
        hang: bool = False,
    ):
        self.status_code = status_code
        self.headers = {}
        self._chunks = list(chunks)
        self._error = error
        self._hang = hang
        self.chunks_read = 0
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    async def _iterate(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            self.chunks_read += 1
            yield chunk
        if self._error is not None:
            raise self._error
        if self._hang:
            await asyncio.Event().wait()

    def aiter_chunks(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def aread(self) -> bytes:
        return b"".join(self._chunks)

    async def aclose(self) -> None:
        self.close_count += 1


class FakeTransport(Transport):
    """Transport that records requests and returns preset responses."""

    def __init__(self):
        self.requests: list[dict[str, Any]] = []
        self.response = HTTPResponse(status_code=200, body=b"{}")
        self.streaming_response = FakeStreamingResponse()
        self.closed = False

    def _record(self, method: str, url: str, headers: Mapping[str, str], body: bytes | None) -> None:
        self.requests.append({"method": method, "url": url, "headers": dict(headers), "body": body})

    @property
    def last_request(self) -> dict[str, Any]:
        return self.requests[-1]

    @property
    def last_json(self) -> dict[str, Any]:
        return json.loads(self.last_request["body"])

    async def execute(self, method, url, headers, body) -> HTTPResponse:
        self._record(method, url, headers, body)
        return self.response

    async def stream(self, method, url, headers, body) -> StreamingHTTPResponse:
        self._record(method, url, headers, body)
        return self.streaming_response

    async def aclose(self) -> None:
        self.closed = True


def sse(*payloads: dict[str, Any]) -> bytes:
    """Encode payloads as ``data:`` frames."""
    return b"".join(f"data: {json.dumps(p)}\n\n".encode("utf-8") for p in payloads)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def configuration() -> Configuration:
    return Configuration(api_key="test-key", base_url="https://api.test")


@pytest.fixture
def handler(transport: FakeTransport, configuration: Configuration) -> RequestHandler:
    return RequestHandler(transport, configuration)


@pytest.fixture
def chat_payload() -> dict[str, Any]:
    """A chat completion response body."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "Hello there"},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12},
    }


@pytest.fixture
def chunk_payloads() -> list[dict[str, Any]]:
    """Stream events of a short streamed completion."""
    base = {"id": "chatcmpl-9", "object": "chat.completion.chunk", "created": 1700000000, "model": "gpt-4o"}
    return [
        {**base, "choices": [{"index": 0, "delta": {"role": "assistant", "content": ""}}]},
        {**base, "choices": [{"index": 0, "delta": {"content": "Hel"}}]},
        {**base, "choices": [{"index": 0, "delta": {"content": "lo"}}]},
        {**base, "choices": [{"index": 0, "delta": {}, "finish_reason": "stop"}]},
    ]
