"""Unit tests for the request handler.

Tests cover:
- Single-exchange requests: success decode, error fallback, missing body
- Header merging and URL building
- Streaming requests: error status handling before any value
"""

import json

import pytest

from chatkit.configuration import Configuration
from chatkit.errors import (
    APIError,
    ErrorParsingFailed,
    InvalidURLGenerated,
    ResponseBodyMissing,
)
from chatkit.handler import RequestHandler, merge_headers
from chatkit.models import Chat, ChatStream
from chatkit.request import Request
from chatkit.stream import EventStream
from chatkit.transport.base import HTTPResponse

from conftest import Event, FakeStreamingResponse, sse


def post(path: str = "/v1/chat/completions", **kwargs) -> Request:
    return Request(method="POST", path=path, body=b'{"model":"gpt-4o"}', **kwargs)


class TestMergeHeaders:
    """Tests for header merging."""

    def test_request_headers_override(self):
        """Test request headers win over base headers regardless of case."""
        merged = merge_headers(
            {"Content-Type": "application/json", "Authorization": "Bearer a"},
            {"authorization": "Bearer b", "X-Trace": "1"},
        )
        assert merged == {"Content-Type": "application/json", "authorization": "Bearer b", "X-Trace": "1"}


class TestPerform:
    """Tests for RequestHandler.perform()."""

    @pytest.mark.asyncio
    async def test_success(self, handler, transport, chat_payload):
        """Test a success body is decoded into the requested type."""
        transport.response = HTTPResponse(status_code=200, body=json.dumps(chat_payload).encode())

        chat = await handler.perform(post(), Chat)

        assert isinstance(chat, Chat)
        assert chat.content == "Hello there"
        assert transport.last_request["method"] == "POST"
        assert transport.last_request["url"] == "https://api.test/v1/chat/completions"
        assert transport.last_request["body"] == b'{"model":"gpt-4o"}'

    @pytest.mark.asyncio
    async def test_headers_merged(self, handler, transport, chat_payload):
        """Test configuration headers are sent and extended by request headers."""
        transport.response = HTTPResponse(status_code=200, body=json.dumps(chat_payload).encode())

        await handler.perform(post(headers={"X-Request-Id": "abc"}), Chat)

        headers = transport.last_request["headers"]
        assert headers["Authorization"] == "Bearer test-key"
        assert headers["Content-Type"] == "application/json"
        assert headers["X-Request-Id"] == "abc"

    @pytest.mark.asyncio
    async def test_missing_body(self, handler, transport):
        """Test an absent body raises ResponseBodyMissing."""
        transport.response = HTTPResponse(status_code=204, body=None)

        with pytest.raises(ResponseBodyMissing):
            await handler.perform(post(), Chat)

    @pytest.mark.asyncio
    async def test_error_body(self, handler, transport):
        """Test a body that is not the success type is decoded as an error."""
        transport.response = HTTPResponse(
            status_code=401,
            body=b'{"error": {"message": "Incorrect API key provided", "type": "invalid_request_error", "code": "invalid_api_key"}}',
        )

        with pytest.raises(APIError) as exc_info:
            await handler.perform(post(), Chat)

        assert exc_info.value.message == "Incorrect API key provided"
        assert exc_info.value.code == "invalid_api_key"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_error_body_with_success_status(self, handler, transport):
        """Test the status code is not consulted before decoding."""
        transport.response = HTTPResponse(status_code=200, body=b'{"detail": "Conversation not found"}')

        with pytest.raises(APIError) as exc_info:
            await handler.perform(post(), Chat)

        assert exc_info.value.code == "Conversation not found"

    @pytest.mark.asyncio
    async def test_unparseable_body(self, handler, transport):
        """Test an unknown body raises ErrorParsingFailed carrying the text."""
        transport.response = HTTPResponse(status_code=502, body=b"Bad Gateway")

        with pytest.raises(ErrorParsingFailed) as exc_info:
            await handler.perform(post(), Chat)

        assert exc_info.value.body == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_out_of_range_timestamp(self, handler, transport, chat_payload):
        """Test an unrepresentable timestamp falls through to the error chain."""
        chat_payload["created"] = 1e20
        transport.response = HTTPResponse(status_code=200, body=json.dumps(chat_payload).encode())

        with pytest.raises(ErrorParsingFailed):
            await handler.perform(post(), Chat)

    @pytest.mark.asyncio
    async def test_invalid_url(self, transport):
        """Test a base URL without scheme raises InvalidURLGenerated."""
        handler = RequestHandler(transport, Configuration(base_url="api.test"))

        with pytest.raises(InvalidURLGenerated):
            await handler.perform(post(), Chat)
        assert transport.requests == []


class TestStream:
    """Tests for RequestHandler.stream()."""

    @pytest.mark.asyncio
    async def test_success(self, handler, transport):
        """Test a success status returns a stream of decoded events."""
        transport.streaming_response = FakeStreamingResponse(
            chunks=[sse({"id": "1", "object": "a"}, {"id": "2", "object": "b"})]
        )

        stream = await handler.stream(post(), Event)

        assert isinstance(stream, EventStream)
        assert [e.id async for e in stream] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_error_status(self, handler, transport):
        """Test an error status yields no values and one normalized error."""
        response = FakeStreamingResponse(
            status_code=429,
            chunks=[b'{"error": {"message": "Rate limit ', b'reached", "type": "requests"}}'],
        )
        transport.streaming_response = response

        with pytest.raises(APIError) as exc_info:
            await handler.stream(post(), Event)

        assert exc_info.value.message == "Rate limit reached"
        assert exc_info.value.type == "requests"
        assert exc_info.value.status_code == 429
        assert response.closed

    @pytest.mark.asyncio
    async def test_error_status_unparseable(self, handler, transport):
        """Test an unknown error body on a stream raises ErrorParsingFailed."""
        transport.streaming_response = FakeStreamingResponse(status_code=500, chunks=[b"upstream timeout"])

        with pytest.raises(ErrorParsingFailed) as exc_info:
            await handler.stream(post(), Event)

        assert exc_info.value.body == "upstream timeout"

    @pytest.mark.asyncio
    async def test_frame_errors_not_raised(self, handler, transport):
        """Test frames of the wrong shape are buffered, never raised."""
        transport.streaming_response = FakeStreamingResponse(
            chunks=[b'data: {"unexpected": true}\n\n', sse({"id": "1", "object": "a"})]
        )

        stream = await handler.stream(post(), Event)

        assert [e.id async for e in stream] == ["1"]

    @pytest.mark.asyncio
    async def test_out_of_range_timestamp_frame_skipped(self, handler, transport, chunk_payloads):
        """Test a frame with an unrepresentable timestamp does not end the stream."""
        bad, good = chunk_payloads[1], chunk_payloads[2]
        transport.streaming_response = FakeStreamingResponse(
            chunks=[sse({**bad, "created": 1e20}), sse(good)]
        )

        stream = await handler.stream(post(), ChatStream)

        assert [e.content async for e in stream] == ["lo"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size,expected", [(None, 64), (0, 0), (3, 3)])
    async def test_buffer_size(self, handler, transport, size, expected):
        """Test an explicit buffer size, including unbounded 0, is honoured."""
        transport.streaming_response = FakeStreamingResponse(chunks=[sse({"id": "1", "object": "a"})])

        stream = await handler.stream(post(), Event, max_buffered_events=size)

        assert stream._queue.maxsize == expected
        await stream.aclose()
