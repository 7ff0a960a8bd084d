"""Server-sent event stream decoding.

FrameDecoder turns raw body chunks into decoded values. Frames are
``data: <json>`` segments and may be split anywhere by the transport, so a
frame that fails to decode is kept as the buffered remainder and retried
once more bytes arrive.

EventStream runs the decoder in a producer task that feeds a bounded queue,
so network reads and consumption proceed independently.
"""

import asyncio
import codecs
import contextlib
import logging
from collections.abc import Callable, Coroutine
from typing import Any, Generic, TypeVar

from .transport.base import StreamingHTTPResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
DEFAULT_MAX_BUFFERED_EVENTS = 64

_PENDING: Any = object()
_END: Any = object()

# Strong references to close tasks scheduled from __del__ until they finish
_background_tasks: set[asyncio.Task[None]] = set()


class FrameDecoder(Generic[T]):
    """Incremental ``data:`` frame decoder.

    The only state is ``remainder``: text of a frame that has not decoded
    yet. It is cleared on every successful decode.
    """

    def __init__(self, parse: Callable[[str], T]):
        self._parse = parse
        self._text = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._chunk_ended_at_boundary = False
        self.remainder = ""

    def feed(self, chunk: bytes) -> list[T]:
        """Consume one chunk and return the values it completed, in order."""
        text = self._text.decode(chunk)
        values: list[T] = []
        for index, segment in enumerate(text.split(DATA_PREFIX)):
            at_boundary = index > 0 or self._chunk_ended_at_boundary
            if not segment or (not segment.strip() and not self.remainder):
                continue
            value = self._decode_segment(segment, at_boundary)
            if value is not _PENDING:
                values.append(value)
        if text:
            self._chunk_ended_at_boundary = text.endswith(DATA_PREFIX)
        return values

    def finish(self) -> None:
        """Signal end of stream, discarding any frame that never decoded."""
        self.remainder += self._text.decode(b"", final=True)
        if self.remainder.strip():
            self._drop_remainder("stream ended")
        self.remainder = ""

    def _decode_segment(self, segment: str, at_boundary: bool) -> Any:
        candidate = self.remainder + segment
        if candidate.strip() == DONE_SENTINEL:
            self.remainder = ""
            return _PENDING

        try:
            value = self._parse(candidate)
        except ValueError:
            pass
        else:
            self.remainder = ""
            return value

        if at_boundary and self.remainder:
            # a new frame started, so the buffered text can no longer complete
            self._drop_remainder("superseded by a new frame")
            return self._decode_segment(segment, at_boundary=False)

        self.remainder = candidate
        return _PENDING

    def _drop_remainder(self, reason: str) -> None:
        logger.warning(
            "Discarding undecodable stream frame (%s)",
            reason,
            extra={"dropped_bytes": len(self.remainder.encode("utf-8"))},
        )
        self.remainder = ""


class _Failure:
    __slots__ = ("error",)

    def __init__(self, error: BaseException):
        self.error = error


class EventStream(Generic[T]):
    """Lazy async iterator over the decoded events of one streaming response.

    Usage:
        async with await client.chat.stream(model="gpt-4o", messages=[...]) as events:
            async for event in events:
                print(event.content, end="")

    Not restartable. Closing the stream (aclose(), leaving the ``async with``
    block, or garbage collection) stops reading and releases the response.
    Transport errors are raised to the consumer after every value decoded
    before them.
    """

    def __init__(
        self,
        response: StreamingHTTPResponse,
        decoder: FrameDecoder[T],
        max_buffered_events: int = DEFAULT_MAX_BUFFERED_EVENTS,
    ):
        self._response = response
        self._decoder = decoder
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max_buffered_events)
        self._task: asyncio.Task[None] | None = None
        self._finished = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    def __aiter__(self) -> "EventStream[T]":
        return self

    async def __anext__(self) -> T:
        if self._finished:
            raise StopAsyncIteration
        if self._task is None:
            self._task = asyncio.create_task(self._produce())

        item = await self._queue.get()
        if item is _END:
            self._finished = True
            raise StopAsyncIteration
        if isinstance(item, _Failure):
            self._finished = True
            raise item.error
        return item

    def _produce(self) -> Coroutine[Any, Any, None]:
        # The producer must not hold a reference to self, otherwise an
        # abandoned stream is never collected and __del__ never runs.
        return _pump(self._response, self._decoder, self._queue)

    async def aclose(self) -> None:
        """Stop reading and release the response. Safe to call repeatedly."""
        self._finished = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        await self._response.aclose()

    async def __aenter__(self) -> "EventStream[T]":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __del__(self) -> None:
        if getattr(self, "_finished", True):
            return
        task = getattr(self, "_task", None)
        if task is not None:
            if not task.done():
                task.cancel()
            return

        # Never iterated: no producer exists to release the response.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Event stream dropped outside an event loop; response left open")
            return
        closer = loop.create_task(self._response.aclose())
        _background_tasks.add(closer)
        closer.add_done_callback(_background_tasks.discard)


async def _pump(
    response: StreamingHTTPResponse,
    decoder: FrameDecoder[T],
    queue: "asyncio.Queue[Any]",
) -> None:
    """Read chunks, decode frames and push values until the body ends.

    The response is closed before the terminal marker is queued.
    """
    outcome: Any = _END
    try:
        async for chunk in response.aiter_chunks():
            for value in decoder.feed(chunk):
                await queue.put(value)
        decoder.finish()
    except Exception as e:
        logger.debug("Event stream failed: %s", e, extra={"error_type": type(e).__name__})
        outcome = _Failure(e)
    finally:
        await response.aclose()
    await queue.put(outcome)
