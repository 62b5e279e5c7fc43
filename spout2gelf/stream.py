import asyncio
from collections.abc import AsyncIterator

from spout2gelf.types import LogRecord

_CLOSED = object()


class LogStreamClosed(Exception):
    pass


class LogStream(AsyncIterator[LogRecord]):
    """
    Unbounded channel of log records with a single consumer.
    Iteration blocks until a record arrives and ends once the producer has
    closed the stream and every queued record has been consumed.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._finished = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put_nowait(self, record: LogRecord):
        if self._closed:
            raise LogStreamClosed("log stream is closed")
        self._queue.put_nowait(record)

    async def put(self, record: LogRecord):
        self.put_nowait(record)

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> LogRecord:
        if self._finished:
            raise StopAsyncIteration()

        item = await self._queue.get()
        if item is _CLOSED:
            self._finished = True
            raise StopAsyncIteration()
        return item
