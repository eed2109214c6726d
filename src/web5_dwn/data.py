"""
Record data accessor.

A record's payload comes from one of three sources:

- BytesSource: the node returned the payload inline. Reads are repeatable and
  decoded values are memoized, so repeat calls return without suspending.
- StreamSource: a one-shot byte stream, typically a live HTTP response body.
  The first read consumes it; every later read raises StreamExhaustedError.
- PendingSource: nothing was supplied. The first read calls `fetch`, which
  returns bytes or a stream, and the rules above apply to what it returned.

Concurrent reads share one in-flight materialization, so a stream is never
consumed twice and a pending fetch runs once.
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, AsyncIterable, Awaitable, Callable, NamedTuple, Optional, Union

from web5_dwn.errors import DecodeError, StreamExhaustedError
from web5_dwn.stream import DataStream

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, DataStream, AsyncIterable[bytes]]


class BytesSource(NamedTuple):
    buffer: bytes


class StreamSource(NamedTuple):
    stream: DataStream


class PendingSource(NamedTuple):
    fetch: Callable[[], Awaitable[Payload]]


DataSource = Union[BytesSource, StreamSource, PendingSource]


class DataState(str, Enum):
    UNREAD = "unread"
    MATERIALIZING = "materializing"
    CACHED = "cached"
    EXHAUSTED = "exhausted"


def to_source(payload: Payload) -> DataSource:
    """Pick the source variant for a payload returned by a node or a fetch."""
    if isinstance(payload, (bytes, bytearray)):
        return BytesSource(bytes(payload))
    if isinstance(payload, DataStream):
        return StreamSource(payload)
    if hasattr(payload, "__aiter__"):
        return StreamSource(DataStream(payload))
    raise TypeError(f"Unsupported record payload type: {type(payload).__name__}")


def _retrieve_failure(future: "asyncio.Future[Any]") -> None:
    # Marks the exception retrieved even when every waiter has given up.
    if not future.cancelled() and future.exception() is not None:
        logger.debug("Record data read failed: %r", future.exception())


class RecordData:
    """Payload accessor owned by a single Record. There is no reset or rewind."""

    def __init__(self, source: DataSource):
        self._source = source
        self._state = DataState.UNREAD
        self._buffer: Optional[bytes] = None
        self._fetching: Optional[asyncio.Future[DataSource]] = None
        self._inflight: Optional[asyncio.Future[bytes]] = None
        self._decoded: dict[str, Any] = {}

    @property
    def state(self) -> DataState:
        return self._state

    async def read(self) -> bytes:
        """Return the raw payload bytes."""
        return await self._materialized()

    async def text(self) -> str:
        return await self._decode("text", lambda buffer: buffer.decode("utf-8"))

    async def json(self) -> Any:
        """Return the payload parsed as JSON.

        Repeatable for inline payloads; a stream-backed payload can be read
        once, later calls raise StreamExhaustedError.
        """
        return await self._decode("json", json.loads)

    async def stream(self) -> DataStream:
        """Hand over the payload as a stream.

        Inline payloads get a fresh stream over the buffer on every call. A
        one-shot stream is handed over untouched and the accessor is exhausted.
        """
        if self._state is DataState.UNREAD:
            source = await self._resolved_source()
            if isinstance(source, BytesSource):
                return DataStream.from_bytes(source.buffer)
            if self._state is DataState.UNREAD:
                self._state = DataState.EXHAUSTED
                return source.stream
        if self._state is DataState.MATERIALIZING:
            return DataStream.from_bytes(await self._materialized())
        if self._state is DataState.CACHED:
            return DataStream.from_bytes(self._buffer or b"")
        raise StreamExhaustedError()

    async def _decode(self, kind: str, decoder: Callable[[bytes], Any]) -> Any:
        if self._state is DataState.CACHED and kind in self._decoded:
            return self._decoded[kind]
        buffer = await self._materialized()
        if kind not in self._decoded:
            try:
                self._decoded[kind] = decoder(buffer)
            except ValueError as e:
                raise DecodeError(f"Record data is not valid {kind}: {e}") from e
        return self._decoded[kind]

    async def _materialized(self) -> bytes:
        if self._state is DataState.CACHED:
            return self._buffer  # type: ignore[return-value]
        if self._state is DataState.EXHAUSTED:
            raise StreamExhaustedError()
        if self._inflight is None:
            self._state = DataState.MATERIALIZING
            self._inflight = asyncio.ensure_future(self._materialize())
            self._inflight.add_done_callback(_retrieve_failure)
        # Shielded so a caller timing out does not abort consumption for the others.
        return await asyncio.shield(self._inflight)

    async def _materialize(self) -> bytes:
        try:
            source = await self._resolved_source()
        except BaseException:
            # Nothing was consumed yet, a later read may fetch again.
            self._state = DataState.UNREAD
            self._inflight = None
            raise

        if isinstance(source, BytesSource):
            self._buffer = source.buffer
            self._state = DataState.CACHED
            return source.buffer

        try:
            buffer = await source.stream.read_all()
        finally:
            self._state = DataState.EXHAUSTED
        logger.debug("Consumed record data stream (%d bytes)", len(buffer))
        return buffer

    async def _resolved_source(self) -> DataSource:
        if not isinstance(self._source, PendingSource):
            return self._source
        if self._fetching is None:
            self._fetching = asyncio.ensure_future(self._fetch(self._source))
            self._fetching.add_done_callback(_retrieve_failure)
        return await asyncio.shield(self._fetching)

    async def _fetch(self, pending: PendingSource) -> DataSource:
        logger.debug("Fetching record data from node")
        try:
            payload = await pending.fetch()
        finally:
            self._fetching = None
        self._source = to_source(payload)
        return self._source
