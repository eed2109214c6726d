"""
One-shot async byte stream used for record payloads.

A DataStream can be iterated exactly once, end to end. A second iteration
raises StreamExhaustedError instead of silently yielding nothing.
"""

from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, Optional

import httpx

from web5_dwn.errors import StreamExhaustedError, TransportError

DEFAULT_CHUNK_SIZE = 64 * 1024


class DataStream:
    __slots__ = ("_chunks", "_on_close", "_consumed")

    def __init__(
        self,
        chunks: AsyncIterable[bytes],
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self._chunks = chunks
        self._on_close = on_close
        self._consumed = False

    @classmethod
    def from_bytes(cls, data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> "DataStream":
        async def chunks() -> AsyncIterator[bytes]:
            for i in range(0, len(data), chunk_size):
                yield data[i:i + chunk_size]

        return cls(chunks())

    @classmethod
    def from_response(cls, response: httpx.Response) -> "DataStream":
        """Wrap a streamed httpx response body. The response is closed once read."""

        async def chunks() -> AsyncIterator[bytes]:
            try:
                async for chunk in response.aiter_bytes():
                    yield chunk
            except httpx.HTTPError as e:
                raise TransportError(f"Reading response body failed: {e}", retryable=True) from e

        return cls(chunks(), on_close=response.aclose)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise StreamExhaustedError()
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._chunks:
                yield chunk
        finally:
            await self.aclose()

    async def read_all(self) -> bytes:
        return b"".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        """Release the underlying source without reading it."""
        self._consumed = True
        on_close, self._on_close = self._on_close, None
        if on_close is not None:
            await on_close()

    def __repr__(self) -> str:
        return f"DataStream(consumed={self._consumed})"
