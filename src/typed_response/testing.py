"""Test utilities for typed_response.

In-memory body sources and a recording decoder, for tests and examples
that want to exercise dispatch without a real transport.

For real traffic, build handles with typed_response.httpx.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from typed_response._decoders import passthrough
from typed_response._errors import TransportError


@dataclass(slots=True)
class ChunkedBody:
    """A sync and async iterable of byte chunks.

    >>> from typed_response import ResponseHandle
    >>> ResponseHandle(200, body=ChunkedBody([b'{"ok":', b"true}"])).consume()
    b'{"ok":true}'
    """

    chunks: list[bytes]
    reads: int = 0

    def __iter__(self) -> Iterator[bytes]:
        self.reads += 1
        yield from self.chunks

    async def __aiter__(self) -> AsyncIterator[bytes]:
        self.reads += 1
        for chunk in self.chunks:
            yield chunk


@dataclass(slots=True)
class FailingBody:
    """Yields ``chunks`` then fails like a reset connection."""

    chunks: list[bytes] = field(default_factory=list)
    error: Exception = field(
        default_factory=lambda: ConnectionResetError("connection reset by peer")
    )

    def __iter__(self) -> Iterator[bytes]:
        yield from self.chunks
        raise self.error

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        raise self.error


@dataclass(slots=True)
class RecordingDecoder:
    """Wraps a decoder and records every body it was called with."""

    decoder: Callable[[bytes], Any] = passthrough
    calls: list[bytes] = field(default_factory=list)

    def __call__(self, body: bytes, /) -> Any:
        self.calls.append(body)
        return self.decoder(body)

    @property
    def call_count(self) -> int:
        return len(self.calls)


def transport_error(message: str = "connection reset by peer") -> FailingBody:
    """A body that fails with TransportError after the first chunk."""
    return FailingBody(chunks=[b"{"], error=TransportError(message))
