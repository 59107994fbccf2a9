"""Response Handle — status, headers and a single-use body.

The handle owns the body until consume() moves it out. After that the
handle keeps only its metadata; every further read attempt raises
BodyReuseError instead of returning empty data.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable, Iterator, Mapping
from typing import Protocol, runtime_checkable

from typed_response._errors import BodyReuseError, TransportError


@runtime_checkable
class SyncBody(Protocol):
    """A body that can be read to completion in one blocking call."""

    def read(self) -> bytes: ...


@runtime_checkable
class AsyncBody(Protocol):
    """A body that can be read to completion in one awaited call."""

    async def aread(self) -> bytes: ...


type BodySource = (
    bytes | bytearray | memoryview | SyncBody | AsyncBody | Iterable[bytes] | AsyncIterable[bytes]
)

type HeaderPairs = Mapping[str, str] | Iterable[tuple[str, str]]


class Headers:
    """Ordered, case-insensitive header multimap.

    Names are matched case-insensitively, values are kept verbatim and
    repeated names keep their arrival order. Objects with ``multi_items()``
    (httpx.Headers, multidicts) are read pair by pair so repeats survive.
    """

    __slots__ = ("_index", "_items")

    def __init__(self, headers: Headers | HeaderPairs | None = None) -> None:
        if headers is None:
            items: tuple[tuple[str, str], ...] = ()
        elif isinstance(headers, Headers):
            items = headers._items
        elif callable(getattr(headers, "multi_items", None)):
            pairs = headers.multi_items()  # type: ignore[union-attr]
            items = tuple((str(k), str(v)) for k, v in pairs)
        elif isinstance(headers, Mapping):
            items = tuple((str(k), str(v)) for k, v in headers.items())
        else:
            items = tuple((str(k), str(v)) for k, v in headers)

        index: dict[str, list[str]] = {}
        for name, value in items:
            index.setdefault(name.lower(), []).append(value)

        self._items = items
        self._index = {k: tuple(v) for k, v in index.items()}

    def get_all(self, name: str) -> tuple[str, ...]:
        """Every value for ``name`` in arrival order (empty when absent)."""
        return self._index.get(name.lower(), ())

    def get(self, name: str, default: str | None = None) -> str | None:
        """First value for ``name``, or ``default``."""
        values = self._index.get(name.lower())
        return values[0] if values else default

    def items(self) -> tuple[tuple[str, str], ...]:
        return self._items

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._index

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"Headers({list(self._items)!r})"


class ResponseHandle:
    """A completed HTTP response whose body has not been read yet.

    ``status`` and ``headers`` may be read any number of times. The body is
    read through consume() or aconsume(), at most once over the handle's
    lifetime.
    """

    __slots__ = ("_body", "_consumed", "_headers", "_status")

    def __init__(
        self,
        status: int,
        headers: Headers | HeaderPairs | None = None,
        body: BodySource = b"",
    ) -> None:
        if isinstance(status, bool) or not isinstance(status, int):
            msg = f"status must be an int, got {type(status).__name__}"
            raise TypeError(msg)
        self._status = status
        self._headers = Headers(headers)
        self._body: BodySource | None = body
        self._consumed = False

    @property
    def status(self) -> int:
        return self._status

    @property
    def headers(self) -> Headers:
        return self._headers

    @property
    def consumed(self) -> bool:
        """True once the body has been moved out of this handle."""
        return self._consumed

    def consume(self) -> bytes:
        """Move the body out of the handle and read it to completion.

        Raises:
            BodyReuseError: The body was already consumed.
            TransportError: The body stream failed mid-read.
            TypeError: The body can only be read asynchronously.
        """
        if self._consumed:
            raise BodyReuseError
        if _is_async_only(self._body):
            msg = "response body is asynchronous, use aconsume()"
            raise TypeError(msg)
        return _read_sync(self._take())

    async def aconsume(self) -> bytes:
        """Async variant of consume(); accepts sync and async bodies.

        Cancellation propagates unchanged. The body counts as consumed
        either way since a partially read stream cannot be resumed.
        """
        if self._consumed:
            raise BodyReuseError
        return await _read_async(self._take())

    def _take(self) -> BodySource:
        body = self._body
        self._body = None
        self._consumed = True
        assert body is not None
        return body

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "unconsumed"
        return f"<ResponseHandle [{self._status}] {state}>"


def _is_async_only(source: object) -> bool:
    if isinstance(source, SyncBody):
        return False
    if isinstance(source, AsyncBody):
        return True
    return isinstance(source, AsyncIterable) and not isinstance(source, Iterable)


def _read_sync(source: BodySource) -> bytes:
    try:
        if isinstance(source, bytes | bytearray | memoryview):
            return bytes(source)
        if isinstance(source, SyncBody):
            return _ensure_bytes(source.read())
        if isinstance(source, Iterable) and not isinstance(source, str):
            return b"".join(_ensure_bytes(chunk) for chunk in source)
    except OSError as e:
        raise TransportError(str(e)) from e
    msg = f"unsupported body source: {type(source).__name__}"
    raise TypeError(msg)


async def _read_async(source: BodySource) -> bytes:
    try:
        if isinstance(source, AsyncBody):
            return _ensure_bytes(await source.aread())
        if isinstance(source, AsyncIterable):
            return b"".join([_ensure_bytes(chunk) async for chunk in source])
    except OSError as e:
        raise TransportError(str(e)) from e
    return _read_sync(source)


def _ensure_bytes(data: object) -> bytes:
    if isinstance(data, bytes | bytearray | memoryview):
        return bytes(data)
    msg = f"body source produced {type(data).__name__}, expected bytes"
    raise TypeError(msg)
