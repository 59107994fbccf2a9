"""Typed Outcome — the closed result union of a dispatch.

Exactly one variant is produced per dispatch and exactly one payload is
populated, consistent with the variant's ``kind``. Handle it exhaustively
with ``match``::

    match dispatch(handle, rules):
        case Success(value=user):
            ...
        case Error(value=problem):
            ...
        case Raw(body=data):
            ...
        case DecodeFailed(body=data, error=exc):
            ...
        case Unmatched(handle=h):
            ...

or through the tag-checked accessors (unwrap, unwrap_error, unwrap_raw),
which raise OutcomeAccessError against the wrong variant.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from typed_response._errors import OutcomeAccessError
from typed_response._types import OutcomeKind, Role

if TYPE_CHECKING:
    from typed_response._response import Headers, ResponseHandle


class _Accessors:
    """Tag-checked accessors shared by every outcome variant."""

    __slots__ = ()

    kind: ClassVar[OutcomeKind]

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.kind is OutcomeKind.ERROR

    @property
    def is_raw(self) -> bool:
        return self.kind is OutcomeKind.RAW

    @property
    def is_unmatched(self) -> bool:
        return self.kind is OutcomeKind.UNMATCHED

    @property
    def is_decode_failed(self) -> bool:
        return self.kind is OutcomeKind.DECODE_FAILED

    def unwrap(self) -> Any:
        """The decoded success value."""
        if isinstance(self, Success):
            return self.value
        raise OutcomeAccessError(OutcomeKind.SUCCESS, self.kind)

    def unwrap_or(self, default: Any) -> Any:
        """The decoded success value, or ``default`` for any other variant."""
        if isinstance(self, Success):
            return self.value
        return default

    def unwrap_error(self) -> Any:
        """The decoded error value."""
        if isinstance(self, Error):
            return self.value
        raise OutcomeAccessError(OutcomeKind.ERROR, self.kind)

    def unwrap_raw(self) -> Any:
        """The body of a raw outcome."""
        if isinstance(self, Raw):
            return self.body
        raise OutcomeAccessError(OutcomeKind.RAW, self.kind)


@dataclass(frozen=True, slots=True)
class Success(_Accessors):
    """A success rule matched and its decoder succeeded."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.SUCCESS

    value: Any
    status: int
    headers: Headers


@dataclass(frozen=True, slots=True)
class Error(_Accessors):
    """An error rule matched and its decoder succeeded."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.ERROR

    value: Any
    status: int
    headers: Headers


@dataclass(frozen=True, slots=True)
class Raw(_Accessors):
    """A raw rule matched. ``body`` is the bytes, or the raw decoder's output."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.RAW

    body: Any
    status: int
    headers: Headers

    def text(self) -> str:
        """Lossy UTF-8 rendering of the body; other decoded values use str()."""
        if isinstance(self.body, bytes | bytearray | memoryview):
            return bytes(self.body).decode("utf-8", errors="replace")
        if isinstance(self.body, str):
            return self.body
        return str(self.body)


@dataclass(frozen=True, slots=True)
class DecodeFailed(_Accessors):
    """A rule matched, the body was read, but the decoder rejected it.

    ``body`` is exactly the bytes that were read, for logging or fallback.
    """

    kind: ClassVar[OutcomeKind] = OutcomeKind.DECODE_FAILED

    body: bytes
    error: Exception
    role: Role
    status: int
    headers: Headers

    def text(self) -> str:
        """Lossy UTF-8 rendering of the body."""
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class Unmatched(_Accessors):
    """No rule matched. The body was not touched and is still available."""

    kind: ClassVar[OutcomeKind] = OutcomeKind.UNMATCHED

    handle: ResponseHandle

    @property
    def status(self) -> int:
        return self.handle.status

    @property
    def headers(self) -> Headers:
        return self.handle.headers

    def consume(self) -> bytes:
        """Read the untouched body manually."""
        return self.handle.consume()

    async def aconsume(self) -> bytes:
        return await self.handle.aconsume()


type Outcome = Success | Error | Raw | DecodeFailed | Unmatched
