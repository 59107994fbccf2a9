"""Core protocols and type aliases for typed_response.

The type system splits a rule condition into two ports:
- DataInput extracts a value from the MatchContext (status, header, selector)
- InputMatcher decides whether that extracted value matches

Decoder is the pluggable codec port: bytes in, a typed value out.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from typed_response._conditions import MatchContext

# The erased data type handed from a DataInput to an InputMatcher.
# tuple[str, ...] carries every value of a repeated header, in order.
# None means "not present" and makes the predicate evaluate to False.
MatchingData = str | int | bool | bytes | tuple[str, ...] | None

T_co = TypeVar("T_co", covariant=True)


class Role(StrEnum):
    """Semantic role a matched rule assigns to its decoded payload."""

    SUCCESS = "success"
    ERROR = "error"
    RAW = "raw"


class OutcomeKind(StrEnum):
    """Tag of a Typed Outcome variant."""

    SUCCESS = "success"
    ERROR = "error"
    RAW = "raw"
    UNMATCHED = "unmatched"
    DECODE_FAILED = "decode_failed"


@runtime_checkable
class DataInput(Protocol):
    """Extract a value from a MatchContext.

    Returning None signals "data not available" and causes the predicate
    to evaluate to False (the None -> false invariant).
    """

    def get(self, ctx: MatchContext, /) -> MatchingData: ...


@runtime_checkable
class InputMatcher(Protocol):
    """Match against a type-erased value.

    Non-generic on purpose: the same ExactMatcher works for any header,
    and StatusMatcher never sees anything but the status code.
    """

    def matches(self, value: MatchingData, /) -> bool: ...


class Decoder(Protocol[T_co]):
    """Turn a fully read body into a value.

    A decoder is a pure function of the bytes. It signals a malformed
    payload by raising ValueError (json.JSONDecodeError, UnicodeDecodeError
    and pydantic's ValidationError all qualify).
    """

    def __call__(self, body: bytes, /) -> T_co: ...


# Anything a caller may pass as the external selector.
type Selector = Any
