"""String matchers for header values.

Each matcher is a frozen dataclass implementing InputMatcher. Header
inputs hand over every value of a (possibly repeated) header as a tuple;
a matcher succeeds when any one of those values matches. Non-string input
never matches.

Header values are opaque and compared case-sensitively unless the matcher
is built with ``ignore_case=True``.

Regex uses ``google-re2`` for guaranteed linear-time matching, so header
values coming from an untrusted server cannot trigger catastrophic
backtracking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import re2

from typed_response._errors import RuleSetError

if TYPE_CHECKING:
    from typed_response._types import MatchingData


def _candidates(value: MatchingData) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, tuple):
        return tuple(v for v in value if isinstance(v, str))
    return ()


def _fold(value: str, ignore_case: bool) -> str:
    return value.casefold() if ignore_case else value


@dataclass(frozen=True, slots=True)
class ExactMatcher:
    """Exact string equality.

    >>> ExactMatcher("application/json").matches(("text/plain", "application/json"))
    True
    """

    value: str
    ignore_case: bool = False
    _cmp_value: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_cmp_value", _fold(self.value, self.ignore_case))

    def matches(self, value: MatchingData, /) -> bool:
        return any(_fold(v, self.ignore_case) == self._cmp_value for v in _candidates(value))


@dataclass(frozen=True, slots=True)
class PrefixMatcher:
    """Prefix match, e.g. ``application/json`` against ``application/json; charset=utf-8``."""

    prefix: str
    ignore_case: bool = False
    _cmp_prefix: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_cmp_prefix", _fold(self.prefix, self.ignore_case))

    def matches(self, value: MatchingData, /) -> bool:
        return any(
            _fold(v, self.ignore_case).startswith(self._cmp_prefix) for v in _candidates(value)
        )


@dataclass(frozen=True, slots=True)
class SuffixMatcher:
    suffix: str
    ignore_case: bool = False
    _cmp_suffix: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_cmp_suffix", _fold(self.suffix, self.ignore_case))

    def matches(self, value: MatchingData, /) -> bool:
        return any(
            _fold(v, self.ignore_case).endswith(self._cmp_suffix) for v in _candidates(value)
        )


@dataclass(frozen=True, slots=True)
class ContainsMatcher:
    """Substring search; the pattern is case-folded once at construction."""

    substring: str
    ignore_case: bool = False
    _cmp_substring: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_cmp_substring", _fold(self.substring, self.ignore_case))

    def matches(self, value: MatchingData, /) -> bool:
        return any(self._cmp_substring in _fold(v, self.ignore_case) for v in _candidates(value))


@dataclass(frozen=True, slots=True)
class RegexMatcher:
    """Regular expression search (not fullmatch) over each header value.

    With ignore_case the whole pattern is compiled under RE2's ``(?i)`` flag.

    Raises:
        RuleSetError: If the pattern is not valid RE2 syntax. RE2 rejects
            backreferences and lookaround.
    """

    pattern: str
    ignore_case: bool = False
    _compiled: re2.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        source = f"(?i){self.pattern}" if self.ignore_case else self.pattern
        try:
            compiled = re2.compile(source)
        except re2.error as e:
            msg = f'invalid regex pattern "{self.pattern}": {e}'
            raise RuleSetError(msg) from e
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, value: MatchingData, /) -> bool:
        return any(self._compiled.search(v) is not None for v in _candidates(value))
