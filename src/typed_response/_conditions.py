"""Conditions — pure predicates over a response's status, headers and selector.

A SinglePredicate combines a DataInput (extract) with an InputMatcher
(match). And, Or, Not compose predicates with short-circuit evaluation;
Where wraps an arbitrary function and Always is the catch-all.

Conditions only ever see a MatchContext, never the body.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from typed_response._string_matchers import ExactMatcher

if TYPE_CHECKING:
    from typed_response._response import Headers
    from typed_response._types import DataInput, InputMatcher, MatchingData, Selector


@dataclass(frozen=True, slots=True)
class MatchContext:
    """Everything a condition may look at: status, headers and the selector."""

    status: int
    headers: Headers
    selector: Selector = None


# ── Inputs ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class StatusInput:
    """Extracts the numeric status code."""

    def get(self, ctx: MatchContext, /) -> MatchingData:
        return ctx.status


@dataclass(frozen=True, slots=True)
class HeaderInput:
    """Extracts every value of a header (case-insensitive name), or None."""

    name: str

    def get(self, ctx: MatchContext, /) -> MatchingData:
        return ctx.headers.get_all(self.name) or None


@dataclass(frozen=True, slots=True)
class SelectorInput:
    """Extracts the caller-supplied selector, or None when absent."""

    def get(self, ctx: MatchContext, /) -> MatchingData:
        return ctx.selector


# ── Matchers ───────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class StatusMatcher:
    """Inclusive status code range. An exact status is ``low == high``."""

    low: int
    high: int

    def __post_init__(self) -> None:
        if not 100 <= self.low <= 599 or not 100 <= self.high <= 599:
            msg = f"status range {self.low}-{self.high} outside 100-599"
            raise ValueError(msg)
        if self.low > self.high:
            msg = f"status range is empty: {self.low} > {self.high}"
            raise ValueError(msg)

    def matches(self, value: MatchingData, /) -> bool:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return self.low <= value <= self.high


@dataclass(frozen=True, slots=True)
class SelectorMatcher:
    """Equality against a selector token."""

    token: Any

    def matches(self, value: MatchingData, /) -> bool:
        return bool(value == self.token)


# ── Predicates ─────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SinglePredicate:
    """A single predicate: extract data, then match.

    Enforces the None -> false invariant: if the DataInput returns None,
    the predicate evaluates to False without consulting the matcher.
    """

    input: DataInput
    matcher: InputMatcher

    def evaluate(self, ctx: MatchContext) -> bool:
        value = self.input.get(ctx)
        if value is None:
            return False
        return self.matcher.matches(value)


@dataclass(frozen=True, slots=True)
class And:
    """All predicates must match. Empty And is True."""

    predicates: tuple[Condition, ...]

    def evaluate(self, ctx: MatchContext) -> bool:
        return all(p.evaluate(ctx) for p in self.predicates)


@dataclass(frozen=True, slots=True)
class Or:
    """Any predicate must match. Empty Or is False."""

    predicates: tuple[Condition, ...]

    def evaluate(self, ctx: MatchContext) -> bool:
        return any(p.evaluate(ctx) for p in self.predicates)


@dataclass(frozen=True, slots=True)
class Not:
    predicate: Condition

    def evaluate(self, ctx: MatchContext) -> bool:
        return not self.predicate.evaluate(ctx)


@dataclass(frozen=True, slots=True)
class Where:
    """Arbitrary predicate over the MatchContext.

    The function must be pure: it is evaluated during matching, possibly
    for responses it does not end up selecting.
    """

    fn: Callable[[MatchContext], bool]

    def evaluate(self, ctx: MatchContext) -> bool:
        return bool(self.fn(ctx))


@dataclass(frozen=True, slots=True)
class Always:
    """Catch-all condition."""

    def evaluate(self, ctx: MatchContext) -> bool:
        return True


type Condition = SinglePredicate | And | Or | Not | Where | Always


def condition_depth(c: Condition) -> int:
    """Calculate the nesting depth of a condition tree."""
    match c:
        case And(predicates=ps) | Or(predicates=ps):
            return 1 + max((condition_depth(sub) for sub in ps), default=0)
        case Not(predicate=inner):
            return 1 + condition_depth(inner)
        case _:
            return 1


# ── Helpers ────────────────────────────────────────────────────────────────


def status(code: int) -> SinglePredicate:
    """Match one exact status code."""
    return SinglePredicate(StatusInput(), StatusMatcher(code, code))


def status_range(low: int, high: int) -> SinglePredicate:
    """Match any status in ``low..high`` inclusive."""
    return SinglePredicate(StatusInput(), StatusMatcher(low, high))


def status_class(cls: str | int) -> SinglePredicate:
    """Match a status class given as ``"4xx"`` (or ``"4XX"``, or ``4``)."""
    if isinstance(cls, str):
        text = cls.strip().lower()
        if len(text) != 3 or not text.endswith("xx") or not text[0].isdigit():
            msg = f"invalid status class: {cls!r}"
            raise ValueError(msg)
        digit = int(text[0])
    elif isinstance(cls, bool) or not isinstance(cls, int):
        msg = f"invalid status class: {cls!r}"
        raise ValueError(msg)
    else:
        digit = cls
    if not 1 <= digit <= 5:
        msg = f"invalid status class: {cls!r}"
        raise ValueError(msg)
    return status_range(digit * 100, digit * 100 + 99)


def header(name: str, matcher: InputMatcher | str) -> SinglePredicate:
    """Match a header by name. A plain string means exact value equality."""
    if isinstance(matcher, str):
        matcher = ExactMatcher(matcher)
    return SinglePredicate(HeaderInput(name), matcher)


def selector(token: Any) -> SinglePredicate:
    """Match when the caller-supplied selector equals ``token``."""
    return SinglePredicate(SelectorInput(), SelectorMatcher(token))


def where(fn: Callable[[MatchContext], bool]) -> Where:
    return Where(fn)
