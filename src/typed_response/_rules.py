"""Decode rules and rule sets with first-match-wins semantics.

A DecodeRule pairs a condition with a decoder and the role its decoded
payload plays. A RuleSet evaluates rules in order and selects the first
whose condition holds; later rules are never consulted. No match is not an
error: leaving out a catch-all rule is the caller's explicit choice.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from typed_response._conditions import Or, condition_depth, status_class
from typed_response._decoders import passthrough
from typed_response._errors import RuleSetError
from typed_response._types import Role

if TYPE_CHECKING:
    from typed_response._conditions import Condition, MatchContext
    from typed_response._types import Decoder

MAX_DEPTH = 32
MAX_RULES = 256


@dataclass(frozen=True, slots=True)
class DecodeRule:
    """When ``condition`` holds, read the body with ``decoder`` as ``role``."""

    condition: Condition
    decoder: Decoder[Any] = passthrough
    role: Role = Role.RAW

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role(self.role))


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Ordered, immutable collection of decode rules.

    Depth and size validation runs at construction time, so a RuleSet that
    exists is safe to evaluate. Build one per response shape and reuse it
    across requests.
    """

    rules: tuple[DecodeRule, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))
        self.validate()

    @classmethod
    def of(cls, rules: RuleSet | DecodeRule | Sequence[DecodeRule]) -> RuleSet:
        """Coerce a rule, a sequence of rules or a RuleSet into a RuleSet."""
        if isinstance(rules, RuleSet):
            return rules
        if isinstance(rules, DecodeRule):
            return cls((rules,))
        return cls(tuple(rules))

    @classmethod
    def split(cls, success_decoder: Decoder[Any], error_decoder: Decoder[Any]) -> RuleSet:
        """The classic success/error split on the status code.

        2xx decodes as success; 1xx, 3xx and 4xx decode as error. 5xx stays
        unmatched: a server failure rarely carries the application's error
        shape, so the caller gets the status and an untouched body instead.
        """
        return cls(
            (
                DecodeRule(status_class("2xx"), success_decoder, Role.SUCCESS),
                DecodeRule(
                    Or((status_class("1xx"), status_class("3xx"), status_class("4xx"))),
                    error_decoder,
                    Role.ERROR,
                ),
            )
        )

    def select(self, ctx: MatchContext) -> int | None:
        """Index of the first rule whose condition holds, or None."""
        for i, rule in enumerate(self.rules):
            if rule.condition.evaluate(ctx):
                return i
        return None

    def validate(self) -> None:
        """Raise RuleSetError if the rule set is too large or too deep."""
        if len(self.rules) > MAX_RULES:
            msg = f"rule set has {len(self.rules)} rules, maximum is {MAX_RULES}"
            raise RuleSetError(msg)
        for i, rule in enumerate(self.rules):
            if not isinstance(rule, DecodeRule):
                msg = f"rule {i} is {type(rule).__name__}, expected DecodeRule"
                raise RuleSetError(msg)
            d = condition_depth(rule.condition)
            if d > MAX_DEPTH:
                msg = f"rule {i} condition depth {d} exceeds maximum allowed depth {MAX_DEPTH}"
                raise RuleSetError(msg)

    def __len__(self) -> int:
        return len(self.rules)


def success(condition: Condition, decoder: Decoder[Any]) -> DecodeRule:
    return DecodeRule(condition, decoder, Role.SUCCESS)


def error(condition: Condition, decoder: Decoder[Any]) -> DecodeRule:
    return DecodeRule(condition, decoder, Role.ERROR)


def raw(condition: Condition, decoder: Decoder[Any] = passthrough) -> DecodeRule:
    """A raw passthrough rule; ``decoder`` may still reshape the bytes."""
    return DecodeRule(condition, decoder, Role.RAW)
