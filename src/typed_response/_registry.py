"""Type registry for config-driven rule sets.

Decoders and custom conditions are referenced from config by ``type_url``
and built by plain factory callables ``(config: dict) -> object``.

- RegistryBuilder → .build() → Registry (immutable)
- load_rule_set() walks a RuleSetConfig and constructs the runtime RuleSet

Example::

    builder = register_core_decoders(RegistryBuilder())
    builder.decoder("acme.v1.Problem", lambda cfg: model_decoder(Problem))
    registry = builder.build()

    rules = registry.load_rule_set(parse_rule_set_config(yaml.safe_load(text)))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from typed_response._conditions import (
    Always,
    And,
    Not,
    Or,
    header,
    selector,
    status,
    status_class,
    status_range,
)
from typed_response._config import (
    AlwaysConfig,
    AndConditionConfig,
    CustomConditionConfig,
    HeaderConfig,
    NotConditionConfig,
    OrConditionConfig,
    SelectorConfig,
    StatusClassConfig,
    StatusConfig,
    StatusRangeConfig,
)
from typed_response._decoders import json_decoder, passthrough, text_decoder
from typed_response._errors import RuleSetError
from typed_response._rules import MAX_RULES, DecodeRule, RuleSet
from typed_response._string_matchers import (
    ContainsMatcher,
    ExactMatcher,
    PrefixMatcher,
    RegexMatcher,
    SuffixMatcher,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from typed_response._conditions import Condition
    from typed_response._config import (
        BuiltInMatch,
        ConditionConfig,
        DecodeRuleConfig,
        RuleSetConfig,
        TypedConfig,
    )
    from typed_response._types import Decoder, InputMatcher

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════

MAX_PREDICATES_PER_COMPOUND = 256
MAX_PATTERN_LENGTH = 8192
MAX_REGEX_PATTERN_LENGTH = 4096

RAW_DECODER = "typed_response.v1.RawDecoder"
TEXT_DECODER = "typed_response.v1.TextDecoder"
JSON_DECODER = "typed_response.v1.JsonDecoder"

# ═══════════════════════════════════════════════════════════════════════════════
# Error types
# ═══════════════════════════════════════════════════════════════════════════════


class UnknownTypeUrlError(RuleSetError):
    """A type_url was not found in the registry."""

    def __init__(self, type_url: str, registry: str, available: list[str]) -> None:
        self.type_url = type_url
        self.registry = registry
        self.available = sorted(available)
        if self.available:
            registered = ", ".join(self.available)
            msg = f"unknown {registry} type_url: {type_url!r} (registered: {registered})"
        else:
            msg = f"unknown {registry} type_url: {type_url!r} (no {registry} types are registered)"
        super().__init__(msg)


class InvalidConfigError(RuleSetError):
    """A config payload was malformed or semantically invalid."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"invalid config: {source}")


class TooManyRulesError(RuleSetError):
    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many rules: {count} exceeds maximum {max_}")


class TooManyPredicatesError(RuleSetError):
    """Compound condition has too many children."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many predicates in compound: {count} exceeds maximum {max_}")


class PatternTooLongError(RuleSetError):
    def __init__(self, length: int, max_: int) -> None:
        self.length = length
        self.max = max_
        super().__init__(f"pattern length {length} exceeds maximum {max_}")


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════

type DecoderFactory = Callable[[dict[str, Any]], Decoder[Any]]
type ConditionFactory = Callable[[dict[str, Any]], Condition]


class RegistryBuilder:
    """Collects decoder and condition factories, then freezes into a Registry."""

    def __init__(self) -> None:
        self._decoder_factories: dict[str, DecoderFactory] = {}
        self._condition_factories: dict[str, ConditionFactory] = {}

    def decoder(self, type_url: str, factory: DecoderFactory) -> RegistryBuilder:
        """Register a decoder factory with a type URL."""
        self._decoder_factories[type_url] = factory
        return self

    def condition(self, type_url: str, factory: ConditionFactory) -> RegistryBuilder:
        """Register a custom condition factory with a type URL."""
        self._condition_factories[type_url] = factory
        return self

    def build(self) -> Registry:
        """Freeze the registry. No further registration is possible."""
        return Registry(
            _decoder_factories=MappingProxyType(dict(self._decoder_factories)),
            _condition_factories=MappingProxyType(dict(self._condition_factories)),
        )


def register_core_decoders(builder: RegistryBuilder) -> RegistryBuilder:
    """Register the bundled raw, text and JSON decoders.

    Type URLs:
    - typed_response.v1.RawDecoder
    - typed_response.v1.TextDecoder  { "encoding": "utf-8" }
    - typed_response.v1.JsonDecoder
    """
    return (
        builder.decoder(RAW_DECODER, _raw_factory)
        .decoder(TEXT_DECODER, _text_factory)
        .decoder(JSON_DECODER, _json_factory)
    )


def _raw_factory(_config: dict[str, Any]) -> Decoder[bytes]:
    return passthrough


def _text_factory(config: dict[str, Any]) -> Decoder[str]:
    encoding = config.get("encoding", "utf-8")
    if not isinstance(encoding, str) or not encoding:
        msg = "TextDecoder 'encoding' must be a non-empty string"
        raise ValueError(msg)
    return text_decoder(encoding)


def _json_factory(_config: dict[str, Any]) -> Decoder[Any]:
    return json_decoder()


# ═══════════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Registry:
    """Immutable registry of decoder and condition factories.

    Constructed via RegistryBuilder. Use load_rule_set() to compile config
    into a runtime RuleSet.
    """

    _decoder_factories: MappingProxyType[str, DecoderFactory] = field(
        default_factory=lambda: MappingProxyType({})
    )
    _condition_factories: MappingProxyType[str, ConditionFactory] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def load_rule_set(self, config: RuleSetConfig) -> RuleSet:
        """Load a RuleSet from configuration.

        Raises:
            UnknownTypeUrlError: decoder or condition type_url not registered
            InvalidConfigError: config payload malformed
            TooManyRulesError: too many rules
            TooManyPredicatesError: too many compound condition children
            PatternTooLongError: header pattern exceeds length limit
            RuleSetError: condition depth exceeded
        """
        if len(config.rules) > MAX_RULES:
            raise TooManyRulesError(len(config.rules), MAX_RULES)

        rule_set = RuleSet(tuple(self._load_rule(r) for r in config.rules))
        logger.debug("loaded rule set with %d rules", len(rule_set))
        return rule_set

    @property
    def decoder_count(self) -> int:
        return len(self._decoder_factories)

    @property
    def condition_count(self) -> int:
        return len(self._condition_factories)

    def contains_decoder(self, type_url: str) -> bool:
        return type_url in self._decoder_factories

    def contains_condition(self, type_url: str) -> bool:
        return type_url in self._condition_factories

    def decoder_type_urls(self) -> list[str]:
        """Return all registered decoder type URLs (sorted)."""
        return sorted(self._decoder_factories.keys())

    def condition_type_urls(self) -> list[str]:
        """Return all registered condition type URLs (sorted)."""
        return sorted(self._condition_factories.keys())

    # ── Private loading methods ────────────────────────────────────────────

    def _load_rule(self, config: DecodeRuleConfig) -> DecodeRule:
        condition = self._load_condition(config.when)
        decoder = passthrough if config.decoder is None else self._load_decoder(config.decoder)
        return DecodeRule(condition=condition, decoder=decoder, role=config.role)

    def _load_decoder(self, config: TypedConfig) -> Decoder[Any]:
        factory = self._decoder_factories.get(config.type_url)
        if factory is None:
            raise UnknownTypeUrlError(
                config.type_url, "decoder", list(self._decoder_factories.keys())
            )
        try:
            return factory(config.config)
        except Exception as e:
            raise InvalidConfigError(str(e)) from e

    def _load_condition(self, config: ConditionConfig) -> Condition:
        try:
            match config:
                case StatusConfig(code=code):
                    return status(code)
                case StatusRangeConfig(min=low, max=high):
                    return status_range(low, high)
                case StatusClassConfig(status_class=cls):
                    return status_class(cls)
                case HeaderConfig(name=name, matcher=m):
                    return header(name, _compile_built_in(m))
                case SelectorConfig(equals=token):
                    return selector(token)
        except ValueError as e:
            raise InvalidConfigError(str(e)) from e

        match config:
            case AlwaysConfig():
                return Always()
            case AndConditionConfig(predicates=children):
                return And(self._load_children(children))
            case OrConditionConfig(predicates=children):
                return Or(self._load_children(children))
            case NotConditionConfig(predicate=inner):
                return Not(self._load_condition(inner))
            case CustomConditionConfig(typed_config=tc):
                factory = self._condition_factories.get(tc.type_url)
                if factory is None:
                    raise UnknownTypeUrlError(
                        tc.type_url, "condition", list(self._condition_factories.keys())
                    )
                try:
                    return factory(tc.config)
                except Exception as e:
                    raise InvalidConfigError(str(e)) from e
            case _:  # pragma: no cover
                msg = f"unknown condition config type: {type(config).__name__}"
                raise InvalidConfigError(msg)

    def _load_children(self, children: tuple[ConditionConfig, ...]) -> tuple[Condition, ...]:
        if len(children) > MAX_PREDICATES_PER_COMPOUND:
            raise TooManyPredicatesError(len(children), MAX_PREDICATES_PER_COMPOUND)
        return tuple(self._load_condition(c) for c in children)


# ═══════════════════════════════════════════════════════════════════════════════
# Built-in header matcher compilation
# ═══════════════════════════════════════════════════════════════════════════════


def _check_pattern_length(variant: str, value: str) -> None:
    if variant == "Regex":
        if len(value) > MAX_REGEX_PATTERN_LENGTH:
            raise PatternTooLongError(len(value), MAX_REGEX_PATTERN_LENGTH)
    elif len(value) > MAX_PATTERN_LENGTH:
        raise PatternTooLongError(len(value), MAX_PATTERN_LENGTH)


def _compile_built_in(m: BuiltInMatch) -> InputMatcher:
    _check_pattern_length(m.variant, m.value)

    match m.variant:
        case "Exact":
            return ExactMatcher(value=m.value, ignore_case=m.ignore_case)
        case "Prefix":
            return PrefixMatcher(prefix=m.value, ignore_case=m.ignore_case)
        case "Suffix":
            return SuffixMatcher(suffix=m.value, ignore_case=m.ignore_case)
        case "Contains":
            return ContainsMatcher(substring=m.value, ignore_case=m.ignore_case)
        case "Regex":
            try:
                return RegexMatcher(pattern=m.value, ignore_case=m.ignore_case)
            except RuleSetError as e:
                raise InvalidConfigError(str(e)) from e
    msg = f"unknown built-in match variant: {m.variant!r}"
    raise InvalidConfigError(msg)
