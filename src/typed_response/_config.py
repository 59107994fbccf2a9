"""Config types for config-driven rule sets.

The same dict shape loads from JSON or YAML. Construction path:
  dict → parse_rule_set_config() → RuleSetConfig → Registry.load_rule_set() → RuleSet

Relationship to runtime types:

| Config type              | Runtime type                 |
|--------------------------|------------------------------|
| RuleSetConfig            | RuleSet                      |
| DecodeRuleConfig         | DecodeRule                   |
| StatusConfig et al.      | SinglePredicate              |
| AndConditionConfig ...   | And / Or / Not               |
| CustomConditionConfig    | condition factory output     |
| TypedConfig              | decoder / condition factory  |
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from typed_response._types import Role

# ═══════════════════════════════════════════════════════════════════════════════
# Config types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TypedConfig:
    """Reference to a registered factory plus its configuration payload."""

    type_url: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuiltInMatch:
    """Built-in header value match.

    Variant names: { "Exact": "..." }, { "Prefix": "..." }, { "Suffix": "..." },
    { "Contains": "..." }, { "Regex": "..." }.
    """

    variant: str
    value: str
    ignore_case: bool = False


@dataclass(frozen=True, slots=True)
class StatusConfig:
    code: int


@dataclass(frozen=True, slots=True)
class StatusRangeConfig:
    min: int
    max: int


@dataclass(frozen=True, slots=True)
class StatusClassConfig:
    status_class: str


@dataclass(frozen=True, slots=True)
class HeaderConfig:
    name: str
    matcher: BuiltInMatch


@dataclass(frozen=True, slots=True)
class SelectorConfig:
    equals: Any


@dataclass(frozen=True, slots=True)
class AlwaysConfig:
    pass


@dataclass(frozen=True, slots=True)
class AndConditionConfig:
    predicates: tuple[ConditionConfig, ...]


@dataclass(frozen=True, slots=True)
class OrConditionConfig:
    predicates: tuple[ConditionConfig, ...]


@dataclass(frozen=True, slots=True)
class NotConditionConfig:
    predicate: ConditionConfig


@dataclass(frozen=True, slots=True)
class CustomConditionConfig:
    """Condition built by a factory registered under ``typed_config.type_url``."""

    typed_config: TypedConfig


type ConditionConfig = (
    StatusConfig
    | StatusRangeConfig
    | StatusClassConfig
    | HeaderConfig
    | SelectorConfig
    | AlwaysConfig
    | AndConditionConfig
    | OrConditionConfig
    | NotConditionConfig
    | CustomConditionConfig
)


@dataclass(frozen=True, slots=True)
class DecodeRuleConfig:
    """Config for a DecodeRule. A missing decoder means passthrough."""

    when: ConditionConfig
    role: Role
    decoder: TypedConfig | None = None


@dataclass(frozen=True, slots=True)
class RuleSetConfig:
    rules: tuple[DecodeRuleConfig, ...]


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════

_STRING_MATCH_VARIANTS = ("Exact", "Prefix", "Suffix", "Contains", "Regex")


class ConfigParseError(Exception):
    """Error parsing a config dict into config types."""


def parse_rule_set_config(data: dict[str, Any]) -> RuleSetConfig:
    """Parse a dict into a RuleSetConfig.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    _expect_dict(data, "rule set config")

    raw_rules = data.get("rules")
    if raw_rules is None:
        msg = "missing required field 'rules'"
        raise ConfigParseError(msg)
    if not isinstance(raw_rules, list):
        msg = f"'rules' must be a list, got {type(raw_rules).__name__}"
        raise ConfigParseError(msg)

    return RuleSetConfig(rules=tuple(_parse_rule(r) for r in raw_rules))


def _parse_rule(data: dict[str, Any]) -> DecodeRuleConfig:
    _expect_dict(data, "rule")
    if "when" not in data:
        msg = "rule missing required field 'when'"
        raise ConfigParseError(msg)
    if "role" not in data:
        msg = "rule missing required field 'role'"
        raise ConfigParseError(msg)

    try:
        role = Role(data["role"])
    except ValueError:
        expected = [r.value for r in Role]
        msg = f"rule role must be one of {expected}, got {data['role']!r}"
        raise ConfigParseError(msg) from None

    decoder = None
    if data.get("decoder") is not None:
        decoder = _parse_typed_config(data["decoder"])

    return DecodeRuleConfig(when=_parse_condition(data["when"]), role=role, decoder=decoder)


def _parse_condition(data: dict[str, Any]) -> ConditionConfig:
    """Parse a condition dict, discriminated by its 'type' field."""
    _expect_dict(data, "condition")

    cond_type = data.get("type")
    if cond_type is None:
        msg = "condition missing required field 'type'"
        raise ConfigParseError(msg)

    match cond_type:
        case "status":
            return StatusConfig(code=_int_field(data, "code"))
        case "status_range":
            return StatusRangeConfig(min=_int_field(data, "min"), max=_int_field(data, "max"))
        case "status_class":
            value = data.get("class")
            if not isinstance(value, str | int) or isinstance(value, bool):
                msg = "status_class condition requires a 'class' field such as '2xx'"
                raise ConfigParseError(msg)
            if isinstance(value, int):
                value = f"{value}xx"
            return StatusClassConfig(status_class=value)
        case "header":
            name = data.get("name")
            if not isinstance(name, str) or not name:
                msg = "header condition requires a non-empty 'name' field"
                raise ConfigParseError(msg)
            if "value_match" not in data:
                msg = "header condition missing required field 'value_match'"
                raise ConfigParseError(msg)
            return HeaderConfig(name=name, matcher=_parse_value_match(data["value_match"]))
        case "selector":
            if "equals" not in data:
                msg = "selector condition missing required field 'equals'"
                raise ConfigParseError(msg)
            return SelectorConfig(equals=data["equals"])
        case "always":
            return AlwaysConfig()
        case "and":
            return AndConditionConfig(predicates=_parse_children(data))
        case "or":
            return OrConditionConfig(predicates=_parse_children(data))
        case "not":
            if "predicate" not in data:
                msg = "not condition missing required field 'predicate'"
                raise ConfigParseError(msg)
            return NotConditionConfig(predicate=_parse_condition(data["predicate"]))
        case "custom":
            return CustomConditionConfig(typed_config=_parse_typed_config(data))

    msg = f"unknown condition type: {cond_type!r}"
    raise ConfigParseError(msg)


def _parse_children(data: dict[str, Any]) -> tuple[ConditionConfig, ...]:
    children = data.get("predicates", [])
    if not isinstance(children, list):
        msg = f"'predicates' must be a list, got {type(children).__name__}"
        raise ConfigParseError(msg)
    return tuple(_parse_condition(p) for p in children)


def _parse_value_match(data: dict[str, Any]) -> BuiltInMatch:
    """Parse { "Exact": "hello" } (optionally with "ignore_case") into a BuiltInMatch."""
    _expect_dict(data, "value_match")

    ignore_case = data.get("ignore_case", False)
    if not isinstance(ignore_case, bool):
        msg = f"ignore_case must be a bool, got {type(ignore_case).__name__}"
        raise ConfigParseError(msg)

    for variant in _STRING_MATCH_VARIANTS:
        if variant in data:
            value = data[variant]
            if not isinstance(value, str):
                msg = f"value_match {variant} value must be a string, got {type(value).__name__}"
                raise ConfigParseError(msg)
            return BuiltInMatch(variant=variant, value=value, ignore_case=ignore_case)

    msg = (
        f"value_match must contain one of {sorted(_STRING_MATCH_VARIANTS)}, "
        f"got keys: {sorted(data.keys())}"
    )
    raise ConfigParseError(msg)


def _parse_typed_config(data: dict[str, Any]) -> TypedConfig:
    _expect_dict(data, "typed_config")

    if "type_url" not in data:
        msg = "typed_config missing required field 'type_url'"
        raise ConfigParseError(msg)

    type_url = data["type_url"]
    if not isinstance(type_url, str):
        msg = f"type_url must be a string, got {type(type_url).__name__}"
        raise ConfigParseError(msg)

    config = data.get("config", {})
    if not isinstance(config, dict):
        msg = f"config must be a dict, got {type(config).__name__}"
        raise ConfigParseError(msg)

    return TypedConfig(type_url=type_url, config=config)


def _int_field(data: dict[str, Any], name: str) -> int:
    value = data.get(name)
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{data.get('type')} condition requires an integer '{name}' field"
        raise ConfigParseError(msg)
    return value


def _expect_dict(data: Any, what: str) -> None:
    if not isinstance(data, dict):
        msg = f"{what} must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
