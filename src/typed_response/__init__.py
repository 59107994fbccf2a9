"""typed_response — decide how to decode an HTTP body after seeing the response.

All public types are exported from this module for flat imports:

    from typed_response import RuleSet, dispatch, json_decoder, status_class
"""

__version__ = "0.1.0"

from typed_response._conditions import (
    Always,
    And,
    Condition,
    HeaderInput,
    MatchContext,
    Not,
    Or,
    SelectorInput,
    SelectorMatcher,
    SinglePredicate,
    StatusInput,
    StatusMatcher,
    Where,
    condition_depth,
    header,
    selector,
    status,
    status_class,
    status_range,
    where,
)

# Config types — see typed_response._config for details
from typed_response._config import (
    AlwaysConfig,
    AndConditionConfig,
    BuiltInMatch,
    ConditionConfig,
    ConfigParseError,
    CustomConditionConfig,
    DecodeRuleConfig,
    HeaderConfig,
    NotConditionConfig,
    OrConditionConfig,
    RuleSetConfig,
    SelectorConfig,
    StatusClassConfig,
    StatusConfig,
    StatusRangeConfig,
    TypedConfig,
    parse_rule_set_config,
)
from typed_response._decoders import json_decoder, model_decoder, passthrough, text_decoder
from typed_response._dispatch import adispatch, dispatch
from typed_response._errors import (
    BodyReuseError,
    DecodeError,
    OutcomeAccessError,
    RuleSetError,
    TransportError,
    TypedResponseError,
)
from typed_response._outcome import DecodeFailed, Error, Outcome, Raw, Success, Unmatched

# Registry — see typed_response._registry for details
from typed_response._registry import (
    JSON_DECODER,
    MAX_PATTERN_LENGTH,
    MAX_PREDICATES_PER_COMPOUND,
    MAX_REGEX_PATTERN_LENGTH,
    RAW_DECODER,
    TEXT_DECODER,
    InvalidConfigError,
    PatternTooLongError,
    Registry,
    RegistryBuilder,
    TooManyPredicatesError,
    TooManyRulesError,
    UnknownTypeUrlError,
    register_core_decoders,
)
from typed_response._response import AsyncBody, BodySource, Headers, ResponseHandle, SyncBody
from typed_response._rules import MAX_DEPTH, MAX_RULES, DecodeRule, RuleSet, error, raw, success
from typed_response._string_matchers import (
    ContainsMatcher,
    ExactMatcher,
    PrefixMatcher,
    RegexMatcher,
    SuffixMatcher,
)
from typed_response._types import DataInput, Decoder, InputMatcher, MatchingData, OutcomeKind, Role

__all__ = [
    # Protocols
    "DataInput",
    "InputMatcher",
    "MatchingData",
    "Decoder",
    "SyncBody",
    "AsyncBody",
    "BodySource",
    # Response handle
    "Headers",
    "ResponseHandle",
    # Conditions
    "MatchContext",
    "StatusInput",
    "HeaderInput",
    "SelectorInput",
    "StatusMatcher",
    "SelectorMatcher",
    "SinglePredicate",
    "And",
    "Or",
    "Not",
    "Where",
    "Always",
    "Condition",
    "condition_depth",
    "status",
    "status_range",
    "status_class",
    "header",
    "selector",
    "where",
    # Header value matchers
    "ExactMatcher",
    "PrefixMatcher",
    "SuffixMatcher",
    "ContainsMatcher",
    "RegexMatcher",
    # Rules
    "Role",
    "DecodeRule",
    "RuleSet",
    "success",
    "error",
    "raw",
    "MAX_DEPTH",
    "MAX_RULES",
    # Decoders
    "passthrough",
    "text_decoder",
    "json_decoder",
    "model_decoder",
    # Outcomes
    "OutcomeKind",
    "Outcome",
    "Success",
    "Error",
    "Raw",
    "DecodeFailed",
    "Unmatched",
    # Dispatch
    "dispatch",
    "adispatch",
    # Errors
    "TypedResponseError",
    "TransportError",
    "BodyReuseError",
    "DecodeError",
    "OutcomeAccessError",
    "RuleSetError",
    # Config types
    "TypedConfig",
    "BuiltInMatch",
    "StatusConfig",
    "StatusRangeConfig",
    "StatusClassConfig",
    "HeaderConfig",
    "SelectorConfig",
    "AlwaysConfig",
    "AndConditionConfig",
    "OrConditionConfig",
    "NotConditionConfig",
    "CustomConditionConfig",
    "ConditionConfig",
    "DecodeRuleConfig",
    "RuleSetConfig",
    "ConfigParseError",
    "parse_rule_set_config",
    # Registry
    "RegistryBuilder",
    "Registry",
    "register_core_decoders",
    "RAW_DECODER",
    "TEXT_DECODER",
    "JSON_DECODER",
    "UnknownTypeUrlError",
    "InvalidConfigError",
    "TooManyRulesError",
    "TooManyPredicatesError",
    "PatternTooLongError",
    "MAX_PREDICATES_PER_COMPOUND",
    "MAX_PATTERN_LENGTH",
    "MAX_REGEX_PATTERN_LENGTH",
]
