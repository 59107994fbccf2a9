"""Dispatch benchmarks for typed_response.

Measures rule selection on the hot path (first-match-wins scans, header
and regex conditions, misses) and the cost of loading a rule set from
config.

Run: uv run pytest tests/bench/test_bench_dispatch.py --benchmark-only
"""

from __future__ import annotations

from pydantic import BaseModel

from typed_response import (
    Always,
    MatchContext,
    RegexMatcher,
    RegistryBuilder,
    ResponseHandle,
    RuleSet,
    dispatch,
    error,
    header,
    json_decoder,
    model_decoder,
    parse_rule_set_config,
    passthrough,
    raw,
    register_core_decoders,
    status,
    success,
)

# ── Fixtures ─────────────────────────────────────────────────────────────────

JSON_HEADERS = [("Content-Type", "application/json"), ("X-Request-Id", "abc123")]


class Item(BaseModel):
    id: int
    name: str


def status_ladder(n: int) -> RuleSet:
    """``n`` single-status error rules followed by a catch-all raw rule."""
    return RuleSet((*(error(status(400 + i), passthrough) for i in range(n)), raw(Always())))


# ── Selection ────────────────────────────────────────────────────────────────


def test_bench_select_first_rule(benchmark):
    rules = RuleSet.split(passthrough, passthrough)
    ctx = MatchContext(status=200, headers=ResponseHandle(200, JSON_HEADERS).headers)
    benchmark(rules.select, ctx)


def test_bench_select_last_of_50(benchmark):
    rules = status_ladder(50)
    ctx = MatchContext(status=599, headers=ResponseHandle(599).headers)
    benchmark(rules.select, ctx)


def test_bench_select_header_regex(benchmark):
    rules = RuleSet.of(
        success(header("content-type", RegexMatcher(r"^application/(\w+\+)?json")), passthrough)
    )
    ctx = MatchContext(status=200, headers=ResponseHandle(200, JSON_HEADERS).headers)
    benchmark(rules.select, ctx)


def test_bench_select_miss(benchmark):
    rules = RuleSet.of([success(status(200), passthrough), error(status(404), passthrough)])
    ctx = MatchContext(status=503, headers=ResponseHandle(503).headers)
    benchmark(rules.select, ctx)


# ── Full dispatch ────────────────────────────────────────────────────────────


def test_bench_dispatch_json(benchmark):
    rules = RuleSet.split(json_decoder(), json_decoder())
    body = b'{"id": 1, "name": "widget"}'
    benchmark(lambda: dispatch(ResponseHandle(200, JSON_HEADERS, body), rules))


def test_bench_dispatch_model(benchmark):
    rules = RuleSet.split(model_decoder(Item), json_decoder())
    body = b'{"id": 1, "name": "widget"}'
    benchmark(lambda: dispatch(ResponseHandle(200, JSON_HEADERS, body), rules))


def test_bench_dispatch_unmatched(benchmark):
    rules = RuleSet.split(json_decoder(), json_decoder())
    benchmark(lambda: dispatch(ResponseHandle(502, JSON_HEADERS, b"bad gateway"), rules))


# ── Config loading ───────────────────────────────────────────────────────────


def test_bench_load_rule_set(benchmark):
    registry = register_core_decoders(RegistryBuilder()).build()
    data = {
        "rules": [
            {
                "when": {
                    "type": "and",
                    "predicates": [
                        {"type": "status_class", "class": "2xx"},
                        {
                            "type": "header",
                            "name": "content-type",
                            "value_match": {"Prefix": "application/json"},
                        },
                    ],
                },
                "role": "success",
                "decoder": {"type_url": "typed_response.v1.JsonDecoder"},
            },
            {
                "when": {"type": "status_range", "min": 400, "max": 499},
                "role": "error",
                "decoder": {"type_url": "typed_response.v1.TextDecoder"},
            },
            {"when": {"type": "always"}, "role": "raw"},
        ]
    }
    benchmark(lambda: registry.load_rule_set(parse_rule_set_config(data)))
