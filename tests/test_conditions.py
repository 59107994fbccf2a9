"""Tests for conditions and their composition."""

from __future__ import annotations

import pytest

from typed_response import (
    Always,
    And,
    ExactMatcher,
    Headers,
    MatchContext,
    Not,
    Or,
    PrefixMatcher,
    SinglePredicate,
    StatusInput,
    StatusMatcher,
    condition_depth,
    header,
    selector,
    status,
    status_class,
    status_range,
    where,
)


def ctx(code: int = 200, headers: dict[str, str] | None = None, sel: object = None) -> MatchContext:
    return MatchContext(status=code, headers=Headers(headers), selector=sel)


class TestStatusConditions:
    def test_exact(self) -> None:
        assert status(404).evaluate(ctx(404)) is True
        assert status(404).evaluate(ctx(405)) is False

    def test_range_is_inclusive(self) -> None:
        c = status_range(200, 299)
        assert c.evaluate(ctx(200)) is True
        assert c.evaluate(ctx(299)) is True
        assert c.evaluate(ctx(300)) is False

    @pytest.mark.parametrize("cls", ["4xx", "4XX", " 4xx ", 4])
    def test_class_spellings(self, cls: str | int) -> None:
        c = status_class(cls)
        assert c.evaluate(ctx(400)) is True
        assert c.evaluate(ctx(499)) is True
        assert c.evaluate(ctx(500)) is False

    @pytest.mark.parametrize("cls", ["6xx", "0xx", "4x", "xxx", "44x", 9, True, 4.0, None])
    def test_invalid_class(self, cls: object) -> None:
        with pytest.raises(ValueError, match="invalid status class"):
            status_class(cls)

    def test_invalid_range(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            status_range(500, 400)
        with pytest.raises(ValueError, match="outside"):
            status(42)

    def test_status_matcher_ignores_non_int(self) -> None:
        m = StatusMatcher(200, 299)
        assert m.matches("200") is False
        assert m.matches(True) is False
        assert m.matches(None) is False


class TestHeaderConditions:
    def test_plain_string_is_exact(self) -> None:
        c = header("X-Mode", "strict")
        assert c.evaluate(ctx(headers={"x-mode": "strict"})) is True
        assert c.evaluate(ctx(headers={"x-mode": "Strict"})) is False

    def test_matcher(self) -> None:
        c = header("content-type", PrefixMatcher("application/json"))
        assert c.evaluate(ctx(headers={"Content-Type": "application/json; charset=utf-8"}))

    def test_absent_header_is_false(self) -> None:
        assert header("etag", PrefixMatcher("")).evaluate(ctx()) is False

    def test_any_repeated_value_matches(self) -> None:
        c = header("vary", "Accept")
        h = Headers([("Vary", "Origin"), ("Vary", "Accept")])
        assert c.evaluate(MatchContext(200, h)) is True


class TestSelectorConditions:
    def test_equal_token(self) -> None:
        assert selector("v2").evaluate(ctx(sel="v2")) is True
        assert selector("v2").evaluate(ctx(sel="v1")) is False

    def test_missing_selector_is_false(self) -> None:
        assert selector("v2").evaluate(ctx()) is False

    def test_non_string_tokens(self) -> None:
        assert selector(3).evaluate(ctx(sel=3)) is True
        assert selector(("a", 1)).evaluate(ctx(sel=("a", 1))) is True


class TestComposition:
    def test_and(self) -> None:
        c = And((status_class("2xx"), header("content-type", "text/csv")))
        assert c.evaluate(ctx(200, {"content-type": "text/csv"})) is True
        assert c.evaluate(ctx(200, {"content-type": "text/plain"})) is False

    def test_or(self) -> None:
        c = Or((status(301), status(302)))
        assert c.evaluate(ctx(302)) is True
        assert c.evaluate(ctx(303)) is False

    def test_not(self) -> None:
        assert Not(status_class("2xx")).evaluate(ctx(503)) is True

    def test_empty_and_or(self) -> None:
        assert And(()).evaluate(ctx()) is True
        assert Or(()).evaluate(ctx()) is False

    def test_where_and_always(self) -> None:
        c = where(lambda m: m.status == 418 and m.selector == "tea")
        assert c.evaluate(ctx(418, sel="tea")) is True
        assert c.evaluate(ctx(418)) is False
        assert Always().evaluate(ctx(599)) is True

    def test_single_predicate_none_is_false(self) -> None:
        class NoData:
            def get(self, ctx: MatchContext, /) -> None:
                return None

        assert SinglePredicate(NoData(), ExactMatcher("")).evaluate(ctx()) is False

    def test_depth(self) -> None:
        leaf = SinglePredicate(StatusInput(), StatusMatcher(200, 200))
        assert condition_depth(leaf) == 1
        assert condition_depth(And((leaf,))) == 2
        assert condition_depth(Not(Or((And((leaf,)),)))) == 4
        assert condition_depth(Always()) == 1
