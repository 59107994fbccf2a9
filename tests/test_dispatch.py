"""Tests for dispatch and adispatch."""

from __future__ import annotations

import asyncio
import logging

import pytest
from pydantic import BaseModel

from typed_response import (
    Always,
    BodyReuseError,
    DecodeFailed,
    Error,
    OutcomeKind,
    Raw,
    ResponseHandle,
    Role,
    RuleSet,
    Success,
    TransportError,
    Unmatched,
    adispatch,
    dispatch,
    error,
    header,
    json_decoder,
    model_decoder,
    raw,
    selector,
    status,
    status_class,
    status_range,
    success,
    text_decoder,
)
from typed_response.testing import ChunkedBody, FailingBody, RecordingDecoder, transport_error


class Item(BaseModel):
    id: int


class ApiError(BaseModel):
    msg: str


class TestScenarios:
    def test_success_2xx(self) -> None:
        d1 = RecordingDecoder(json_decoder())
        body = ChunkedBody([b'{"ok":', b"true}"])
        handle = ResponseHandle(200, body=body)

        outcome = dispatch(handle, success(status_range(200, 299), d1))

        assert outcome == Success(value={"ok": True}, status=200, headers=handle.headers)
        assert d1.calls == [b'{"ok":true}']
        assert body.reads == 1

    def test_error_4xx(self) -> None:
        d1 = RecordingDecoder(model_decoder(Item))
        d2 = RecordingDecoder(model_decoder(ApiError))
        handle = ResponseHandle(404, body=b'{"msg":"not found"}')

        outcome = dispatch(
            handle,
            [success(status_range(200, 299), d1), error(status_range(400, 499), d2)],
        )

        assert isinstance(outcome, Error)
        assert outcome.value == ApiError(msg="not found")
        assert d1.call_count == 0
        assert d2.call_count == 1

    def test_unmatched_leaves_body(self) -> None:
        d1 = RecordingDecoder(json_decoder())
        handle = ResponseHandle(500, {"Retry-After": "3"}, b"internal error")

        outcome = dispatch(handle, [success(status_range(200, 299), d1)])

        assert isinstance(outcome, Unmatched)
        assert outcome.status == 500
        assert outcome.headers.get("retry-after") == "3"
        assert not handle.consumed
        assert d1.call_count == 0
        assert outcome.consume() == b"internal error"

    def test_decode_failed_keeps_exact_bytes(self) -> None:
        original = b'{"ok": tru'
        handle = ResponseHandle(200, body=original)

        outcome = dispatch(handle, success(status_class("2xx"), json_decoder()))

        assert isinstance(outcome, DecodeFailed)
        assert outcome.body == original
        assert isinstance(outcome.error, ValueError)
        assert outcome.role is Role.SUCCESS
        assert outcome.status == 200

    def test_deeply_nested_json_is_decode_failed(self) -> None:
        body = b"[" * 100_000
        outcome = dispatch(ResponseHandle(200, body=body), success(Always(), json_decoder()))

        assert isinstance(outcome, DecodeFailed)
        assert outcome.body == body
        assert "nested too deeply" in str(outcome.error)

    def test_transport_failure_invokes_no_decoder(self) -> None:
        d1 = RecordingDecoder(json_decoder())
        handle = ResponseHandle(200, body=transport_error())

        with pytest.raises(TransportError):
            dispatch(handle, success(status_class("2xx"), d1))

        assert d1.call_count == 0
        assert handle.consumed


class TestDispatchProperties:
    def test_first_match_wins(self) -> None:
        first = RecordingDecoder(text_decoder())
        second = RecordingDecoder(json_decoder())
        rules = [error(status(422), first), success(status_class("4xx"), second)]

        outcome = dispatch(ResponseHandle(422, body=b'"x"'), rules)

        assert outcome.kind is OutcomeKind.ERROR
        assert outcome.unwrap_error() == '"x"'
        assert second.call_count == 0

    def test_raw_rule(self) -> None:
        outcome = dispatch(ResponseHandle(200, body=b"\x89PNG"), raw(Always()))
        assert isinstance(outcome, Raw)
        assert outcome.body == b"\x89PNG"

    def test_raw_rule_with_decoder(self) -> None:
        outcome = dispatch(ResponseHandle(200, body=b"plain"), raw(Always(), text_decoder()))
        assert outcome.unwrap_raw() == "plain"

    def test_raw_rule_decode_failure(self) -> None:
        outcome = dispatch(ResponseHandle(200, body=b"\xff"), raw(Always(), text_decoder()))
        assert isinstance(outcome, DecodeFailed)
        assert outcome.role is Role.RAW

    def test_selector_drives_choice(self) -> None:
        rules = RuleSet(
            (
                success(selector("v2"), model_decoder(Item)),
                success(Always(), json_decoder()),
            )
        )
        body = b'{"id": 3}'
        assert dispatch(ResponseHandle(200, body=body), rules, "v2").unwrap() == Item(id=3)
        assert dispatch(ResponseHandle(200, body=body), rules, "v1").unwrap() == {"id": 3}
        assert dispatch(ResponseHandle(200, body=body), rules).unwrap() == {"id": 3}

    def test_unused_selector_is_ignored(self) -> None:
        rules = success(status(200), json_decoder())
        outcome = dispatch(ResponseHandle(200, body=b"1"), rules, selector={"any": "thing"})
        assert outcome.unwrap() == 1

    def test_header_driven(self) -> None:
        rules = [
            success(header("content-type", "application/json"), json_decoder()),
            success(Always(), text_decoder()),
        ]
        handle = ResponseHandle(200, [("Content-Type", "application/json")], b"[1]")
        assert dispatch(handle, rules).unwrap() == [1]

    def test_split_rule_set(self) -> None:
        rules = RuleSet.split(model_decoder(Item), model_decoder(ApiError))
        ok = dispatch(ResponseHandle(200, body=b'{"id": 1}'), rules)
        bad = dispatch(ResponseHandle(400, body=b'{"msg": "bad"}'), rules)
        down = dispatch(ResponseHandle(503, body=b"<html>"), rules)
        assert ok.unwrap() == Item(id=1)
        assert bad.unwrap_error() == ApiError(msg="bad")
        assert down.is_unmatched

    def test_already_consumed_handle(self) -> None:
        handle = ResponseHandle(200, body=b"{}")
        handle.consume()
        with pytest.raises(BodyReuseError):
            dispatch(handle, success(Always(), json_decoder()))

    def test_consumed_handle_unmatched_is_not_an_error(self) -> None:
        handle = ResponseHandle(500, body=b"")
        handle.consume()
        assert dispatch(handle, success(status(200), json_decoder())).is_unmatched

    def test_second_consume_after_dispatch(self) -> None:
        handle = ResponseHandle(200, body=b"{}")
        dispatch(handle, success(Always(), json_decoder()))
        with pytest.raises(BodyReuseError):
            handle.consume()

    def test_decoder_bug_propagates(self) -> None:
        def broken(body: bytes) -> object:
            raise KeyError("bug")

        with pytest.raises(KeyError):
            dispatch(ResponseHandle(200, body=b"{}"), success(Always(), broken))

    def test_exactly_one_outcome_kind(self) -> None:
        rules = RuleSet.split(json_decoder(), json_decoder())
        for code, body in [(200, b"1"), (404, b"2"), (500, b""), (200, b"{")]:
            outcome = dispatch(ResponseHandle(code, body=body), rules)
            flags = [
                outcome.is_success,
                outcome.is_error,
                outcome.is_raw,
                outcome.is_unmatched,
                outcome.is_decode_failed,
            ]
            assert flags.count(True) == 1

    def test_logs_decode_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="typed_response"):
            dispatch(ResponseHandle(200, body=b"{"), success(Always(), json_decoder()))
        assert "failed for status 200" in caplog.text


class TestAsyncDispatch:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        handle = ResponseHandle(201, body=ChunkedBody([b'{"id"', b": 9}"]))
        outcome = await adispatch(handle, success(status_class("2xx"), model_decoder(Item)))
        assert outcome.unwrap() == Item(id=9)

    @pytest.mark.asyncio
    async def test_unmatched(self) -> None:
        handle = ResponseHandle(500, body=b"x")
        outcome = await adispatch(handle, success(status_class("2xx"), json_decoder()))
        assert isinstance(outcome, Unmatched)
        assert await outcome.aconsume() == b"x"

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        d1 = RecordingDecoder(json_decoder())
        handle = ResponseHandle(200, body=FailingBody([b"{"]))
        with pytest.raises(TransportError):
            await adispatch(handle, success(Always(), d1))
        assert d1.call_count == 0

    @pytest.mark.asyncio
    async def test_cancellation_produces_no_outcome(self) -> None:
        d1 = RecordingDecoder(json_decoder())
        started = asyncio.Event()

        class Stalled:
            async def aread(self) -> bytes:
                started.set()
                await asyncio.sleep(3600)
                return b"{}"

        task = asyncio.create_task(
            adispatch(ResponseHandle(200, body=Stalled()), success(Always(), d1))
        )
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert d1.call_count == 0

    @pytest.mark.asyncio
    async def test_concurrent_dispatch(self) -> None:
        rules = RuleSet.split(json_decoder(), json_decoder())
        handles = [ResponseHandle(200 if i % 2 else 404, body=str(i).encode()) for i in range(20)]
        outcomes = await asyncio.gather(*(adispatch(h, rules) for h in handles))
        for i, outcome in enumerate(outcomes):
            assert outcome.kind is (OutcomeKind.SUCCESS if i % 2 else OutcomeKind.ERROR)
