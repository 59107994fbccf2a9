"""Dispatcher — match a Response Handle against rules, consume once, decode.

Per call::

    Unconsumed -> Matching -> Unmatched                (body untouched)
                           -> Consuming -> Consumed -> Success | Error | Raw | DecodeFailed
                                        -> TransportError raised

No state survives a call. Transport and reuse errors propagate unchanged
and no decoder runs; decoder failures come back as DecodeFailed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from typed_response._conditions import MatchContext
from typed_response._outcome import DecodeFailed, Error, Raw, Success, Unmatched
from typed_response._rules import DecodeRule, RuleSet
from typed_response._types import Role

if TYPE_CHECKING:
    from typed_response._outcome import Outcome
    from typed_response._response import ResponseHandle
    from typed_response._types import Selector

logger = logging.getLogger(__name__)


def dispatch(
    handle: ResponseHandle,
    rules: RuleSet | DecodeRule | Sequence[DecodeRule],
    selector: Selector = None,
) -> Outcome:
    """Decode ``handle`` with the first rule of ``rules`` that matches.

    Raises:
        TransportError: The body stream failed mid-read.
        BodyReuseError: The handle's body was already consumed.
    """
    rule = _select(handle, RuleSet.of(rules), selector)
    if rule is None:
        return Unmatched(handle)
    return _decode(handle, rule, handle.consume())


async def adispatch(
    handle: ResponseHandle,
    rules: RuleSet | DecodeRule | Sequence[DecodeRule],
    selector: Selector = None,
) -> Outcome:
    """Async variant of dispatch(); the only suspension point is the body read.

    A cancelled read propagates asyncio.CancelledError with no outcome.
    """
    rule = _select(handle, RuleSet.of(rules), selector)
    if rule is None:
        return Unmatched(handle)
    return _decode(handle, rule, await handle.aconsume())


def _select(handle: ResponseHandle, rule_set: RuleSet, selector: Selector) -> DecodeRule | None:
    ctx = MatchContext(status=handle.status, headers=handle.headers, selector=selector)
    index = rule_set.select(ctx)
    if index is None:
        logger.debug("no decode rule matched status %d (%d rules)", handle.status, len(rule_set))
        return None
    rule = rule_set.rules[index]
    logger.debug("status %d matched rule %d (%s)", handle.status, index, rule.role)
    return rule


def _decode(handle: ResponseHandle, rule: DecodeRule, body: bytes) -> Outcome:
    try:
        value = rule.decoder(body)
    except ValueError as e:
        logger.debug(
            "decoding %d byte %s body failed for status %d: %s",
            len(body),
            rule.role,
            handle.status,
            e,
        )
        return DecodeFailed(
            body=body, error=e, role=rule.role, status=handle.status, headers=handle.headers
        )

    match rule.role:
        case Role.SUCCESS:
            return Success(value=value, status=handle.status, headers=handle.headers)
        case Role.ERROR:
            return Error(value=value, status=handle.status, headers=handle.headers)
        case Role.RAW:
            return Raw(body=value, status=handle.status, headers=handle.headers)
    msg = f"unknown role: {rule.role!r}"  # pragma: no cover
    raise AssertionError(msg)  # pragma: no cover
