"""Adapt ``httpx.Response`` into Response Handles.

Works for buffered and streamed responses alike; streamed responses are
where deferring the decode decision pays off, since nothing is read until
a rule has matched::

    with client.stream("GET", url) as response:
        outcome = dispatch_response(response, rules)

httpx failures during the body read are mapped onto the package's error
taxonomy: RequestError (ReadError, RemoteProtocolError, DecodingError, ...)
and StreamClosed become TransportError, StreamConsumed becomes
BodyReuseError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from typed_response._dispatch import adispatch, dispatch
from typed_response._errors import BodyReuseError, TransportError
from typed_response._response import ResponseHandle

if TYPE_CHECKING:
    from collections.abc import Sequence

    from typed_response._outcome import Outcome
    from typed_response._rules import DecodeRule, RuleSet
    from typed_response._types import Selector

logger = logging.getLogger(__name__)


class _ResponseBody:
    __slots__ = ("_response",)

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    def read(self) -> bytes:
        try:
            return self._response.read()
        except httpx.StreamConsumed as e:
            raise BodyReuseError from e
        except (httpx.RequestError, httpx.StreamClosed) as e:
            logger.debug("reading %d response body failed: %r", self._response.status_code, e)
            self._response.close()
            raise TransportError(str(e)) from e


class _AsyncResponseBody:
    __slots__ = ("_response",)

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    async def aread(self) -> bytes:
        try:
            return await self._response.aread()
        except httpx.StreamConsumed as e:
            raise BodyReuseError from e
        except (httpx.RequestError, httpx.StreamClosed) as e:
            logger.debug("reading %d response body failed: %r", self._response.status_code, e)
            await self._response.aclose()
            raise TransportError(str(e)) from e


def handle_from_response(response: httpx.Response) -> ResponseHandle:
    """Wrap a response from ``httpx.Client`` without reading its body."""
    return ResponseHandle(
        response.status_code, response.headers.multi_items(), _ResponseBody(response)
    )


def ahandle_from_response(response: httpx.Response) -> ResponseHandle:
    """Wrap a response from ``httpx.AsyncClient``; read it with aconsume()."""
    return ResponseHandle(
        response.status_code, response.headers.multi_items(), _AsyncResponseBody(response)
    )


def dispatch_response(
    response: httpx.Response,
    rules: RuleSet | DecodeRule | Sequence[DecodeRule],
    selector: Selector = None,
) -> Outcome:
    """Shortcut for ``dispatch(handle_from_response(response), rules, selector)``."""
    return dispatch(handle_from_response(response), rules, selector)


async def adispatch_response(
    response: httpx.Response,
    rules: RuleSet | DecodeRule | Sequence[DecodeRule],
    selector: Selector = None,
) -> Outcome:
    return await adispatch(ahandle_from_response(response), rules, selector)
