"""typed_response.httpx — httpx transport adapter.

Builds Response Handles from ``httpx.Response`` objects (sync and async)
and dispatches them in one call.
"""

from typed_response.httpx._adapter import (
    adispatch_response,
    ahandle_from_response,
    dispatch_response,
    handle_from_response,
)

__all__ = [
    "handle_from_response",
    "ahandle_from_response",
    "dispatch_response",
    "adispatch_response",
]
