"""Exception hierarchy.

Transport and reuse errors are raised out of dispatch. Decode failures are
raised by decoders and captured into a DecodeFailed outcome. Everything
else signals misuse of the API.
"""

from __future__ import annotations


class TypedResponseError(Exception):
    """Base class for every error raised by typed_response."""


class TransportError(TypedResponseError):
    """The body stream failed before it was read to completion."""


class BodyReuseError(TypedResponseError):
    """The body was already moved out of its Response Handle."""

    def __init__(self) -> None:
        super().__init__("response body has already been consumed")


class DecodeError(TypedResponseError, ValueError):
    """A decoder could not turn the body into a value."""


class OutcomeAccessError(TypedResponseError):
    """An accessor was used against the wrong outcome variant."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected a {expected} outcome, got {actual}")


class RuleSetError(TypedResponseError):
    """Errors from rule set validation."""
