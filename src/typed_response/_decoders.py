"""Bundled decoders.

Decoders are plain callables ``(bytes) -> value`` with no knowledge of
the dispatcher. Any ValueError they raise becomes a DecodeFailed outcome.
"""

from __future__ import annotations

import codecs
import json
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from typed_response._errors import DecodeError

if TYPE_CHECKING:
    from typed_response._types import Decoder


def passthrough(body: bytes, /) -> bytes:
    """Return the body unchanged. Default decoder of raw rules."""
    return body


def text_decoder(encoding: str = "utf-8") -> Decoder[str]:
    """Strictly decode the body as text.

    Invalid byte sequences raise UnicodeDecodeError (a ValueError).
    """
    codecs.lookup(encoding)

    def decode(body: bytes, /) -> str:
        return body.decode(encoding)

    return decode


def json_decoder(**loads_kwargs: Any) -> Decoder[Any]:
    """Decode the body as JSON into plain Python values.

    An empty body is rejected with DecodeError; json.loads would report it
    as an unhelpful "Expecting value: line 1 column 1". So is nesting too
    deep for the parser, which json.loads reports as RecursionError.
    """

    def decode(body: bytes, /) -> Any:
        if not body.strip():
            msg = "empty body is not valid JSON"
            raise DecodeError(msg)
        try:
            return json.loads(body, **loads_kwargs)
        except RecursionError as e:
            msg = "JSON body is nested too deeply"
            raise DecodeError(msg) from e

    return decode


def model_decoder[T](type_: type[T]) -> Decoder[T]:
    """Decode and validate the body as JSON into ``type_`` with pydantic.

    ``type_`` may be a BaseModel, a dataclass, a TypedDict or any type
    pydantic's TypeAdapter understands. Schema mismatches raise
    pydantic.ValidationError, which is a ValueError.
    """
    adapter = TypeAdapter(type_)

    def decode(body: bytes, /) -> T:
        return adapter.validate_json(body)

    return decode
