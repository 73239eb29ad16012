"""
Request bodies.

A body is either absent (``None``), a JSON-serializable value (``JsonBody``)
or pre-encoded bytes (``RawBody``). The bytes returned by ``serialize`` are
the exact bytes that get hashed into ``Content-MD5`` and sent on the wire.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class JsonBody:
    value: Any


@dataclass(frozen=True)
class RawBody:
    data: bytes


Body = Optional[Union[JsonBody, RawBody]]


def to_body(value: Any) -> Body:
    """Coerce caller input into a ``Body``; empty input means no body."""
    if isinstance(value, (JsonBody, RawBody)):
        return value
    if value is None:
        return None
    if isinstance(value, str):
        return RawBody(value.encode('utf-8')) if value else None
    if isinstance(value, (bytes, bytearray)):
        return RawBody(bytes(value)) if value else None
    if isinstance(value, (dict, list, tuple)) and not value:
        return None
    return JsonBody(value)


def serialize(body: Body) -> bytes:
    """Encode a body into its canonical wire form."""
    if body is None:
        return b''
    if isinstance(body, JsonBody):
        return json.dumps(body.value, separators=(',', ':')).encode('utf-8')
    if isinstance(body, RawBody):
        return body.data
    raise TypeError(f"Unsupported body type: {type(body).__name__}")
