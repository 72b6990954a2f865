"""tjson — Tagged JSON for Python.

TJSON is a subset of JSON in which every object member key carries a type
tag, so that integers, binary data and timestamps survive the trip through
plain JSON without guesswork.

Quick start:
    >>> from tjson import loads, dumps, to_native
    >>> v = loads('{"id:u":"18446744073709551615","blob:b16":"cafe"}')
    >>> to_native(v)
    {'blob': b'\\xca\\xfe', 'id': 18446744073709551615}
    >>> dumps(v)
    '{"blob:b16":"cafe","id:u":"18446744073709551615"}'

Every failure raises TJSONError; its ``.code`` is one of the ERR_* strings
exported here and ``.path`` locates the offending member.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from ._constants import INT64_MAX, INT64_MIN, MAX_DEPTH, UINT64_MAX
from ._core import decode, encode
from ._errors import (
    ALL_CODES,
    ERR_B16_INVALID,
    ERR_B16_UPPER_CASE,
    ERR_B32_INVALID,
    ERR_B32_PADDING,
    ERR_B32_UPPER_CASE,
    ERR_B64_INVALID,
    ERR_B64_PADDING,
    ERR_B64_UPPER_CASE,
    ERR_DUPLICATE_KEY,
    ERR_HETEROGENEOUS_ARRAY,
    ERR_INT_INVALID,
    ERR_INT_OVERFLOW,
    ERR_INT_UNDERFLOW,
    ERR_JSON_SYNTAX,
    ERR_LIMIT_DEPTH,
    ERR_MALFORMED_TYPE,
    ERR_MISSING_TAG,
    ERR_TIME_INVALID,
    ERR_UINT_INVALID,
    ERR_UINT_NEGATIVE,
    ERR_UINT_OVERFLOW,
    ERR_UNEXPECTED_SHAPE,
    TJSONError,
)
from ._json_adapter import parse_json, serialize_json
from ._tags import format_tag, parse_tag
from ._types import (
    BINARY16,
    BINARY32,
    BINARY64,
    BOOLEAN,
    FLOAT,
    INT,
    OBJECT,
    STRING,
    TIMESTAMP,
    UINT,
    ArrayOf,
    Atom,
    SetOf,
    TypeDesc,
    format_type,
    parse_type,
)
from ._values import Value, from_native, to_native

__version__ = "0.1.0"

__all__ = [
    # Codec
    "decode",
    "encode",
    "loads",
    "dumps",
    "dumps_native",
    "from_native",
    "to_native",
    # Tags and types
    "parse_tag",
    "format_tag",
    "parse_type",
    "format_type",
    "Value",
    "TypeDesc",
    "Atom",
    "ArrayOf",
    "SetOf",
    "STRING",
    "BINARY16",
    "BINARY32",
    "BINARY64",
    "INT",
    "UINT",
    "FLOAT",
    "TIMESTAMP",
    "BOOLEAN",
    "OBJECT",
    # Limits
    "MAX_DEPTH",
    "INT64_MIN",
    "INT64_MAX",
    "UINT64_MAX",
    # Exception
    "TJSONError",
    # Error codes
    "ALL_CODES",
    "ERR_MISSING_TAG",
    "ERR_DUPLICATE_KEY",
    "ERR_MALFORMED_TYPE",
    "ERR_HETEROGENEOUS_ARRAY",
    "ERR_UNEXPECTED_SHAPE",
    "ERR_B16_UPPER_CASE",
    "ERR_B16_INVALID",
    "ERR_B32_UPPER_CASE",
    "ERR_B32_INVALID",
    "ERR_B32_PADDING",
    "ERR_B64_UPPER_CASE",
    "ERR_B64_INVALID",
    "ERR_B64_PADDING",
    "ERR_INT_OVERFLOW",
    "ERR_INT_UNDERFLOW",
    "ERR_INT_INVALID",
    "ERR_UINT_OVERFLOW",
    "ERR_UINT_NEGATIVE",
    "ERR_UINT_INVALID",
    "ERR_TIME_INVALID",
    "ERR_LIMIT_DEPTH",
    "ERR_JSON_SYNTAX",
]


# ── Text API ──────────────────────────────────────────────────
# These wrap decode/encode with the strict JSON adapter, the way
# json.loads/json.dumps wrap the JSON scanner.

def loads(data: Union[str, bytes, bytearray], *, max_depth: int = MAX_DEPTH) -> Value:
    """Parse TJSON text into a Value."""
    return decode(parse_json(data), max_depth=max_depth)


def dumps(value: Value, *, indent: Optional[int] = None,
          max_depth: int = MAX_DEPTH) -> str:
    """Serialize a Value to canonical TJSON text.

    With ``indent=None`` the output is compact; otherwise it is pretty-printed.
    Member keys are sorted, but readers must not rely on member order.
    """
    return serialize_json(encode(value, max_depth=max_depth), indent=indent)


def dumps_native(obj: Any, *, indent: Optional[int] = None,
                 max_depth: int = MAX_DEPTH) -> str:
    """Infer tags for a plain Python value and serialize it."""
    return dumps(from_native(obj, max_depth=max_depth), indent=indent, max_depth=max_depth)
