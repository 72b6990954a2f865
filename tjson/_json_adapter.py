"""JSON boundary: raw text in, untyped tree out, and back again.

The codec itself only sees untyped trees.  This adapter drives the standard
library json module and tightens it where plain json.loads is too lenient
for TJSON:

    leading UTF-8 BOM           → ERR_JSON_SYNTAX
    invalid UTF-8               → ERR_JSON_SYNTAX
    NaN / Infinity / -Infinity  → ERR_JSON_SYNTAX
    repeated raw key in object  → ERR_DUPLICATE_KEY

Repeated raw keys have to be caught here: json.loads keeps the last one and
the decoder would never see the first.  Members that share a name under
different tags ("a:i" and "a:s") are left to the decoder.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional, Tuple, Union

from ._errors import (
    ERR_DUPLICATE_KEY,
    ERR_JSON_SYNTAX,
    ERR_LIMIT_DEPTH,
    TJSONError,
)

# Leading whitespace pattern for BOM detection.
_WS = re.compile(rb"^[\x20\x09\x0A\x0D]*")
_BOM = b"\xef\xbb\xbf"


def _reject_constant(token: str) -> Any:
    raise TJSONError(ERR_JSON_SYNTAX, "JSON constant not allowed: {}".format(token))


def _pairs_hook(pairs: List[Tuple[str, Any]]) -> dict:
    result: dict = {}
    for key, value in pairs:
        if key in result:
            raise TJSONError(ERR_DUPLICATE_KEY, "duplicate key in JSON", [key])
        result[key] = value
    return result


def parse_json(raw: Union[bytes, bytearray, str]) -> Any:
    """Parse JSON text (bytes are decoded as UTF-8) into an untyped tree."""
    if isinstance(raw, (bytes, bytearray)):
        m = _WS.match(raw)
        start = m.end() if m else 0
        if raw[start:start + 3] == _BOM:
            raise TJSONError(ERR_JSON_SYNTAX, "UTF-8 BOM rejected")
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            raise TJSONError(ERR_JSON_SYNTAX, "invalid UTF-8 in JSON input")
    else:
        text = raw
        if text.lstrip(" \t\r\n").startswith("\ufeff"):
            raise TJSONError(ERR_JSON_SYNTAX, "BOM rejected")

    try:
        return json.loads(
            text,
            object_pairs_hook=_pairs_hook,
            parse_constant=_reject_constant,
        )
    except json.JSONDecodeError as e:
        raise TJSONError(ERR_JSON_SYNTAX, "JSON parse error: {}".format(e))
    except RecursionError:
        raise TJSONError(ERR_LIMIT_DEPTH, "JSON nesting too deep to parse")


def serialize_json(tree: Any, indent: Optional[int] = None) -> str:
    """Serialize an untyped tree.  Keys are sorted so output is stable."""
    if indent is None:
        return json.dumps(tree, sort_keys=True, ensure_ascii=False,
                          allow_nan=False, separators=(",", ":"))
    return json.dumps(tree, sort_keys=True, ensure_ascii=False,
                      allow_nan=False, indent=indent)
