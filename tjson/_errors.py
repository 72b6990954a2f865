"""TJSON error codes and the exception class.

Every failure the codec can report is one of the ERR_* codes below.  The set
is closed: callers compare ``TJSONError.code`` against these constants rather
than parsing messages.  Decoding is fail-fast, so exactly one code is reported
per call, together with the location of the offending node.
"""

from __future__ import annotations

from typing import Sequence, Union

# ── Tags and structure ───────────────────────────────────────
ERR_MISSING_TAG: str = "ERR_MISSING_TAG"              # no ":type" on a member key
ERR_DUPLICATE_KEY: str = "ERR_DUPLICATE_KEY"          # two members share a name
ERR_MALFORMED_TYPE: str = "ERR_MALFORMED_TYPE"        # unparseable type descriptor
ERR_HETEROGENEOUS_ARRAY: str = "ERR_HETEROGENEOUS_ARRAY"
ERR_UNEXPECTED_SHAPE: str = "ERR_UNEXPECTED_SHAPE"    # JSON kind does not fit the tag

# ── Binary ───────────────────────────────────────────────────
ERR_B16_UPPER_CASE: str = "ERR_B16_UPPER_CASE"
ERR_B16_INVALID: str = "ERR_B16_INVALID"
ERR_B32_UPPER_CASE: str = "ERR_B32_UPPER_CASE"
ERR_B32_INVALID: str = "ERR_B32_INVALID"
ERR_B32_PADDING: str = "ERR_B32_PADDING"
# Never raised: base64url is case-sensitive, so upper case is valid input.
ERR_B64_UPPER_CASE: str = "ERR_B64_UPPER_CASE"
ERR_B64_INVALID: str = "ERR_B64_INVALID"
ERR_B64_PADDING: str = "ERR_B64_PADDING"

# ── Integers ─────────────────────────────────────────────────
ERR_INT_OVERFLOW: str = "ERR_INT_OVERFLOW"
ERR_INT_UNDERFLOW: str = "ERR_INT_UNDERFLOW"
ERR_INT_INVALID: str = "ERR_INT_INVALID"
ERR_UINT_OVERFLOW: str = "ERR_UINT_OVERFLOW"
ERR_UINT_NEGATIVE: str = "ERR_UINT_NEGATIVE"
ERR_UINT_INVALID: str = "ERR_UINT_INVALID"

# ── Timestamps ───────────────────────────────────────────────
ERR_TIME_INVALID: str = "ERR_TIME_INVALID"

# ── Resource and substrate failures ──────────────────────────
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"    # nesting exceeds max_depth
ERR_JSON_SYNTAX: str = "ERR_JSON_SYNTAX"    # the JSON text itself is unusable

ALL_CODES = frozenset([
    ERR_MISSING_TAG,
    ERR_DUPLICATE_KEY,
    ERR_MALFORMED_TYPE,
    ERR_HETEROGENEOUS_ARRAY,
    ERR_UNEXPECTED_SHAPE,
    ERR_B16_UPPER_CASE,
    ERR_B16_INVALID,
    ERR_B32_UPPER_CASE,
    ERR_B32_INVALID,
    ERR_B32_PADDING,
    ERR_B64_UPPER_CASE,
    ERR_B64_INVALID,
    ERR_B64_PADDING,
    ERR_INT_OVERFLOW,
    ERR_INT_UNDERFLOW,
    ERR_INT_INVALID,
    ERR_UINT_OVERFLOW,
    ERR_UINT_NEGATIVE,
    ERR_UINT_INVALID,
    ERR_TIME_INVALID,
    ERR_LIMIT_DEPTH,
    ERR_JSON_SYNTAX,
])

PathItem = Union[str, int]


def format_path(path: Sequence[PathItem]) -> str:
    """Render a location as a JSON-Pointer-style string ("" is the root)."""
    parts = []
    for item in path:
        token = str(item).replace("~", "~0").replace("/", "~1")
        parts.append("/" + token)
    return "".join(parts)


class TJSONError(Exception):
    """Exception for TJSON decode/encode errors.

    The `.code` attribute is one of the ERR_* strings above.  `.path` points
    at the member or element that failed, e.g. "/items/2".
    """

    def __init__(self, code: str, msg: str = "",
                 path: Sequence[PathItem] = ()) -> None:
        super().__init__(msg or code)
        self.code = code
        self.path = format_path(path)

    def locate(self, path: Sequence[PathItem]) -> "TJSONError":
        """Attach a location to an error raised by a path-unaware helper."""
        if not self.path:
            self.path = format_path(path)
        return self

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path:
            return "{} (at {})".format(msg, self.path)
        return msg
