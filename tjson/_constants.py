"""TJSON constants — type tokens, integer bounds, alphabets and limits.

Everything here is read-only after import.  The decoder and encoder share
these tables across calls, so nothing in this module may be mutated.
"""

from __future__ import annotations

import re

# ── Tag syntax ───────────────────────────────────────────────
# A member key is "<name>:<type>" with exactly one separator.
TAG_SEPARATOR = ":"

# ── Scalar and object atoms ──────────────────────────────────
TOKEN_STRING = "s"
TOKEN_BINARY16 = "b16"
TOKEN_BINARY32 = "b32"
TOKEN_BINARY64 = "b64"
TOKEN_INT = "i"
TOKEN_UINT = "u"
TOKEN_FLOAT = "f"
TOKEN_TIMESTAMP = "t"
TOKEN_BOOLEAN = "b"
TOKEN_OBJECT = "O"

# ── Parametric containers ────────────────────────────────────
TOKEN_ARRAY = "A"
TOKEN_SET = "S"
PARAM_OPEN = "<"
PARAM_CLOSE = ">"

# ── 64-bit integer ranges ────────────────────────────────────
# Python ints are arbitrary-precision, so we must range-check explicitly.
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1
UINT64_MAX: int = 2**64 - 1

# ── Timestamps ───────────────────────────────────────────────
# The only accepted profile: RFC 3339 with a literal "Z", whole seconds.
TIMESTAMP_FORMAT = "{:04d}-{:02d}-{:02d}T{:02d}:{:02d}:{:02d}Z"
TIMESTAMP_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})Z", re.ASCII
)

# ── Integers ─────────────────────────────────────────────────
# re.ASCII keeps \d from matching non-ASCII digits that int() would accept.
INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
UINT_RE = re.compile(r"-?\d+", re.ASCII)

# ── Binary alphabets (canonical form) ────────────────────────
B16_ALPHABET = frozenset("0123456789abcdef")
B32_ALPHABET = frozenset("abcdefghijklmnopqrstuvwxyz234567")
B64_ALPHABET = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
)
PADDING = "="

# ── Safety limits ────────────────────────────────────────────
# Bounds container nesting for decode and encode.  Each level costs a few
# interpreter frames, so this stays well under the default recursion limit.
MAX_DEPTH: int = 128
