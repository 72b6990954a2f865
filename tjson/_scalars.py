"""Canonical scalar codecs: binary text, 64-bit integers, timestamps, floats.

Each decoder takes the JSON value found under a tag and either returns the
native Python value or raises the kind-specific TJSONError.  Each encoder
takes a native value and returns the single canonical JSON value for it, so
encoder output always passes the matching decoder.

Binary validation order matters for which code gets reported:

    1. upper case   (only when the text is otherwise within the alphabet)
    2. padding "="  (base32/base64), then foreign characters (base64)
    3. strict decode, including a canonical re-encode comparison

Step 3 catches text whose unused trailing bits are non-zero.  Python's
base64 module silently drops those bits, which would let two different
strings decode to the same bytes.
"""

from __future__ import annotations

import base64
import binascii
import math
from datetime import datetime, timezone
from typing import Any, Sequence

from ._constants import (
    B16_ALPHABET,
    B32_ALPHABET,
    B64_ALPHABET,
    INT64_MAX,
    INT64_MIN,
    INT_RE,
    PADDING,
    TIMESTAMP_FORMAT,
    TIMESTAMP_RE,
    UINT64_MAX,
    UINT_RE,
)
from ._errors import (
    ERR_B16_INVALID,
    ERR_B16_UPPER_CASE,
    ERR_B32_INVALID,
    ERR_B32_PADDING,
    ERR_B32_UPPER_CASE,
    ERR_B64_INVALID,
    ERR_B64_PADDING,
    ERR_INT_INVALID,
    ERR_INT_OVERFLOW,
    ERR_INT_UNDERFLOW,
    ERR_TIME_INVALID,
    ERR_UINT_INVALID,
    ERR_UINT_NEGATIVE,
    ERR_UINT_OVERFLOW,
    ERR_UNEXPECTED_SHAPE,
    PathItem,
    TJSONError,
)

Path = Sequence[PathItem]

# Digits in UINT64_MAX; anything longer, ignoring leading zeros, is out of range.
_MAX_DIGITS = len(str(UINT64_MAX))


def _has_upper(text: str) -> bool:
    return any("A" <= ch <= "Z" for ch in text)


def _only(text: str, alphabet: frozenset) -> bool:
    return all(ch in alphabet for ch in text)


# ── base16 ────────────────────────────────────────────────────

def decode_binary16(text: str, path: Path = ()) -> bytes:
    if _has_upper(text) and _only(text.lower(), B16_ALPHABET):
        raise TJSONError(ERR_B16_UPPER_CASE,
                         "base16 data contains upper case letters", path)
    if len(text) % 2 or not _only(text, B16_ALPHABET):
        raise TJSONError(ERR_B16_INVALID, "invalid base16-encoded data", path)
    return binascii.unhexlify(text)


def encode_binary16(data: bytes) -> str:
    return binascii.hexlify(data).decode("ascii")


# ── base32 (RFC 4648 alphabet, lower case, unpadded) ─────────

def decode_binary32(text: str, path: Path = ()) -> bytes:
    if _has_upper(text) and _only(text.lower(), B32_ALPHABET | {PADDING}):
        raise TJSONError(ERR_B32_UPPER_CASE,
                         "base32 data contains upper case letters", path)
    if PADDING in text:
        raise TJSONError(ERR_B32_PADDING, "padding in base32-encoded data", path)
    # Unpadded base32 never ends a block on 1, 3 or 6 characters.
    if not _only(text, B32_ALPHABET) or len(text) % 8 in (1, 3, 6):
        raise TJSONError(ERR_B32_INVALID, "invalid base32-encoded data", path)
    padded = text.upper() + PADDING * (-len(text) % 8)
    try:
        data = base64.b32decode(padded)
    except (binascii.Error, ValueError):
        raise TJSONError(ERR_B32_INVALID, "invalid base32-encoded data", path)
    if encode_binary32(data) != text:
        raise TJSONError(ERR_B32_INVALID, "non-canonical base32 trailing bits", path)
    return data


def encode_binary32(data: bytes) -> str:
    return base64.b32encode(data).decode("ascii").rstrip(PADDING).lower()


# ── base64url (unpadded) ─────────────────────────────────────
# Upper case is part of this alphabet, so there is no upper-case check.

def decode_binary64(text: str, path: Path = ()) -> bytes:
    if PADDING in text:
        raise TJSONError(ERR_B64_PADDING, "padding in base64-encoded data", path)
    if not _only(text, B64_ALPHABET) or len(text) % 4 == 1:
        raise TJSONError(ERR_B64_INVALID, "invalid base64-encoded data", path)
    try:
        data = base64.urlsafe_b64decode(text + PADDING * (-len(text) % 4))
    except (binascii.Error, ValueError):
        raise TJSONError(ERR_B64_INVALID, "invalid base64-encoded data", path)
    if encode_binary64(data) != text:
        raise TJSONError(ERR_B64_INVALID, "non-canonical base64 trailing bits", path)
    return data


def encode_binary64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip(PADDING)


# ── Integers ─────────────────────────────────────────────────

def _parse_decimal(text: str) -> int:
    """Value of already-validated decimal text, clamped just past 64 bits.

    Leading zeros are stripped and over-long digit runs are never handed to
    int(), which refuses very long strings on recent interpreters.
    """
    negative = text.startswith("-")
    digits = text.lstrip("+-").lstrip("0") or "0"
    if len(digits) > _MAX_DIGITS:
        magnitude = UINT64_MAX + 1
    else:
        magnitude = int(digits)
    return -magnitude if negative else magnitude


def decode_int(text: str, path: Path = ()) -> int:
    """Parse a signed 64-bit integer from decimal text."""
    if INT_RE.fullmatch(text) is None:
        raise TJSONError(ERR_INT_INVALID, "invalid integer: {!r}".format(text), path)
    val = _parse_decimal(text)
    if val < INT64_MIN:
        raise TJSONError(ERR_INT_UNDERFLOW, "integer underflow: {}".format(text), path)
    if val > INT64_MAX:
        raise TJSONError(ERR_INT_OVERFLOW, "integer overflow: {}".format(text), path)
    return val


def decode_uint(text: str, path: Path = ()) -> int:
    """Parse an unsigned 64-bit integer from decimal text."""
    if UINT_RE.fullmatch(text) is None:
        raise TJSONError(ERR_UINT_INVALID,
                         "invalid unsigned integer: {!r}".format(text), path)
    # Any minus sign is negative, "-0" included; unsigned text carries no sign.
    if text.startswith("-"):
        raise TJSONError(ERR_UINT_NEGATIVE,
                         "unsigned integer negative: {}".format(text), path)
    val = _parse_decimal(text)
    if val > UINT64_MAX:
        raise TJSONError(ERR_UINT_OVERFLOW,
                         "unsigned integer overflow: {}".format(text), path)
    return val


def _require_int(val: Any, path: Path) -> int:
    # bool is a subclass of int; True must not encode as "1".
    if isinstance(val, bool) or not isinstance(val, int):
        raise TJSONError(ERR_UNEXPECTED_SHAPE,
                         "expected int, got {}".format(type(val).__name__), path)
    return val


def encode_int(val: Any, path: Path = ()) -> str:
    val = _require_int(val, path)
    if val < INT64_MIN:
        raise TJSONError(ERR_INT_UNDERFLOW, "integer underflow: {}".format(val), path)
    if val > INT64_MAX:
        raise TJSONError(ERR_INT_OVERFLOW, "integer overflow: {}".format(val), path)
    return str(val)


def encode_uint(val: Any, path: Path = ()) -> str:
    val = _require_int(val, path)
    if val < 0:
        raise TJSONError(ERR_UINT_NEGATIVE,
                         "unsigned integer negative: {}".format(val), path)
    if val > UINT64_MAX:
        raise TJSONError(ERR_UINT_OVERFLOW,
                         "unsigned integer overflow: {}".format(val), path)
    return str(val)


# ── Timestamps ───────────────────────────────────────────────

def decode_timestamp(text: str, path: Path = ()) -> datetime:
    """Parse "YYYY-MM-DDTHH:MM:SSZ" into an aware UTC datetime."""
    m = TIMESTAMP_RE.fullmatch(text)
    if m is None:
        raise TJSONError(ERR_TIME_INVALID, "invalid time format: {!r}".format(text), path)
    try:
        # datetime rejects month 13, Feb 30, second 60 and year 0000.
        return datetime(*(int(g) for g in m.groups()), tzinfo=timezone.utc)
    except ValueError:
        raise TJSONError(ERR_TIME_INVALID, "invalid time: {!r}".format(text), path)


def encode_timestamp(val: Any, path: Path = ()) -> str:
    if not isinstance(val, datetime):
        raise TJSONError(ERR_UNEXPECTED_SHAPE,
                         "expected datetime, got {}".format(type(val).__name__), path)
    if val.tzinfo is None or val.utcoffset() is None:
        raise TJSONError(ERR_TIME_INVALID, "naive datetime has no UTC instant", path)
    if val.microsecond:
        raise TJSONError(ERR_TIME_INVALID, "sub-second timestamps are not representable", path)
    try:
        utc = val.astimezone(timezone.utc)
    except OverflowError:
        raise TJSONError(ERR_TIME_INVALID, "timestamp out of range", path)
    return TIMESTAMP_FORMAT.format(
        utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second
    )


# ── Floats ───────────────────────────────────────────────────
# JSON numbers pass through; Python's json module already emits the shortest
# text that round-trips a double.  NaN and infinities have no JSON form.

def _to_finite_float(val: Any, path: Path) -> float:
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise TJSONError(ERR_UNEXPECTED_SHAPE,
                         "expected number, got {}".format(type(val).__name__), path)
    try:
        result = float(val)
    except OverflowError:
        raise TJSONError(ERR_UNEXPECTED_SHAPE, "number out of float range", path)
    if not math.isfinite(result):
        raise TJSONError(ERR_UNEXPECTED_SHAPE, "non-finite float", path)
    return result


def decode_float(val: Any, path: Path = ()) -> float:
    return _to_finite_float(val, path)


def encode_float(val: Any, path: Path = ()) -> float:
    return _to_finite_float(val, path)
