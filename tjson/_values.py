"""The typed value tree.

A ``Value`` pairs a type descriptor with native Python data:

    s              str
    b16/b32/b64    bytes
    i / u          int
    f              float
    t              datetime (aware, UTC, whole seconds)
    b              bool
    O              dict[str, Value]
    A<T>           tuple[Value, ...]   every element typed T
    S<T>           frozenset[Value]    every element typed T

Object members keep their own type on the child ``Value``, which is what
lets a decoded tree re-encode to the same tags.

from_native() / to_native() convert between this tree and plain Python
values for callers who would rather not spell out every tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ._constants import INT64_MAX, INT64_MIN, MAX_DEPTH, UINT64_MAX
from ._errors import (
    ERR_HETEROGENEOUS_ARRAY,
    ERR_INT_OVERFLOW,
    ERR_INT_UNDERFLOW,
    ERR_LIMIT_DEPTH,
    ERR_TIME_INVALID,
    ERR_UNEXPECTED_SHAPE,
    PathItem,
    TJSONError,
)
from ._types import (
    BINARY64,
    BOOLEAN,
    FLOAT,
    INT,
    OBJECT,
    STRING,
    TIMESTAMP,
    UINT,
    ArrayOf,
    SetOf,
    TypeDesc,
)


@dataclass(frozen=True)
class Value:
    """One node of a typed tree: a type descriptor and its native data."""

    type: TypeDesc
    data: Any

    # __getitem__ alone would make every Value iterable by integer index.
    __iter__ = None

    def __getitem__(self, key: Any) -> "Value":
        """Index into an object by member name or into an array by position."""
        return self.data[key]


# ── Native Python → Value ─────────────────────────────────────

def from_native(obj: Any, *, max_depth: int = MAX_DEPTH) -> Value:
    """Infer tags for a plain Python value.

    bool → b, int → i (u above the signed range), float → f, str → s,
    bytes → b64, aware datetime → t, dict → O, list/tuple → A<T>,
    set/frozenset → S<T>.  Empty lists infer A<O> and empty sets S<s>.
    """
    return _from_native(obj, max_depth, 0, [])


def _from_native(obj: Any, max_depth: int, depth: int, path: List[PathItem]) -> Value:
    # bool before int: isinstance(True, int) is True.
    if isinstance(obj, bool):
        return Value(BOOLEAN, obj)

    if isinstance(obj, int):
        if INT64_MIN <= obj <= INT64_MAX:
            return Value(INT, obj)
        if INT64_MAX < obj <= UINT64_MAX:
            return Value(UINT, obj)
        if obj < INT64_MIN:
            raise TJSONError(ERR_INT_UNDERFLOW, "integer underflow: {}".format(obj), path)
        raise TJSONError(ERR_INT_OVERFLOW, "integer overflow: {}".format(obj), path)

    if isinstance(obj, float):
        return Value(FLOAT, obj)

    if isinstance(obj, str):
        return Value(STRING, obj)

    if isinstance(obj, (bytes, bytearray)):
        return Value(BINARY64, bytes(obj))

    if isinstance(obj, datetime):
        if obj.tzinfo is None or obj.utcoffset() is None:
            raise TJSONError(ERR_TIME_INVALID, "naive datetime has no UTC instant", path)
        return Value(TIMESTAMP, obj.astimezone(timezone.utc))

    if isinstance(obj, (dict, list, tuple, set, frozenset)):
        if depth + 1 > max_depth:
            raise TJSONError(ERR_LIMIT_DEPTH, "depth exceeds max_depth", path)

    if isinstance(obj, dict):
        members: Dict[str, Value] = {}
        for k, v in obj.items():
            if not isinstance(k, str):
                raise TJSONError(ERR_UNEXPECTED_SHAPE, "object key must be a string", path)
            members[k] = _from_native(v, max_depth, depth + 1, path + [k])
        return Value(OBJECT, members)

    if isinstance(obj, (list, tuple)):
        items = tuple(
            _from_native(v, max_depth, depth + 1, path + [i])
            for i, v in enumerate(obj)
        )
        element = _common_type(items, path) or OBJECT
        return Value(ArrayOf(element), items)

    if isinstance(obj, (set, frozenset)):
        elems = frozenset(
            _from_native(v, max_depth, depth + 1, path) for v in obj
        )
        element = _common_type(list(elems), path) or STRING
        return Value(SetOf(element), elems)

    if obj is None:
        raise TJSONError(ERR_UNEXPECTED_SHAPE, "null is not representable", path)

    raise TJSONError(ERR_UNEXPECTED_SHAPE,
                     "unsupported type {}".format(type(obj).__name__), path)


def _common_type(items: Sequence[Value], path: List[PathItem]) -> Optional[TypeDesc]:
    if not items:
        return None
    first = items[0].type
    for i, item in enumerate(items):
        if item.type != first:
            raise TJSONError(ERR_HETEROGENEOUS_ARRAY,
                             "heterogeneous elements: {} and {}".format(first, item.type),
                             path + [i])
    return first


# ── Value → native Python ─────────────────────────────────────

def to_native(value: Value) -> Any:
    """Strip the tags: objects become dicts, arrays lists, sets sets."""
    typ = value.type
    if isinstance(typ, ArrayOf):
        return [to_native(v) for v in value.data]
    if isinstance(typ, SetOf):
        return {to_native(v) for v in value.data}
    if typ == OBJECT:
        return {k: to_native(v) for k, v in value.data.items()}
    return value.data
