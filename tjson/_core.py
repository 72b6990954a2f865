"""TJSON core — decode untyped JSON trees into Values and encode them back.

Decoding is a single fail-fast traversal.  Object members are visited in
ascending key order (code-point order, which is also UTF-8 byte order), so
when a document has several problems the reported one does not depend on
how the JSON parser happened to order its dict.

Depth semantics, shared by both directions:
  - The root call starts at depth=0.
  - Entering an object, array or set checks depth+1 against max_depth.
  - Scalars don't increment depth.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from ._constants import MAX_DEPTH
from ._errors import (
    ERR_DUPLICATE_KEY,
    ERR_HETEROGENEOUS_ARRAY,
    ERR_LIMIT_DEPTH,
    ERR_UNEXPECTED_SHAPE,
    PathItem,
    TJSONError,
)
from ._scalars import (
    decode_binary16,
    decode_binary32,
    decode_binary64,
    decode_float,
    decode_int,
    decode_timestamp,
    decode_uint,
    encode_binary16,
    encode_binary32,
    encode_binary64,
    encode_float,
    encode_int,
    encode_timestamp,
    encode_uint,
)
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
)
from ._values import Value

logger = logging.getLogger(__name__)

Path = List[PathItem]

# A top-level array has no tag, so its elements must describe themselves.
ROOT_ARRAY = ArrayOf(OBJECT)


def _json_kind(x: Any) -> str:
    """Name the JSON kind of an untyped node."""
    if x is None:
        return "null"
    # bool before int/float: isinstance(True, int) is True.
    if isinstance(x, bool):
        return "boolean"
    if isinstance(x, (int, float)):
        return "number"
    if isinstance(x, str):
        return "string"
    if isinstance(x, list):
        return "array"
    if isinstance(x, dict):
        return "object"
    return type(x).__name__


def _shape_error(expected: str, x: Any, path: Path) -> TJSONError:
    return TJSONError(ERR_UNEXPECTED_SHAPE,
                      "expected {}, got {}".format(expected, _json_kind(x)), path)


def _enter(depth: int, max_depth: int, path: Path) -> None:
    if depth + 1 > max_depth:
        raise TJSONError(ERR_LIMIT_DEPTH, "depth exceeds max_depth ({})".format(max_depth), path)


# ── Decode ────────────────────────────────────────────────────

def _decode_string(text: str, path: Path) -> str:
    return text


# Every atom carried as JSON text.  f, b and O are handled by shape instead.
_TEXT_DECODERS: Dict[TypeDesc, Callable[[str, Path], Any]] = {
    STRING: _decode_string,
    BINARY16: decode_binary16,
    BINARY32: decode_binary32,
    BINARY64: decode_binary64,
    INT: decode_int,
    UINT: decode_uint,
    TIMESTAMP: decode_timestamp,
}


def decode(tree: Any, *, max_depth: int = MAX_DEPTH) -> Value:
    """Decode an untyped JSON tree (as from json.loads) into a Value.

    The root must be an object or an array of objects.
    """
    if isinstance(tree, dict):
        value = _decode_object(tree, max_depth, 0, [])
        logger.debug("decoded object with %d members", len(value.data))
    elif isinstance(tree, list):
        value = Value(ROOT_ARRAY, _decode_elements(tree, OBJECT, max_depth, 0, []))
        logger.debug("decoded array with %d elements", len(value.data))
    else:
        raise _shape_error("object or array at top level", tree, [])
    return value


def _decode_object(node: Dict[Any, Any], max_depth: int, depth: int, path: Path) -> Value:
    _enter(depth, max_depth, path)
    for key in node:
        if not isinstance(key, str):
            raise TJSONError(ERR_UNEXPECTED_SHAPE, "object key must be a string", path)

    members: Dict[str, Value] = {}
    for key in sorted(node):
        try:
            name, typ = parse_tag(key, max_depth)
        except TJSONError as e:
            raise e.locate(path + [key])
        if name in members:
            raise TJSONError(ERR_DUPLICATE_KEY,
                             "duplicate member name {!r}".format(name), path + [name])
        members[name] = _decode_value(node[key], typ, max_depth, depth + 1, path + [name])
    return Value(OBJECT, members)


def _decode_elements(node: List[Any], element: TypeDesc,
                     max_depth: int, depth: int, path: Path) -> tuple:
    _enter(depth, max_depth, path)
    # Kinds are checked for the whole array first, so a mixed array is
    # heterogeneous whichever element happens to come first.
    first_kind = None
    for i, x in enumerate(node):
        kind = _json_kind(x)
        if kind == "null":
            raise _shape_error(element.tag, x, path + [i])
        if first_kind is None:
            first_kind = kind
        elif kind != first_kind:
            raise TJSONError(ERR_HETEROGENEOUS_ARRAY,
                             "array mixes {} and {}".format(first_kind, kind), path + [i])
    return tuple(
        _decode_value(x, element, max_depth, depth + 1, path + [i])
        for i, x in enumerate(node)
    )


def _decode_value(x: Any, typ: TypeDesc, max_depth: int, depth: int, path: Path) -> Value:
    if isinstance(typ, ArrayOf):
        if not isinstance(x, list):
            raise _shape_error("array", x, path)
        return Value(typ, _decode_elements(x, typ.element, max_depth, depth, path))

    if isinstance(typ, SetOf):
        if not isinstance(x, list):
            raise _shape_error("array", x, path)
        # Duplicate elements collapse; they are not an error.
        return Value(typ, frozenset(_decode_elements(x, typ.element, max_depth, depth, path)))

    if typ == OBJECT:
        if not isinstance(x, dict):
            raise _shape_error("object", x, path)
        return _decode_object(x, max_depth, depth, path)

    if typ == BOOLEAN:
        if not isinstance(x, bool):
            raise _shape_error("boolean", x, path)
        return Value(typ, x)

    if typ == FLOAT:
        if _json_kind(x) != "number":
            raise _shape_error("number", x, path)
        return Value(typ, decode_float(x, path))

    decoder = _TEXT_DECODERS[typ]
    if not isinstance(x, str):
        raise _shape_error("string", x, path)
    return Value(typ, decoder(x, path))


# ── Encode ────────────────────────────────────────────────────

_BINARY_ENCODERS: Dict[TypeDesc, Callable[[bytes], str]] = {
    BINARY16: encode_binary16,
    BINARY32: encode_binary32,
    BINARY64: encode_binary64,
}


def encode(value: Value, *, max_depth: int = MAX_DEPTH) -> Any:
    """Encode a Value into an untyped JSON tree ready for json.dumps.

    Re-validates every invariant along the way; an ill-formed tree raises
    TJSONError rather than producing output that would not decode.
    """
    if not isinstance(value, Value):
        raise TJSONError(ERR_UNEXPECTED_SHAPE,
                         "expected Value, got {}".format(type(value).__name__))
    if value.type != OBJECT and value.type != ROOT_ARRAY:
        raise TJSONError(ERR_UNEXPECTED_SHAPE,
                         "top-level value must be O or A<O>, got {}".format(value.type))
    tree = _encode_value(value, max_depth, 0, [])
    logger.debug("encoded %s with %d entries", value.type, len(tree))
    return tree


def _check_type(typ: Any, path: Path) -> TypeDesc:
    if not isinstance(typ, (Atom, ArrayOf, SetOf)):
        raise TJSONError(ERR_UNEXPECTED_SHAPE,
                         "expected a type descriptor, got {!r}".format(typ), path)
    return typ


def _encode_value(value: Any, max_depth: int, depth: int, path: Path) -> Any:
    if not isinstance(value, Value):
        raise TJSONError(ERR_UNEXPECTED_SHAPE,
                         "expected Value, got {}".format(type(value).__name__), path)
    typ = _check_type(value.type, path)
    data = value.data

    if isinstance(typ, ArrayOf):
        if not isinstance(data, (list, tuple)):
            raise TJSONError(ERR_UNEXPECTED_SHAPE, "array data must be a tuple", path)
        return _encode_elements(data, typ.element, max_depth, depth, path)

    if isinstance(typ, SetOf):
        if not isinstance(data, (set, frozenset)):
            raise TJSONError(ERR_UNEXPECTED_SHAPE, "set data must be a frozenset", path)
        # Sets have no order; sort so the output text is stable.
        return sorted(_encode_elements(list(data), typ.element, max_depth, depth, path))

    if typ == OBJECT:
        if not isinstance(data, dict):
            raise TJSONError(ERR_UNEXPECTED_SHAPE, "object data must be a dict", path)
        _enter(depth, max_depth, path)
        out: Dict[str, Any] = {}
        for name in sorted(data, key=str):
            member = data[name]
            if not isinstance(name, str) or not isinstance(member, Value):
                raise TJSONError(ERR_UNEXPECTED_SHAPE,
                                 "object members must map str to Value", path)
            _check_type(member.type, path + [name])
            try:
                key = format_tag(name, member.type)
            except TJSONError as e:
                raise e.locate(path + [name])
            out[key] = _encode_value(member, max_depth, depth + 1, path + [name])
        return out

    if typ == STRING:
        if not isinstance(data, str):
            raise TJSONError(ERR_UNEXPECTED_SHAPE, "string data must be str", path)
        return data

    if typ == BOOLEAN:
        if not isinstance(data, bool):
            raise TJSONError(ERR_UNEXPECTED_SHAPE, "boolean data must be bool", path)
        return data

    if typ == FLOAT:
        return encode_float(data, path)

    if typ == INT:
        return encode_int(data, path)

    if typ == UINT:
        return encode_uint(data, path)

    if typ == TIMESTAMP:
        return encode_timestamp(data, path)

    if not isinstance(data, (bytes, bytearray)):
        raise TJSONError(ERR_UNEXPECTED_SHAPE, "binary data must be bytes", path)
    return _BINARY_ENCODERS[typ](bytes(data))


def _encode_elements(items: Any, element: TypeDesc,
                     max_depth: int, depth: int, path: Path) -> List[Any]:
    _enter(depth, max_depth, path)
    out = []
    for i, item in enumerate(items):
        if isinstance(item, Value) and item.type != element:
            raise TJSONError(ERR_HETEROGENEOUS_ARRAY,
                             "element of type {} in {} container".format(item.type, element),
                             path + [i])
        out.append(_encode_value(item, max_depth, depth + 1, path + [i]))
    return out
