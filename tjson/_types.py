"""TJSON type descriptors — the closed set of kinds a tag can name.

    s            String
    b16/b32/b64  Binary (base16, base32, base64url text on the wire)
    i / u        signed / unsigned 64-bit integer (decimal text on the wire)
    f            Float (JSON number)
    t            Timestamp (RFC 3339, UTC, whole seconds)
    b            Boolean
    O            Object
    A<T>         Array of T
    S<T>         Set of T  (T must be a scalar atom)

Descriptors compare and hash by their tag text.  Formatting is injective, so
two descriptors are equal exactly when their text is, and comparing text
avoids recursing through deeply nested A<A<...>> chains.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from ._constants import (
    MAX_DEPTH,
    PARAM_CLOSE,
    PARAM_OPEN,
    TOKEN_ARRAY,
    TOKEN_BINARY16,
    TOKEN_BINARY32,
    TOKEN_BINARY64,
    TOKEN_BOOLEAN,
    TOKEN_FLOAT,
    TOKEN_INT,
    TOKEN_OBJECT,
    TOKEN_SET,
    TOKEN_STRING,
    TOKEN_TIMESTAMP,
    TOKEN_UINT,
)
from ._errors import ERR_LIMIT_DEPTH, ERR_MALFORMED_TYPE, TJSONError

_ATOM_TOKENS = frozenset([
    TOKEN_STRING,
    TOKEN_BINARY16,
    TOKEN_BINARY32,
    TOKEN_BINARY64,
    TOKEN_INT,
    TOKEN_UINT,
    TOKEN_FLOAT,
    TOKEN_TIMESTAMP,
    TOKEN_BOOLEAN,
    TOKEN_OBJECT,
])


class _TypeBase:
    tag: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _TypeBase):
            return NotImplemented
        return self.tag == other.tag

    def __hash__(self) -> int:
        return hash(self.tag)

    def __str__(self) -> str:
        return self.tag

    @property
    def is_scalar(self) -> bool:
        return isinstance(self, Atom) and self.token != TOKEN_OBJECT


@dataclass(frozen=True, eq=False)
class Atom(_TypeBase):
    """A non-parametric type: one of the ten atom tokens."""

    token: str

    def __post_init__(self) -> None:
        if self.token not in _ATOM_TOKENS:
            raise TJSONError(ERR_MALFORMED_TYPE,
                             "unrecognized type: {!r}".format(self.token))

    @property
    def tag(self) -> str:  # type: ignore[override]
        return self.token


@dataclass(frozen=True, eq=False)
class ArrayOf(_TypeBase):
    """A<T>: an ordered, homogeneous sequence."""

    element: "TypeDesc"
    tag: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "tag", TOKEN_ARRAY + PARAM_OPEN + self.element.tag + PARAM_CLOSE
        )


@dataclass(frozen=True, eq=False)
class SetOf(_TypeBase):
    """S<T>: an unordered collection of distinct scalars."""

    element: "TypeDesc"
    tag: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.element.is_scalar:
            raise TJSONError(ERR_MALFORMED_TYPE,
                             "set elements must be scalar, got {}".format(self.element.tag))
        object.__setattr__(
            self, "tag", TOKEN_SET + PARAM_OPEN + self.element.tag + PARAM_CLOSE
        )


TypeDesc = Union[Atom, ArrayOf, SetOf]

STRING = Atom(TOKEN_STRING)
BINARY16 = Atom(TOKEN_BINARY16)
BINARY32 = Atom(TOKEN_BINARY32)
BINARY64 = Atom(TOKEN_BINARY64)
INT = Atom(TOKEN_INT)
UINT = Atom(TOKEN_UINT)
FLOAT = Atom(TOKEN_FLOAT)
TIMESTAMP = Atom(TOKEN_TIMESTAMP)
BOOLEAN = Atom(TOKEN_BOOLEAN)
OBJECT = Atom(TOKEN_OBJECT)

BINARY_TYPES = frozenset([BINARY16, BINARY32, BINARY64])

_ARRAY_PREFIX = TOKEN_ARRAY + PARAM_OPEN
_SET_PREFIX = TOKEN_SET + PARAM_OPEN


def parse_type(text: str, max_depth: int = MAX_DEPTH) -> TypeDesc:
    """Parse a type descriptor such as "i", "A<O>" or "A<S<s>>".

    The grammar is a run of "A<"/"S<" prefixes, one atom, then exactly as
    many ">" as there were prefixes.  More than max_depth prefixes is
    ERR_LIMIT_DEPTH, raised before any descriptor is built.
    """
    wrappers: List[str] = []
    pos = 0
    while text.startswith((_ARRAY_PREFIX, _SET_PREFIX), pos):
        wrappers.append(text[pos])
        pos += len(_ARRAY_PREFIX)
        if len(wrappers) > max_depth:
            raise TJSONError(ERR_LIMIT_DEPTH,
                             "type nesting exceeds max_depth ({})".format(max_depth))

    tail = text[pos:]
    closers = PARAM_CLOSE * len(wrappers)
    if not tail.endswith(closers):
        raise TJSONError(ERR_MALFORMED_TYPE,
                         "unbalanced type descriptor: {!r}".format(text))
    token = tail[:len(tail) - len(closers)]
    if token not in _ATOM_TOKENS:
        raise TJSONError(ERR_MALFORMED_TYPE,
                         "unrecognized type: {!r}".format(token))

    result: TypeDesc = Atom(token)
    for kind in reversed(wrappers):
        if kind == TOKEN_ARRAY:
            result = ArrayOf(result)
        else:
            result = SetOf(result)
    return result


def format_type(typ: TypeDesc) -> str:
    """Inverse of parse_type."""
    return typ.tag
