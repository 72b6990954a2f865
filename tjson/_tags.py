"""Member-key tags: "name:type" <-> (name, TypeDesc).

A key holds exactly one separator.  "max:i:" and "a:b:s" are missing-tag
errors just like "max", because neither splits into one name and one type.
format_tag refuses names containing ":" for the same reason; otherwise two
different (name, type) pairs could share a key.
"""

from __future__ import annotations

from typing import Tuple

from ._constants import MAX_DEPTH, TAG_SEPARATOR
from ._errors import ERR_MISSING_TAG, TJSONError
from ._types import TypeDesc, format_type, parse_type


def parse_tag(key: str, max_depth: int = MAX_DEPTH) -> Tuple[str, TypeDesc]:
    """Split a member key into its name and type descriptor."""
    name, sep, suffix = key.partition(TAG_SEPARATOR)
    if not sep or not suffix:
        raise TJSONError(ERR_MISSING_TAG, "key missing a tag: {!r}".format(key))
    if TAG_SEPARATOR in suffix:
        raise TJSONError(ERR_MISSING_TAG,
                         "key has more than one separator: {!r}".format(key))
    if not name:
        raise TJSONError(ERR_MISSING_TAG, "key missing a name: {!r}".format(key))
    return name, parse_type(suffix, max_depth)


def format_tag(name: str, typ: TypeDesc) -> str:
    """Build the member key for (name, typ); the exact inverse of parse_tag."""
    if not name or TAG_SEPARATOR in name:
        raise TJSONError(ERR_MISSING_TAG,
                         "member name cannot be tagged: {!r}".format(name))
    return name + TAG_SEPARATOR + format_type(typ)
