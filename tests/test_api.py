"""Unit tests for the tjson public API.

Organized by feature area.  The example-suite vectors are exercised in
test_conformance.py; scalar codecs and tag grammar have their own modules.
These tests cover the API contracts: round-trips, encoder validation,
traversal order, limits and native-value inference.
"""

from __future__ import annotations

import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tjson import (
    BINARY16,
    BINARY32,
    BINARY64,
    BOOLEAN,
    FLOAT,
    INT,
    MAX_DEPTH,
    OBJECT,
    STRING,
    TIMESTAMP,
    UINT,
    ArrayOf,
    SetOf,
    TJSONError,
    Value,
    ERR_DUPLICATE_KEY,
    ERR_HETEROGENEOUS_ARRAY,
    ERR_INT_INVALID,
    ERR_INT_OVERFLOW,
    ERR_JSON_SYNTAX,
    ERR_LIMIT_DEPTH,
    ERR_MISSING_TAG,
    ERR_TIME_INVALID,
    ERR_UINT_NEGATIVE,
    ERR_UNEXPECTED_SHAPE,
    decode,
    dumps,
    dumps_native,
    encode,
    from_native,
    loads,
    to_native,
)

UTC = timezone.utc
WHEN = datetime(2016, 10, 2, 7, 31, 51, tzinfo=UTC)


def _sample() -> Value:
    """A tree touching every type descriptor."""
    return Value(OBJECT, {
        "name": Value(STRING, "tjson"),
        "raw16": Value(BINARY16, b"\x00\xff"),
        "raw32": Value(BINARY32, b"hello"),
        "raw64": Value(BINARY64, b"\xfb\xff"),
        "min": Value(INT, -(2**63)),
        "max": Value(UINT, 2**64 - 1),
        "ratio": Value(FLOAT, 0.1),
        "when": Value(TIMESTAMP, WHEN),
        "ok": Value(BOOLEAN, True),
        "grid": Value(ArrayOf(ArrayOf(INT)), (
            Value(ArrayOf(INT), (Value(INT, 1), Value(INT, 2))),
            Value(ArrayOf(INT), ()),
        )),
        "labels": Value(SetOf(STRING), frozenset([Value(STRING, "a"), Value(STRING, "b")])),
        "child": Value(OBJECT, {"inner": Value(STRING, "value")}),
    })


# ── Round-trip ────────────────────────────────────────────────

class TestRoundTrip(unittest.TestCase):
    def test_tree_round_trip(self):
        v = _sample()
        self.assertEqual(decode(encode(v)), v)

    def test_text_round_trip(self):
        v = _sample()
        self.assertEqual(loads(dumps(v)), v)

    def test_pretty_printed_round_trip(self):
        v = _sample()
        text = dumps(v, indent=2)
        self.assertIn("\n", text)
        self.assertEqual(loads(text), v)

    def test_encoded_tags(self):
        tree = encode(_sample())
        self.assertEqual(tree["raw16:b16"], "00ff")
        self.assertEqual(tree["raw32:b32"], "nbswy3dp")
        self.assertEqual(tree["raw64:b64"], "-_8")
        self.assertEqual(tree["min:i"], "-9223372036854775808")
        self.assertEqual(tree["max:u"], "18446744073709551615")
        self.assertEqual(tree["when:t"], "2016-10-02T07:31:51Z")
        self.assertEqual(tree["grid:A<A<i>>"], [["1", "2"], []])
        self.assertEqual(tree["labels:S<s>"], ["a", "b"])
        self.assertEqual(tree["child:O"], {"inner:s": "value"})

    def test_set_membership_ignores_order(self):
        a = loads('{"x:S<i>":["1","2","3"]}')
        b = loads('{"x:S<i>":["3","1","2"]}')
        self.assertEqual(a, b)

    def test_set_duplicates_collapse(self):
        v = loads('{"x:S<s>":["a","a","b"]}')
        self.assertEqual(len(v["x"].data), 2)
        self.assertEqual(dumps(v), '{"x:S<s>":["a","b"]}')

    def test_value_indexing_without_iteration(self):
        v = loads('{"a:A<i>":["1","2"]}')
        self.assertEqual(v["a"][1], Value(INT, 2))
        for node in [v, v["a"], v["a"][0]]:
            with self.subTest(node=node):
                with self.assertRaises(TypeError):
                    iter(node)

    def test_float_integral_value(self):
        v = loads('{"x:f":2}')
        self.assertEqual(v["x"], Value(FLOAT, 2.0))
        self.assertEqual(dumps(v), '{"x:f":2.0}')


# ── Empty containers ──────────────────────────────────────────

class TestEmptyContainers(unittest.TestCase):
    def test_empty_object(self):
        v = decode({})
        self.assertEqual(v, Value(OBJECT, {}))
        self.assertEqual(encode(v), {})

    def test_empty_array(self):
        v = decode([])
        self.assertEqual(v, Value(ArrayOf(OBJECT), ()))
        self.assertEqual(encode(v), [])

    def test_toplevel_array_of_objects(self):
        v = loads('[{"a:i":"1"},{"b:s":"x"}]')
        self.assertEqual(v.type, ArrayOf(OBJECT))
        self.assertEqual(v[0]["a"], Value(INT, 1))

    def test_toplevel_array_of_scalars_rejected(self):
        with self.assertRaises(TJSONError) as ctx:
            decode(["1"])
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)

    def test_toplevel_scalar_rejected(self):
        for tree in ["x", 1, True, None]:
            with self.subTest(tree=tree):
                with self.assertRaises(TJSONError) as ctx:
                    decode(tree)
                self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)


# ── Decoder structure ─────────────────────────────────────────

class TestDecoder(unittest.TestCase):
    def test_array_of_integers(self):
        v = loads('{"example:A<i>":["1","2","3"]}')
        self.assertEqual(to_native(v), {"example": [1, 2, 3]})

    def test_mixed_kinds_are_heterogeneous(self):
        for doc in ['{"x:A<i>":["1",2]}', '{"x:A<s>":["a",true]}', '{"x:A<O>":[{},[]]}']:
            with self.subTest(doc=doc):
                with self.assertRaises(TJSONError) as ctx:
                    loads(doc)
                self.assertEqual(ctx.exception.code, ERR_HETEROGENEOUS_ARRAY)

    def test_mixed_kinds_independent_of_order(self):
        for doc in ['{"a:A<i>":["1",1]}', '{"a:A<i>":[1,"1"]}', '{"a:A<i>":[1,2,"3"]}']:
            with self.subTest(doc=doc):
                with self.assertRaises(TJSONError) as ctx:
                    loads(doc)
                self.assertEqual(ctx.exception.code, ERR_HETEROGENEOUS_ARRAY)

    def test_uniform_wrong_kind_is_shape_error(self):
        with self.assertRaises(TJSONError) as ctx:
            loads('{"x:A<i>":[1,2]}')
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)

    def test_null_rejected(self):
        for doc in ['{"x:s":null}', '{"x:A<s>":[null]}', '{"x:O":null}']:
            with self.subTest(doc=doc):
                with self.assertRaises(TJSONError) as ctx:
                    loads(doc)
                self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)

    def test_shape_mismatches(self):
        cases = [
            '{"x:s":1}',
            '{"x:b":"true"}',
            '{"x:f":"1.5"}',
            '{"x:f":true}',
            '{"x:O":[]}',
            '{"x:A<i>":{}}',
            '{"x:S<s>":"a"}',
            '{"x:b64":5}',
        ]
        for doc in cases:
            with self.subTest(doc=doc):
                with self.assertRaises(TJSONError) as ctx:
                    loads(doc)
                self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)

    def test_duplicate_name_different_tags(self):
        with self.assertRaises(TJSONError) as ctx:
            loads('{"example:i":"1","example:s":"2"}')
        self.assertEqual(ctx.exception.code, ERR_DUPLICATE_KEY)
        self.assertEqual(ctx.exception.path, "/example")

    def test_duplicate_raw_key(self):
        with self.assertRaises(TJSONError) as ctx:
            loads('{"example:i":"1","example:i":"2"}')
        self.assertEqual(ctx.exception.code, ERR_DUPLICATE_KEY)

    def test_missing_tag(self):
        for doc in ['{"example":"x"}', '{"example:":"x"}']:
            with self.subTest(doc=doc):
                with self.assertRaises(TJSONError) as ctx:
                    loads(doc)
                self.assertEqual(ctx.exception.code, ERR_MISSING_TAG)

    def test_error_path_points_at_element(self):
        with self.assertRaises(TJSONError) as ctx:
            loads('{"a:O":{"b:A<i>":["1","x"]}}')
        self.assertEqual(ctx.exception.code, ERR_INT_INVALID)
        self.assertEqual(ctx.exception.path, "/a/b/1")
        self.assertIn("/a/b/1", str(ctx.exception))

    def test_first_violation_in_key_order(self):
        """Members are checked in ascending key order, not input order."""
        for doc in ['{"z":"1","a:i":"x"}', '{"a:i":"x","z":"1"}']:
            with self.subTest(doc=doc):
                with self.assertRaises(TJSONError) as ctx:
                    loads(doc)
                self.assertEqual(ctx.exception.code, ERR_INT_INVALID)

    def test_decoded_tree_keeps_member_types(self):
        v = loads('{"n:u":"7","s:s":"7"}')
        self.assertEqual(v["n"], Value(UINT, 7))
        self.assertEqual(v["s"], Value(STRING, "7"))

    def test_bytes_input(self):
        v = loads(b'{"k:s":"caf\xc3\xa9"}')
        self.assertEqual(v["k"].data, "café")


# ── JSON adapter ──────────────────────────────────────────────

class TestJsonAdapter(unittest.TestCase):
    def test_syntax_error(self):
        with self.assertRaises(TJSONError) as ctx:
            loads('{"a:s":')
        self.assertEqual(ctx.exception.code, ERR_JSON_SYNTAX)

    def test_nan_rejected(self):
        for doc in ['{"x:f":NaN}', '{"x:f":Infinity}', '{"x:f":-Infinity}']:
            with self.subTest(doc=doc):
                with self.assertRaises(TJSONError) as ctx:
                    loads(doc)
                self.assertEqual(ctx.exception.code, ERR_JSON_SYNTAX)

    def test_bom_rejected(self):
        with self.assertRaises(TJSONError) as ctx:
            loads(b'\xef\xbb\xbf{"a:s":"b"}')
        self.assertEqual(ctx.exception.code, ERR_JSON_SYNTAX)

    def test_invalid_utf8(self):
        with self.assertRaises(TJSONError) as ctx:
            loads(b'{"k:s":"\xff"}')
        self.assertEqual(ctx.exception.code, ERR_JSON_SYNTAX)

    def test_float_out_of_range(self):
        with self.assertRaises(TJSONError) as ctx:
            loads('{"x:f":1e400}')
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)

    def test_compact_output_sorted(self):
        v = from_native({"b": "2", "a": "1"})
        self.assertEqual(dumps(v), '{"a:s":"1","b:s":"2"}')


# ── Encoder validation ────────────────────────────────────────

class TestEncoderValidation(unittest.TestCase):
    def _encode_member(self, member: Value) -> None:
        encode(Value(OBJECT, {"x": member}))

    def test_heterogeneous_array(self):
        bad = Value(ArrayOf(INT), (Value(INT, 1), Value(STRING, "2")))
        with self.assertRaises(TJSONError) as ctx:
            self._encode_member(bad)
        self.assertEqual(ctx.exception.code, ERR_HETEROGENEOUS_ARRAY)
        self.assertEqual(ctx.exception.path, "/x/1")

    def test_heterogeneous_set(self):
        bad = Value(SetOf(STRING), frozenset([Value(INT, 1)]))
        with self.assertRaises(TJSONError) as ctx:
            self._encode_member(bad)
        self.assertEqual(ctx.exception.code, ERR_HETEROGENEOUS_ARRAY)

    def test_integer_out_of_range(self):
        with self.assertRaises(TJSONError) as ctx:
            self._encode_member(Value(INT, 2**63))
        self.assertEqual(ctx.exception.code, ERR_INT_OVERFLOW)
        with self.assertRaises(TJSONError) as ctx:
            self._encode_member(Value(UINT, -1))
        self.assertEqual(ctx.exception.code, ERR_UINT_NEGATIVE)

    def test_bool_is_not_an_int(self):
        with self.assertRaises(TJSONError) as ctx:
            self._encode_member(Value(INT, True))
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)

    def test_wrong_data_types(self):
        cases = [
            Value(STRING, b"bytes"),
            Value(BINARY64, "text"),
            Value(BOOLEAN, 1),
            Value(FLOAT, "1.5"),
            Value(FLOAT, float("nan")),
            Value(OBJECT, []),
            Value(ArrayOf(INT), {Value(INT, 1)}),
            Value(SetOf(INT), (Value(INT, 1),)),
            Value(TIMESTAMP, "2016-10-02T07:31:51Z"),
        ]
        for member in cases:
            with self.subTest(member=member):
                with self.assertRaises(TJSONError) as ctx:
                    self._encode_member(member)
                self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)

    def test_member_type_must_be_a_descriptor(self):
        for member in [Value("x", b"ab"), Value(None, "x"), Value("A<i>", ())]:
            with self.subTest(member=member):
                with self.assertRaises(TJSONError) as ctx:
                    self._encode_member(member)
                self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)
                self.assertEqual(ctx.exception.path, "/x")

    def test_naive_timestamp(self):
        with self.assertRaises(TJSONError) as ctx:
            self._encode_member(Value(TIMESTAMP, datetime(2016, 10, 2)))
        self.assertEqual(ctx.exception.code, ERR_TIME_INVALID)

    def test_timestamp_normalized_to_utc(self):
        pst = timezone(timedelta(hours=-8))
        local = datetime(2016, 10, 1, 23, 31, 51, tzinfo=pst)
        tree = encode(Value(OBJECT, {"t": Value(TIMESTAMP, local)}))
        self.assertEqual(tree, {"t:t": "2016-10-02T07:31:51Z"})

    def test_untaggable_member_name(self):
        for name in ["a:b", ""]:
            with self.subTest(name=name):
                with self.assertRaises(TJSONError) as ctx:
                    encode(Value(OBJECT, {name: Value(STRING, "x")}))
                self.assertEqual(ctx.exception.code, ERR_MISSING_TAG)

    def test_root_must_be_object_or_object_array(self):
        for root in [Value(INT, 1), Value(ArrayOf(INT), ()), "not a value"]:
            with self.subTest(root=root):
                with self.assertRaises(TJSONError) as ctx:
                    encode(root)
                self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)


# ── Depth limits ──────────────────────────────────────────────

def _nested(levels: int) -> dict:
    d: dict = {"k:s": "leaf"}
    for _ in range(levels - 1):
        d = {"n:O": d}
    return d


class TestDepthLimits(unittest.TestCase):
    def test_default_depth_ok(self):
        v = decode(_nested(MAX_DEPTH))
        self.assertEqual(encode(v), _nested(MAX_DEPTH))

    def test_default_depth_exceeded(self):
        with self.assertRaises(TJSONError) as ctx:
            decode(_nested(MAX_DEPTH + 1))
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)

    def test_custom_limit(self):
        decode(_nested(3), max_depth=3)
        with self.assertRaises(TJSONError) as ctx:
            decode(_nested(4), max_depth=3)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)

    def test_arrays_count_towards_depth(self):
        with self.assertRaises(TJSONError) as ctx:
            loads('{"a:A<A<i>>":[["1"]]}', max_depth=2)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)
        loads('{"a:A<A<i>>":[["1"]]}', max_depth=3)

    def test_encode_limit(self):
        v = decode(_nested(4))
        with self.assertRaises(TJSONError) as ctx:
            encode(v, max_depth=3)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)

    def test_deep_type_tag_hits_limit(self):
        levels = 20000
        text = '{"a:' + "A<" * levels + "i" + ">" * levels + '":[]}'
        with self.assertRaises(TJSONError) as ctx:
            loads(text)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)
        self.assertEqual(ctx.exception.path, "/" + "a:" + "A<" * levels + "i" + ">" * levels)

    def test_type_tag_nesting_follows_max_depth(self):
        doc = '{"a:A<A<A<i>>>":[]}'
        with self.assertRaises(TJSONError) as ctx:
            loads(doc, max_depth=2)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)
        self.assertEqual(loads(doc, max_depth=3).data["a"].type, ArrayOf(ArrayOf(ArrayOf(INT))))

    def test_very_deep_input_does_not_crash(self):
        text = '{"n:O":' * 5000 + "{}" + "}" * 5000
        with self.assertRaises(TJSONError) as ctx:
            loads(text)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)


# ── Native values ─────────────────────────────────────────────

class TestNative(unittest.TestCase):
    def test_scalar_inference(self):
        v = from_native({
            "s": "x", "b": True, "i": -1, "u": 2**64 - 1, "f": 1.5,
            "raw": b"\x01", "t": WHEN,
        })
        self.assertEqual(
            {name: member.type for name, member in v.data.items()},
            {"s": STRING, "b": BOOLEAN, "i": INT, "u": UINT, "f": FLOAT,
             "raw": BINARY64, "t": TIMESTAMP},
        )

    def test_container_inference(self):
        v = from_native({"a": [[1]], "s": {"x", "y"}, "o": {"k": "v"}, "e": []})
        self.assertEqual(v["a"].type, ArrayOf(ArrayOf(INT)))
        self.assertEqual(v["s"].type, SetOf(STRING))
        self.assertEqual(v["o"].type, OBJECT)
        self.assertEqual(v["e"].type, ArrayOf(OBJECT))

    def test_native_round_trip(self):
        native = {
            "name": "x", "flags": [True, False], "blob": b"\x00\xff",
            "child": {"n": 42, "tags": {"a", "b"}}, "when": WHEN,
        }
        self.assertEqual(to_native(from_native(native)), native)
        self.assertEqual(to_native(loads(dumps(from_native(native)))), native)

    def test_heterogeneous_list(self):
        with self.assertRaises(TJSONError) as ctx:
            from_native({"a": [1, "x"]})
        self.assertEqual(ctx.exception.code, ERR_HETEROGENEOUS_ARRAY)
        self.assertEqual(ctx.exception.path, "/a/1")

    def test_none_rejected(self):
        with self.assertRaises(TJSONError) as ctx:
            from_native({"a": None})
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_SHAPE)

    def test_integer_out_of_range(self):
        with self.assertRaises(TJSONError) as ctx:
            from_native({"a": 2**64})
        self.assertEqual(ctx.exception.code, ERR_INT_OVERFLOW)

    def test_naive_datetime(self):
        with self.assertRaises(TJSONError) as ctx:
            from_native({"a": datetime(2016, 10, 2)})
        self.assertEqual(ctx.exception.code, ERR_TIME_INVALID)

    def test_dumps_native(self):
        self.assertEqual(dumps_native({"id": 5}), '{"id:i":"5"}')


if __name__ == "__main__":
    unittest.main()
