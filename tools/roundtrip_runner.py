#!/usr/bin/env python3
# tools/roundtrip_runner.py
#
# Round-trip invariants (property tests) for the tjson codec.
#
# This runner:
# - generates random well-formed Value trees within limits
# - checks decode(encode(v)) == v and loads(dumps(v)) == v
# - checks that encoding is a fixed point: dumps(loads(dumps(v))) == dumps(v)
# - mutates canonical text (upper-cased binary, padding, zone offsets)
#   and checks that the decoder rejects it with the expected code
#
# Exit code:
#   0 -> all checks passed
#   1 -> invariant violation

import os, sys, json, random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

import tjson
from tjson import (
    BINARY16, BINARY32, BINARY64, BOOLEAN, FLOAT, INT, OBJECT, STRING,
    TIMESTAMP, UINT, ArrayOf, SetOf, TJSONError, Value,
)

SEED = int(os.environ.get("TJSON_SEED", "1337"))
TRIALS = int(os.environ.get("TJSON_TRIALS", "2000"))
MAX_GEN_DEPTH = int(os.environ.get("TJSON_GEN_MAX_DEPTH", "5"))
MAX_KEYS = int(os.environ.get("TJSON_GEN_MAX_KEYS", "6"))
MAX_LIST = int(os.environ.get("TJSON_GEN_MAX_LIST", "5"))
MAX_STR = int(os.environ.get("TJSON_GEN_MAX_STR", "16"))
MAX_BYTES = int(os.environ.get("TJSON_GEN_MAX_BYTES", "24"))

random.seed(SEED)

SCALARS = [STRING, BINARY16, BINARY32, BINARY64, INT, UINT, FLOAT, TIMESTAMP, BOOLEAN]
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

def rand_text() -> str:
    # Generate scalars excluding surrogate range; include tricky chars occasionally.
    out = []
    for _ in range(random.randint(0, MAX_STR)):
        r = random.random()
        if r < 0.80:
            out.append(chr(random.randint(0x20, 0x7E)))
        elif r < 0.95:
            out.append(chr(random.randint(0xA0, 0xD7FF)))
        else:
            out.append(chr(random.randint(0x10000, 0x10FFFF)))
    return "".join(out)

def rand_name() -> str:
    return (rand_text().replace(":", "") or "k")

def rand_scalar(typ) -> Any:
    if typ == STRING:
        return rand_text()
    if typ in (BINARY16, BINARY32, BINARY64):
        return bytes(random.getrandbits(8) for _ in range(random.randint(0, MAX_BYTES)))
    if typ == INT:
        return random.choice([tjson.INT64_MIN, tjson.INT64_MAX, 0,
                              random.randint(tjson.INT64_MIN, tjson.INT64_MAX)])
    if typ == UINT:
        return random.choice([0, tjson.UINT64_MAX, random.randint(0, tjson.UINT64_MAX)])
    if typ == FLOAT:
        return random.choice([0.0, -1.5, 1e300, 5e-324, random.uniform(-1e9, 1e9)])
    if typ == TIMESTAMP:
        return EPOCH + timedelta(seconds=random.randint(-10**10, 10**10))
    return random.random() < 0.5

def rand_type(depth: int):
    r = random.random()
    if depth >= MAX_GEN_DEPTH or r < 0.55:
        return random.choice(SCALARS)
    if r < 0.70:
        return OBJECT
    if r < 0.90:
        return ArrayOf(rand_type(depth + 1))
    return SetOf(random.choice(SCALARS))

def gen_value(typ, depth: int) -> Value:
    if typ == OBJECT:
        return gen_object(depth)
    if isinstance(typ, ArrayOf):
        n = random.randint(0, MAX_LIST)
        return Value(typ, tuple(gen_value(typ.element, depth + 1) for _ in range(n)))
    if isinstance(typ, SetOf):
        n = random.randint(0, MAX_LIST)
        return Value(typ, frozenset(gen_value(typ.element, depth + 1) for _ in range(n)))
    return Value(typ, rand_scalar(typ))

def gen_object(depth: int) -> Value:
    members: Dict[str, Value] = {}
    for _ in range(random.randint(0, MAX_KEYS)):
        members[rand_name()] = gen_value(rand_type(depth + 1), depth + 1)
    return Value(OBJECT, members)

def fail(label: str, **ctx: Any) -> None:
    print("VIOLATION:", label)
    for k, v in ctx.items():
        print("  {}: {!r}".format(k, v)[:2000])
    raise SystemExit(1)

def expect_error(code: str, text: str) -> None:
    try:
        tjson.loads(text)
    except TJSONError as e:
        if e.code != code:
            fail("wrong error code", expected=code, got=e.code, text=text)
        return
    fail("mutated text accepted", expected=code, text=text)

# --- mutations: canonical text that must now be rejected ---

MUTATIONS: List[tuple] = [
    (BINARY16, lambda s: s.upper(), tjson.ERR_B16_UPPER_CASE),
    (BINARY32, lambda s: s.upper(), tjson.ERR_B32_UPPER_CASE),
    (BINARY32, lambda s: s + "=", tjson.ERR_B32_PADDING),
    (BINARY64, lambda s: s + "==", tjson.ERR_B64_PADDING),
    (TIMESTAMP, lambda s: s[:-1] + "+00:00", tjson.ERR_TIME_INVALID),
    (TIMESTAMP, lambda s: s[:-1] + ".0Z", tjson.ERR_TIME_INVALID),
]

def check_mutations() -> int:
    checked = 0
    for typ, mutate, code in MUTATIONS:
        key = "x:" + typ.tag
        for _ in range(50):
            tree = tjson.encode(Value(OBJECT, {"x": Value(typ, rand_scalar(typ))}))
            if code.endswith("UPPER_CASE") and not any(c.isalpha() for c in tree[key]):
                continue
            tree[key] = mutate(tree[key])
            expect_error(code, json.dumps(tree))
            checked += 1
    return checked

def main() -> None:
    for trial in range(TRIALS):
        v = gen_object(0) if random.random() < 0.8 else Value(
            ArrayOf(OBJECT), tuple(gen_object(1) for _ in range(random.randint(0, MAX_LIST))))
        try:
            tree = tjson.encode(v)
            if tjson.decode(tree) != v:
                fail("decode(encode(v)) != v", trial=trial, value=v)
            text = tjson.dumps(v)
            if tjson.loads(text) != v:
                fail("loads(dumps(v)) != v", trial=trial, text=text)
            if tjson.dumps(tjson.loads(text)) != text:
                fail("dumps is not a fixed point", trial=trial, text=text)
        except TJSONError as e:
            fail("well-formed tree rejected", trial=trial, code=e.code, path=e.path, value=v)

    mutated = check_mutations()
    print("ROUNDTRIP: {} trials, {} mutations PASS (seed={})".format(TRIALS, mutated, SEED))

if __name__ == "__main__":
    main()
