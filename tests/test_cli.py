"""Command-line interface tests."""

from __future__ import annotations

import contextlib
import io
import os
import sys
import tempfile
import unittest
from typing import List, Tuple

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tjson import __version__
from tjson._cli import main


def _run(argv: List[str]) -> Tuple[int, str, str]:
    out, err = io.StringIO(), io.StringIO()
    code = 0
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        try:
            main(argv)
        except SystemExit as e:
            code = e.code if isinstance(e.code, int) else 1
    return code, out.getvalue(), err.getvalue()


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def _write(self, text: str) -> str:
        path = os.path.join(self._tmp.name, "doc.tjson")
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_version(self):
        code, out, _ = _run(["version"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "tjson {}".format(__version__))

    def test_no_command(self):
        code, _, _ = _run([])
        self.assertEqual(code, 1)

    def test_check_ok(self):
        path = self._write('{"example:A<i>":["1","2","3"]}')
        code, out, _ = _run(["check", "--input", path])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "ok")

    def test_check_reports_code_and_path(self):
        path = self._write('{"n:O":{"big:i":"9223372036854775808"}}')
        code, _, err = _run(["check", "--input", path])
        self.assertEqual(code, 2)
        self.assertIn("[ERR_INT_OVERFLOW]", err)
        self.assertIn("/n/big", err)

    def test_check_depth_flag(self):
        path = self._write('{"a:O":{"b:O":{}}}')
        code, _, err = _run(["check", "--input", path, "--max-depth", "2"])
        self.assertEqual(code, 2)
        self.assertIn("[ERR_LIMIT_DEPTH]", err)

    def test_fmt_canonicalizes(self):
        path = self._write('{ "b:i" : "+007", "a:b16" : "cafe" }')
        code, out, _ = _run(["fmt", "--input", path])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), '{"a:b16":"cafe","b:i":"7"}')

    def test_fmt_indent(self):
        path = self._write('{"a:s":"x"}')
        code, out, _ = _run(["fmt", "--input", path, "--indent", "2"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), '{\n  "a:s": "x"\n}')

    def test_missing_file(self):
        code, _, err = _run(["check", "--input", os.path.join(self._tmp.name, "nope")])
        self.assertEqual(code, 2)
        self.assertIn("cannot read input", err)


if __name__ == "__main__":
    unittest.main()
