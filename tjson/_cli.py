"""TJSON command-line interface.

Usage:
    echo '{"a:s":"b"}' | tjson check
    tjson check --input file.tjson
    tjson fmt --input file.tjson [--indent 2]
    tjson version
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import MAX_DEPTH, TJSONError, __version__, dumps, loads

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tjson",
        description="TJSON — validate and canonicalize tagged JSON documents",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── check ──
    check_p = sub.add_parser("check", help="Validate a TJSON document")
    check_p.add_argument("--input", "-i", metavar="FILE",
                         help="Read TJSON from FILE instead of stdin")
    check_p.add_argument("--max-depth", type=int, default=MAX_DEPTH,
                         help="Maximum container nesting (default: %(default)s)")

    # ── fmt ──
    fmt_p = sub.add_parser("fmt", help="Re-emit a TJSON document in canonical form")
    fmt_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read TJSON from FILE instead of stdin")
    fmt_p.add_argument("--indent", type=int, default=None, metavar="N",
                       help="Pretty-print with N spaces of indentation")
    fmt_p.add_argument("--max-depth", type=int, default=MAX_DEPTH,
                       help="Maximum container nesting (default: %(default)s)")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read TJSON bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("tjson: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _cmd_check(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    loads(raw, max_depth=args.max_depth)
    print("ok")


def _cmd_fmt(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    value = loads(raw, max_depth=args.max_depth)
    print(dumps(value, indent=args.indent, max_depth=args.max_depth))


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"tjson {__version__}")
        return

    try:
        if args.command == "check":
            _cmd_check(args)
        elif args.command == "fmt":
            _cmd_fmt(args)
    except TJSONError as e:
        logger.debug("rejected input", exc_info=True)
        where = e.path or "/"
        print(f"tjson: error [{e.code}] at {where}: {e.args[0]}", file=sys.stderr)
        sys.exit(2)
    except OSError as e:
        print(f"tjson: cannot read input: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
