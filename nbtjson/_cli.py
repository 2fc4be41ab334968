"""nbtjson command-line interface.

Usage:
    nbtjson --input=level.dat
    nbtjson --input=level.dat --output=level.json
    python3 -m nbtjson -i level.dat -o level.json --max-depth 64

Compact JSON always goes to stdout.  Pretty JSON is written to --output when
one is given.  Flag names are matched case-insensitively (--INPUT=... works);
their values are left alone.  Nothing is printed and no file is written
unless the whole document decodes.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import NbtError, __version__, decode, value_to_json
from ._constants import MAX_DEPTH

logger = logging.getLogger(__name__)

_MAX_DEPTH_ENV = "NBTJSON_MAX_DEPTH"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nbtjson",
        description="Decode an uncompressed NBT file and print it as JSON",
        allow_abbrev=False,
    )
    parser.add_argument("--input", "-i", metavar="FILE", required=True,
                        help="NBT file to decode (must not be compressed)")
    parser.add_argument("--output", "-o", metavar="FILE",
                        help="Also write pretty-printed JSON to FILE")
    parser.add_argument("--max-depth", type=int, metavar="N",
                        default=os.environ.get(_MAX_DEPTH_ENV, MAX_DEPTH),
                        help="Maximum compound/list nesting depth "
                             "(default: ${} or {})".format(_MAX_DEPTH_ENV, MAX_DEPTH))
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log decoding details to stderr")
    parser.add_argument("--version", action="version",
                        version="nbtjson {}".format(__version__))
    return parser


def _normalize_flags(argv: List[str]) -> List[str]:
    """Lower-case long flag names, keeping anything after '=' as written."""
    out = []
    for arg in argv:
        if arg.startswith("--"):
            name, sep, value = arg.partition("=")
            arg = name.lower() + sep + value
        out.append(arg)
    return out


def _read_input(filepath: str) -> bytes:
    with open(filepath, "rb") as f:
        return f.read()


def _write_output(filepath: str, text: str) -> None:
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(text)


def _check_printable(text: str) -> None:
    """Fail before any file is written if stdout can't encode text."""
    encoding = getattr(sys.stdout, "encoding", None)
    if encoding:
        text.encode(encoding, getattr(sys.stdout, "errors", None) or "strict")


def main(argv: Optional[List[str]] = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(_normalize_flags(argv))

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(name)s: %(levelname)s: %(message)s")

    try:
        data = _read_input(args.input)
        logger.debug("read %d bytes from %s", len(data), args.input)
        doc = decode(data, max_depth=args.max_depth)
        compact = value_to_json(doc)
        _check_printable(compact)
        if args.output:
            _write_output(args.output, value_to_json(doc, pretty=True))
            logger.debug("wrote pretty JSON to %s", args.output)
    except NbtError as e:
        print(f"nbtjson: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except OSError as e:
        print(f"nbtjson: {e.filename}: {e.strerror}", file=sys.stderr)
        sys.exit(2)
    except UnicodeEncodeError as e:
        print(f"nbtjson: cannot print JSON to stdout: {e}", file=sys.stderr)
        sys.exit(2)

    print(compact)


if __name__ == "__main__":
    main()
