"""nbtjson: decode NBT binary documents and re-emit them as JSON.

NBT is a tagged, length-prefixed, big-endian tree format: every value is
preceded by a one-byte kind, compounds are named fields ended by an END tag,
and lists declare their element kind once up front.  Input must already be
uncompressed.

Quick start:
    >>> from nbtjson import nbt_to_json
    >>> nbt_to_json(b"\\x0a\\x00\\x00\\x02\\x00\\x01x\\x00\\x2a\\x00")
    '{"x":42}'

The decoded tree keeps the wire kind of every node:
    >>> from nbtjson import decode, TagKind
    >>> doc = decode(b"\\x0a\\x00\\x00\\x02\\x00\\x01x\\x00\\x2a\\x00")
    >>> doc["x"].kind is TagKind.SHORT, doc["x"].payload
    (True, 42)
"""

from __future__ import annotations

from ._constants import MAX_DEPTH, TagKind
from ._core import decode, decode_root, decode_tag
from ._errors import (
    ERR_COUNT,
    ERR_LIMIT_DEPTH,
    ERR_MISSING_END,
    ERR_TAG,
    ERR_TRUNCATED,
    ERR_UTF8,
    NbtError,
)
from ._json_adapter import nbt_to_json, to_python, value_to_json
from ._model import RootTag, Value

__version__ = "0.1.0"

__all__ = [
    # Decoding
    "decode",
    "decode_root",
    "decode_tag",
    # JSON output
    "nbt_to_json",
    "value_to_json",
    "to_python",
    # Value model
    "Value",
    "RootTag",
    "TagKind",
    "MAX_DEPTH",
    # Exception
    "NbtError",
    # Error codes
    "ERR_TRUNCATED",
    "ERR_UTF8",
    "ERR_TAG",
    "ERR_COUNT",
    "ERR_MISSING_END",
    "ERR_LIMIT_DEPTH",
]
