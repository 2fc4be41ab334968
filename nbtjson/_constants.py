"""NBT constants: tag kind identifiers, primitive widths, and decode limits.

The tag identifier is the wire discriminant: one unsigned byte in front of
every named tag, and once more in front of every list to declare its element
kind.  The set is closed.  Nothing outside 0x00–0x0C is ever valid.
"""

from __future__ import annotations

import enum
from typing import Dict


class TagKind(enum.IntEnum):
    END = 0x00
    BYTE = 0x01
    SHORT = 0x02
    INT = 0x03
    LONG = 0x04
    FLOAT = 0x05
    DOUBLE = 0x06
    BYTE_ARRAY = 0x07
    STRING = 0x08
    LIST = 0x09
    COMPOUND = 0x0A
    INT_ARRAY = 0x0B
    LONG_ARRAY = 0x0C


# Module-level aliases so the readers can compare against plain ints
# without attribute lookups on the enum.
TAG_END: int = TagKind.END
TAG_BYTE: int = TagKind.BYTE
TAG_SHORT: int = TagKind.SHORT
TAG_INT: int = TagKind.INT
TAG_LONG: int = TagKind.LONG
TAG_FLOAT: int = TagKind.FLOAT
TAG_DOUBLE: int = TagKind.DOUBLE
TAG_BYTE_ARRAY: int = TagKind.BYTE_ARRAY
TAG_STRING: int = TagKind.STRING
TAG_LIST: int = TagKind.LIST
TAG_COMPOUND: int = TagKind.COMPOUND
TAG_INT_ARRAY: int = TagKind.INT_ARRAY
TAG_LONG_ARRAY: int = TagKind.LONG_ARRAY

KNOWN_TAG_IDS = frozenset(int(k) for k in TagKind)

# ── Wire layout ──────────────────────────────────────────────
# Everything is big-endian.  The struct format and byte width of each
# fixed-width scalar.
SCALAR_FORMATS: Dict[int, str] = {
    TAG_BYTE: ">b",
    TAG_SHORT: ">h",
    TAG_INT: ">i",
    TAG_LONG: ">q",
    TAG_FLOAT: ">f",
    TAG_DOUBLE: ">d",
}

SCALAR_WIDTHS: Dict[int, int] = {
    TAG_BYTE: 1,
    TAG_SHORT: 2,
    TAG_INT: 4,
    TAG_LONG: 8,
    TAG_FLOAT: 4,
    TAG_DOUBLE: 8,
}

# Element kind of each fixed-width array.
ARRAY_ELEMENT_KINDS: Dict[int, int] = {
    TAG_BYTE_ARRAY: TAG_BYTE,
    TAG_INT_ARRAY: TAG_INT,
    TAG_LONG_ARRAY: TAG_LONG,
}

STRING_LENGTH_WIDTH: int = 2   # uint16be
COUNT_WIDTH: int = 4           # int32be, arrays and lists

# Smallest possible encoding of one payload of each kind.  Used to reject
# list counts that cannot fit in what is left of the buffer before we start
# iterating.  END has no payload and never appears as a list element.
MIN_PAYLOAD_WIDTHS: Dict[int, int] = {
    **SCALAR_WIDTHS,
    TAG_BYTE_ARRAY: COUNT_WIDTH,
    TAG_STRING: STRING_LENGTH_WIDTH,
    TAG_LIST: 1 + COUNT_WIDTH,
    TAG_COMPOUND: 1,
    TAG_INT_ARRAY: COUNT_WIDTH,
    TAG_LONG_ARRAY: COUNT_WIDTH,
}

# ── Limits ───────────────────────────────────────────────────
# Each level of nesting costs two Python frames (dispatch + container
# reader), so this stays well under the default recursion limit.
MAX_DEPTH: int = 256
