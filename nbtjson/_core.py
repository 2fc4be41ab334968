"""NBT core: primitive readers, container readers, tag dispatch, root framing.

Wire format (all multi-byte fields big-endian):

    named tag   := id:u8  name:string  payload        (no name/payload if id == END)
    string      := len:u16  utf8[len]
    array       := count:i32  element[count]          (BYTE / INT / LONG elements)
    list        := elem_id:u8  count:i32  payload[count]
    compound    := named_tag*  END

Every reader takes (buf, off) and returns (value, consumed).  `consumed` is
exactly the number of bytes the value occupies on the wire, so the caller
always advances with `off += consumed`.  Containers get this for free by
summing their children, and that sum is the invariant the tests pin down:

    compound consumed == sum(1 + name + payload for each field) + 1
    list consumed     == 5 + sum(payload for each element)

The depth parameter tracks container nesting:
  - The root call starts at depth=0.
  - Entering a LIST or COMPOUND checks depth+1 against max_depth.
  - Scalars, strings and arrays don't increment depth.
"""

from __future__ import annotations

import logging
import struct
from typing import Any, Dict, List, Tuple, Union

from ._constants import (
    ARRAY_ELEMENT_KINDS,
    COUNT_WIDTH,
    KNOWN_TAG_IDS,
    MAX_DEPTH,
    MIN_PAYLOAD_WIDTHS,
    SCALAR_FORMATS,
    SCALAR_WIDTHS,
    STRING_LENGTH_WIDTH,
    TAG_BYTE,
    TAG_COMPOUND,
    TAG_DOUBLE,
    TAG_END,
    TAG_FLOAT,
    TAG_INT,
    TAG_LIST,
    TAG_LONG,
    TAG_SHORT,
    TAG_STRING,
    TagKind,
)
from ._errors import (
    ERR_COUNT,
    ERR_LIMIT_DEPTH,
    ERR_MISSING_END,
    ERR_TAG,
    ERR_TRUNCATED,
    ERR_UTF8,
    NbtError,
)
from ._model import RootTag, Value

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]


def _need(buf: Buffer, off: int, n: int, what: str) -> None:
    """Fail unless n bytes are available at off.  No partial reads."""
    if off + n > len(buf):
        raise NbtError(
            ERR_TRUNCATED,
            "truncated {}: need {} bytes, {} left".format(what, n, max(len(buf) - off, 0)),
            off,
        )


# ── Primitive readers ─────────────────────────────────────────

def read_scalar(buf: Buffer, off: int, tag_id: int) -> Tuple[Any, int]:
    """Read one fixed-width scalar of kind tag_id (BYTE through DOUBLE)."""
    width = SCALAR_WIDTHS[tag_id]
    if off + width > len(buf):
        _need(buf, off, width, TagKind(tag_id).name)
    return struct.unpack_from(SCALAR_FORMATS[tag_id], buf, off)[0], width


def read_byte(buf: Buffer, off: int) -> Tuple[int, int]:
    return read_scalar(buf, off, TAG_BYTE)


def read_short(buf: Buffer, off: int) -> Tuple[int, int]:
    return read_scalar(buf, off, TAG_SHORT)


def read_int(buf: Buffer, off: int) -> Tuple[int, int]:
    return read_scalar(buf, off, TAG_INT)


def read_long(buf: Buffer, off: int) -> Tuple[int, int]:
    return read_scalar(buf, off, TAG_LONG)


def read_float(buf: Buffer, off: int) -> Tuple[float, int]:
    return read_scalar(buf, off, TAG_FLOAT)


def read_double(buf: Buffer, off: int) -> Tuple[float, int]:
    return read_scalar(buf, off, TAG_DOUBLE)


def read_string(buf: Buffer, off: int) -> Tuple[str, int]:
    """Read a u16-length-prefixed UTF-8 string.  Returns (text, 2 + length)."""
    _need(buf, off, STRING_LENGTH_WIDTH, "string length")
    (length,) = struct.unpack_from(">H", buf, off)
    start = off + STRING_LENGTH_WIDTH
    _need(buf, start, length, "string payload")
    try:
        text = bytes(buf[start:start + length]).decode("utf-8")
    except UnicodeDecodeError as e:
        raise NbtError(ERR_UTF8, "invalid utf-8 in string: {}".format(e.reason),
                       start + e.start)
    return text, STRING_LENGTH_WIDTH + length


def _read_count(buf: Buffer, off: int, what: str) -> int:
    count, _ = read_int(buf, off)
    # Never read as an empty run.
    if count < 0:
        raise NbtError(ERR_COUNT, "negative {} count {}".format(what, count), off)
    return count


# ── Arrays (BYTE_ARRAY, INT_ARRAY, LONG_ARRAY) ────────────────

def read_array(buf: Buffer, off: int, tag_id: int) -> Tuple[List[Value], int]:
    """Read a count-prefixed run of fixed-width elements.

    The whole run is bounds-checked before anything is allocated, then
    unpacked in one struct call.
    """
    elem_id = ARRAY_ELEMENT_KINDS[tag_id]
    count = _read_count(buf, off, TagKind(tag_id).name)
    width = SCALAR_WIDTHS[elem_id]
    start = off + COUNT_WIDTH
    _need(buf, start, count * width, "{} payload".format(TagKind(tag_id).name))

    fmt = ">{}{}".format(count, SCALAR_FORMATS[elem_id][1:])
    elem_kind = TagKind(elem_id)
    items = [Value(elem_kind, v) for v in struct.unpack_from(fmt, buf, start)]
    return items, COUNT_WIDTH + count * width


# ── LIST ──────────────────────────────────────────────────────

def read_list(buf: Buffer, off: int, depth: int = 1,
              max_depth: int = MAX_DEPTH) -> Tuple[Value, int]:
    """Read a LIST payload.  `depth` is the depth of this list itself."""
    _need(buf, off, 1, "list element kind")
    elem_id = buf[off]
    count = _read_count(buf, off + 1, "list")
    pos = off + 1 + COUNT_WIDTH

    if count == 0:
        # The element kind byte is still consumed, even when it names
        # nothing we know; there is nothing to decode with it.
        elem_kind = TagKind(elem_id) if elem_id in KNOWN_TAG_IDS else None
        return Value(TagKind.LIST, [], elem_kind), pos - off

    if elem_id not in MIN_PAYLOAD_WIDTHS:
        raise NbtError(ERR_TAG, "list of {} elements declares kind 0x{:02x}".format(
            count, elem_id), off)
    _need(buf, pos, count * MIN_PAYLOAD_WIDTHS[elem_id], "list payload")

    items: List[Value] = []
    for _ in range(count):
        item, n = decode_tag(buf, pos, elem_id, depth, max_depth)
        pos += n
        items.append(item)
    return Value(TagKind.LIST, items, TagKind(elem_id)), pos - off


# ── COMPOUND ──────────────────────────────────────────────────

def read_compound(buf: Buffer, off: int, depth: int = 1,
                  max_depth: int = MAX_DEPTH) -> Tuple[Value, int]:
    """Read named tags until END.  `depth` is the depth of this compound itself.

    The END byte is counted in `consumed`.
    """
    fields: Dict[str, Value] = {}
    pos = off
    while True:
        if pos >= len(buf):
            raise NbtError(ERR_MISSING_END, "compound has no END tag", pos)
        tag_id = buf[pos]
        pos += 1
        if tag_id == TAG_END:
            break

        name, n = read_string(buf, pos)
        pos += n
        value, n = decode_tag(buf, pos, tag_id, depth, max_depth)
        pos += n

        # Last write wins on a repeated name, same as a dict literal.
        fields[name] = value
    return Value(TagKind.COMPOUND, fields), pos - off


# ── Tag dispatch ──────────────────────────────────────────────

def decode_tag(buf: Buffer, off: int, tag_id: int, depth: int = 0,
               max_depth: int = MAX_DEPTH) -> Tuple[Value, int]:
    """Decode the payload of a tag of kind tag_id starting at off.

    `depth` is the nesting depth of the container that holds this payload.
    This is the only recursion point: LIST and COMPOUND readers come back
    here for every element and field.
    """
    if tag_id in SCALAR_FORMATS:
        val, n = read_scalar(buf, off, tag_id)
        return Value(TagKind(tag_id), val), n

    if tag_id == TAG_STRING:
        text, n = read_string(buf, off)
        return Value(TagKind.STRING, text), n

    if tag_id in ARRAY_ELEMENT_KINDS:
        items, n = read_array(buf, off, tag_id)
        return Value(TagKind(tag_id), items), n

    if tag_id == TAG_LIST or tag_id == TAG_COMPOUND:
        if depth + 1 > max_depth:
            raise NbtError(ERR_LIMIT_DEPTH,
                           "nesting exceeds max depth {}".format(max_depth), off)
        if tag_id == TAG_LIST:
            return read_list(buf, off, depth + 1, max_depth)
        return read_compound(buf, off, depth + 1, max_depth)

    if tag_id == TAG_END:
        raise NbtError(ERR_TAG, "END tag where a value was expected", off)

    raise NbtError(ERR_TAG, "unknown tag id 0x{:02x}".format(tag_id), off)


# ── Root framing ──────────────────────────────────────────────

def decode_root(data: Buffer, *, max_depth: int = MAX_DEPTH) -> RootTag:
    """Decode the root named tag at the start of data.

    The root is framed like any other named tag (id, name, payload), so a
    named root or a non-COMPOUND root decodes the same way as the usual
    unnamed root COMPOUND.  A stream that opens with END is an empty
    document.  Bytes after the root are not part of the document and are
    ignored.
    """
    buf = bytes(data)
    if not buf:
        raise NbtError(ERR_TRUNCATED, "empty input", 0)

    tag_id = buf[0]
    if tag_id == TAG_END:
        logger.debug("root tag is END; empty document")
        return RootTag("", Value(TagKind.COMPOUND, {}), 1)

    name, n = read_string(buf, 1)
    pos = 1 + n
    try:
        value, n = decode_tag(buf, pos, tag_id, 0, max_depth)
    except RecursionError:
        # max_depth was set above what the interpreter's stack can hold.
        raise NbtError(ERR_LIMIT_DEPTH,
                       "nesting exceeds the interpreter recursion limit "
                       "(max depth {})".format(max_depth), pos) from None
    pos += n

    logger.debug("decoded root %s %r: %d bytes", value.kind.name, name, pos)
    if pos < len(buf):
        logger.debug("ignoring %d trailing bytes after root tag", len(buf) - pos)
    return RootTag(name, value, pos)


def decode(data: Buffer, *, max_depth: int = MAX_DEPTH) -> Value:
    """Decode an NBT document into a COMPOUND Value.

    For the usual root COMPOUND this is the root itself, its fields being the
    document's top-level tags.  Any other root kind is wrapped as
    {root_name: value} so the document is always a mapping.
    """
    root = decode_root(data, max_depth=max_depth)
    if root.value.kind == TagKind.COMPOUND:
        return root.value
    return Value(TagKind.COMPOUND, {root.name: root.value})
