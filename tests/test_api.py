"""Unit tests for the nbtjson public API.

Organized by feature area: end-to-end documents, root framing, truncation,
the value model, and JSON output.  Reader-level byte accounting is in
test_readers.py.
"""

from __future__ import annotations

import dataclasses
import json
import math
import os
import struct
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.dirname(__file__))

from nbtjson import (
    ERR_LIMIT_DEPTH,
    ERR_MISSING_END,
    ERR_TAG,
    ERR_TRUNCATED,
    MAX_DEPTH,
    NbtError,
    TagKind,
    Value,
    decode,
    decode_root,
    nbt_to_json,
    to_python,
    value_to_json,
)

import nbt_bytes as nb


def _nested_document(levels: int) -> bytes:
    """A root COMPOUND with `levels` total levels of compound nesting."""
    payload = nb.compound()
    for _ in range(levels - 1):
        payload = nb.compound(nb.named(nb.COMPOUND, "n", payload))
    return nb.named(nb.COMPOUND, "", payload)


NESTED_DOC = nb.root(
    nb.named(nb.STRING, "name", nb.string("world")),
    nb.named(nb.COMPOUND, "player", nb.compound(
        nb.named(nb.INT, "hp", nb.int_(20)),
        nb.named(nb.LIST, "pos", nb.list_of(nb.DOUBLE, nb.double(1.5), nb.double(-2.0))),
    )),
    nb.named(nb.BYTE, "after", nb.byte(1)),
)


# ── End-to-end documents ──────────────────────────────────────

class TestDocuments(unittest.TestCase):
    def test_single_short(self):
        raw = bytes.fromhex("0a0000" "020001") + b"x" + bytes.fromhex("002a" "00")
        self.assertEqual(nbt_to_json(raw), '{"x":42}')

    def test_int_list(self):
        raw = nb.root(nb.named(nb.LIST, "items", nb.list_of(nb.INT, nb.int_(1), nb.int_(2))))
        self.assertEqual(nbt_to_json(raw), '{"items":[1,2]}')

    def test_empty_list(self):
        raw = nb.root(nb.named(nb.LIST, "items", nb.list_of(nb.BYTE)))
        self.assertEqual(nbt_to_json(raw), '{"items":[]}')

    def test_nested_compound(self):
        self.assertEqual(
            nbt_to_json(NESTED_DOC),
            '{"name":"world","player":{"hp":20,"pos":[1.5,-2.0]},"after":1}',
        )

    def test_nested_compound_consumes_whole_buffer(self):
        self.assertEqual(decode_root(NESTED_DOC).consumed, len(NESTED_DOC))

    def test_unknown_tag_anywhere(self):
        docs = [
            nb.root(nb.named(0x0D, "bad", b"\x00" * 8)),
            nb.root(nb.named(nb.COMPOUND, "c", nb.compound(nb.named(0x0D, "bad", b"")))),
            nb.root(nb.named(nb.LIST, "l", b"\x0d" + nb.int_(1) + b"\x00" * 4)),
            nb.named(0x0D, "", b"\x00"),
        ]
        for raw in docs:
            with self.subTest(raw=raw):
                with self.assertRaises(NbtError) as ctx:
                    decode(raw)
                self.assertEqual(ctx.exception.code, ERR_TAG)

    def test_all_kinds(self):
        raw = nb.root(
            nb.named(nb.BYTE, "b", nb.byte(-1)),
            nb.named(nb.SHORT, "s", nb.short(-2)),
            nb.named(nb.INT, "i", nb.int_(-3)),
            nb.named(nb.LONG, "l", nb.long(-(2**63))),
            nb.named(nb.FLOAT, "f", nb.float_(0.5)),
            nb.named(nb.DOUBLE, "d", nb.double(0.25)),
            nb.named(nb.BYTE_ARRAY, "ba", nb.array("b", 1, -1)),
            nb.named(nb.STRING, "str", nb.string("héllo")),
            nb.named(nb.LIST, "li", nb.list_of(nb.STRING, nb.string("a"))),
            nb.named(nb.COMPOUND, "c", nb.compound()),
            nb.named(nb.INT_ARRAY, "ia", nb.array("i", 2**31 - 1)),
            nb.named(nb.LONG_ARRAY, "la", nb.array("q", 2**63 - 1)),
        )
        self.assertEqual(json.loads(nbt_to_json(raw)), {
            "b": -1, "s": -2, "i": -3, "l": -(2**63), "f": 0.5, "d": 0.25,
            "ba": [1, -1], "str": "héllo", "li": ["a"], "c": {},
            "ia": [2**31 - 1], "la": [2**63 - 1],
        })
        doc = decode(raw)
        self.assertEqual([v.kind for v in doc.payload.values()],
                         [TagKind(k) for k in range(1, 13)])


# ── Root framing ──────────────────────────────────────────────

class TestRootFraming(unittest.TestCase):
    def test_unnamed_root(self):
        root = decode_root(nb.root(nb.named(nb.BYTE, "a", nb.byte(1))))
        self.assertEqual(root.name, "")
        self.assertIs(root.value.kind, TagKind.COMPOUND)

    def test_named_root(self):
        """A named root isn't assumed to have a zero-length name."""
        raw = nb.root(nb.named(nb.SHORT, "x", nb.short(42)), name="Level")
        self.assertEqual(decode_root(raw).name, "Level")
        self.assertEqual(nbt_to_json(raw), '{"x":42}')

    def test_non_compound_root(self):
        raw = nb.named(nb.INT, "answer", nb.int_(42))
        doc = decode(raw)
        self.assertEqual(doc.kind, TagKind.COMPOUND)
        self.assertEqual(to_python(doc), {"answer": 42})

    def test_list_root(self):
        raw = nb.named(nb.LIST, "l", nb.list_of(nb.BYTE, nb.byte(1)))
        self.assertEqual(nbt_to_json(raw), '{"l":[1]}')

    def test_end_root_is_empty_document(self):
        self.assertEqual(nbt_to_json(b"\x00"), "{}")
        self.assertEqual(decode_root(b"\x00").consumed, 1)

    def test_empty_input(self):
        with self.assertRaises(NbtError) as ctx:
            decode(b"")
        self.assertEqual(ctx.exception.code, ERR_TRUNCATED)

    def test_trailing_bytes_ignored(self):
        raw = nb.root(nb.named(nb.BYTE, "a", nb.byte(1)))
        root = decode_root(raw + b"\x0a\x00\x00\x00")
        self.assertEqual(root.consumed, len(raw))
        self.assertEqual(to_python(root.value), {"a": 1})

    def test_accepts_bytearray_and_memoryview(self):
        raw = nb.root(nb.named(nb.INT, "a", nb.int_(7)))
        for buf in (bytearray(raw), memoryview(raw)):
            with self.subTest(type=type(buf).__name__):
                self.assertEqual(nbt_to_json(buf), '{"a":7}')


# ── Truncation ────────────────────────────────────────────────

class TestTruncation(unittest.TestCase):
    """Cutting a document short anywhere must fault, never shrink the tree."""

    def test_every_prefix_faults(self):
        for cut in range(len(NESTED_DOC)):
            with self.subTest(cut=cut):
                with self.assertRaises(NbtError) as ctx:
                    decode(NESTED_DOC[:cut])
                self.assertIn(ctx.exception.code, (ERR_TRUNCATED, ERR_MISSING_END))

    def test_missing_root_end(self):
        with self.assertRaises(NbtError) as ctx:
            decode(NESTED_DOC[:-1])
        self.assertEqual(ctx.exception.code, ERR_MISSING_END)
        self.assertEqual(ctx.exception.offset, len(NESTED_DOC) - 1)


# ── Depth limit ───────────────────────────────────────────────

class TestDepthLimit(unittest.TestCase):
    def test_default_limit_ok(self):
        doc = decode(_nested_document(MAX_DEPTH))
        self.assertIn("n", doc.payload)

    def test_default_limit_exceeded(self):
        with self.assertRaises(NbtError) as ctx:
            decode(_nested_document(MAX_DEPTH + 1))
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)

    def test_custom_limit(self):
        decode(_nested_document(4), max_depth=4)
        with self.assertRaises(NbtError) as ctx:
            decode(_nested_document(5), max_depth=4)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)

    def test_limit_above_recursion_limit(self):
        """A max_depth the stack can't honor still faults with a code."""
        with self.assertRaises(NbtError) as ctx:
            decode(_nested_document(2000), max_depth=5000)
        self.assertEqual(ctx.exception.code, ERR_LIMIT_DEPTH)


# ── Value model ───────────────────────────────────────────────

class TestValueModel(unittest.TestCase):
    def setUp(self):
        self.doc = decode(NESTED_DOC)

    def test_indexing(self):
        self.assertEqual(self.doc["player"]["hp"], Value(TagKind.INT, 20))
        self.assertEqual(self.doc["player"]["pos"][1].payload, -2.0)

    def test_list_element_kind(self):
        self.assertIs(self.doc["player"]["pos"].element_kind, TagKind.DOUBLE)

    def test_len(self):
        self.assertEqual(len(self.doc), 3)
        self.assertEqual(len(self.doc["player"]["pos"]), 2)

    def test_scalar_has_no_len(self):
        with self.assertRaises(TypeError):
            len(self.doc["after"])
        with self.assertRaises(TypeError):
            self.doc["after"][0]

    def test_frozen(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            self.doc.kind = TagKind.LIST

    def test_kind_flags(self):
        self.assertTrue(self.doc["name"].is_scalar)
        self.assertFalse(self.doc["player"].is_scalar)
        arr = decode(nb.root(nb.named(nb.INT_ARRAY, "a", nb.array("i", 1))))["a"]
        self.assertTrue(arr.is_array)
        self.assertFalse(self.doc["player"]["pos"].is_array)


# ── JSON output ───────────────────────────────────────────────

class TestJsonOutput(unittest.TestCase):
    def test_pretty(self):
        raw = nb.root(nb.named(nb.SHORT, "x", nb.short(42)))
        self.assertEqual(nbt_to_json(raw, pretty=True), '{\n  "x": 42\n}')

    def test_compact_and_pretty_agree(self):
        doc = decode(NESTED_DOC)
        self.assertEqual(json.loads(value_to_json(doc)),
                         json.loads(value_to_json(doc, pretty=True)))

    def test_non_ascii_not_escaped(self):
        raw = nb.root(nb.named(nb.STRING, "ключ", nb.string("значение")))
        self.assertEqual(nbt_to_json(raw), '{"ключ":"значение"}')

    def test_float_keeps_single_precision_value(self):
        raw = nb.root(nb.named(nb.FLOAT, "f", nb.float_(0.1)))
        expected = struct.unpack(">f", struct.pack(">f", 0.1))[0]
        self.assertEqual(to_python(decode(raw))["f"], expected)

    def test_non_finite_floats_become_null(self):
        raw = nb.root(
            nb.named(nb.DOUBLE, "nan", nb.double(math.nan)),
            nb.named(nb.FLOAT, "inf", nb.float_(math.inf)),
            nb.named(nb.LIST, "l", nb.list_of(nb.DOUBLE, nb.double(-math.inf), nb.double(1.0))),
        )
        self.assertEqual(nbt_to_json(raw), '{"nan":null,"inf":null,"l":[null,1.0]}')

    def test_to_python_arrays(self):
        raw = nb.root(nb.named(nb.BYTE_ARRAY, "ba", nb.array("b", 5, -5)))
        self.assertEqual(to_python(decode(raw)), {"ba": [5, -5]})


if __name__ == "__main__":
    unittest.main()
