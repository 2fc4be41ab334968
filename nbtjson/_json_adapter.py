"""NBT value tree → JSON.

Type mapping:
    BYTE / SHORT / INT / LONG   → JSON integer
    FLOAT / DOUBLE              → JSON number  (NaN and ±Infinity → null)
    STRING                      → JSON string
    *_ARRAY / LIST              → JSON array
    COMPOUND                    → JSON object, fields in wire order

The tag kinds are dropped on the way out.  JSON has no way to tell a SHORT
from a LONG, so the output is for reading, not for rebuilding the binary.

Two encodings: compact (no whitespace at all, e.g. {"x":42}) and pretty
(two-space indent).  Non-ASCII text is written as-is rather than escaped.
"""

from __future__ import annotations

import json
import math
from typing import Any

from ._constants import MAX_DEPTH, SCALAR_WIDTHS, TagKind
from ._core import Buffer, decode
from ._model import Value

_COMPACT_SEPARATORS = (",", ":")
_PRETTY_INDENT = 2


def to_python(value: Value) -> Any:
    """Strip kinds from a Value tree, leaving int/float/str/list/dict."""
    kind = value.kind
    if kind == TagKind.COMPOUND:
        return {k: to_python(v) for k, v in value.payload.items()}
    if kind == TagKind.LIST:
        return [to_python(v) for v in value.payload]
    if value.is_array:
        # Elements are always scalars; skip the recursion.
        return [v.payload for v in value.payload]
    if kind in SCALAR_WIDTHS or kind == TagKind.STRING:
        return value.payload
    raise TypeError("cannot convert {!r} value".format(kind))


def _finite_or_none(obj: Any) -> Any:
    """Replace non-finite floats with None.  Only walks what needs walking."""
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, dict):
        return {k: _finite_or_none(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_finite_or_none(v) for v in obj]
    return obj


def _has_float(value: Value) -> bool:
    kind = value.kind
    if kind == TagKind.FLOAT or kind == TagKind.DOUBLE:
        return True
    if kind == TagKind.COMPOUND:
        return any(_has_float(v) for v in value.payload.values())
    if kind == TagKind.LIST:
        return any(_has_float(v) for v in value.payload)
    return False


def value_to_json(value: Value, *, pretty: bool = False) -> str:
    """Serialize a Value tree to JSON text."""
    obj = to_python(value)
    if _has_float(value):
        obj = _finite_or_none(obj)
    if pretty:
        return json.dumps(obj, ensure_ascii=False, indent=_PRETTY_INDENT,
                          allow_nan=False)
    return json.dumps(obj, ensure_ascii=False, separators=_COMPACT_SEPARATORS,
                      allow_nan=False)


def nbt_to_json(data: Buffer, *, pretty: bool = False,
                max_depth: int = MAX_DEPTH) -> str:
    """Decode an NBT document and serialize it to JSON text in one step."""
    return value_to_json(decode(data, max_depth=max_depth), pretty=pretty)
