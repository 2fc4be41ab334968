"""Decoded NBT value tree.

Every node is a Value: the wire tag kind it was decoded from plus a payload.

    BYTE / SHORT / INT / LONG      int
    FLOAT / DOUBLE                 float
    STRING                         str
    BYTE_ARRAY / INT_ARRAY /
    LONG_ARRAY                     list of BYTE / INT / LONG Values
    LIST                           list of Values, all of `element_kind`
    COMPOUND                       dict of str -> Value, insertion ordered

Keeping the kind on every node means a consumer can branch on `kind`
instead of guessing from Python types (an INT and a LONG are both `int`),
and it keeps the tree encodable again without any side information.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple, Optional

from ._constants import ARRAY_ELEMENT_KINDS, SCALAR_WIDTHS, TagKind


@dataclass(frozen=True)
class Value:
    kind: TagKind
    payload: Any
    # Declared element kind of a LIST.  Kept even for an empty list, whose
    # payload alone can't tell you what it was declared as.
    element_kind: Optional[TagKind] = None

    @property
    def is_scalar(self) -> bool:
        return self.kind in SCALAR_WIDTHS or self.kind == TagKind.STRING

    @property
    def is_array(self) -> bool:
        return self.kind in ARRAY_ELEMENT_KINDS

    def __len__(self) -> int:
        if self.is_scalar:
            raise TypeError("{} value has no length".format(self.kind.name))
        return len(self.payload)

    def __getitem__(self, key: Any) -> "Value":
        """Index a COMPOUND by name, or a LIST / array by position."""
        if self.is_scalar:
            raise TypeError("{} value is not subscriptable".format(self.kind.name))
        return self.payload[key]


class RootTag(NamedTuple):
    """The document's root framing: its name, its value, and the byte count
    consumed from the start of the buffer through the root's END."""
    name: str
    value: Value
    consumed: int
