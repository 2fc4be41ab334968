"""NBT decode error codes and the exception class.

Decoding is all-or-nothing.  Every fault raises NbtError straight up to the
caller; no reader recovers locally and no partial tree is ever returned.
"""

from __future__ import annotations

from typing import Optional

ERR_TRUNCATED: str = "ERR_TRUNCATED"        # fewer bytes left than a field needs
ERR_UTF8: str = "ERR_UTF8"                  # string payload is not valid UTF-8
ERR_TAG: str = "ERR_TAG"                    # unknown tag id, or END where a value belongs
ERR_COUNT: str = "ERR_COUNT"                # negative array/list element count
ERR_MISSING_END: str = "ERR_MISSING_END"    # compound ran off the buffer without END
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"    # nesting deeper than max_depth


class NbtError(Exception):
    """Exception for NBT decoding faults.

    `.code` is one of the ERR_* strings above.  `.offset` is the absolute
    buffer offset at which the fault was detected, or None when no single
    offset applies.
    """

    def __init__(self, code: str, msg: str = "", offset: Optional[int] = None) -> None:
        if offset is not None:
            msg = "{} at offset {}".format(msg or code, offset)
        super().__init__(msg or code)
        self.code = code
        self.offset = offset
