"""
bdstring — length-encoded strings in fixed-capacity byte buffers.

Layout (Bron-Dijkstra convention), capacity C, upb = C - 1:
    Short form:    buf[upb] = dist (0..255)          -> terminator at upb - dist
    Escaped form:  buf[upb] = 255, buf[upb-2:upb]    -> terminator at big-endian uint16
                   buf[upb-255] is never NUL (poisoned) while escaped

A NUL is always written at the terminator, so byte-scanning consumers still
see a classic NUL-terminated string, while decode_length() answers in O(1).

Buffers are caller-owned bytearrays. Nothing here locks: mutating one buffer
from two threads at once is undefined.
"""

__version__ = "0.1.0"

NUL = 0

# Trailer constants
ESCAPE = 255
SHORT_FORM_MAX_DISTANCE = 255
MAX_ENCODABLE_LENGTH = 256 * 256 + 255  # 65791
POISON_BYTE = 0xFF  # any non-NUL value works

# CLI defaults
DEFAULT_CAPACITY = 256

from bdstring.errors import BDStringError, BadTrailerError, set_reporter
from bdstring.codec import decode_length, encode_length, is_short_form, max_position
from bdstring.lifecycle import init, is_empty, new, normalize, to_bytes
from bdstring.bulk import (
    append,
    append_char,
    append_char_scanning,
    append_scanning,
    copy,
    copy_scanning,
)
from bdstring.cursor import (
    append_until_char,
    append_until_char_predicate,
    append_until_position_predicate,
    compare,
    iter_chars,
    next_char,
)

__all__ = [
    "BDStringError",
    "BadTrailerError",
    "set_reporter",
    "decode_length",
    "encode_length",
    "is_short_form",
    "max_position",
    "init",
    "is_empty",
    "new",
    "normalize",
    "to_bytes",
    "copy",
    "copy_scanning",
    "append",
    "append_scanning",
    "append_char",
    "append_char_scanning",
    "next_char",
    "iter_chars",
    "append_until_char",
    "append_until_char_predicate",
    "append_until_position_predicate",
    "compare",
]
