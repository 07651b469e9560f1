"""
Length codec: reads and writes the terminator position in a buffer's trailer.

Short form (1 byte):
    buf[upb] = upb - pos, valid for distances 0..255. Distance 0 means the
    trailer byte itself is the terminating NUL.

Escaped form (3 bytes):
    buf[upb] = ESCAPE, buf[upb-2], buf[upb-1] = pos as big-endian uint16.

Disambiguation:
    ESCAPE (255) is also a legal short-form distance. Decoding tries the short
    form first and accepts it only if the candidate position holds a NUL. The
    encoder therefore poisons buf[upb-255] whenever it writes the escaped
    form, so a stale NUL there can never be mistaken for a distance of 255.
"""

from __future__ import annotations

import struct

from bdstring import ESCAPE, MAX_ENCODABLE_LENGTH, NUL, POISON_BYTE, SHORT_FORM_MAX_DISTANCE
from bdstring.errors import report_bad_trailer

_POSITION_STRUCT = struct.Struct(">H")
_MAX_ESCAPED_POSITION = 0xFFFF


def _upb(buf) -> int:
    upb = len(buf) - 1
    if upb < 0:
        raise ValueError("buffer has no capacity")
    return upb


def max_position(buf) -> int:
    """Largest terminator position encodable in this buffer.

    Every position from 0 up to the result is encodable. Past 0xFFFF only
    short-form distances work, so buffers whose last 256 positions start
    beyond 0x10000 stop at 0xFFFF.
    """
    upb = _upb(buf)
    pos = min(upb, MAX_ENCODABLE_LENGTH - 1)
    if pos > _MAX_ESCAPED_POSITION and upb - SHORT_FORM_MAX_DISTANCE > _MAX_ESCAPED_POSITION + 1:
        return _MAX_ESCAPED_POSITION
    return pos


def char_code(ch) -> int:
    """Byte value of a one-character int, bytes or (latin-1) str."""
    if isinstance(ch, int):
        if not 0 <= ch <= 255:
            raise ValueError(f"character code out of range: {ch}")
        return ch
    if isinstance(ch, str):
        ch = ch.encode("latin-1")
    if len(ch) != 1:
        raise ValueError(f"expected a single character, got {ch!r}")
    return ch[0]


def decode_length(buf, *, strict: bool = True) -> int:
    """Return the terminator position (the string length) of a buffer.

    Strict mode treats a trailer that resolves to nothing as corruption and
    raises BadTrailerError after reporting it. Permissive mode is for buffers
    filled by foreign code: an unresolvable trailer means the buffer is full
    and unterminated, and the length is its capacity.
    """
    upb = _upb(buf)
    trailer = buf[upb]
    candidate = upb - trailer

    if strict:
        if candidate < 0:
            raise report_bad_trailer(1, len(buf), trailer)
        if buf[candidate] == NUL:
            return candidate
        if trailer == ESCAPE:
            pos = _POSITION_STRUCT.unpack_from(buf, upb - 2)[0]
            if pos <= upb:
                return pos
        raise report_bad_trailer(2, len(buf), trailer)

    if candidate >= 0:
        if buf[candidate] == NUL:
            return candidate
        if trailer == ESCAPE:
            pos = _POSITION_STRUCT.unpack_from(buf, upb - 2)[0]
            if pos <= upb and buf[pos] == NUL:
                return pos
    return len(buf)


def encode_length(buf: bytearray, pos: int) -> int:
    """Terminate the string at pos and record pos in the trailer.

    pos is clamped to [0, max_position(buf)]. Returns the position actually
    encoded. Bytes between the terminator and the end of the buffer are
    encoding overhead and may be overwritten.
    """
    upb = _upb(buf)
    pos = max(0, min(pos, max_position(buf)))
    dist = upb - pos

    buf[pos] = NUL
    if dist <= SHORT_FORM_MAX_DISTANCE:
        buf[upb] = dist
        return pos

    esc_pos = upb - SHORT_FORM_MAX_DISTANCE
    if buf[esc_pos] == NUL:
        buf[esc_pos] = POISON_BYTE
    buf[upb] = ESCAPE
    _POSITION_STRUCT.pack_into(buf, upb - 2, pos)
    return pos


def is_short_form(buf) -> bool:
    """True if the buffer's length is held in the one-byte short form."""
    upb = _upb(buf)
    candidate = upb - buf[upb]
    return candidate >= 0 and buf[candidate] == NUL
