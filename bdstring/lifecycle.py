"""
Bringing buffers into (and out of) the length-encoding convention.
"""

from __future__ import annotations

from bdstring import NUL
from bdstring.codec import decode_length, encode_length, max_position


def init(buf: bytearray) -> None:
    """Make buf hold the empty string."""
    buf[0] = NUL
    encode_length(buf, 0)


def is_empty(buf) -> bool:
    # An empty string has a physical NUL at 0 in either form.
    return buf[0] == NUL


def normalize(buf: bytearray) -> int:
    """Adopt a buffer filled by code unaware of the convention.

    The string ends at the first NUL, or at the last index if there is none
    (the last byte is then overwritten by the terminator). Returns the length.
    Idempotent.
    """
    upb = len(buf) - 1
    pos = buf.find(NUL, 0, upb)
    if pos < 0:
        pos = upb
    return encode_length(buf, pos)


def new(capacity: int, data: bytes = b"") -> bytearray:
    """Allocate a buffer of the given capacity holding data.

    data ends at its first NUL, if any, and is truncated to fit.
    """
    if capacity < 1:
        raise ValueError(f"capacity must be at least 1, got {capacity}")
    buf = bytearray(capacity)
    n = data.find(NUL)
    if n < 0:
        n = len(data)
    n = min(n, max_position(buf))
    buf[:n] = data[:n]
    encode_length(buf, n)
    return buf


def to_bytes(buf, *, strict: bool = True) -> bytes:
    """Return the string payload, without terminator or trailer."""
    return bytes(buf[:decode_length(buf, strict=strict)])
