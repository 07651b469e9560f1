"""
Bulk operations: copy and append into a fixed-capacity destination.

Every operation truncates to the destination's capacity instead of failing,
re-terminates the destination and re-encodes its length as the last step.
All return the resulting length of dest; callers that care about truncation
compare it with the length they asked for.

The *_scanning variants locate lengths by searching for NUL instead of
decoding the trailer. They are meant for sources without a trustworthy
encoding (plain bytes, foreign buffers) and are slower on long strings.
"""

from __future__ import annotations

import logging

from bdstring import NUL
from bdstring.codec import char_code, decode_length, encode_length, max_position

logger = logging.getLogger(__name__)


def _scan(buf, limit: int) -> int:
    """Index of the first NUL in buf[:limit], or limit if there is none."""
    limit = min(limit, len(buf))
    pos = buf.find(NUL, 0, limit)
    return limit if pos < 0 else pos


def _payload_char(ch) -> int:
    c = char_code(ch)
    if c == NUL:
        raise ValueError("cannot append NUL: it would end the string early")
    return c


def _store(src, n: int, dest: bytearray, start: int = 0) -> int:
    """Write src[:n - start] at dest[start:], terminate and encode."""
    limit = max_position(dest)
    if n > limit:
        logger.debug("truncating %d -> %d bytes (capacity %d)", n, limit, len(dest))
        n = limit
    dest[start:n] = src[:n - start]
    return encode_length(dest, n)


def copy(src, dest: bytearray) -> int:
    """Copy the string in src into dest. src must follow the convention."""
    return _store(src, decode_length(src), dest)


def copy_scanning(src, dest: bytearray) -> int:
    """Copy src up to its first NUL (or its end) into dest.

    src may be any bytes-like object, e.g. a bytes literal.
    """
    return _store(src, _scan(src, max_position(dest) + 1), dest)


def append(extra, dest: bytearray) -> int:
    """Append the string in extra to the string in dest."""
    d0 = decode_length(dest)
    return _store(extra, d0 + decode_length(extra), dest, d0)


def append_scanning(extra, dest: bytearray) -> int:
    """Append extra to dest, finding both lengths by scanning for NUL."""
    limit = max_position(dest)
    d0 = _scan(dest, limit)
    return _store(extra, d0 + _scan(extra, limit - d0 + 1), dest, d0)


def append_char(ch, dest: bytearray) -> int:
    """Append one character to dest; a full dest is left unchanged.

    In short form the terminator moves by exactly one, so the distance byte
    is decremented in place instead of re-encoding.
    """
    c = _payload_char(ch)
    upb = len(dest) - 1
    dist = dest[upb]
    pos = upb - dist
    if dist > 0 and pos >= 0 and dest[pos] == NUL and pos < max_position(dest):
        dest[pos] = c
        dest[pos + 1] = NUL
        dest[upb] = dist - 1  # same byte as the NUL above when dist == 1
        return pos + 1

    pos = decode_length(dest)
    if pos >= max_position(dest):
        logger.debug("append_char: buffer full (capacity %d)", len(dest))
        return pos
    dest[pos] = c
    return encode_length(dest, pos + 1)


def append_char_scanning(ch, dest: bytearray) -> int:
    """Append one character to dest, scanning for its end and re-encoding fully."""
    c = _payload_char(ch)
    limit = max_position(dest)
    pos = _scan(dest, limit)
    if pos >= limit:
        logger.debug("append_char_scanning: buffer full (capacity %d)", len(dest))
        return pos
    dest[pos] = c
    return encode_length(dest, pos + 1)
