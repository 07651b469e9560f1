"""
Cursor operations: forward-only reading of a string, bounded copies and
comparison.

next_char() is the primitive every scanner here is built on. Past the end of
the string it yields a virtual NUL, whether or not the buffer holds a physical
one there, so consumers never read the trailer as payload.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from bdstring import NUL
from bdstring.codec import char_code, decode_length, encode_length, max_position

logger = logging.getLogger(__name__)

CharPredicate = Callable[[int], bool]
PositionPredicate = Callable[[int], bool]


def next_char(buf, pos: int, *, strict: bool = True) -> tuple[int, int]:
    """Return (character, next position) for the character at pos.

    At or past the end of the string returns (NUL, pos) without advancing.
    """
    if pos < 0:
        raise ValueError(f"negative position: {pos}")
    if pos > decode_length(buf, strict=strict) - 1:
        return NUL, pos
    return buf[pos], pos + 1


def iter_chars(buf, pos: int = 0, *, strict: bool = True) -> Iterator[int]:
    """Yield the characters from pos on, then exactly one NUL."""
    while True:
        ch, pos = next_char(buf, pos, strict=strict)
        yield ch
        if ch == NUL:
            return


def _append_until(extra, dest: bytearray, pos: int, stop: PositionPredicate) -> int:
    """Move characters of extra from pos into dest until stop(pos) holds or
    extra is exhausted. Characters that no longer fit in dest are consumed
    and dropped. Returns the new position in extra.
    """
    if pos < 0:
        raise ValueError(f"negative position: {pos}")
    if extra is dest:
        # writes land at and past the terminator of extra; read from a copy
        extra = bytearray(extra)
    end = decode_length(extra)
    d = decode_length(dest)
    limit = max_position(dest)
    dropped = 0

    while pos < end and not stop(pos):
        ch, pos = next_char(extra, pos)
        if d < limit:
            dest[d] = ch
            d += 1
        else:
            dropped += 1

    if dropped:
        logger.debug("dropped %d byte(s): destination full (capacity %d)",
                      dropped, len(dest))
    encode_length(dest, d)
    return pos


def append_until_char(extra, dest: bytearray, pos: int, stop_char) -> int:
    """Append extra[pos:] to dest up to (not including) the next stop_char.

    Returns the position of that stop_char in extra, or the length of extra.
    """
    c = char_code(stop_char)
    return _append_until(extra, dest, pos, lambda p: extra[p] == c)


def append_until_char_predicate(extra, dest: bytearray, pos: int,
                                predicate: CharPredicate) -> int:
    """Like append_until_char, stopping at the first character satisfying predicate."""
    return _append_until(extra, dest, pos, lambda p: predicate(extra[p]))


def append_until_position_predicate(extra, dest: bytearray, pos: int,
                                    predicate: PositionPredicate) -> int:
    """Like append_until_char, stopping at the first position satisfying predicate."""
    return _append_until(extra, dest, pos, predicate)


def compare(s1, s2) -> int:
    """Lexicographic comparison.

    Returns the difference of the first differing byte values, 0 if the
    strings are equal.
    """
    for c1, c2 in zip(iter_chars(s1), iter_chars(s2)):
        if c1 != c2 or c1 == NUL:
            return c1 - c2
    return 0
