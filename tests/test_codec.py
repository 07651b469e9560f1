"""
Tests for the length codec — bdstring/codec.py + bdstring/errors.py.

TestRoundTrip       — encode/decode agree for every position and capacity
TestEscapeThreshold — short/escaped boundary and the poisoning guard
TestClamping        — out-of-range and oversize positions
TestStrictDecode    — BadTrailerError codes and diagnostics
TestPermissiveDecode — foreign buffers fall back to "full"
"""

from __future__ import annotations

import logging

import pytest

from bdstring import ESCAPE, MAX_ENCODABLE_LENGTH, POISON_BYTE
from bdstring.codec import decode_length, encode_length, is_short_form, max_position
from bdstring.errors import BadTrailerError, BDStringError, set_reporter


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def restore_reporter():
    """Put the default reporter back after a test swaps it."""
    yield
    set_reporter(None)


def _clamp(pos: int, capacity: int) -> int:
    return max(0, min(pos, capacity - 1, MAX_ENCODABLE_LENGTH - 1))


# ---------------------------------------------------------------------------
# TestRoundTrip
# ---------------------------------------------------------------------------

class TestRoundTrip:

    @pytest.mark.parametrize("capacity", [1, 2, 3, 16, 255, 256, 257, 258, 300, 600])
    @pytest.mark.parametrize("fill", [0x00, 0x61, 0xFF])
    def test_every_position(self, capacity, fill):
        for pos in range(capacity + 2):
            buf = bytearray([fill]) * capacity
            encoded = encode_length(buf, pos)
            assert encoded == _clamp(pos, capacity)
            assert decode_length(buf) == encoded
            assert len(buf) == capacity

    def test_reused_buffer(self):
        """Re-encoding over stale NULs and poison bytes still decodes."""
        buf = bytearray(300)
        for pos in [10, 44, 43, 45, 299, 0, 200, 43, 44, 100, 299]:
            assert encode_length(buf, pos) == pos
            assert decode_length(buf) == pos

    def test_max_capacity_buffer(self):
        capacity = MAX_ENCODABLE_LENGTH
        buf = bytearray(capacity)
        for pos in [0, 1, 255, 65534, 65535, 65536, capacity - 256, capacity - 255, capacity - 1]:
            assert encode_length(buf, pos) == pos
            assert decode_length(buf) == pos

    def test_terminator_written(self):
        buf = bytearray(b"abcdefgh")
        encode_length(buf, 3)
        assert buf[3] == 0
        assert buf[:3] == b"abc"

    def test_max_position(self):
        assert max_position(bytearray(1)) == 0
        assert max_position(bytearray(300)) == 299
        assert max_position(bytearray(MAX_ENCODABLE_LENGTH + 1)) == MAX_ENCODABLE_LENGTH - 1
        assert max_position(bytearray(MAX_ENCODABLE_LENGTH + 2)) == 0xFFFF
        assert max_position(bytearray(MAX_ENCODABLE_LENGTH + 10)) == 0xFFFF


# ---------------------------------------------------------------------------
# TestEscapeThreshold
# ---------------------------------------------------------------------------

class TestEscapeThreshold:

    def test_distance_255_is_short_form(self):
        buf = bytearray(300)  # upb = 299
        encode_length(buf, 44)
        assert buf[299] == 255
        assert is_short_form(buf)
        assert decode_length(buf) == 44

    def test_distance_256_is_escaped(self):
        buf = bytearray(300)
        encode_length(buf, 43)
        assert buf[299] == ESCAPE
        assert bytes(buf[297:299]) == b"\x00\x2b"
        assert not is_short_form(buf)
        assert decode_length(buf) == 43

    def test_short_distance_zero_uses_trailer_as_nul(self):
        buf = bytearray(b"abcd")
        encode_length(buf, 3)
        assert buf == bytearray(b"abc\x00")
        assert decode_length(buf) == 3

    def test_poisoning_guard(self):
        """A NUL at upb - 255 must not be read as a short-form terminator."""
        buf = bytearray(b"a" * 300)
        buf[44] = 0
        encode_length(buf, 10)
        assert buf[44] == POISON_BYTE
        assert decode_length(buf) == 10

    def test_unpoisoned_escape_is_misread(self):
        """Without the guard a stale NUL hijacks the decode."""
        buf = bytearray(b"a" * 300)
        buf[10] = 0
        buf[297:299] = b"\x00\x0a"
        buf[299] = ESCAPE
        assert decode_length(buf) == 10
        buf[44] = 0
        assert decode_length(buf) == 44

    def test_non_nul_at_escape_position_kept(self):
        buf = bytearray(b"b" * 300)
        encode_length(buf, 5)
        assert buf[44] == ord("b")


# ---------------------------------------------------------------------------
# TestClamping
# ---------------------------------------------------------------------------

class TestClamping:

    def test_past_capacity(self):
        buf = bytearray(10)
        assert encode_length(buf, 1000) == 9
        assert buf[9] == 0
        assert decode_length(buf) == 9

    def test_negative(self):
        buf = bytearray(b"xxxxxxxx")
        assert encode_length(buf, -5) == 0
        assert decode_length(buf) == 0

    def test_oversize_buffer(self):
        """Escaped positions that do not fit 16 bits clamp to 0xFFFF."""
        buf = bytearray(70000)
        assert encode_length(buf, 69999) == 0xFFFF
        assert decode_length(buf) == 0xFFFF

    def test_oversize_buffer_small_position(self):
        buf = bytearray(MAX_ENCODABLE_LENGTH + 100)
        pos = encode_length(buf, 10)
        assert pos == 10
        assert decode_length(buf) == 10

    @pytest.mark.parametrize("capacity", [
        MAX_ENCODABLE_LENGTH, MAX_ENCODABLE_LENGTH + 1, MAX_ENCODABLE_LENGTH + 2,
        MAX_ENCODABLE_LENGTH + 256, 70000,
    ])
    def test_max_position_is_encodable(self, capacity):
        buf = bytearray(capacity)
        top = max_position(buf)
        assert encode_length(buf, top) == top
        assert decode_length(buf) == top
        assert encode_length(buf, top + 1) == top

    def test_zero_capacity(self):
        with pytest.raises(ValueError, match="no capacity"):
            encode_length(bytearray(), 0)
        with pytest.raises(ValueError, match="no capacity"):
            decode_length(bytearray())


# ---------------------------------------------------------------------------
# TestStrictDecode
# ---------------------------------------------------------------------------

class TestStrictDecode:

    def test_distance_before_start(self):
        buf = bytearray(b"abc\x05")
        with pytest.raises(BadTrailerError) as exc_info:
            decode_length(buf)
        assert exc_info.value.code == 1
        assert exc_info.value.capacity == 4
        assert exc_info.value.trailer == 5
        assert "encoding error 1" in str(exc_info.value)

    def test_no_terminator(self):
        buf = bytearray(b"abcd\x02")
        with pytest.raises(BadTrailerError, match="encoding error 2"):
            decode_length(buf)

    def test_escaped_position_out_of_range(self):
        buf = bytearray(b"a" * 300)
        buf[297:299] = b"\xff\xff"
        buf[299] = ESCAPE
        with pytest.raises(BadTrailerError) as exc_info:
            decode_length(buf)
        assert exc_info.value.code == 2

    def test_is_package_error(self):
        with pytest.raises(BDStringError):
            decode_length(bytearray(b"abcd\x02"))

    def test_logged_at_error(self, caplog):
        with caplog.at_level(logging.ERROR, logger="bdstring.errors"):
            with pytest.raises(BadTrailerError):
                decode_length(bytearray(b"abcd\x02"))
        assert "encoding error 2" in caplog.text

    def test_custom_reporter_still_raises(self, restore_reporter, caplog):
        seen: list[BadTrailerError] = []
        previous = set_reporter(seen.append)
        assert previous is not None

        with caplog.at_level(logging.ERROR, logger="bdstring.errors"):
            with pytest.raises(BadTrailerError):
                decode_length(bytearray(b"abc\x09"))
        assert len(seen) == 1
        assert seen[0].code == 1
        assert "encoding error" not in caplog.text

    def test_set_reporter_none_restores_default(self, restore_reporter, caplog):
        set_reporter(lambda error: None)
        set_reporter(None)
        with caplog.at_level(logging.ERROR, logger="bdstring.errors"):
            with pytest.raises(BadTrailerError):
                decode_length(bytearray(b"abc\x09"))
        assert "encoding error 1" in caplog.text


# ---------------------------------------------------------------------------
# TestPermissiveDecode
# ---------------------------------------------------------------------------

class TestPermissiveDecode:

    def test_valid_short_form(self):
        buf = bytearray(8)
        encode_length(buf, 3)
        assert decode_length(buf, strict=False) == 3

    def test_unterminated_is_full(self):
        assert decode_length(bytearray(b"abcd\x02"), strict=False) == 5
        assert decode_length(bytearray(b"abcde"), strict=False) == 5

    def test_escaped_position_must_hold_nul(self):
        buf = bytearray(b"a" * 300)
        buf[297:299] = b"\x00\x0a"
        buf[299] = ESCAPE
        assert decode_length(buf, strict=False) == 300
        buf[10] = 0
        assert decode_length(buf, strict=False) == 10

    def test_escaped_position_out_of_range(self):
        buf = bytearray(b"a" * 300)
        buf[297:299] = b"\x01\x2c"  # 300
        buf[299] = ESCAPE
        assert decode_length(buf, strict=False) == 300

    def test_no_diagnostics(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="bdstring"):
            decode_length(bytearray(b"abc\x09"), strict=False)
        assert caplog.text == ""

    def test_small_buffer_ending_in_escape_is_full(self):
        """Too small for the escaped form: the trailer bytes are not consulted."""
        buf = bytearray(b"a\x00\x00\x01\xff")
        assert decode_length(buf, strict=False) == 5
