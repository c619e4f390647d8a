"""Tests for the byte cursor."""

import pytest

from pyjvis.cursor import ByteCursor
from pyjvis.errors import UnexpectedEndOfInput


class TestByteCursor:
    def test_big_endian_reads(self):
        cursor = ByteCursor(bytes([0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07]))
        assert cursor.read_u1() == 0x01
        assert cursor.read_u2() == 0x0203
        assert cursor.read_u4() == 0x04050607
        assert cursor.remaining == 0

    def test_signed_reads(self):
        cursor = ByteCursor(bytes([0xFF, 0xFF, 0xFD, 0xFF, 0xFF, 0xFF, 0xFE]))
        assert cursor.read_s1() == -1
        assert cursor.read_s2() == -3
        assert cursor.read_s4() == -2

    def test_peek_does_not_advance(self):
        cursor = ByteCursor(b"\x2a\xb1")
        assert cursor.peek_u1() == 0x2A
        assert cursor.pos == 0
        assert cursor.read_u1() == 0x2A
        assert cursor.pos == 1

    def test_skip_and_position(self):
        cursor = ByteCursor(b"abcdef")
        cursor.skip(4)
        assert cursor.pos == 4
        assert cursor.remaining == 2
        assert cursor.read_bytes(2) == b"ef"

    def test_read_past_end_fails_without_moving(self):
        cursor = ByteCursor(b"\x00\x01\x02")
        cursor.read_u1()
        with pytest.raises(UnexpectedEndOfInput):
            cursor.read_u4()
        assert cursor.pos == 1
        with pytest.raises(UnexpectedEndOfInput):
            cursor.skip(3)
        with pytest.raises(UnexpectedEndOfInput):
            cursor.read_bytes(5)
        assert cursor.read_u2() == 0x0102

    def test_empty_input(self):
        cursor = ByteCursor(b"")
        assert cursor.remaining == 0
        with pytest.raises(UnexpectedEndOfInput):
            cursor.peek_u1()
