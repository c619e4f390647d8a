"""
Positional big-endian reader over an immutable byte sequence.
"""

import struct

from .errors import UnexpectedEndOfInput


class ByteCursor:
    """Reads primitive values from a byte sequence, never past its end."""

    def __init__(self, data: bytes, pos: int = 0):
        self.data = bytes(data)
        self.pos = pos

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def _require(self, count: int):
        if count > self.remaining:
            raise UnexpectedEndOfInput(
                f"Need {count} byte(s) at offset {self.pos}, {self.remaining} left")

    def _unpack(self, fmt: str, size: int):
        self._require(size)
        val = struct.unpack_from(fmt, self.data, self.pos)[0]
        self.pos += size
        return val

    def peek_u1(self) -> int:
        self._require(1)
        return self.data[self.pos]

    def read_u1(self) -> int:
        val = self.peek_u1()
        self.pos += 1
        return val

    def read_u2(self) -> int:
        return self._unpack(">H", 2)

    def read_u4(self) -> int:
        return self._unpack(">I", 4)

    def read_s1(self) -> int:
        return self._unpack(">b", 1)

    def read_s2(self) -> int:
        return self._unpack(">h", 2)

    def read_s4(self) -> int:
        return self._unpack(">i", 4)

    def read_s8(self) -> int:
        return self._unpack(">q", 8)

    def read_f4(self) -> float:
        return self._unpack(">f", 4)

    def read_f8(self) -> float:
        return self._unpack(">d", 8)

    def read_bytes(self, length: int) -> bytes:
        self._require(length)
        val = self.data[self.pos:self.pos + length]
        self.pos += length
        return val

    def skip(self, length: int):
        self._require(length)
        self.pos += length
