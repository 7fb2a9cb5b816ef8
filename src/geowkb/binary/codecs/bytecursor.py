from __future__ import annotations
import struct

from geowkb.errors import InvalidByteOrderError, TruncatedInputError

BIG_ENDIAN = 0
LITTLE_ENDIAN = 1

_PREFIX = {BIG_ENDIAN: ">", LITTLE_ENDIAN: "<"}


class Cursor:
    """Read position over an immutable byte buffer.

    The byte order is switched by :meth:`read_byte_order`, which WKB repeats
    in front of every geometry node. All reads check the length first, so a
    failed read never moves ``pos``.
    """

    __slots__ = ("buf", "pos", "order")

    def __init__(self, data: bytes | bytearray | memoryview):
        self.buf = memoryview(bytes(data))
        self.pos = 0
        self.order = LITTLE_ENDIAN

    def remaining(self) -> int: return len(self.buf) - self.pos
    def tell(self) -> int: return self.pos
    def at_end(self) -> bool: return self.pos == len(self.buf)

    def seek(self, pos: int) -> None:
        if not (0 <= pos <= len(self.buf)): raise ValueError("seek out of bounds")
        self.pos = pos

    def skip(self, n: int) -> None: self.seek(self.pos + n)

    def _require(self, n: int) -> None:
        if n > self.remaining():
            raise TruncatedInputError(n, self.remaining(), self.pos)

    def take(self, n: int) -> bytes:
        self._require(n)
        end = self.pos + n
        out = self.buf[self.pos:end].tobytes()
        self.pos = end
        return out

    def peek(self, n: int) -> bytes:
        self._require(n)
        return self.buf[self.pos:self.pos + n].tobytes()

    def read_byte_order(self) -> int:
        self._require(1)
        marker = self.buf[self.pos]
        if marker not in _PREFIX:
            raise InvalidByteOrderError(marker, self.pos)
        self.pos += 1
        self.order = marker
        return marker

    # order-aware reads
    def _unpack(self, fmt: str, n: int):
        return struct.unpack(_PREFIX[self.order] + fmt, self.take(n))
    def u32(self) -> int: return self._unpack("I", 4)[0]
    def u64(self) -> int: return self._unpack("Q", 8)[0]
    def f64(self) -> float: return self._unpack("d", 8)[0]

    def f64s(self, n: int) -> tuple[float, ...]:
        return self._unpack(f"{n}d", 8 * n)

    def read_count(self, min_item_size: int) -> int:
        """Read a u32 element count that must fit in the bytes left.

        Every item takes at least ``min_item_size`` bytes, so a count that
        cannot fit fails here instead of after a long partial loop.
        """
        start = self.pos
        count = self.u32()
        needed = count * min_item_size
        if needed > self.remaining():
            left = self.remaining()
            self.pos = start
            raise TruncatedInputError(needed, left, start)
        return count
