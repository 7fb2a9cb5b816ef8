from __future__ import annotations
import struct
from dataclasses import dataclass
from typing import Protocol

from .bytecursor import Cursor, BIG_ENDIAN, LITTLE_ENDIAN
from geowkb.errors import EncodeError, UnsupportedGeometryTypeError
from geowkb.models.common import CoordinateSystem, GeometryKind

# EWKB flag bits in the high byte of the type code
EWKB_Z_FLAG = 0x80000000
EWKB_M_FLAG = 0x40000000
EWKB_SRID_FLAG = 0x20000000
EWKB_TYPE_MASK = 0x1FFFFFFF


@dataclass(frozen=True)
class GeometryHeader:
    kind: GeometryKind
    has_z: bool
    has_m: bool
    srid: int

    def coordinate_system(self) -> CoordinateSystem:
        return CoordinateSystem(has_z=self.has_z, has_m=self.has_m, srid=self.srid)


class HeaderDecoder(Protocol):
    def decode(self, cur: Cursor, inherited_srid: int) -> GeometryHeader: ...

    def encode(
        self,
        kind: GeometryKind,
        cs: CoordinateSystem,
        *,
        parent_srid: int | None,
        big_endian: bool,
    ) -> bytes: ...


def _kind_or_raise(code: int, raw: int, offset: int) -> GeometryKind:
    kind = GeometryKind.from_code(code)
    if kind is None:
        raise UnsupportedGeometryTypeError(raw, offset=offset)
    return kind


def _pack_u32(value: int, big_endian: bool) -> bytes:
    return struct.pack(">I" if big_endian else "<I", value)


def _order_byte(big_endian: bool) -> bytes:
    return bytes([BIG_ENDIAN if big_endian else LITTLE_ENDIAN])


class StandardHeader:
    """Plain OGC WKB: 4-byte type code, 2D only, no SRID on the wire."""

    def decode(self, cur: Cursor, inherited_srid: int) -> GeometryHeader:
        start = cur.tell()
        code = cur.u32()
        kind = _kind_or_raise(code, code, start)
        return GeometryHeader(kind, False, False, inherited_srid)

    def encode(self, kind, cs, *, parent_srid, big_endian) -> bytes:
        if cs.has_z or cs.has_m:
            raise EncodeError(
                f"{kind.label} {cs.dimension_label} cannot be written as plain WKB; use EWKB"
            )
        return _order_byte(big_endian) + _pack_u32(int(kind), big_endian)


class ExtendedHeader:
    """PostGIS EWKB: Z/M/SRID flags in the top bits, optional 4-byte SRID."""

    def decode(self, cur: Cursor, inherited_srid: int) -> GeometryHeader:
        start = cur.tell()
        raw = cur.u32()
        kind = _kind_or_raise(raw & EWKB_TYPE_MASK, raw, start)
        srid = cur.u32() if raw & EWKB_SRID_FLAG else inherited_srid
        return GeometryHeader(
            kind,
            bool(raw & EWKB_Z_FLAG),
            bool(raw & EWKB_M_FLAG),
            srid,
        )

    def encode(self, kind, cs, *, parent_srid, big_endian) -> bytes:
        # SRID goes on the root (when set) and on any child that overrides it
        if parent_srid is None:
            with_srid = cs.srid != 0
        else:
            with_srid = cs.srid != parent_srid

        code = int(kind)
        if cs.has_z: code |= EWKB_Z_FLAG
        if cs.has_m: code |= EWKB_M_FLAG
        if with_srid: code |= EWKB_SRID_FLAG

        out = _order_byte(big_endian) + _pack_u32(code, big_endian)
        if with_srid:
            out += _pack_u32(cs.srid, big_endian)
        return out
