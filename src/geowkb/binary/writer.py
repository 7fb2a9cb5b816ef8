from __future__ import annotations
import struct
from typing import Optional

from .codecs.geometry_header import ExtendedHeader, HeaderDecoder, StandardHeader
from ..models.common import CoordinateSystem, GeometryKind
from ..models.geometry import Geometry, Point

_NAN = float("nan")

_RAW_CURVES = (GeometryKind.LINESTRING, GeometryKind.CIRCULARSTRING)
_FLAT_POLYGONS = (GeometryKind.POLYGON, GeometryKind.TRIANGLE)


def _coords(point: Point, cs: CoordinateSystem, fmt: str) -> bytes:
    values = point.coordinates or (_NAN,) * cs.coordinate_dimension
    return struct.pack(f"{fmt}{len(values)}d", *values)


def _point_list(points, cs: CoordinateSystem, fmt: str) -> bytes:
    out = bytearray(struct.pack(f"{fmt}I", len(points)))
    for p in points:
        out += _coords(p, cs, fmt)
    return bytes(out)


def encode_geometry(
    geom: Geometry,
    header: HeaderDecoder,
    *,
    big_endian: bool = False,
    parent_srid: Optional[int] = None,
) -> bytes:
    """
    Encode one node and its subtree. Rings of Polygon/Triangle are written flat
    (count + coordinates); every other composite writes full child headers.
    """
    cs = geom.cs
    fmt = ">" if big_endian else "<"
    out = bytearray(header.encode(geom.kind, cs, parent_srid=parent_srid, big_endian=big_endian))

    if geom.kind is GeometryKind.POINT:
        out += _coords(geom, cs, fmt)
    elif geom.kind in _RAW_CURVES:
        out += _point_list(geom.points, cs, fmt)
    elif geom.kind in _FLAT_POLYGONS:
        out += struct.pack(f"{fmt}I", len(geom.rings))
        for ring in geom.rings:
            out += _point_list(ring.points, cs, fmt)
    else:
        children = geom.children()
        out += struct.pack(f"{fmt}I", len(children))
        for child in children:
            out += encode_geometry(child, header, big_endian=big_endian, parent_srid=cs.srid)
    return bytes(out)


def write_wkb(geom: Geometry, *, big_endian: bool = False) -> bytes:
    """Plain OGC WKB (2D only; the SRID is not written)."""
    return encode_geometry(geom, StandardHeader(), big_endian=big_endian)


def write_ewkb(geom: Geometry, *, big_endian: bool = False) -> bytes:
    return encode_geometry(geom, ExtendedHeader(), big_endian=big_endian)


def write_hex(geom: Geometry, *, extended: bool = True, big_endian: bool = False) -> str:
    data = write_ewkb(geom, big_endian=big_endian) if extended else write_wkb(geom, big_endian=big_endian)
    return data.hex().upper()
