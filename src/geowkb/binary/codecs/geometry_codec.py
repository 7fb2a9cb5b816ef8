from __future__ import annotations
from typing import Any, Dict, List

from .bytecursor import Cursor
from .geometry_header import HeaderDecoder
from geowkb.errors import NestingTooDeepError, TrailingDataError
from geowkb.models.common import CoordinateSystem, GeometryKind
from geowkb.models.factory import GeometryFactory, ModelFactory
from geowkb.models.options import MAX_DEPTH_LIMIT

DEFAULT_MAX_DEPTH = 64

# Smallest on-wire size of one element, used to reject impossible counts
COORD_BYTES = 8
RING_MIN_BYTES = 4          # point count of an empty ring
CHILD_MIN_BYTES = 1 + 4 + 4  # byte order + type code + empty count

# Kind -> reader method. Checked below so a new GeometryKind can't slip through.
_DISPATCH: Dict[GeometryKind, str] = {
    GeometryKind.POINT:              "_read_point",
    # raw coordinate sequences
    GeometryKind.LINESTRING:         "_read_curve",
    GeometryKind.CIRCULARSTRING:     "_read_curve",
    # flat rings, no header per ring
    GeometryKind.POLYGON:            "_read_polygon",
    GeometryKind.TRIANGLE:           "_read_polygon",
    # fully headered sub-geometries
    GeometryKind.COMPOUNDCURVE:      "_read_composite",
    GeometryKind.CURVEPOLYGON:       "_read_composite",
    GeometryKind.POLYHEDRALSURFACE:  "_read_composite",
    GeometryKind.TIN:                "_read_composite",
    GeometryKind.MULTIPOINT:         "_read_composite",
    GeometryKind.MULTILINESTRING:    "_read_composite",
    GeometryKind.MULTIPOLYGON:       "_read_composite",
    GeometryKind.GEOMETRYCOLLECTION: "_read_composite",
}

_unhandled = set(GeometryKind) - set(_DISPATCH)
if _unhandled:
    raise RuntimeError(f"no reader for geometry kinds: {sorted(k.name for k in _unhandled)}")


class GeometryBuilder:
    """
    Recursive-descent WKB decoder.
      - `header` picks the dialect (StandardHeader / ExtendedHeader); the
        payload rules below are shared by both.
      - `factory` receives every finished node; whatever it returns becomes
        the child passed to the parent's factory call.
    """

    def __init__(
        self,
        header: HeaderDecoder,
        factory: GeometryFactory | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.header = header
        if not 1 <= max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be in 1..{MAX_DEPTH_LIMIT}, got {max_depth}")
        self.factory = factory if factory is not None else ModelFactory()
        self.max_depth = max_depth

    def read(self, data: bytes | bytearray | memoryview, srid: int = 0) -> Any:
        """Decode exactly one geometry spanning all of `data`."""
        cur = Cursor(data)
        geom = self.read_geometry(cur, srid)
        if not cur.at_end():
            raise TrailingDataError(cur.remaining(), cur.tell())
        return geom

    def read_geometry(self, cur: Cursor, inherited_srid: int, depth: int = 0) -> Any:
        if depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth, cur.tell())
        cur.read_byte_order()
        hdr = self.header.decode(cur, inherited_srid)
        reader = getattr(self, _DISPATCH[hdr.kind])
        return reader(cur, hdr.kind, hdr.coordinate_system(), depth)

    def _read_points(self, cur: Cursor, cs: CoordinateSystem) -> List[Any]:
        dim = cs.coordinate_dimension
        count = cur.read_count(COORD_BYTES * dim)
        flat = cur.f64s(count * dim)
        make_point = self.factory.make_point
        return [make_point(flat[i:i + dim], cs) for i in range(0, count * dim, dim)]

    def _read_point(self, cur: Cursor, kind: GeometryKind, cs: CoordinateSystem, depth: int):
        return self.factory.make_point(cur.f64s(cs.coordinate_dimension), cs)

    def _read_curve(self, cur: Cursor, kind: GeometryKind, cs: CoordinateSystem, depth: int):
        return self.factory.make_curve(kind, self._read_points(cur, cs), cs)

    def _read_polygon(self, cur: Cursor, kind: GeometryKind, cs: CoordinateSystem, depth: int):
        num_rings = cur.read_count(RING_MIN_BYTES)
        rings = []
        for _ in range(num_rings):
            points = self._read_points(cur, cs)
            rings.append(self.factory.make_curve(GeometryKind.LINESTRING, points, cs))
        return self.factory.make_polygon(kind, rings, cs)

    def _read_composite(self, cur: Cursor, kind: GeometryKind, cs: CoordinateSystem, depth: int):
        count = cur.read_count(CHILD_MIN_BYTES)
        children = [self.read_geometry(cur, cs.srid, depth + 1) for _ in range(count)]
        return self.factory.make_composite(kind, children, cs)
