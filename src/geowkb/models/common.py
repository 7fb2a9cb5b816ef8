from __future__ import annotations
from enum import Enum, IntEnum
from pydantic import BaseModel, ConfigDict, Field


class GeometryKind(IntEnum):
    """OGC geometry type codes. 11..14 are abstract and never on the wire."""
    POINT = 1
    LINESTRING = 2
    POLYGON = 3
    MULTIPOINT = 4
    MULTILINESTRING = 5
    MULTIPOLYGON = 6
    GEOMETRYCOLLECTION = 7
    CIRCULARSTRING = 8
    COMPOUNDCURVE = 9
    CURVEPOLYGON = 10
    POLYHEDRALSURFACE = 15
    TIN = 16
    TRIANGLE = 17

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_code(cls, code: int) -> "GeometryKind | None":
        try:
            return cls(code)
        except ValueError:
            return None


_LABELS = {
    GeometryKind.POINT: "Point",
    GeometryKind.LINESTRING: "LineString",
    GeometryKind.POLYGON: "Polygon",
    GeometryKind.MULTIPOINT: "MultiPoint",
    GeometryKind.MULTILINESTRING: "MultiLineString",
    GeometryKind.MULTIPOLYGON: "MultiPolygon",
    GeometryKind.GEOMETRYCOLLECTION: "GeometryCollection",
    GeometryKind.CIRCULARSTRING: "CircularString",
    GeometryKind.COMPOUNDCURVE: "CompoundCurve",
    GeometryKind.CURVEPOLYGON: "CurvePolygon",
    GeometryKind.POLYHEDRALSURFACE: "PolyhedralSurface",
    GeometryKind.TIN: "TIN",
    GeometryKind.TRIANGLE: "Triangle",
}


class Dialect(str, Enum):
    WKB = "wkb"
    EWKB = "ewkb"

    def header(self):
        from ..binary.codecs.geometry_header import ExtendedHeader, StandardHeader
        return ExtendedHeader() if self is Dialect.EWKB else StandardHeader()


class CoordinateSystem(BaseModel):
    """Z/M presence plus SRID, shared by a node and (by default) its children."""
    model_config = ConfigDict(frozen=True)

    has_z: bool = False
    has_m: bool = False
    srid: int = Field(0, ge=0, le=0xFFFFFFFF)

    @property
    def coordinate_dimension(self) -> int:
        return 2 + int(self.has_z) + int(self.has_m)

    @property
    def dimension_label(self) -> str:
        """'XY', 'XYZ', 'XYM' or 'XYZM'."""
        return "XY" + ("Z" if self.has_z else "") + ("M" if self.has_m else "")

    def same_dimensions(self, other: "CoordinateSystem") -> bool:
        return self.has_z == other.has_z and self.has_m == other.has_m

    def with_srid(self, srid: int) -> "CoordinateSystem":
        return CoordinateSystem(has_z=self.has_z, has_m=self.has_m, srid=srid)
