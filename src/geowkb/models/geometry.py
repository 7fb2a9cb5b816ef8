from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, computed_field, model_validator
from typing import ClassVar, Iterator, Tuple, Union
from .common import CoordinateSystem, GeometryKind
from ..errors import UnexpectedGeometryTypeError


class Geometry(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ClassVar[GeometryKind]
    cs: CoordinateSystem = Field(default_factory=CoordinateSystem)

    @computed_field
    @property
    def geometry_type(self) -> str:
        return self.kind.label

    @property
    def srid(self) -> int:
        return self.cs.srid

    @property
    def is_3d(self) -> bool:
        return self.cs.has_z

    @property
    def is_measured(self) -> bool:
        return self.cs.has_m

    def children(self) -> Tuple["Geometry", ...]:
        """Direct sub-nodes in encoding order (points, rings, parts)."""
        return ()

    def is_empty(self) -> bool:
        return not self.children()

    def iter_nodes(self) -> Iterator["Geometry"]:
        """Pre-order walk over this node and every descendant."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children()))

    def _check_children(self) -> None:
        for child in self.children():
            if not child.cs.same_dimensions(self.cs):
                raise ValueError(
                    f"{child.kind.label} is {child.cs.dimension_label} inside "
                    f"{self.cs.dimension_label} {self.kind.label}"
                )

    # Convenience constructors (implemented in the binary layer)
    @classmethod
    def _expect(cls, geom: "Geometry") -> "Geometry":
        if not isinstance(geom, cls):
            raise UnexpectedGeometryTypeError(
                f"expected {cls.__name__}, decoded {type(geom).__name__}",
                details={"expected": cls.__name__, "decoded": type(geom).__name__},
            )
        return geom

    @classmethod
    def from_wkb(cls, data: bytes | str, *, srid: int = 0) -> "Geometry":
        from ..binary.reader import read_wkb
        return cls._expect(read_wkb(data, srid=srid))

    @classmethod
    def from_ewkb(cls, data: bytes | str, *, srid: int = 0) -> "Geometry":
        from ..binary.reader import read_ewkb
        return cls._expect(read_ewkb(data, srid=srid))

    @classmethod
    def from_hex(cls, text: str, *, extended: bool = True, srid: int = 0) -> "Geometry":
        from ..binary.reader import read_hex
        from .common import Dialect
        dialect = Dialect.EWKB if extended else Dialect.WKB
        return cls._expect(read_hex(text, dialect=dialect, srid=srid))

    def to_wkb(self, *, big_endian: bool = False) -> bytes:
        from ..binary.writer import write_wkb
        return write_wkb(self, big_endian=big_endian)

    def to_ewkb(self, *, big_endian: bool = False) -> bytes:
        from ..binary.writer import write_ewkb
        return write_ewkb(self, big_endian=big_endian)

    def to_hex(self, *, extended: bool = True, big_endian: bool = False) -> str:
        from ..binary.writer import write_hex
        return write_hex(self, extended=extended, big_endian=big_endian)


class Point(Geometry):
    kind: ClassVar[GeometryKind] = GeometryKind.POINT
    coordinates: Tuple[float, ...] = ()

    @model_validator(mode="after")
    def check_dimension(self):
        if self.coordinates and len(self.coordinates) != self.cs.coordinate_dimension:
            raise ValueError(
                f"{self.cs.dimension_label} point needs {self.cs.coordinate_dimension} "
                f"coordinates, got {len(self.coordinates)}"
            )
        return self

    def is_empty(self) -> bool:
        return not self.coordinates

    @property
    def x(self) -> float | None:
        return self.coordinates[0] if self.coordinates else None

    @property
    def y(self) -> float | None:
        return self.coordinates[1] if self.coordinates else None

    @property
    def z(self) -> float | None:
        return self.coordinates[2] if self.coordinates and self.cs.has_z else None

    @property
    def m(self) -> float | None:
        if not self.coordinates or not self.cs.has_m:
            return None
        return self.coordinates[3 if self.cs.has_z else 2]


class Curve(Geometry):
    """Abstract 1-dimensional geometry."""


class LineString(Curve):
    kind: ClassVar[GeometryKind] = GeometryKind.LINESTRING
    points: Tuple[Point, ...] = ()

    def children(self):
        return self.points

    @model_validator(mode="after")
    def check_points(self):
        self._check_children()
        return self


class CircularString(Curve):
    kind: ClassVar[GeometryKind] = GeometryKind.CIRCULARSTRING
    points: Tuple[Point, ...] = ()

    def children(self):
        return self.points

    @model_validator(mode="after")
    def check_points(self):
        self._check_children()
        n = len(self.points)
        if n and (n < 3 or n % 2 == 0):
            raise ValueError(f"a circular string needs an odd number of points >= 3, got {n}")
        return self


class CompoundCurve(Curve):
    kind: ClassVar[GeometryKind] = GeometryKind.COMPOUNDCURVE
    curves: Tuple[Union[LineString, CircularString], ...] = ()

    def children(self):
        return self.curves

    @model_validator(mode="after")
    def check_curves(self):
        self._check_children()
        return self


class Surface(Geometry):
    """Abstract 2-dimensional geometry."""


class Polygon(Surface):
    kind: ClassVar[GeometryKind] = GeometryKind.POLYGON
    rings: Tuple[LineString, ...] = ()

    def children(self):
        return self.rings

    @property
    def exterior_ring(self) -> LineString | None:
        return self.rings[0] if self.rings else None

    @property
    def interior_rings(self) -> Tuple[LineString, ...]:
        return self.rings[1:]

    @model_validator(mode="after")
    def check_rings(self):
        self._check_children()
        return self


class Triangle(Polygon):
    kind: ClassVar[GeometryKind] = GeometryKind.TRIANGLE

    @model_validator(mode="after")
    def check_triangle(self):
        if not self.rings:
            return self
        if len(self.rings) != 1:
            raise ValueError(f"a triangle has exactly one ring, got {len(self.rings)}")
        if len(self.rings[0].points) != 4:
            raise ValueError(
                f"a triangle ring needs exactly 4 points (3 + closing), got {len(self.rings[0].points)}"
            )
        return self


class CurvePolygon(Surface):
    kind: ClassVar[GeometryKind] = GeometryKind.CURVEPOLYGON
    rings: Tuple[Union[LineString, CircularString, CompoundCurve], ...] = ()

    def children(self):
        return self.rings

    @model_validator(mode="after")
    def check_rings(self):
        self._check_children()
        return self


class PolyhedralSurface(Surface):
    kind: ClassVar[GeometryKind] = GeometryKind.POLYHEDRALSURFACE
    patches: Tuple[Polygon, ...] = ()

    def children(self):
        return self.patches

    @model_validator(mode="after")
    def check_patches(self):
        self._check_children()
        return self


class TIN(PolyhedralSurface):
    kind: ClassVar[GeometryKind] = GeometryKind.TIN
    patches: Tuple[Triangle, ...] = ()


class GeometryCollection(Geometry):
    kind: ClassVar[GeometryKind] = GeometryKind.GEOMETRYCOLLECTION
    # children dump with their own fields, not just the base ones
    geometries: Tuple[SerializeAsAny[Geometry], ...] = ()

    def children(self):
        return self.geometries

    @model_validator(mode="after")
    def check_geometries(self):
        self._check_children()
        return self


class MultiPoint(GeometryCollection):
    kind: ClassVar[GeometryKind] = GeometryKind.MULTIPOINT
    geometries: Tuple[Point, ...] = ()


class MultiLineString(GeometryCollection):
    kind: ClassVar[GeometryKind] = GeometryKind.MULTILINESTRING
    geometries: Tuple[LineString, ...] = ()


class MultiPolygon(GeometryCollection):
    kind: ClassVar[GeometryKind] = GeometryKind.MULTIPOLYGON
    geometries: Tuple[Polygon, ...] = ()


GEOMETRY_TYPES = {
    cls.kind: cls
    for cls in (
        Point, LineString, CircularString, CompoundCurve, Polygon, Triangle,
        CurvePolygon, PolyhedralSurface, TIN, GeometryCollection,
        MultiPoint, MultiLineString, MultiPolygon,
    )
}
