"""Construction interface between the decoder and the geometry values.

The decoder hands every finished node to one of four calls. It never looks
at what they return, it just passes the result up as a child of the parent's
call, so any object tree can be produced by supplying another factory.
"""

from __future__ import annotations
import math
from typing import Any, Protocol, Sequence

from pydantic import ValidationError

from .common import CoordinateSystem, GeometryKind
from .geometry import GEOMETRY_TYPES
from ..errors import ConstructionError


class GeometryFactory(Protocol):
    def make_point(self, coordinates: Sequence[float], cs: CoordinateSystem) -> Any: ...

    def make_curve(self, kind: GeometryKind, points: Sequence[Any], cs: CoordinateSystem) -> Any: ...

    def make_polygon(self, kind: GeometryKind, rings: Sequence[Any], cs: CoordinateSystem) -> Any: ...

    def make_composite(self, kind: GeometryKind, children: Sequence[Any], cs: CoordinateSystem) -> Any: ...


# Name of the payload field holding the children of each composite kind
_COMPOSITE_FIELDS = {
    GeometryKind.COMPOUNDCURVE: "curves",
    GeometryKind.CURVEPOLYGON: "rings",
    GeometryKind.POLYHEDRALSURFACE: "patches",
    GeometryKind.TIN: "patches",
    GeometryKind.MULTIPOINT: "geometries",
    GeometryKind.MULTILINESTRING: "geometries",
    GeometryKind.MULTIPOLYGON: "geometries",
    GeometryKind.GEOMETRYCOLLECTION: "geometries",
}

_CURVE_KINDS = {GeometryKind.LINESTRING, GeometryKind.CIRCULARSTRING}
_POLYGON_KINDS = {GeometryKind.POLYGON, GeometryKind.TRIANGLE}


class ModelFactory:
    """Builds :mod:`geowkb.models.geometry` values.

    Model validation failures surface as :class:`ConstructionError`.
    """

    def make_point(self, coordinates, cs):
        # WKB has no empty-point marker; writers emit NaN for every ordinate
        if coordinates and all(math.isnan(c) for c in coordinates):
            coordinates = ()
        return self._build(GeometryKind.POINT, cs, coordinates=tuple(coordinates))

    def make_curve(self, kind, points, cs):
        self._check_kind(kind, _CURVE_KINDS)
        return self._build(kind, cs, points=tuple(points))

    def make_polygon(self, kind, rings, cs):
        self._check_kind(kind, _POLYGON_KINDS)
        return self._build(kind, cs, rings=tuple(rings))

    def make_composite(self, kind, children, cs):
        self._check_kind(kind, _COMPOSITE_FIELDS)
        return self._build(kind, cs, **{_COMPOSITE_FIELDS[kind]: tuple(children)})

    @staticmethod
    def _check_kind(kind: GeometryKind, allowed) -> None:
        if kind not in allowed:
            raise ConstructionError(f"{kind.label} cannot be built by this call")

    @staticmethod
    def _build(kind: GeometryKind, cs: CoordinateSystem, **payload):
        model = GEOMETRY_TYPES[kind]
        try:
            return model(cs=cs, **payload)
        except ValidationError as e:
            errors = e.errors(include_url=False)
            first = errors[0]["msg"] if errors else str(e)
            raise ConstructionError(
                f"cannot build {model.__name__}: {first}",
                details={"kind": kind.label, "errors": errors},
            ) from e
