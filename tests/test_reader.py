import math
import struct

import pytest
from pydantic import ValidationError

from geowkb.binary.codecs.bytecursor import Cursor
from geowkb.binary.codecs.geometry_codec import GeometryBuilder
from geowkb.binary.codecs.geometry_header import ExtendedHeader, StandardHeader
from geowkb.binary.reader import (
    parse_geometry, read_ewkb, read_hex, read_wkb, summarize_geometry,
)
from geowkb.binary.writer import write_ewkb
from geowkb.errors import (
    ConstructionError, InvalidByteOrderError, InvalidHexError, NestingTooDeepError, TrailingDataError,
    TruncatedInputError, UnexpectedGeometryTypeError, UnsupportedGeometryTypeError,
    WkbDecodeError,
)
from geowkb.models.common import CoordinateSystem, Dialect, GeometryKind
from geowkb.models.geometry import (
    CircularString, CurvePolygon, GeometryCollection, LineString, MultiPoint, Point, Polygon,
)
from geowkb.models.options import MAX_DEPTH_LIMIT, ReaderOptions

from samples import DIMENSIONS, SAMPLES


def le(code, *counts):
    return b"\x01" + struct.pack(f"<{1 + len(counts)}I", code, *counts)


def be(code, *counts):
    return b"\x00" + struct.pack(f">{1 + len(counts)}I", code, *counts)


def le_doubles(*values):
    return struct.pack(f"<{len(values)}d", *values)


# SRID=4326;POINT(1 2) as returned by PostGIS
POINT_4326_HEX = "0101000020E6100000000000000000F03F0000000000000040"
POINT_4326 = le(0x20000001, 4326) + le_doubles(1.0, 2.0)


def test_ewkb_point_with_srid():
    geom = read_ewkb(POINT_4326)
    assert isinstance(geom, Point)
    assert geom.coordinates == (1.0, 2.0)
    assert geom.cs == CoordinateSystem(has_z=False, has_m=False, srid=4326)


def test_postgis_hex_matches_bytes():
    assert bytes.fromhex(POINT_4326_HEX) == POINT_4326
    assert read_hex(POINT_4326_HEX) == read_ewkb(POINT_4326)
    assert read_hex("\\x" + POINT_4326_HEX.lower()).srid == 4326


@pytest.mark.parametrize("text", ["0101000", "01zz", "\x01\xff", b"\xc3\xa9"])
def test_bad_hex_is_a_decode_error(text):
    with pytest.raises(InvalidHexError) as exc:
        read_hex(text)
    assert isinstance(exc.value, WkbDecodeError)


def test_empty_multipoint_standard():
    geom = read_wkb(be(4, 0))
    assert isinstance(geom, MultiPoint)
    assert geom.geometries == ()
    assert geom.is_empty()


def test_polygon_rings_have_no_header():
    data = le(3, 1, 4) + le_doubles(0, 0, 1, 0, 1, 1, 0, 0)
    assert len(data) == 1 + 4 + 4 + 4 + 4 * 16
    geom = read_wkb(data)
    assert isinstance(geom, Polygon)
    assert len(geom.rings) == 1
    ring = geom.rings[0]
    assert isinstance(ring, LineString)
    assert [p.coordinates for p in ring.points] == [(0, 0), (1, 0), (1, 1), (0, 0)]


def test_curvepolygon_ring_is_headered_circularstring():
    ring = le(8, 3) + le_doubles(0, 0, 1, 1, 2, 0)
    geom = read_wkb(le(10, 1) + ring)
    assert isinstance(geom, CurvePolygon)
    assert len(geom.rings) == 1
    assert isinstance(geom.rings[0], CircularString)
    assert len(geom.rings[0].points) == 3


@pytest.mark.parametrize("header", [StandardHeader(), ExtendedHeader()])
def test_unknown_type_fails_before_payload(header):
    cur = Cursor(le(999) + le_doubles(1, 2))
    with pytest.raises(UnsupportedGeometryTypeError) as exc:
        GeometryBuilder(header).read_geometry(cur, 0)
    assert exc.value.type_code == 999
    assert cur.tell() == 5


def test_trailing_byte_is_rejected():
    with pytest.raises(TrailingDataError) as exc:
        read_ewkb(POINT_4326 + b"\x00")
    assert exc.value.trailing == 1
    assert exc.value.offset == len(POINT_4326)


def test_mixed_srid_collection_prefixes_are_truncated():
    point = le(1) + le_doubles(5, 6)
    line = be(0x20000002, 3857, 2) + struct.pack(">4d", 0, 0, 1, 1)
    data = le(0x20000007, 4326, 2) + point + line
    assert read_ewkb(data).geometries[1].srid == 3857
    for n in range(1, len(data)):
        with pytest.raises(TruncatedInputError):
            read_ewkb(data[:n])


@pytest.mark.parametrize("big_endian", [False, True], ids=["le", "be"])
@pytest.mark.parametrize("dims", sorted(DIMENSIONS))
@pytest.mark.parametrize("kind", sorted(SAMPLES), ids=lambda k: k.label)
def test_every_prefix_of_each_kind_is_truncated(kind, dims, big_endian):
    data = write_ewkb(SAMPLES[kind](DIMENSIONS[dims].with_srid(4326)), big_endian=big_endian)
    for n in range(len(data)):
        with pytest.raises(TruncatedInputError):
            read_ewkb(data[:n])
    with pytest.raises(TrailingDataError):
        read_ewkb(data + b"\x00")


def test_empty_input_is_truncated():
    with pytest.raises(TruncatedInputError):
        read_wkb(b"")


def test_invalid_byte_order_in_child():
    data = le(4, 1) + b"\x07" + struct.pack("<I", 1) + le_doubles(1, 2)
    with pytest.raises(InvalidByteOrderError) as exc:
        read_wkb(data)
    assert exc.value.offset == 9


def test_absurd_count_fails_without_iterating():
    with pytest.raises(TruncatedInputError) as exc:
        read_wkb(le(2, 0xFFFFFFFF))
    assert exc.value.needed == 0xFFFFFFFF * 16


def test_absurd_child_count_fails():
    with pytest.raises(TruncatedInputError):
        read_wkb(le(7, 1_000_000) + le(7, 0))


def _nested_collections(levels):
    return le(7, 1) * (levels - 1) + le(7, 0)


def test_nesting_limit():
    data = _nested_collections(11)
    geom = parse_geometry(data, options=ReaderOptions(max_depth=11))
    assert sum(1 for _ in geom.iter_nodes()) == 11
    with pytest.raises(NestingTooDeepError) as exc:
        parse_geometry(data, options=ReaderOptions(max_depth=10))
    assert exc.value.max_depth == 10


def test_max_depth_is_capped():
    with pytest.raises(ValidationError):
        ReaderOptions(max_depth=MAX_DEPTH_LIMIT + 1)
    with pytest.raises(ValueError):
        GeometryBuilder(ExtendedHeader(), max_depth=100_000)


def test_deepest_allowed_nesting_fails_cleanly():
    data = _nested_collections(MAX_DEPTH_LIMIT + 1)
    with pytest.raises(NestingTooDeepError):
        parse_geometry(data, options=ReaderOptions(max_depth=MAX_DEPTH_LIMIT))
    geom = parse_geometry(data[9:], options=ReaderOptions(max_depth=MAX_DEPTH_LIMIT))
    assert sum(1 for _ in geom.iter_nodes()) == MAX_DEPTH_LIMIT


def test_mixed_endianness_children():
    data = (
        be(4, 2)
        + le(1) + le_doubles(1, 2)
        + be(1) + struct.pack(">2d", 3, 4)
    )
    geom = read_wkb(data)
    assert [p.coordinates for p in geom.geometries] == [(1, 2), (3, 4)]


def test_child_srid_override_is_preserved():
    data = (
        le(0x20000007, 4326, 2)
        + le(0x20000001, 3857) + le_doubles(1, 2)
        + le(1) + le_doubles(3, 4)
    )
    geom = read_ewkb(data)
    assert geom.srid == 4326
    assert [g.srid for g in geom.geometries] == [3857, 4326]


def test_wkb_default_srid_applies_to_every_node():
    data = le(5, 1) + le(2, 2) + le_doubles(0, 0, 1, 1)
    geom = read_wkb(data, srid=4326)
    assert {node.srid for node in geom.iter_nodes()} == {4326}


def test_ewkb_default_srid_only_where_absent():
    assert read_ewkb(POINT_4326, srid=3857).srid == 4326
    assert read_ewkb(le(1) + le_doubles(1, 2), srid=3857).srid == 3857


def test_zm_linestring():
    data = le(0xC0000002, 2) + le_doubles(1, 2, 3, 4, 5, 6, 7, 8)
    geom = read_ewkb(data)
    assert geom.cs.coordinate_dimension == 4
    first, second = geom.points
    assert (first.x, first.y, first.z, first.m) == (1, 2, 3, 4)
    assert second.m == 8
    assert second.cs.has_z and second.cs.has_m


def test_measured_point_has_no_z():
    geom = read_ewkb(le(0x40000001) + le_doubles(1, 2, 9))
    assert geom.z is None
    assert geom.m == 9


def test_nan_point_decodes_as_empty():
    geom = read_wkb(le(1) + le_doubles(math.nan, math.nan))
    assert isinstance(geom, Point)
    assert geom.is_empty()
    assert geom.x is None


def test_decoding_is_deterministic():
    data = le(7, 2) + POINT_4326 + le(3, 1, 4) + le_doubles(0, 0, 1, 0, 1, 1, 0, 0)
    assert read_ewkb(data) == read_ewkb(data)


def test_factory_rejection_is_not_a_decode_error():
    data = le(4, 1) + le(2, 0)
    with pytest.raises(ConstructionError) as exc:
        read_wkb(data)
    assert not isinstance(exc.value, WkbDecodeError)
    assert "MultiPoint" in str(exc.value)


def test_triangle_ring_size_is_checked_by_factory():
    data = le(17, 1, 3) + le_doubles(0, 0, 1, 0, 0, 0)
    with pytest.raises(ConstructionError):
        read_wkb(data)


def test_custom_factory_receives_every_node():
    class TupleFactory:
        def make_point(self, coordinates, cs):
            return ("point", tuple(coordinates))

        def make_curve(self, kind, points, cs):
            return (kind.label, points)

        def make_polygon(self, kind, rings, cs):
            return (kind.label, rings)

        def make_composite(self, kind, children, cs):
            return (kind.label, children, cs.srid)

    data = le(0x20000007, 4326, 2) + le(1) + le_doubles(1, 2) + le(3, 1, 0)
    geom = read_ewkb(data, factory=TupleFactory())
    assert geom == (
        "GeometryCollection",
        [("point", (1.0, 2.0)), ("Polygon", [("LineString", [])])],
        4326,
    )


def test_typed_entry_points():
    assert Point.from_ewkb(POINT_4326).srid == 4326
    assert Point.from_hex(POINT_4326_HEX).coordinates == (1.0, 2.0)
    with pytest.raises(UnexpectedGeometryTypeError):
        LineString.from_ewkb(POINT_4326)


def test_parse_from_path(tmp_path):
    path = tmp_path / "point.wkb"
    path.write_bytes(POINT_4326)
    geom = parse_geometry(path, options=ReaderOptions(dialect=Dialect.EWKB))
    assert geom.srid == 4326
    assert read_ewkb(str(path)) == geom


def test_summarize_geometry():
    data = le(7, 3) + le(1) + le_doubles(1, 2) + le(3, 1, 4) + le_doubles(0, 0, 1, 0, 1, 1, 0, 0) + le(4, 0)
    summary = summarize_geometry(read_wkb(data, srid=4326))
    assert summary["root"] == "GeometryCollection"
    assert summary["dimension"] == "XY"
    assert summary["srids"] == [4326]
    assert summary["coordinates"] == 5
    assert summary["nodes"]["Point"] == 5
    assert summary["nodes"]["Polygon"] == 1
    assert summary["nodes"]["MultiPoint"] == 1
    assert summary["empty"] is False


def test_kind_labels_cover_table():
    assert {k.value for k in GeometryKind} == {1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 15, 16, 17}
    assert isinstance(read_wkb(le(7, 0)), GeometryCollection)
