#!/usr/bin/env python3
"""Print every node header of a WKB/EWKB blob with its byte offset."""
import sys
from pathlib import Path
from geowkb.binary.reader import _load_bytes, _hex_to_bytes
from geowkb.binary.codecs.bytecursor import Cursor
from geowkb.binary.codecs.geometry_header import (
    EWKB_M_FLAG, EWKB_SRID_FLAG, EWKB_Z_FLAG, ExtendedHeader,
)
from geowkb.binary.codecs.geometry_codec import COORD_BYTES
from geowkb.models.common import GeometryKind

FLAT_RINGS = (GeometryKind.POLYGON, GeometryKind.TRIANGLE)
RAW_POINTS = (GeometryKind.LINESTRING, GeometryKind.CIRCULARSTRING)


def trace(cur: Cursor, srid: int, depth: int = 0):
    start = cur.tell()
    order = cur.read_byte_order()
    raw = cur.peek(4)
    hdr = ExtendedHeader().decode(cur, srid)
    code = int.from_bytes(raw, "big" if order == 0 else "little")
    flags = "".join(
        f for f, bit in (("Z", EWKB_Z_FLAG), ("M", EWKB_M_FLAG), ("S", EWKB_SRID_FLAG)) if code & bit
    )
    print(f"{'  ' * depth}@{start:<6d} {'BE' if order == 0 else 'LE'} "
          f"code=0x{code:08x} {hdr.kind.label:<18s} flags={flags or '-':<3s} srid={hdr.srid}")

    dim = hdr.coordinate_system().coordinate_dimension
    if hdr.kind is GeometryKind.POINT:
        cur.skip(COORD_BYTES * dim)
    elif hdr.kind in RAW_POINTS:
        n = cur.u32()
        print(f"{'  ' * depth}  {n} points")
        cur.skip(n * COORD_BYTES * dim)
    elif hdr.kind in FLAT_RINGS:
        for i in range(cur.u32()):
            n = cur.u32()
            print(f"{'  ' * depth}  ring[{i}] {n} points")
            cur.skip(n * COORD_BYTES * dim)
    else:
        for _ in range(cur.u32()):
            trace(cur, hdr.srid, depth + 1)


def main(path: Path, as_hex: bool = False):
    data = _load_bytes(str(path))
    if as_hex:
        data = _hex_to_bytes(data)
    cur = Cursor(data)
    trace(cur, 0)
    if not cur.at_end():
        print(f"{cur.remaining()} trailing bytes at @{cur.tell()}: {cur.peek(min(16, cur.remaining())).hex()}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: trace_headers.py FILE [--hex]", file=sys.stderr)
        raise SystemExit(2)
    main(Path(sys.argv[1]), as_hex="--hex" in sys.argv[2:])
