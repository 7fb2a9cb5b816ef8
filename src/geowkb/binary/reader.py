from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Any, Optional, Union

from .codecs.geometry_codec import GeometryBuilder
from geowkb.errors import InvalidHexError, WkbError
from geowkb.models.common import Dialect
from geowkb.models.factory import GeometryFactory
from geowkb.models.geometry import Geometry, Point
from geowkb.models.options import ReaderOptions

BytesLike = Union[str, Path, bytes, bytearray, memoryview]

logger = logging.getLogger(__name__)


# -----------------------------
# Helpers
# -----------------------------

def _load_bytes(inp: BytesLike) -> bytes:
    if isinstance(inp, (bytes, bytearray, memoryview)):
        return bytes(inp)
    p = Path(str(inp))
    return p.read_bytes()


def _hex_to_bytes(text: str | bytes) -> bytes:
    if isinstance(text, bytes):
        try:
            text = text.decode("ascii")
        except UnicodeDecodeError as e:
            raise InvalidHexError("hex input is not ASCII text", offset=e.start) from e
    text = text.strip()
    if text[:2] in ("\\x", "0x"):
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise InvalidHexError(f"invalid hex input: {e}") from e


# -----------------------------
# Decoding
# -----------------------------

def parse_geometry(
    data: BytesLike,
    *,
    options: Optional[ReaderOptions] = None,
    factory: Optional[GeometryFactory] = None,
) -> Any:
    """
    Decode one WKB/EWKB geometry. `data` is raw bytes or a path to a file
    holding them. Fails if bytes are left after the geometry.
    """
    opts = options or ReaderOptions()
    raw = _load_bytes(data)
    builder = GeometryBuilder(opts.dialect.header(), factory, max_depth=opts.max_depth)
    try:
        geom = builder.read(raw, opts.default_srid)
    except WkbError as e:
        logger.debug("%s decode of %d bytes failed: %s", opts.dialect.value, len(raw), e)
        raise
    logger.debug(
        "decoded %s from %d bytes (dialect=%s)",
        type(geom).__name__, len(raw), opts.dialect.value,
    )
    return geom


def read_wkb(data: BytesLike, *, srid: int = 0, factory: Optional[GeometryFactory] = None) -> Any:
    """Plain OGC WKB. The format carries no SRID; `srid` is applied to every node."""
    return parse_geometry(
        data, options=ReaderOptions(dialect=Dialect.WKB, default_srid=srid), factory=factory
    )


def read_ewkb(data: BytesLike, *, srid: int = 0, factory: Optional[GeometryFactory] = None) -> Any:
    """PostGIS EWKB. `srid` is used only where the bytes don't carry one."""
    return parse_geometry(
        data, options=ReaderOptions(dialect=Dialect.EWKB, default_srid=srid), factory=factory
    )


def read_hex(
    text: str | bytes,
    *,
    dialect: Dialect = Dialect.EWKB,
    srid: int = 0,
    factory: Optional[GeometryFactory] = None,
) -> Any:
    """Decode the hex form returned by e.g. PostGIS for geometry columns."""
    return parse_geometry(
        _hex_to_bytes(text),
        options=ReaderOptions(dialect=dialect, default_srid=srid),
        factory=factory,
    )


# -----------------------------
# Summary
# -----------------------------

def summarize_geometry(geom: Geometry) -> dict:
    """Node counts per kind, total coordinate tuples and the SRIDs seen."""
    kinds: Counter = Counter()
    srids = set()
    coordinates = 0
    for node in geom.iter_nodes():
        kinds[node.geometry_type] += 1
        srids.add(node.srid)
        if isinstance(node, Point) and not node.is_empty():
            coordinates += 1
    return {
        "root": geom.geometry_type,
        "dimension": geom.cs.dimension_label,
        "srids": sorted(srids),
        "nodes": dict(sorted(kinds.items())),
        "coordinates": coordinates,
        "empty": geom.is_empty(),
    }
