from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path

from .binary.reader import parse_geometry, summarize_geometry, _hex_to_bytes
from .errors import WkbError
from .models.common import Dialect
from .models.options import ReaderOptions

logger = logging.getLogger("geowkb")


def _load(args):
    data = Path(args.input).read_bytes()
    if args.hex:
        data = _hex_to_bytes(data)
    opts = ReaderOptions(dialect=Dialect(args.dialect), default_srid=args.srid)
    return parse_geometry(data, options=opts)


def cmd_info(args):
    geom = _load(args)
    print(json.dumps(geom.model_dump(mode="json"), indent=2))


def cmd_summary(args):
    geom = _load(args)
    print(json.dumps(summarize_geometry(geom), indent=2))


def cmd_to_json(args):
    geom = _load(args)
    with open(args.output, "w", encoding="utf-8") as out:
        json.dump(geom.model_dump(mode="json"), out, indent=2)


def cmd_convert(args):
    geom = _load(args)
    if args.to == "ewkb":
        data = geom.to_ewkb(big_endian=args.big_endian)
    else:
        data = geom.to_wkb(big_endian=args.big_endian)
    if args.hex_out:
        Path(args.output).write_text(data.hex().upper() + "\n", encoding="ascii")
    else:
        Path(args.output).write_bytes(data)


def cmd_plot(args):
    from .viz import plot_geometry
    fig = plot_geometry(_load(args), show=args.output is None)
    if args.output is not None:
        fig.savefig(args.output)


def _srid(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid SRID {text!r}") from None
    if not 0 <= value <= 0xFFFFFFFF:
        raise argparse.ArgumentTypeError(f"SRID must be in 0..{0xFFFFFFFF}, got {value}")
    return value


def _add_input(sp):
    sp.add_argument("input", help="Path to a WKB/EWKB file")
    sp.add_argument("--hex", action="store_true", help="Input file holds hex text instead of raw bytes")
    sp.add_argument("--dialect", default="ewkb", choices=[d.value for d in Dialect])
    sp.add_argument("--srid", type=_srid, default=0, help="SRID to use where the input carries none")


def build_parser():
    p = argparse.ArgumentParser(prog="geowkb", description="WKB / EWKB geometry utilities")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("info", help="print decoded geometry as JSON")
    _add_input(sp)
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("summary", help="print node counts, SRIDs and dimension")
    _add_input(sp)
    sp.set_defaults(func=cmd_summary)

    sp = sub.add_parser("to-json", help="convert to JSON")
    _add_input(sp)
    sp.add_argument("output")
    sp.set_defaults(func=cmd_to_json)

    sp = sub.add_parser("convert", help="re-encode as WKB or EWKB")
    _add_input(sp)
    sp.add_argument("output")
    sp.add_argument("--to", default="ewkb", choices=[d.value for d in Dialect])
    sp.add_argument("--big-endian", action="store_true")
    sp.add_argument("--hex-out", action="store_true", help="Write hex text instead of raw bytes")
    sp.set_defaults(func=cmd_convert)

    sp = sub.add_parser("plot", help="minimal verification plot")
    _add_input(sp)
    sp.add_argument("-o", "--output", help="Save the figure to this file instead of showing it")
    sp.set_defaults(func=cmd_plot)

    return p


def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ns.func(ns)
    except (WkbError, OSError) as e:
        logger.debug("command %s failed", ns.cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
