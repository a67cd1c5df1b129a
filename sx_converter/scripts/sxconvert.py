"""
Command line converter between UFS and CSV spectra files.

Examples
--------
Convert, keeping the 400-700 nm window and the first 100 ps:

    sxconvert scan.ufs scan.csv --wavelength 400 700 --time -1 100

Show axes and metadata without writing anything:

    sxconvert scan.ufs --info
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from sx_converter.config import DEFAULT_CONFIG, FORMATS, ConverterConfig, load_config
from sx_converter.convert import convert, load
from sx_converter.models.spectra import SpectraData

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)


def _axis_line(label: str, count: int, lo: Optional[float], hi: Optional[float]) -> str:
    if count == 0:
        return f"{label}: 0 points"
    return f"{label}: {count} points, {lo:.6g} .. {hi:.6g}"


def describe(data: SpectraData) -> str:
    """Multi-line summary of axes and metadata."""
    lines = [
        _axis_line(str(data.time_axis), data.time_count,
                   data.time_min if data.time_count else None,
                   data.time_max if data.time_count else None),
        _axis_line(str(data.wavelength_axis), data.wavelength_count,
                   data.wavelength_min if data.wavelength_count else None,
                   data.wavelength_max if data.wavelength_count else None),
        "Metadata:",
    ]
    lines.extend(data.metadata.splitlines())
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="sxconvert",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Convert fs-TAS spectra between UFS (binary) and CSV grid files.

            Formats are taken from the file extensions (.ufs / .csv) unless
            --from/--to are given. Trim windows are half-open: MIN is kept,
            MAX is not.
            """
        ),
    )
    p.add_argument("source", help="Input file (.ufs or .csv)")
    p.add_argument("destination", nargs="?", default=None, help="Output file (.ufs or .csv)")
    p.add_argument("--from", dest="source_format", choices=FORMATS, default=None, help="Input format override")
    p.add_argument("--to", dest="destination_format", choices=FORMATS, default=None, help="Output format override")
    p.add_argument("--time", nargs=2, type=float, metavar=("MIN", "MAX"), default=None, help="Keep times in [MIN, MAX)")
    p.add_argument(
        "--wavelength", nargs=2, type=float, metavar=("MIN", "MAX"), default=None,
        help="Keep wavelengths in [MIN, MAX)",
    )
    p.add_argument("--metadata-file", default=None, help="Replace the metadata with the contents of this text file")
    p.add_argument("--config", default=None, help="JSON file with ConverterConfig fields")
    p.add_argument("--info", action="store_true", help="Print axes and metadata of the source and exit")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-v info, -vv debug)")

    ns = p.parse_args(list(argv) if argv is not None else None)
    _configure_logging(ns.verbose)

    if not ns.info and ns.destination is None:
        p.error("destination is required unless --info is given")

    try:
        cfg: ConverterConfig = load_config(ns.config) if ns.config else DEFAULT_CONFIG

        if ns.info:
            print(describe(load(ns.source, ns.source_format, config=cfg)))
            return 0

        metadata = None
        if ns.metadata_file:
            metadata = Path(ns.metadata_file).expanduser().read_text(encoding="utf-8")

        data = convert(
            ns.source,
            ns.destination,
            time_range=tuple(ns.time) if ns.time is not None else None,
            wavelength_range=tuple(ns.wavelength) if ns.wavelength is not None else None,
            metadata=metadata,
            source_format=ns.source_format,
            destination_format=ns.destination_format,
            config=cfg,
        )
    # FormatError and RangeError are ValueErrors; so are bad config and undecodable text.
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"wrote {ns.destination}: {data.wavelength_count} wavelengths x {data.time_count} times")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
