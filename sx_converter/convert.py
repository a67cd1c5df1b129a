"""
Load/save entry points for spectra files.

Supported inputs
----------------
- a filesystem path (str or Path); the format is taken from the extension
  unless given explicitly
- raw ``bytes``
- an open binary stream

For bytes and streams the format must be given.

Examples
--------
>>> # data = load("scan.ufs")
>>> # data.trim_time(-1.0, 100.0)
>>> # save(data, "scan_trimmed.csv")
>>> # convert("scan.ufs", "scan.csv", wavelength_range=(400.0, 700.0))
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from sx_converter.config import DEFAULT_CONFIG, FORMATS, ConverterConfig, SpectraFormat
from sx_converter.formats.csv_grid import read_csv, write_csv
from sx_converter.formats.newlines import to_canonical
from sx_converter.formats.ufs import read_ufs, write_ufs
from sx_converter.models.spectra import SpectraData

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, bytearray, BinaryIO]
Target = Union[str, Path, BinaryIO]
Bounds = Tuple[float, float]

_EXTENSIONS = {".ufs": "ufs", ".csv": "csv"}


def detect_format(path: str | Path, default: SpectraFormat = "csv") -> SpectraFormat:
    """Pick the format from the file extension (case-insensitive)."""
    return _EXTENSIONS.get(Path(path).suffix.lower(), default)  # type: ignore[return-value]


def _resolve_format(target, fmt: Optional[str], config: ConverterConfig) -> str:
    if fmt is None:
        if not isinstance(target, (str, Path)):
            raise ValueError("format must be given explicitly for bytes or stream input/output")
        fmt = detect_format(target, config.fallback_format)
        logger.debug("detected format %r for %s", fmt, target)
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format: {fmt!r} (expected one of {FORMATS})")
    return fmt


def _read_stream(stream: BinaryIO, fmt: str, config: ConverterConfig) -> SpectraData:
    if fmt == "ufs":
        return read_ufs(stream, config.ufs_format)
    return read_csv(stream)


def _write_stream(data: SpectraData, stream: BinaryIO, fmt: str, config: ConverterConfig) -> None:
    if fmt == "ufs":
        write_ufs(data, stream, config.ufs_format)
    else:
        write_csv(data, stream)


def load(
    source: Source,
    fmt: Optional[SpectraFormat] = None,
    *,
    config: Optional[ConverterConfig] = None,
) -> SpectraData:
    cfg = config or DEFAULT_CONFIG
    fmt = _resolve_format(source, fmt, cfg)

    if isinstance(source, (bytes, bytearray)):
        return _read_stream(io.BytesIO(bytes(source)), fmt, cfg)

    if isinstance(source, (str, Path)):
        path = Path(source).expanduser()
        with path.open("rb") as fh:
            data = _read_stream(fh, fmt, cfg)
        logger.info("loaded %s (%s): %d wavelengths x %d times",
                    path, fmt, data.wavelength_count, data.time_count)
        return data

    return _read_stream(source, fmt, cfg)


def save(
    data: SpectraData,
    target: Target,
    fmt: Optional[SpectraFormat] = None,
    *,
    config: Optional[ConverterConfig] = None,
) -> None:
    """Write ``data`` to a path or binary stream.

    Writes are not transactional: a failure part-way leaves a truncated file.
    """
    cfg = config or DEFAULT_CONFIG
    fmt = _resolve_format(target, fmt, cfg)

    if isinstance(target, (str, Path)):
        path = Path(target).expanduser()
        with path.open("wb") as fh:
            _write_stream(data, fh, fmt, cfg)
        logger.info("saved %s (%s)", path, fmt)
        return

    _write_stream(data, target, fmt, cfg)


def loads(raw: bytes, fmt: SpectraFormat, *, config: Optional[ConverterConfig] = None) -> SpectraData:
    return load(raw, fmt, config=config)


def dumps(data: SpectraData, fmt: SpectraFormat, *, config: Optional[ConverterConfig] = None) -> bytes:
    buf = io.BytesIO()
    save(data, buf, fmt, config=config)
    return buf.getvalue()


def convert(
    source: str | Path,
    destination: str | Path,
    *,
    time_range: Optional[Bounds] = None,
    wavelength_range: Optional[Bounds] = None,
    metadata: Optional[str] = None,
    source_format: Optional[SpectraFormat] = None,
    destination_format: Optional[SpectraFormat] = None,
    config: Optional[ConverterConfig] = None,
) -> SpectraData:
    """Load ``source``, optionally trim and replace metadata, then save to ``destination``.

    Returns the dataset that was written.
    """
    data = load(source, source_format, config=config)
    if time_range is not None:
        data.trim_time(*time_range)
    if wavelength_range is not None:
        data.trim_wavelength(*wavelength_range)
    if metadata is not None:
        data.metadata = to_canonical(metadata)
    save(data, destination, destination_format, config=config)
    return data
