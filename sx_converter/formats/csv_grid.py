"""
CSV grid format used by SurfaceXplorer.

Layout
------
::

    0,t1,t2,...,tT<CR>
    wl1,v11,...,v1T<CR>
    ...
    wlW,vW1,...,vWT<CR>
    file info<CR>...metadata with bare CR newlines...

Reading rules
-------------
- A line is a data row when it is non-empty and every comma-separated field
  parses as a float. The first data row is the header; its first field is a
  sentinel and the rest are the times.
- The first line that is not a data row ends the grid. That line is consumed
  and dropped; the metadata is rebuilt as ``"file info\\r"`` followed by the
  rest of the text. The viewer recognises the metadata block by this prefix.
"""

from __future__ import annotations

import logging
import math
import re
from typing import BinaryIO, List, Optional, Tuple

import numpy as np

from sx_converter.errors import FormatError
from sx_converter.formats.newlines import CR, to_canonical, to_csv_form
from sx_converter.models.spectra import SpectraData

logger = logging.getLogger(__name__)

METADATA_PREFIX = "file info\r"
HEADER_SENTINEL = "0"
ENCODING = "utf-8"

_NEWLINE = re.compile(r"\r\n|\r|\n")


def _next_line(text: str, pos: int) -> Tuple[Optional[str], int]:
    """Return (line, next_pos); line is None at end of text."""
    if pos >= len(text):
        return None, pos
    m = _NEWLINE.search(text, pos)
    if m is None:
        return text[pos:], len(text)
    return text[pos:m.start()], m.end()


def _parse_row(line: Optional[str]) -> Optional[List[float]]:
    if not line:
        return None
    values: List[float] = []
    for field in line.split(","):
        # float() takes "1_0"; the viewer's parser does not.
        if "_" in field:
            return None
        try:
            values.append(float(field))
        except ValueError:
            return None
    return values


def format_value(value: float) -> str:
    """Shortest round-trip text, without a trailing '.0' and with an 'E' exponent."""
    v = float(value)
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "Infinity" if v > 0 else "-Infinity"
    s = repr(v)
    if s.endswith(".0"):
        s = s[:-2]
    return s.replace("e", "E")


def parse_csv(text: str) -> SpectraData:
    """Parse CSV grid text into a SpectraData."""
    pos = 0
    line, pos = _next_line(text, pos)
    header = _parse_row(line)
    if not header:
        raise FormatError("No header found.")
    times = header[1:]
    n_times = len(times)

    wavelengths: List[float] = []
    rows: List[List[float]] = []
    while True:
        line, pos = _next_line(text, pos)
        row = _parse_row(line)
        if row is None:
            break
        if len(row) - 1 != n_times:
            raise FormatError(
                f"Row {len(rows) + 2} has {len(row) - 1} values, expected {n_times} (one per time point)."
            )
        wavelengths.append(row[0])
        rows.append(row[1:])

    metadata = to_canonical(METADATA_PREFIX + text[pos:])

    logger.debug("read CSV: %d wavelengths x %d times, metadata %d chars",
                 len(wavelengths), n_times, len(metadata))

    spectra = np.array(rows, dtype=np.float64).reshape(len(rows), n_times)
    return SpectraData(
        times=np.array(times, dtype=np.float64),
        wavelengths=np.array(wavelengths, dtype=np.float64),
        spectra=spectra,
        metadata=metadata,
    )


def format_csv(data: SpectraData) -> str:
    """Render a SpectraData as CSV grid text (bare CR line ends)."""
    parts = [HEADER_SENTINEL + "," + ",".join(format_value(t) for t in data.times) + CR]
    for wl, row in zip(data.wavelengths, data.spectra):
        parts.append(format_value(wl) + "," + ",".join(format_value(v) for v in row) + CR)
    parts.append(to_csv_form(data.metadata))
    return "".join(parts)


def read_csv(stream: BinaryIO) -> SpectraData:
    raw = stream.read()
    try:
        # A UTF-8 BOM, if present, is not part of the header.
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FormatError(f"CSV data is not valid UTF-8 ({e}).") from e
    return parse_csv(text)


def write_csv(data: SpectraData, stream: BinaryIO) -> None:
    stream.write(format_csv(data).encode(ENCODING))
    logger.debug("wrote CSV: %d wavelengths x %d times", data.wavelength_count, data.time_count)
