"""SX Converter -- fs-TAS spectra conversion between UFS binary and CSV grid files.

UFS is the big-endian binary container written by the Ultrafast Systems
acquisition suite; the CSV grid is the plain-text layout read by
SurfaceXplorer and general-purpose tools.

This package provides tools for:
- Reading and writing UFS version 2 files
- Reading and writing the CSV grid layout, including its metadata block
- Trimming datasets to a time and/or wavelength window
- Editing the free-form metadata text

Main subpackages:
- formats: byte-level codecs (UFS, CSV, newline conventions)
- models: data model (AxisInfo, SpectraData)
- scripts: command line entry points
"""

from .convert import convert, detect_format, dumps, load, loads, save
from .errors import FormatError, RangeError
from .models import AxisInfo, SpectraData

__all__ = [
    "AxisInfo",
    "FormatError",
    "RangeError",
    "SpectraData",
    "convert",
    "detect_format",
    "dumps",
    "load",
    "loads",
    "save",
]
