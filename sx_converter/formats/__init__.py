"""Formats package - byte-level codecs for UFS and CSV spectra files.

- byte_codec: big-endian int32/float64 and UTF-8 text primitives
- newlines: metadata newline conventions (CRLF in memory, LF in UFS, CR in CSV)
- ufs: UFS binary container reader/writer
- csv_grid: CSV grid reader/writer
"""
from .csv_grid import read_csv, write_csv
from .ufs import UFS_V2, UfsFormat, read_ufs, write_ufs

__all__ = [
    "UFS_V2",
    "UfsFormat",
    "read_csv",
    "read_ufs",
    "write_csv",
    "write_ufs",
]
