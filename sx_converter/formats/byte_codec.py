"""Fixed-width big-endian scalar codec and UTF-8 text codec.

All multi-byte values in a UFS file are big-endian. The numpy dtypes below
carry the byte order explicitly, so numpy swaps only when the host is
little-endian and leaves the bytes alone on a big-endian host.

NaN payloads are not normalized: whatever bit pattern the host float64 holds
is written, and whatever is read is returned. Viewers that compare NaN bit
patterns may therefore see differences between files written on different
tools.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

INT32_BE = np.dtype(">i4")
FLOAT64_BE = np.dtype(">f8")

INT32_SIZE = INT32_BE.itemsize
FLOAT64_SIZE = FLOAT64_BE.itemsize

TEXT_ENCODING = "utf-8"


def encode_int32(value: int) -> bytes:
    return np.array(value, dtype=INT32_BE).tobytes()


def decode_int32(data: bytes) -> int:
    return int(np.frombuffer(data, dtype=INT32_BE, count=1)[0])


def encode_float64(value: float) -> bytes:
    return np.array(value, dtype=FLOAT64_BE).tobytes()


def decode_float64(data: bytes) -> float:
    return float(np.frombuffer(data, dtype=FLOAT64_BE, count=1)[0])


def encode_float64_array(values: Iterable[float] | np.ndarray) -> bytes:
    """Encode a sequence (or a 2-D array, row-major) of float64 values."""
    arr = np.asarray(values, dtype=np.float64)
    return np.ascontiguousarray(arr, dtype=FLOAT64_BE).tobytes()


def decode_float64_array(data: bytes, count: int) -> np.ndarray:
    """Decode ``count`` big-endian float64 values into a native float64 array."""
    if count == 0:
        return np.empty(0, dtype=np.float64)
    arr = np.frombuffer(data, dtype=FLOAT64_BE, count=count)
    return arr.astype(np.float64)


def encode_text(value: str) -> bytes:
    return value.encode(TEXT_ENCODING)


def decode_text(data: bytes) -> str:
    # Some writers pad text fields with NUL bytes.
    return data.decode(TEXT_ENCODING).rstrip("\0")
