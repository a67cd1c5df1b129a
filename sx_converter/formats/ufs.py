"""
UFS binary container (Ultrafast Systems), big-endian throughout.

Layout
------
::

    [int32 len]["Version2"]
    [text wl name][text wl unit][int32 W][W x float64 wavelengths]
    [text t name][text t unit][int32 T][T x float64 times]
    [text "DA"][int32 0][int32 W][int32 T]
    [W x T x float64 spectra, row-major by wavelength]
    [text metadata]

A text field is an int32 byte count followed by that many UTF-8 bytes; a
count of 0 has no payload.

Metadata is stored with bare LF newlines and held in memory as CRLF.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterable, List, Tuple

import numpy as np

from sx_converter.errors import FormatError
from sx_converter.formats import byte_codec
from sx_converter.formats.newlines import to_binary_form, to_canonical
from sx_converter.models.axis import AxisInfo
from sx_converter.models.spectra import SpectraData

logger = logging.getLogger(__name__)

VERSION_PREFIX = "Version"
READ_CHUNK_SIZE = 1 << 20


@dataclass(frozen=True)
class UfsFormat:
    """
    Binary sub-format selected when a reader or writer is built.

    version:
      Version number written after "Version" in the tag.
    supported_versions:
      Version numbers accepted on read.
    data_label:
      Text field that must precede the spectra block.
    """
    version: int = 2
    supported_versions: Tuple[int, ...] = (2,)
    data_label: str = "DA"

    @property
    def version_tag(self) -> str:
        return f"{VERSION_PREFIX}{self.version}"


UFS_V2 = UfsFormat()


class UfsReader:
    """Sequential big-endian field reader over a binary stream."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def _read_exact(self, n: int, what: str) -> bytes:
        # Counts come from the file; read in bounded chunks so a corrupt
        # count fails on the first short chunk instead of allocating n bytes.
        chunks: List[bytes] = []
        got = 0
        while got < n:
            chunk = self._stream.read(min(n - got, READ_CHUNK_SIZE))
            if not chunk:
                raise FormatError(f"Unexpected end of data while reading {what} ({got} of {n} bytes).")
            chunks.append(chunk)
            got += len(chunk)
        return b"".join(chunks)

    def read_int32(self, what: str = "int32") -> int:
        return byte_codec.decode_int32(self._read_exact(byte_codec.INT32_SIZE, what))

    def read_count(self, what: str) -> int:
        n = self.read_int32(what)
        if n < 0:
            raise FormatError(f"Invalid {what}: {n}.")
        return n

    def read_float64_array(self, count: int, what: str = "float64 array") -> np.ndarray:
        data = self._read_exact(count * byte_codec.FLOAT64_SIZE, what)
        return byte_codec.decode_float64_array(data, count)

    def read_text(self, what: str = "text") -> str:
        length = self.read_count(f"{what} length")
        if length == 0:
            return ""
        data = self._read_exact(length, what)
        try:
            return byte_codec.decode_text(data)
        except UnicodeDecodeError as e:
            raise FormatError(f"Invalid {what}: not valid UTF-8 ({e}).") from e


class UfsWriter:
    """Sequential big-endian field writer over a binary stream."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def write_int32(self, value: int) -> None:
        self._stream.write(byte_codec.encode_int32(value))

    def write_float64_array(self, values: Iterable[float] | np.ndarray) -> None:
        self._stream.write(byte_codec.encode_float64_array(values))

    def write_text(self, value: str) -> None:
        if not value:
            self.write_int32(0)
            return
        data = byte_codec.encode_text(value)
        self.write_int32(len(data))
        self._stream.write(data)


def read_ufs(stream: BinaryIO, fmt: UfsFormat = UFS_V2) -> SpectraData:
    """
    Parse a whole UFS stream.

    Fails fast with FormatError on the first violation; the dataset is only
    constructed once every field has been read and checked.
    """
    reader = UfsReader(stream)

    version_str = reader.read_text("version tag")
    if not version_str.startswith(VERSION_PREFIX):
        raise FormatError(f"Invalid version string: {version_str!r}.")
    try:
        version = int(version_str[len(VERSION_PREFIX):])
    except ValueError:
        raise FormatError(f"Invalid version number: {version_str!r}.") from None
    if version not in fmt.supported_versions:
        raise FormatError(f"Unsupported version: {version} (supported: {list(fmt.supported_versions)}).")

    wl_axis = AxisInfo(reader.read_text("wavelength axis name"), reader.read_text("wavelength axis unit"))
    wl_count = reader.read_count("wavelength count")
    wavelengths = reader.read_float64_array(wl_count, "wavelengths")

    t_axis = AxisInfo(reader.read_text("time axis name"), reader.read_text("time axis unit"))
    t_count = reader.read_count("time count")
    times = reader.read_float64_array(t_count, "times")

    label = reader.read_text("data label")
    if label != fmt.data_label:
        raise FormatError(f"Invalid data label: {label!r} (expected {fmt.data_label!r}).")

    padding = reader.read_int32("padding")
    if padding != 0:
        raise FormatError(f"Invalid padding: {padding}.")

    wc = reader.read_int32("redundant wavelength count")
    if wc != wl_count:
        raise FormatError(f"Invalid wavelength count: {wc} (header says {wl_count}).")
    tc = reader.read_int32("redundant time count")
    if tc != t_count:
        raise FormatError(f"Invalid time count: {tc} (header says {t_count}).")

    spectra = reader.read_float64_array(wl_count * t_count, "spectra").reshape(wl_count, t_count)

    metadata = to_canonical(reader.read_text("metadata"))

    logger.debug("read UFS %s: %d wavelengths x %d times, metadata %d chars",
                 version_str, wl_count, t_count, len(metadata))

    return SpectraData(
        times=times,
        wavelengths=wavelengths,
        spectra=spectra,
        time_axis=t_axis,
        wavelength_axis=wl_axis,
        metadata=metadata,
    )


def write_ufs(data: SpectraData, stream: BinaryIO, fmt: UfsFormat = UFS_V2) -> None:
    """Write ``data`` in the exact field order :func:`read_ufs` expects."""
    writer = UfsWriter(stream)

    writer.write_text(fmt.version_tag)

    _write_axis(writer, data.wavelength_axis, data.wavelengths)
    _write_axis(writer, data.time_axis, data.times)

    writer.write_text(fmt.data_label)
    writer.write_int32(0)
    writer.write_int32(data.wavelength_count)
    writer.write_int32(data.time_count)
    writer.write_float64_array(data.spectra)

    writer.write_text(to_binary_form(data.metadata))

    logger.debug("wrote UFS %s: %d wavelengths x %d times",
                 fmt.version_tag, data.wavelength_count, data.time_count)


def _write_axis(writer: UfsWriter, axis: AxisInfo, values: np.ndarray) -> None:
    writer.write_text(axis.name)
    writer.write_text(axis.unit)
    writer.write_int32(len(values))
    writer.write_float64_array(values)
