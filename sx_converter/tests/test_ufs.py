"""Tests for the UFS binary reader/writer."""

from __future__ import annotations

import io
import struct

import numpy as np
import pytest

from sx_converter.errors import FormatError
from sx_converter.formats.ufs import UFS_V2, UfsFormat, read_ufs, write_ufs
from sx_converter.models.axis import AxisInfo
from sx_converter.models.spectra import SpectraData


def _text(s: str) -> bytes:
    b = s.encode("utf-8")
    return struct.pack(">i", len(b)) + b


def _small() -> SpectraData:
    return SpectraData(
        times=[0.0, 1.0],
        wavelengths=[500.0],
        spectra=[[0.5, -0.25]],
        metadata="a\r\nb",
    )


def _raw(
    *,
    version: str = "Version2",
    label: str = "DA",
    padding: int = 0,
    wc: int = 1,
    tc: int = 2,
    metadata: bytes = _text("a\nb"),
) -> bytes:
    """Hand-built UFS bytes for the dataset returned by _small()."""
    return (
        _text(version)
        + _text("Wavelength") + _text("nm") + struct.pack(">i", 1) + struct.pack(">d", 500.0)
        + _text("Time") + _text("ps") + struct.pack(">i", 2) + struct.pack(">2d", 0.0, 1.0)
        + _text(label) + struct.pack(">iii", padding, wc, tc)
        + struct.pack(">2d", 0.5, -0.25)
        + metadata
    )


def _write(data: SpectraData, fmt: UfsFormat = UFS_V2) -> bytes:
    buf = io.BytesIO()
    write_ufs(data, buf, fmt)
    return buf.getvalue()


# -----------------------------------------------------------------------
# write
# -----------------------------------------------------------------------


def test_write_exact_layout() -> None:
    assert _write(_small()) == _raw()


def test_write_empty_metadata_is_zero_length_field() -> None:
    data = _small()
    data.metadata = ""
    raw = _write(data)
    assert raw.endswith(struct.pack(">d", -0.25) + b"\x00\x00\x00\x00")
    assert raw == _raw(metadata=b"\x00\x00\x00\x00")


def test_write_empty_axis_name() -> None:
    data = _small()
    data.time_axis = AxisInfo("", "ps")
    raw = _write(data)
    assert b"\x00\x00\x00\x00" + _text("ps") in raw


# -----------------------------------------------------------------------
# read
# -----------------------------------------------------------------------


def test_read_hand_built() -> None:
    data = read_ufs(io.BytesIO(_raw()))
    assert data.wavelengths.tolist() == [500.0]
    assert data.times.tolist() == [0.0, 1.0]
    assert data.spectra.shape == (1, 2)
    assert data.spectra.tolist() == [[0.5, -0.25]]
    assert data.wavelength_axis == AxisInfo("Wavelength", "nm")
    assert data.time_axis == AxisInfo("Time", "ps")
    # LF on disk -> CRLF in memory
    assert data.metadata == "a\r\nb"


def test_read_empty_metadata() -> None:
    data = read_ufs(io.BytesIO(_raw(metadata=b"\x00\x00\x00\x00")))
    assert data.metadata == ""


def test_round_trip_bit_exact() -> None:
    rng = np.random.default_rng(1234)
    times = np.concatenate([[-1.0], np.geomspace(1e-3, 7e3, 40)])
    wavelengths = np.linspace(350.0, 750.0, 25)
    spectra = rng.normal(scale=1e-3, size=(25, 41))
    spectra[3, 7] = np.nan
    spectra[4, 0] = -0.0
    src = SpectraData(
        times=times,
        wavelengths=wavelengths,
        spectra=spectra,
        time_axis=AxisInfo("Delay", "ns"),
        wavelength_axis=AxisInfo("Wavelength", "nm"),
        metadata="Operator: K\r\nPump 400 nm\r\n",
    )
    out = read_ufs(io.BytesIO(_write(src)))

    assert out.times.tobytes() == src.times.tobytes()
    assert out.wavelengths.tobytes() == src.wavelengths.tobytes()
    assert out.spectra.tobytes() == src.spectra.tobytes()
    assert out.time_axis == AxisInfo("Delay", "ns")
    assert out.metadata == src.metadata


def test_round_trip_empty_dataset() -> None:
    out = read_ufs(io.BytesIO(_write(SpectraData())))
    assert out.time_count == 0
    assert out.wavelength_count == 0
    assert out.spectra.shape == (0, 0)


# -----------------------------------------------------------------------
# rejection
# -----------------------------------------------------------------------


def test_version_99_rejected_before_axis_data() -> None:
    stream = io.BytesIO(_raw(version="Version99"))
    with pytest.raises(FormatError, match="Unsupported version"):
        read_ufs(stream)
    # Only the version field was consumed.
    assert stream.tell() == 4 + len("Version99")


@pytest.mark.parametrize("tag", ["version2", "Ver2", "", "2"])
def test_bad_version_prefix(tag: str) -> None:
    with pytest.raises(FormatError, match="version string"):
        read_ufs(io.BytesIO(_raw(version=tag)))


def test_non_numeric_version() -> None:
    with pytest.raises(FormatError, match="version number"):
        read_ufs(io.BytesIO(_raw(version="VersionX")))


@pytest.mark.parametrize("label", ["DB", "da", "", "DAX"])
def test_bad_label(label: str) -> None:
    with pytest.raises(FormatError, match="data label"):
        read_ufs(io.BytesIO(_raw(label=label)))


def test_nonzero_padding() -> None:
    with pytest.raises(FormatError, match="padding"):
        read_ufs(io.BytesIO(_raw(padding=1)))


def test_redundant_counts_must_match() -> None:
    with pytest.raises(FormatError, match="wavelength count"):
        read_ufs(io.BytesIO(_raw(wc=2)))
    with pytest.raises(FormatError, match="time count"):
        read_ufs(io.BytesIO(_raw(tc=3)))


def test_truncated_stream() -> None:
    raw = _raw()
    with pytest.raises(FormatError, match="Unexpected end of data"):
        read_ufs(io.BytesIO(raw[:-10]))
    with pytest.raises(FormatError, match="Unexpected end of data"):
        read_ufs(io.BytesIO(b""))


def test_negative_count() -> None:
    raw = _text("Version2") + _text("Wavelength") + _text("nm") + struct.pack(">i", -1)
    with pytest.raises(FormatError, match="wavelength count"):
        read_ufs(io.BytesIO(raw))


def test_invalid_utf8_text() -> None:
    raw = struct.pack(">i", 2) + b"\xff\xfe"
    with pytest.raises(FormatError, match="UTF-8"):
        read_ufs(io.BytesIO(raw))


# -----------------------------------------------------------------------
# format variant
# -----------------------------------------------------------------------


def test_format_variant_selected_at_construction() -> None:
    fmt = UfsFormat(version=3, supported_versions=(2, 3), data_label="DB")
    raw = _write(_small(), fmt)
    assert raw.startswith(_text("Version3"))
    assert _text("DB") in raw

    out = read_ufs(io.BytesIO(raw), fmt)
    assert out.spectra.tolist() == [[0.5, -0.25]]

    with pytest.raises(FormatError):
        read_ufs(io.BytesIO(raw))


def test_huge_count_in_file_is_format_error(tmp_path) -> None:
    # The count claims 2**31-1 wavelengths; the file holds 16 bytes after it.
    from sx_converter.convert import load

    p = tmp_path / "corrupt.ufs"
    p.write_bytes(_text("Version2") + _text("W") + _text("nm") + struct.pack(">i", 2**31 - 1) + b"\0" * 16)
    with pytest.raises(FormatError, match="Unexpected end of data while reading wavelengths"):
        load(p)


def test_huge_text_length_is_format_error() -> None:
    raw = _text("Version2") + struct.pack(">i", 2**31 - 1) + b"abc"
    with pytest.raises(FormatError, match="Unexpected end of data"):
        read_ufs(io.BytesIO(raw))
