from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

import numpy as np
import pandas as pd

from sx_converter.errors import RangeError
from sx_converter.models.axis import AxisInfo, default_time_axis, default_wavelength_axis

logger = logging.getLogger(__name__)

PathOrStream = Union[str, Path, BinaryIO]


@dataclass(eq=False)
class SpectraData:
    """
    In-memory fs-TAS dataset: two axes, the spectra matrix and free-form metadata.

    Notes
    - ``spectra`` has shape ``(len(wavelengths), len(times))``; row i belongs to
      ``wavelengths[i]``.
    - ``times`` and ``wavelengths`` are expected strictly ascending. This is not
      re-checked here; the trim operations rely on it.
    - ``metadata`` is kept with CRLF newlines; the codecs convert on the way in
      and out.
    - Trims replace the arrays with fresh copies, so arrays handed out earlier
      are never modified behind the caller's back.
    """

    times: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.float64))
    wavelengths: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.float64))
    spectra: np.ndarray = field(default_factory=lambda: np.empty((0, 0), dtype=np.float64))
    time_axis: AxisInfo = field(default_factory=default_time_axis)
    wavelength_axis: AxisInfo = field(default_factory=default_wavelength_axis)
    metadata: str = ""

    def __post_init__(self) -> None:
        self.times = np.asarray(self.times, dtype=np.float64).reshape(-1)
        self.wavelengths = np.asarray(self.wavelengths, dtype=np.float64).reshape(-1)
        expected = (len(self.wavelengths), len(self.times))
        spectra = np.asarray(self.spectra, dtype=np.float64)
        if spectra.size == 0 and expected[0] * expected[1] == 0:
            spectra = spectra.reshape(expected)
        if spectra.ndim != 2:
            raise ValueError(f"spectra must be 2-D, got ndim={spectra.ndim}")
        if spectra.shape != expected:
            raise ValueError(
                f"spectra shape {spectra.shape} does not match (wavelengths, times) = {expected}"
            )
        self.spectra = spectra

    # ------------------------------------------------------------------
    # Axis summary
    # ------------------------------------------------------------------

    @property
    def time_count(self) -> int:
        return int(self.times.size)

    @property
    def wavelength_count(self) -> int:
        return int(self.wavelengths.size)

    @property
    def time_min(self) -> float:
        return float(_axis_extreme(self.times, np.min, "time"))

    @property
    def time_max(self) -> float:
        return float(_axis_extreme(self.times, np.max, "time"))

    @property
    def wavelength_min(self) -> float:
        return float(_axis_extreme(self.wavelengths, np.min, "wavelength"))

    @property
    def wavelength_max(self) -> float:
        return float(_axis_extreme(self.wavelengths, np.max, "wavelength"))

    def copy(self) -> SpectraData:
        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Trim
    # ------------------------------------------------------------------

    def trim_time(self, min_value: float, max_value: float) -> None:
        """Keep the time points in ``[min_value, max_value)``.

        Each bound is located by binary search on ``times``: an exact hit gives
        its own index, otherwise the index of the first larger element. Every
        spectra row is sliced to the same columns.
        """
        lo, hi = _search_range(self.times, min_value, max_value)
        self.times = self.times[lo:hi].copy()
        self.spectra = self.spectra[:, lo:hi].copy()
        logger.info("trimmed time axis to [%r, %r): indices %d:%d, %d points left",
                    min_value, max_value, lo, hi, self.time_count)

    def trim_wavelength(self, min_value: float, max_value: float) -> None:
        """Keep the wavelengths in ``[min_value, max_value)`` (whole spectra rows)."""
        lo, hi = _search_range(self.wavelengths, min_value, max_value)
        self.wavelengths = self.wavelengths[lo:hi].copy()
        self.spectra = self.spectra[lo:hi, :].copy()
        logger.info("trimmed wavelength axis to [%r, %r): indices %d:%d, %d points left",
                    min_value, max_value, lo, hi, self.wavelength_count)

    # ------------------------------------------------------------------
    # pandas interop
    # ------------------------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        """Return the matrix as a DataFrame (index: wavelengths, columns: times)."""
        index = pd.Index(self.wavelengths, name=str(self.wavelength_axis))
        columns = pd.Index(self.times, name=str(self.time_axis))
        return pd.DataFrame(self.spectra.copy(), index=index, columns=columns)

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        *,
        time_axis: Optional[AxisInfo] = None,
        wavelength_axis: Optional[AxisInfo] = None,
        metadata: str = "",
    ) -> SpectraData:
        """Build a dataset from a DataFrame laid out as :meth:`to_frame` returns it."""
        return cls(
            times=df.columns.to_numpy(dtype=np.float64),
            wavelengths=df.index.to_numpy(dtype=np.float64),
            spectra=df.to_numpy(dtype=np.float64, copy=True),
            time_axis=time_axis or default_time_axis(),
            wavelength_axis=wavelength_axis or default_wavelength_axis(),
            metadata=metadata,
        )

    # ------------------------------------------------------------------
    # File I/O shortcuts
    # ------------------------------------------------------------------

    @classmethod
    def read_ufs(cls, source: PathOrStream) -> SpectraData:
        # Avoid circular import at module level
        from sx_converter.convert import load

        return load(source, "ufs")

    @classmethod
    def read_csv(cls, source: PathOrStream) -> SpectraData:
        from sx_converter.convert import load

        return load(source, "csv")

    def write_ufs(self, target: PathOrStream) -> None:
        from sx_converter.convert import save

        save(self, target, "ufs")

    def write_csv(self, target: PathOrStream) -> None:
        from sx_converter.convert import save

        save(self, target, "csv")


def _axis_extreme(values: np.ndarray, func, label: str) -> float:
    if values.size == 0:
        raise ValueError(f"{label} axis is empty")
    return func(values)


def _search_range(axis: np.ndarray, min_value: float, max_value: float) -> Tuple[int, int]:
    # `not (a < b)` also rejects NaN bounds.
    if not (min_value < max_value):
        raise RangeError(f"trim range requires min < max, got min={min_value!r}, max={max_value!r}")
    lo = int(np.searchsorted(axis, min_value, side="left"))
    hi = int(np.searchsorted(axis, max_value, side="left"))
    return lo, hi
