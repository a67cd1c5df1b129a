from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AxisInfo:
    """Name and unit label of one axis (time or wavelength)."""

    name: str
    unit: str

    def __str__(self) -> str:
        return f"{self.name} ({self.unit})"


def default_time_axis() -> AxisInfo:
    return AxisInfo("Time", "ps")


def default_wavelength_axis() -> AxisInfo:
    return AxisInfo("Wavelength", "nm")
