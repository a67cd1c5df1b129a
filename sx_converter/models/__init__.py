from .axis import AxisInfo
from .spectra import SpectraData

__all__ = [
    "AxisInfo",
    "SpectraData",
]
