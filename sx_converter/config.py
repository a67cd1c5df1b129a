"""Converter configuration.

A ConverterConfig groups the parameters that change what the converter reads
or writes into one frozen dataclass. It can be:

- Used as-is (defaults match UFS version 2 files)
- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict, or loaded from a JSON file
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Literal, Tuple

from sx_converter.formats.ufs import UfsFormat

SpectraFormat = Literal["ufs", "csv"]
FORMATS: Tuple[str, ...] = ("ufs", "csv")


@dataclass(frozen=True)
class ConverterConfig:
    """Frozen converter configuration.

    Fields
    ------
    ufs_version : int
        Version number written into the UFS version tag.
    supported_versions : tuple of int
        UFS version numbers accepted on read.
    data_label : str
        Label expected before the UFS spectra block.
    fallback_format : {"csv", "ufs"}
        Format assumed for paths whose extension is neither .ufs nor .csv.
    """

    ufs_version: int = 2
    supported_versions: Tuple[int, ...] = (2,)
    data_label: str = "DA"
    fallback_format: SpectraFormat = "csv"

    def __post_init__(self) -> None:
        if self.fallback_format not in FORMATS:
            raise ValueError(f"fallback_format must be one of {FORMATS}, got {self.fallback_format!r}")

    @property
    def ufs_format(self) -> UfsFormat:
        return UfsFormat(
            version=self.ufs_version,
            supported_versions=tuple(self.supported_versions),
            data_label=self.data_label,
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict (tuples become lists)."""
        d = asdict(self)
        d["supported_versions"] = list(d["supported_versions"])
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ConverterConfig:
        d = dict(d)
        unknown = sorted(set(d) - {f.name for f in fields(cls)})
        if unknown:
            raise ValueError(f"Unknown ConverterConfig field(s): {', '.join(unknown)}")
        if "supported_versions" in d and not isinstance(d["supported_versions"], tuple):
            d["supported_versions"] = tuple(int(v) for v in d["supported_versions"])
        return cls(**d)


DEFAULT_CONFIG = ConverterConfig()


def load_config(path: str | Path) -> ConverterConfig:
    p = Path(path).expanduser()
    with p.open("r", encoding="utf-8") as fh:
        d = json.load(fh)
    if not isinstance(d, dict):
        raise ValueError(f"{p.name}: expected a JSON object, got {type(d).__name__}")
    return ConverterConfig.from_dict(d)
