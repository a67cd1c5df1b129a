from __future__ import annotations


class FormatError(ValueError):
    """Raised when UFS or CSV input violates the expected layout.

    Always raised before any SpectraData is returned; a failed read never
    yields a partially populated dataset.
    """


class RangeError(ValueError):
    """Raised when a trim is requested with ``min >= max``."""
