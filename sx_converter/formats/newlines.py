"""Newline conventions for metadata text.

Three forms are in use:

- canonical (CRLF): in memory and in anything handed to a presentation layer
- bare LF: inside UFS files
- bare CR: inside CSV files
"""

from __future__ import annotations

import re

CRLF = "\r\n"
CR = "\r"
LF = "\n"

_ANY_NEWLINE = re.compile(r"\r\n|\r|\n")


def to_canonical(text: str) -> str:
    """Map every ``\\r\\n``, lone ``\\r`` and lone ``\\n`` to ``\\r\\n``."""
    return _ANY_NEWLINE.sub(CRLF, text)


def to_binary_form(text: str) -> str:
    return text.replace(CRLF, LF)


def to_csv_form(text: str) -> str:
    return text.replace(CRLF, CR)
