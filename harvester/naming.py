"""
Canonical file naming for downloaded reports.
"""

import re

from .models import ReportFormat

# Characters that are unsafe in a filename on at least one target filesystem
_UNSAFE_CHARS = re.compile(r'[\\/:"*?<>|]+')


def sanitize_filename(name: str) -> str:
    """Strip path-unsafe characters and surrounding whitespace.

    Idempotent: sanitizing an already sanitized name returns it unchanged.
    """
    return _UNSAFE_CHARS.sub("", name).strip()


def report_filename(symbol: str, year: int, fmt: ReportFormat = ReportFormat.PDF) -> str:
    return sanitize_filename(f"{symbol}_{year}.{ReportFormat(fmt).value}")


def canonical_pdf_name(symbol: str, year: int) -> str:
    """``SYMBOL_YEAR.pdf`` with unsafe characters removed."""
    return report_filename(symbol, year, ReportFormat.PDF)
