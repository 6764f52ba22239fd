"""
Data models for the harvester.
References are transient; only ledger entries outlive a single company.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List


class ReportFormat(str, Enum):
    PDF = "pdf"
    ZIP = "zip"


class Outcome(str, Enum):
    """Terminal state of one company's acquisition."""
    SATISFIED_PRIMARY = "satisfied_primary"
    SATISFIED_FALLBACK = "satisfied_fallback"
    UNSATISFIED = "unsatisfied"

    @property
    def satisfied(self) -> bool:
        return self is not Outcome.UNSATISFIED


@dataclass(frozen=True)
class Company:
    """One worklist row."""
    symbol: str
    name: str = ""


@dataclass(frozen=True)
class ReportReference:
    """A discovered report not yet downloaded."""
    year: int
    url: str
    format: ReportFormat


@dataclass
class Discovery:
    """Result of asking a report source about one company.

    ``found`` is False when navigation failed; an empty ``references`` list
    with ``found`` True means the source has nothing for the company.
    """
    references: List[ReportReference] = field(default_factory=list)
    found: bool = True


@dataclass
class DownloadedFile:
    path: Path
    bytes: int


@dataclass
class LedgerEntry:
    """All diagnostics accumulated for one company during a run."""
    symbol: str
    name: str = ""
    messages: List[str] = field(default_factory=list)
