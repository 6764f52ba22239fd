"""
Base report source with the row-filtering rules shared by every site.
Site-specific navigation lives in harvester/sources/.
"""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

from .config import MIN_REPORT_YEAR
from .ledger import ErrorLedger
from .models import Company, Discovery, ReportFormat, ReportReference
from .naming import sanitize_filename

logger = logging.getLogger(__name__)

# Leading integer of a year cell, so "2015-16" reads as 2015
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_year(text) -> Optional[int]:
    """Parse the leading integer of a year cell. Returns None when there is none."""
    if text is None:
        return None
    match = _LEADING_INT.match(str(text))
    if not match:
        return None
    return int(match.group(1))


def is_secure_url(url: Optional[str]) -> bool:
    return bool(url) and url.startswith("https://")


def infer_format(url: Optional[str]) -> Optional[ReportFormat]:
    """Report format from the URL's extension; None for anything else."""
    if not url:
        return None
    path = url.lower().split("?", 1)[0].split("#", 1)[0]
    if path.endswith(".zip"):
        return ReportFormat.ZIP
    if path.endswith(".pdf"):
        return ReportFormat.PDF
    return None


def make_reference(year_text, url: Optional[str], fmt) -> Optional[ReportReference]:
    """Build a reference if the row passes every filter, else None.

    Filters: numeric year >= MIN_REPORT_YEAR, absolute https URL, pdf or zip.
    """
    year = parse_year(year_text)
    if year is None or year < MIN_REPORT_YEAR:
        return None
    if not is_secure_url(url):
        return None
    try:
        fmt = ReportFormat(fmt)
    except ValueError:
        return None
    return ReportReference(year=year, url=url, format=fmt)


def filter_rows(rows: Iterable[dict]) -> List[ReportReference]:
    """Turn ``{year, url, type}`` records into references, dropping invalid rows."""
    references = []
    for row in rows:
        if not row:
            continue
        ref = make_reference(row.get("year"), row.get("url"), row.get("type"))
        if ref is None:
            logger.debug(f"Skipping row {row}")
            continue
        references.append(ref)
    return references


class ReportSource(ABC):
    """A site that lists annual reports for a company.

    Implementations record navigation failures in the ledger and return
    ``Discovery(found=False)``; they do not raise for them.
    """

    # Subclasses should set these
    name: str = ""
    folder_name: str = ""

    def __init__(self, ledger: ErrorLedger):
        self.ledger = ledger

    @abstractmethod
    def discover(self, company: Company) -> Discovery:
        """List the company's downloadable reports."""
        pass

    def folder_for(self, output_dir: Path, company: Company) -> Path:
        return Path(output_dir) / self.folder_name / sanitize_filename(company.symbol)

    def _fail(self, company: Company, error: Exception) -> Discovery:
        self.ledger.add(
            company.symbol, company.name,
            f"{self.name} scraping failed for {company.symbol}: {error}",
        )
        return Discovery(references=[], found=False)
