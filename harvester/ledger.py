"""
Error ledger - per-company diagnostics for one run.
Every component that can fail for a company appends here instead of raising;
the ledger is flushed to a spreadsheet at the end of the run.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List

import pandas as pd

from .config import FAILURE_REPORT_SHEET, REPORT_COLUMNS
from .models import LedgerEntry

logger = logging.getLogger(__name__)


class ErrorLedger:
    """Append-only map of company symbol -> ordered diagnostic messages."""

    def __init__(self):
        self._entries: Dict[str, LedgerEntry] = {}
        self._lock = threading.Lock()

    def add(self, symbol: str, name: str, message: str, level: int = logging.ERROR) -> None:
        """Record a diagnostic for ``symbol``, creating its entry on first use."""
        with self._lock:
            entry = self._entries.get(symbol)
            if entry is None:
                entry = LedgerEntry(symbol=symbol, name=name or "")
                self._entries[symbol] = entry
            elif name and not entry.name:
                entry.name = name
            entry.messages.append(message)
        logger.log(level, message)

    def messages(self, symbol: str) -> List[str]:
        with self._lock:
            entry = self._entries.get(symbol)
            return list(entry.messages) if entry else []

    def entries(self) -> List[LedgerEntry]:
        """Entries in first-diagnostic order."""
        with self._lock:
            return list(self._entries.values())

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return symbol in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "Symbol": entry.symbol,
                "Company Name": entry.name or "",
                "Error/Status Messages": "\n".join(entry.messages),
            }
            for entry in self.entries()
        ]
        return pd.DataFrame(rows, columns=REPORT_COLUMNS)

    def write_report(self, path: Path) -> Path:
        """Write the failure report spreadsheet. Caller decides whether to call it."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        df = self.to_frame()
        if path.suffix.lower() == ".csv":
            df.to_csv(path, index=False)
        else:
            df.to_excel(path, sheet_name=FAILURE_REPORT_SHEET, index=False, engine="openpyxl")
        logger.info(f"Written {len(df)} companies with errors or missing reports to '{path}'.")
        return path
