"""
Worklist loader - reads the companies to harvest from a spreadsheet.

Expected layout (first sheet):
    Symbol | Company Name
    TCS    | Tata Consultancy Services

Header matching is case-insensitive. ``Company`` is accepted in place of
``Company Name``. Row order is processing order.
"""

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .errors import WorklistError
from .models import Company

logger = logging.getLogger(__name__)

SYMBOL_COLUMN = "symbol"
NAME_COLUMNS = ("company name", "company")


def _find_column(columns, wanted: str) -> Optional[str]:
    for col in columns:
        if str(col).strip().lower() == wanted:
            return col
    return None


def _cell_text(value) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def read_sheet(path: Path) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise WorklistError(f"Worklist not found: {path}")
    try:
        if path.suffix.lower() == ".csv":
            return pd.read_csv(path, dtype=object)
        return pd.read_excel(path, sheet_name=0, dtype=object)
    except Exception as e:
        raise WorklistError(f"Could not read worklist {path}: {e}") from e


def companies_from_frame(df: pd.DataFrame) -> List[Company]:
    """Convert worklist rows to companies. Rows with a blank symbol are skipped."""
    if df.empty:
        raise WorklistError("Excel sheet is empty")

    symbol_col = _find_column(df.columns, SYMBOL_COLUMN)
    if symbol_col is None:
        raise WorklistError("No 'symbol' column found in Excel sheet.")

    name_col = None
    for wanted in NAME_COLUMNS:
        name_col = _find_column(df.columns, wanted)
        if name_col is not None:
            break

    companies = []
    for _, row in df.iterrows():
        symbol = _cell_text(row[symbol_col])
        if not symbol:
            continue
        name = _cell_text(row[name_col]) if name_col is not None else ""
        companies.append(Company(symbol=symbol, name=name))
    return companies


def load_worklist(path: Path) -> List[Company]:
    """Load the worklist. Raises WorklistError for any startup problem."""
    companies = companies_from_frame(read_sheet(path))
    logger.info(f"Worklist has {len(companies)} companies")
    return companies
