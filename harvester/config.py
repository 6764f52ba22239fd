"""
Configuration and path management for the annual report harvester.
All paths are relative to the project root (the directory holding harvester/).
"""

from pathlib import Path

# Project root: one level up from harvester/
_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = _THIS_DIR.parent

# ── Input / output ────────────────────────────────────────────────────────────

WORKLIST_FILE = PROJECT_ROOT / "companies.xlsx"
OUTPUT_DIR = PROJECT_ROOT

BSE_FOLDER_NAME = "BSE_AnnualReports"
NSE_FOLDER_NAME = "NSE_AnnualReports"

FAILURE_REPORT_NAME = "not_found_companies.xlsx"
FAILURE_REPORT_SHEET = "ErrorsAndMissing"
REPORT_COLUMNS = ["Symbol", "Company Name", "Error/Status Messages"]

# ── Acquisition policy ────────────────────────────────────────────────────────

# Reports for fiscal years before this are never downloaded
MIN_REPORT_YEAR = 2009

# Archives below this size are treated as malformed and not extracted
MIN_ARCHIVE_BYTES = 1024

# ── BSE (primary source) ─────────────────────────────────────────────────────

BSE_ANNUAL_REPORTS_URL = "https://www.bseindia.com/corporates/HistoricalAnnualReport.aspx"
BSE_SEARCH_INPUT = "#ContentPlaceHolder1_SmartSearch_smartSearch"
BSE_SUGGESTION_LIST = "#ulSearchQuote2"
BSE_SUGGESTION_ITEM = "#ulSearchQuote2 li.quotemenu"
BSE_SUBMIT_BUTTON = "#ContentPlaceHolder1_btnSubmit"
BSE_RESULTS_TABLE = "#ContentPlaceHolder1_grdAnnualReport"
BSE_NEXT_PAGE_LINK = 'a[href*="Page$2"]'

# Timeouts in milliseconds (Playwright convention)
BSE_PAGE_TIMEOUT_MS = 30_000
BSE_SUGGESTION_TIMEOUT_MS = 10_000
BSE_SUBMIT_TIMEOUT_MS = 20_000
BSE_RESULTS_TIMEOUT_MS = 15_000
BSE_NEXT_PAGE_TIMEOUT_MS = 15_000
BSE_NEXT_RESULTS_TIMEOUT_MS = 10_000

# ── NSE (fallback source) ────────────────────────────────────────────────────

NSE_QUOTE_URL = "https://www.nseindia.com/get-quotes/equity?symbol={symbol}"
NSE_ANNUAL_REPORTS_TAB = "#annualReports"
NSE_ANNUAL_REPORTS_PANEL = "#Annual_Reports"
NSE_ANNUAL_REPORTS_ROWS = "#Annual_Reports table tbody tr"

NSE_PAGE_TIMEOUT_MS = 60_000
NSE_PANEL_TIMEOUT_MS = 30_000

NSE_VIEWPORT = {"width": 1280, "height": 1000}
SCREENSHOT_TEMPLATE = "debug_{source}_{symbol}.png"

# ── Browser / HTTP settings ──────────────────────────────────────────────────

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/115.0.0.0 Safari/537.36"
)

REQUEST_TIMEOUT = 60
REQUEST_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "application/pdf,application/zip,application/octet-stream,*/*",
}
DOWNLOAD_CHUNK_SIZE = 64 * 1024
PROGRESS_INTERVAL_SECONDS = 1.0
