"""
NSE source - annual reports from the nseindia.com equity quote page.
The fallback source. Rows are pulled out of the annual reports panel in a
single browser-side evaluation and filtered here.
"""

import logging
from pathlib import Path
from urllib.parse import quote

from playwright.sync_api import BrowserContext
from playwright.sync_api import Error as PlaywrightError

from ..base_source import ReportSource, filter_rows
from ..config import (
    NSE_ANNUAL_REPORTS_PANEL,
    NSE_ANNUAL_REPORTS_ROWS,
    NSE_ANNUAL_REPORTS_TAB,
    NSE_FOLDER_NAME,
    NSE_PAGE_TIMEOUT_MS,
    NSE_PANEL_TIMEOUT_MS,
    NSE_QUOTE_URL,
    NSE_VIEWPORT,
    OUTPUT_DIR,
    SCREENSHOT_TEMPLATE,
)
from ..ledger import ErrorLedger
from ..models import Company, Discovery
from ..naming import sanitize_filename

logger = logging.getLogger(__name__)

# Runs in the page: one {year, url, type} record per table row
EXTRACT_ROWS_JS = """
rows => rows.map(row => {
    const yearTd = row.querySelector('td[data-ws-symbol-col*="toYr"]');
    const anchor = row.querySelector('td:nth-child(4) a');
    const url = anchor ? anchor.href : null;
    let type = null;
    if (url) {
        const u = url.toLowerCase();
        if (u.endsWith('.zip')) type = 'zip';
        else if (u.endsWith('.pdf')) type = 'pdf';
    }
    return {year: yearTd ? yearTd.textContent.trim() : null, url, type};
})
"""


class NseReportSource(ReportSource):
    """Reads the annual reports panel of the NSE quote page, one fresh page per company."""

    name = "NSE"
    folder_name = NSE_FOLDER_NAME

    def __init__(self, context: BrowserContext, ledger: ErrorLedger,
                 screenshot_dir: Path = OUTPUT_DIR,
                 page_timeout: int = NSE_PAGE_TIMEOUT_MS,
                 panel_timeout: int = NSE_PANEL_TIMEOUT_MS):
        super().__init__(ledger)
        self.context = context
        self.screenshot_dir = Path(screenshot_dir)
        self.page_timeout = page_timeout
        self.panel_timeout = panel_timeout

    def discover(self, company: Company) -> Discovery:
        logger.info(f"Trying NSE reports for {company.name} ({company.symbol})")
        page = self.context.new_page()
        try:
            page.set_viewport_size(NSE_VIEWPORT)
            url = NSE_QUOTE_URL.format(symbol=quote(company.symbol))
            page.goto(url, wait_until="networkidle", timeout=self.page_timeout)

            page.wait_for_selector(NSE_ANNUAL_REPORTS_TAB, state="visible", timeout=self.panel_timeout)
            page.click(NSE_ANNUAL_REPORTS_TAB)
            page.wait_for_selector(NSE_ANNUAL_REPORTS_PANEL, state="visible", timeout=self.panel_timeout)
            page.wait_for_selector(NSE_ANNUAL_REPORTS_ROWS, state="visible", timeout=self.panel_timeout)

            rows = page.eval_on_selector_all(NSE_ANNUAL_REPORTS_ROWS, EXTRACT_ROWS_JS)
        except PlaywrightError as e:
            discovery = self._fail(company, e)
            self._capture_screenshot(page, company)
            return discovery
        finally:
            self._close(page)

        references = filter_rows(rows or [])
        if not references:
            # An empty panel is not a navigation failure
            logger.info(f"NSE has no reports from the supported years for {company.symbol}")
        else:
            logger.info(f"NSE lists {len(references)} reports for {company.symbol}")
        return Discovery(references=references, found=True)

    def screenshot_path(self, company: Company) -> Path:
        filename = SCREENSHOT_TEMPLATE.format(source=self.name, symbol=company.symbol)
        return self.screenshot_dir / sanitize_filename(filename)

    def _capture_screenshot(self, page, company: Company) -> None:
        path = self.screenshot_path(company)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            page.screenshot(path=str(path), full_page=True)
            logger.info(f"Saved debug screenshot: {path}")
        except Exception as e:
            logger.warning(f"Could not capture debug screenshot for {company.symbol}: {e}")

    @staticmethod
    def _close(page) -> None:
        try:
            page.close()
        except PlaywrightError as e:
            logger.debug(f"Page close failed: {e}")
