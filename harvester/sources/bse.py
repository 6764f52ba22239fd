"""
BSE source - historical annual reports from bseindia.com.
The primary source: search by symbol, then read the ASP.NET results grid
(first page plus at most one continuation page).
"""

import logging
from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from ..base_source import ReportSource, make_reference
from ..config import (
    BSE_ANNUAL_REPORTS_URL,
    BSE_FOLDER_NAME,
    BSE_NEXT_PAGE_LINK,
    BSE_NEXT_PAGE_TIMEOUT_MS,
    BSE_NEXT_RESULTS_TIMEOUT_MS,
    BSE_PAGE_TIMEOUT_MS,
    BSE_RESULTS_TABLE,
    BSE_RESULTS_TIMEOUT_MS,
    BSE_SEARCH_INPUT,
    BSE_SUBMIT_BUTTON,
    BSE_SUBMIT_TIMEOUT_MS,
    BSE_SUGGESTION_ITEM,
    BSE_SUGGESTION_LIST,
    BSE_SUGGESTION_TIMEOUT_MS,
)
from ..ledger import ErrorLedger
from ..models import Company, Discovery, ReportFormat, ReportReference

logger = logging.getLogger(__name__)


def parse_results_grid(html: str, base_url: str = BSE_ANNUAL_REPORTS_URL,
                       table_selector: str = BSE_RESULTS_TABLE) -> List[ReportReference]:
    """Read report references out of the results grid markup.

    The first row is the header. A data row needs a year cell and a link
    cell; the link is resolved against ``base_url`` and must end up https.
    """
    soup = BeautifulSoup(html, "html.parser")
    table = soup.select_one(table_selector)
    if table is None:
        return []

    body = table.find("tbody", recursive=False) or table
    rows = body.find_all("tr", recursive=False)

    references = []
    for row in rows[1:]:
        cells = row.find_all("td", recursive=False)
        if len(cells) < 2:
            continue
        year_text = cells[0].get_text(strip=True)
        link = cells[1].find("a", href=True)
        if link is None:
            continue
        url = urljoin(base_url, link["href"].strip())
        ref = make_reference(year_text, url, ReportFormat.PDF)
        if ref is not None:
            references.append(ref)
    return references


class BseReportSource(ReportSource):
    """Drives the BSE historical annual report search on a long-lived page."""

    name = "BSE"
    folder_name = BSE_FOLDER_NAME

    def __init__(self, page: Page, ledger: ErrorLedger,
                 page_timeout: int = BSE_PAGE_TIMEOUT_MS,
                 suggestion_timeout: int = BSE_SUGGESTION_TIMEOUT_MS,
                 submit_timeout: int = BSE_SUBMIT_TIMEOUT_MS,
                 results_timeout: int = BSE_RESULTS_TIMEOUT_MS,
                 next_page_timeout: int = BSE_NEXT_PAGE_TIMEOUT_MS,
                 next_results_timeout: int = BSE_NEXT_RESULTS_TIMEOUT_MS):
        super().__init__(ledger)
        self.page = page
        self.page_timeout = page_timeout
        self.suggestion_timeout = suggestion_timeout
        self.submit_timeout = submit_timeout
        self.results_timeout = results_timeout
        self.next_page_timeout = next_page_timeout
        self.next_results_timeout = next_results_timeout

    def discover(self, company: Company) -> Discovery:
        logger.info(f"Trying BSE reports for {company.name} ({company.symbol})")
        page = self.page
        try:
            page.goto(BSE_ANNUAL_REPORTS_URL, wait_until="networkidle", timeout=self.page_timeout)
            page.wait_for_selector(BSE_SEARCH_INPUT, timeout=self.page_timeout)

            search = page.locator(BSE_SEARCH_INPUT)
            search.click(click_count=3)
            search.press_sequentially(company.symbol)

            self._pick_suggestion()

            with page.expect_navigation(wait_until="networkidle", timeout=self.submit_timeout):
                page.click(BSE_SUBMIT_BUTTON)
            page.wait_for_selector(BSE_RESULTS_TABLE, timeout=self.results_timeout)

            references = self._read_grid()
        except PlaywrightError as e:
            return self._fail(company, e)

        references.extend(self._read_continuation(company))

        logger.info(f"BSE lists {len(references)} reports for {company.symbol}")
        return Discovery(references=references, found=True)

    def _read_continuation(self, company: Company) -> List[ReportReference]:
        """Second results page, if any. A failure here keeps the first page's references."""
        page = self.page
        try:
            next_link = page.query_selector(BSE_NEXT_PAGE_LINK)
            if next_link is None:
                return []
            with page.expect_navigation(wait_until="networkidle", timeout=self.next_page_timeout):
                next_link.click()
            page.wait_for_selector(BSE_RESULTS_TABLE, timeout=self.next_results_timeout)
            return self._read_grid()
        except PlaywrightError as e:
            self.ledger.add(
                company.symbol, company.name,
                f"{self.name} scraping failed for {company.symbol}: {e}",
                level=logging.WARNING,
            )
            return []

    def _pick_suggestion(self) -> None:
        # Some symbols resolve without an autocomplete entry
        try:
            self.page.wait_for_selector(BSE_SUGGESTION_LIST, timeout=self.suggestion_timeout)
            self.page.click(BSE_SUGGESTION_ITEM)
        except PlaywrightError:
            logger.debug("No BSE autocomplete suggestion, submitting as typed")

    def _read_grid(self) -> List[ReportReference]:
        return parse_results_grid(self.page.content(), base_url=self.page.url or BSE_ANNUAL_REPORTS_URL)
