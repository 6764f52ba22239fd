"""
Tests for the BSE and NSE report sources.

Row filtering and grid parsing are pure functions. Navigation is exercised
against Mock pages, so no browser is launched.
"""
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeout

from harvester.base_source import filter_rows, infer_format, make_reference, parse_year
from harvester.config import BSE_SUGGESTION_LIST, NSE_ANNUAL_REPORTS_PANEL
from harvester.models import Company, ReportFormat, ReportReference
from harvester.sources.bse import BseReportSource, parse_results_grid
from harvester.sources.nse import NseReportSource

BSE_URL = "https://www.bseindia.com/corporates/HistoricalAnnualReport.aspx"

GRID_HTML = """
<html><body>
<table id="ContentPlaceHolder1_grdAnnualReport">
  <tbody>
    <tr><th>Year</th><th>Annual Report</th></tr>
    <tr><td>2015-16</td><td><a href="/bseplus/AnnualReport/532540/5325400316.pdf">PDF</a></td></tr>
    <tr><td>2008</td><td><a href="https://www.bseindia.com/old.pdf">PDF</a></td></tr>
    <tr><td>N/A</td><td><a href="https://www.bseindia.com/na.pdf">PDF</a></td></tr>
    <tr><td>2012</td><td><a href="http://www.bseindia.com/insecure.pdf">PDF</a></td></tr>
    <tr><td>2013</td><td><a href="javascript:__doPostBack('x','')">PDF</a></td></tr>
    <tr><td>2014</td><td>No link</td></tr>
    <tr><td colspan="2">1 2</td></tr>
    <tr><td>2020</td><td><a href="https://www.bseindia.com/2020.pdf">PDF</a></td></tr>
  </tbody>
</table>
</body></html>
"""


class TestRowFilters:
    @pytest.mark.parametrize("text, expected", [
        ("2015", 2015),
        (" 2015-16", 2015),
        ("2019 (Revised)", 2019),
        ("FY2015", None),
        ("", None),
        (None, None),
        (2011, 2011),
    ])
    def test_parse_year(self, text, expected):
        assert parse_year(text) == expected

    @pytest.mark.parametrize("url, expected", [
        ("https://x.com/AR_2015.zip", ReportFormat.ZIP),
        ("https://x.com/AR_2015.PDF", ReportFormat.PDF),
        ("https://x.com/AR_2015.pdf?v=2", ReportFormat.PDF),
        ("https://x.com/AR_2015.html", None),
        (None, None),
    ])
    def test_infer_format(self, url, expected):
        assert infer_format(url) is expected

    def test_make_reference_boundaries(self):
        url = "https://nsearchives.nseindia.com/a.pdf"
        assert make_reference("2009", url, "pdf") == ReportReference(2009, url, ReportFormat.PDF)
        assert make_reference("2008", url, "pdf") is None
        assert make_reference("2015", "http://insecure.example/a.pdf", "pdf") is None
        assert make_reference("2015", url, None) is None
        assert make_reference("2015", url, "docx") is None

    def test_filter_rows_keeps_order_and_drops_invalid(self):
        rows = [
            {"year": "2019", "url": "https://n.com/a.zip", "type": "zip"},
            {"year": None, "url": "https://n.com/b.pdf", "type": "pdf"},
            {"year": "2018", "url": None, "type": None},
            None,
            {"year": "2010", "url": "https://n.com/c.pdf", "type": "pdf"},
        ]

        refs = filter_rows(rows)

        assert [(r.year, r.format) for r in refs] == [(2019, ReportFormat.ZIP), (2010, ReportFormat.PDF)]


class TestParseResultsGrid:
    def test_only_valid_rows_survive(self):
        refs = parse_results_grid(GRID_HTML, base_url=BSE_URL)

        assert [r.year for r in refs] == [2015, 2020]
        assert refs[0].url == "https://www.bseindia.com/bseplus/AnnualReport/532540/5325400316.pdf"
        assert all(r.format is ReportFormat.PDF for r in refs)

    def test_missing_table(self):
        assert parse_results_grid("<html><body>No records</body></html>") == []


def _bse_page(html=GRID_HTML):
    page = MagicMock()
    page.url = BSE_URL
    page.content.return_value = html
    page.query_selector.return_value = None
    return page


class TestBseReportSource:
    def test_discover_reads_grid(self, ledger):
        page = _bse_page()
        source = BseReportSource(page, ledger)

        discovery = source.discover(Company("TCS", "Tata Consultancy"))

        assert discovery.found
        assert [r.year for r in discovery.references] == [2015, 2020]
        page.locator.return_value.press_sequentially.assert_called_once_with("TCS")
        assert len(ledger) == 0

    def test_follows_one_continuation_page(self, ledger):
        page = _bse_page()
        next_link = MagicMock()
        page.query_selector.return_value = next_link

        discovery = BseReportSource(page, ledger).discover(Company("TCS"))

        next_link.click.assert_called_once()
        assert len(discovery.references) == 4

    def test_continuation_failure_keeps_first_page(self, ledger):
        page = _bse_page()
        next_link = MagicMock()
        next_link.click.side_effect = PlaywrightTimeout("Timeout 15000ms exceeded.")
        page.query_selector.return_value = next_link

        discovery = BseReportSource(page, ledger).discover(Company("TCS"))

        assert discovery.found
        assert [r.year for r in discovery.references] == [2015, 2020]
        assert ledger.messages("TCS") == ["BSE scraping failed for TCS: Timeout 15000ms exceeded."]

    def test_missing_suggestion_is_not_an_error(self, ledger):
        page = _bse_page()

        def wait_for_selector(selector, **kwargs):
            if selector == BSE_SUGGESTION_LIST:
                raise PlaywrightTimeout("Timeout 10000ms exceeded.")

        page.wait_for_selector.side_effect = wait_for_selector

        discovery = BseReportSource(page, ledger).discover(Company("TCS"))

        assert discovery.found
        assert len(ledger) == 0

    def test_timeout_recorded_as_not_found(self, ledger):
        page = _bse_page()
        page.goto.side_effect = PlaywrightTimeout("Timeout 30000ms exceeded.")

        discovery = BseReportSource(page, ledger).discover(Company("GHOST", "Ghost Ltd"))

        assert not discovery.found
        assert discovery.references == []
        assert ledger.messages("GHOST") == [
            "BSE scraping failed for GHOST: Timeout 30000ms exceeded."
        ]


def _nse_context(rows=None):
    context = MagicMock()
    page = context.new_page.return_value
    page.eval_on_selector_all.return_value = rows if rows is not None else []
    return context, page


class TestNseReportSource:
    def test_rows_filtered(self, ledger, tmp_path):
        context, page = _nse_context([
            {"year": "2021", "url": "https://nsearchives.nseindia.com/AR_2021.zip", "type": "zip"},
            {"year": "2007", "url": "https://nsearchives.nseindia.com/AR_2007.pdf", "type": "pdf"},
        ])

        discovery = NseReportSource(context, ledger, screenshot_dir=tmp_path).discover(Company("TCS"))

        assert discovery.found
        assert discovery.references == [
            ReportReference(2021, "https://nsearchives.nseindia.com/AR_2021.zip", ReportFormat.ZIP)
        ]
        assert "symbol=TCS" in page.goto.call_args[0][0]
        page.close.assert_called_once()

    def test_empty_panel_is_found_without_screenshot(self, ledger, tmp_path):
        context, page = _nse_context([])

        discovery = NseReportSource(context, ledger, screenshot_dir=tmp_path).discover(Company("TCS"))

        assert discovery.found
        assert discovery.references == []
        page.screenshot.assert_not_called()
        assert len(ledger) == 0

    def test_timeout_records_error_and_screenshot(self, ledger, tmp_path):
        context, page = _nse_context()

        def wait_for_selector(selector, **kwargs):
            if selector == NSE_ANNUAL_REPORTS_PANEL:
                raise PlaywrightTimeout("Timeout 30000ms exceeded.")

        page.wait_for_selector.side_effect = wait_for_selector
        source = NseReportSource(context, ledger, screenshot_dir=tmp_path)

        discovery = source.discover(Company("M&M", "Mahindra"))

        assert not discovery.found
        assert ledger.messages("M&M") == ["NSE scraping failed for M&M: Timeout 30000ms exceeded."]
        _, kwargs = page.screenshot.call_args
        assert kwargs["path"] == str(tmp_path / "debug_NSE_M&M.png")
        assert kwargs["full_page"] is True
        page.close.assert_called_once()

    def test_screenshot_failure_does_not_mask_error(self, ledger, tmp_path):
        context, page = _nse_context()
        page.goto.side_effect = PlaywrightTimeout("Timeout 60000ms exceeded.")
        page.screenshot.side_effect = RuntimeError("page crashed")

        discovery = NseReportSource(context, ledger, screenshot_dir=tmp_path).discover(Company("TCS"))

        assert not discovery.found
        assert len(ledger.messages("TCS")) == 1
        page.close.assert_called_once()

    def test_screenshot_name_is_sanitized(self, ledger, tmp_path):
        source = NseReportSource(MagicMock(), ledger, screenshot_dir=tmp_path)
        assert source.screenshot_path(Company("A/B")).name == "debug_NSE_AB.png"
