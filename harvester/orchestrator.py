"""
Orchestrator - end-to-end acquisition runner.
For every worklist company: try BSE, fall back to NSE, and record anything
that went wrong in the error ledger. The ledger becomes the failure report.

Usage:
    python -m harvester.orchestrator
    python -m harvester.orchestrator --worklist companies.xlsx --output-dir ./reports
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional

from .archive import ArchiveNormalizer
from .base_source import ReportSource
from .config import (
    BROWSER_USER_AGENT,
    FAILURE_REPORT_NAME,
    MIN_REPORT_YEAR,
    OUTPUT_DIR,
    WORKLIST_FILE,
)
from .downloader import ReportDownloader
from .errors import TransferError, WorklistError
from .ledger import ErrorLedger
from .models import Company, Outcome, ReportFormat, ReportReference
from .naming import report_filename
from .worklist import load_worklist

logger = logging.getLogger(__name__)

NOT_FOUND_TEMPLATE = "Reports not found on either source ({sources}) for {symbol}"


class AcquisitionOrchestrator:
    """Runs the primary/fallback acquisition for each company, one at a time."""

    def __init__(self, primary: ReportSource, fallback: ReportSource,
                 downloader: ReportDownloader, ledger: ErrorLedger,
                 output_dir: Path = OUTPUT_DIR,
                 normalizer: Optional[ArchiveNormalizer] = None):
        self.primary = primary
        self.fallback = fallback
        self.downloader = downloader
        self.ledger = ledger
        self.output_dir = Path(output_dir)
        self.normalizer = normalizer or ArchiveNormalizer(ledger)

    def run(self, companies: Iterable[Company]) -> Dict[str, Outcome]:
        outcomes = {}
        for company in companies:
            logger.info(f"\n--- {company.name} ({company.symbol}) ---")
            try:
                outcome = self.process(company)
            except Exception as e:
                self.ledger.add(company.symbol, company.name,
                                f"Error processing {company.symbol}: {e}")
                self._record_not_found(company)
                outcome = Outcome.UNSATISFIED
            outcomes[company.symbol] = outcome
        return outcomes

    def process(self, company: Company) -> Outcome:
        if self._acquire(self.primary, company):
            logger.info(f"{company.symbol}: satisfied from {self.primary.name}")
            return Outcome.SATISFIED_PRIMARY
        if self._acquire(self.fallback, company):
            logger.info(f"{company.symbol}: satisfied from {self.fallback.name}")
            return Outcome.SATISFIED_FALLBACK
        self._record_not_found(company)
        return Outcome.UNSATISFIED

    def _record_not_found(self, company: Company) -> None:
        sources = f"{self.primary.name}, {self.fallback.name}"
        self.ledger.add(company.symbol, company.name,
                        NOT_FOUND_TEMPLATE.format(sources=sources, symbol=company.symbol))

    def _acquire(self, source: ReportSource, company: Company) -> bool:
        """Discover and download every reference. True if any download succeeded."""
        discovery = source.discover(company)
        if not discovery.found:
            return False
        if not discovery.references:
            logger.info(f"{source.name}: nothing to download for {company.symbol}")
            return False

        folder = source.folder_for(self.output_dir, company)
        folder.mkdir(parents=True, exist_ok=True)

        downloaded_any = False
        for ref in discovery.references:
            if ref.year < MIN_REPORT_YEAR:
                continue
            if self._download(source, company, folder, ref):
                downloaded_any = True
        return downloaded_any

    def _download(self, source: ReportSource, company: Company,
                  folder: Path, ref: ReportReference) -> bool:
        filename = report_filename(company.symbol, ref.year, ref.format)
        dest = folder / filename
        logger.info(f"Downloading {source.name} report: {filename}...")
        try:
            downloaded = self.downloader.fetch(ref.url, dest)
        except (TransferError, OSError) as e:
            self.ledger.add(company.symbol, company.name,
                            f"Failed to download {source.name} report {filename}: {e}")
            return False

        # PDFs are fetched straight to SYMBOL_YEAR.pdf; zips need unpacking
        if ref.format is ReportFormat.ZIP:
            self.normalizer.normalize(downloaded.path, folder, company.symbol, ref.year)
        return True


def _summarize(outcomes: Dict[str, Outcome]) -> None:
    logger.info("=" * 60)
    logger.info("HARVEST SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Companies processed: {len(outcomes)}")
    logger.info(f"Satisfied: {sum(1 for o in outcomes.values() if o.satisfied)}")
    for outcome in Outcome:
        count = sum(1 for o in outcomes.values() if o is outcome)
        logger.info(f"  {outcome.value}: {count}")


def finish_run(ledger: ErrorLedger, report_path: Path) -> None:
    """Write the failure report if anything was recorded. Never raises."""
    if len(ledger) == 0:
        logger.info("All companies have reports on BSE or NSE.")
        return
    try:
        ledger.write_report(report_path)
    except Exception as e:
        logger.error(f"Failed writing not found companies report: {e}")


def run_pipeline(worklist_path: Path = WORKLIST_FILE, output_dir: Path = OUTPUT_DIR,
                 report_path: Optional[Path] = None, headless: bool = True) -> Dict[str, Outcome]:
    """Load the worklist, harvest every company, write the failure report.

    Raises WorklistError before launching the browser if the worklist is unusable.
    """
    from playwright.sync_api import sync_playwright

    from .sources.bse import BseReportSource
    from .sources.nse import NseReportSource

    output_dir = Path(output_dir)
    report_path = Path(report_path) if report_path else output_dir / FAILURE_REPORT_NAME

    logger.info("=" * 60)
    logger.info("ANNUAL REPORT HARVEST - BSE with NSE fallback")
    logger.info("=" * 60)

    companies = load_worklist(worklist_path)

    ledger = ErrorLedger()
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=headless)
        try:
            context = browser.new_context(user_agent=BROWSER_USER_AGENT)
            orchestrator = AcquisitionOrchestrator(
                primary=BseReportSource(context.new_page(), ledger),
                fallback=NseReportSource(context, ledger, screenshot_dir=output_dir),
                downloader=ReportDownloader(),
                ledger=ledger,
                output_dir=output_dir,
            )
            outcomes = orchestrator.run(companies)
        finally:
            browser.close()

    finish_run(ledger, report_path)
    _summarize(outcomes)
    logger.info("All done!")
    return outcomes


def main(argv=None) -> int:
    """Entry point."""
    parser = argparse.ArgumentParser(description="Download BSE/NSE annual reports for a worklist")
    parser.add_argument("--worklist", type=Path, default=WORKLIST_FILE,
                        help="Spreadsheet with a Symbol column (default: %(default)s)")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR,
                        help="Where report folders and the failure report go")
    parser.add_argument("--report", type=Path, default=None,
                        help=f"Failure report path (default: OUTPUT_DIR/{FAILURE_REPORT_NAME})")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    try:
        run_pipeline(
            worklist_path=args.worklist,
            output_dir=args.output_dir,
            report_path=args.report,
            headless=not args.headed,
        )
    except WorklistError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
