"""
Archive normalizer - turns a downloaded report zip into SYMBOL_YEAR.pdf.
"""

import logging
import zipfile
from pathlib import Path

from .config import MIN_ARCHIVE_BYTES
from .ledger import ErrorLedger
from .naming import canonical_pdf_name

logger = logging.getLogger(__name__)


class ArchiveNormalizer:
    """Extracts PDFs from report archives under the canonical name.

    Never raises: every failure is written to the ledger. Archives that are
    too small or unreadable are left on disk for manual inspection; any
    archive that was opened successfully is deleted afterwards.
    """

    def __init__(self, ledger: ErrorLedger, min_bytes: int = MIN_ARCHIVE_BYTES):
        self.ledger = ledger
        self.min_bytes = min_bytes

    def normalize(self, archive_path: Path, target_folder: Path, symbol: str, year: int) -> None:
        archive_path = Path(archive_path)
        target_folder = Path(target_folder)
        try:
            size = archive_path.stat().st_size
            if size < self.min_bytes:
                self.ledger.add(
                    symbol, "",
                    f"ZIP file too small ({size} bytes), skipping extraction: {archive_path}",
                    level=logging.WARNING,
                )
                return

            output_path = target_folder / canonical_pdf_name(symbol, year)
            extracted = False
            with zipfile.ZipFile(archive_path) as archive:
                for entry in archive.infolist():
                    if entry.is_dir() or not entry.filename.lower().endswith(".pdf"):
                        continue
                    # Several PDFs in one archive collapse onto the same name; last one wins
                    output_path.write_bytes(archive.read(entry))
                    logger.info(f"Extracted PDF from ZIP and renamed: {output_path}")
                    extracted = True

            if not extracted:
                self.ledger.add(symbol, "", f"No PDF found inside ZIP: {archive_path}",
                                level=logging.WARNING)

            archive_path.unlink()
        except Exception as e:
            self.ledger.add(symbol, "", f"Error extracting ZIP file {archive_path}: {e}")
