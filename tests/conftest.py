"""Shared fixtures: in-memory report sources and a downloader that never touches the network."""
import io
import zipfile
from pathlib import Path

import pytest

from harvester.base_source import ReportSource
from harvester.errors import TransferError
from harvester.ledger import ErrorLedger
from harvester.models import Discovery, DownloadedFile


class FakeSource(ReportSource):
    """Report source double returning a fixed discovery."""

    def __init__(self, ledger, name, folder_name, references=None, found=True, error=None):
        super().__init__(ledger)
        self.name = name
        self.folder_name = folder_name
        self.references = list(references or [])
        self.found = found
        self.error = error
        self.calls = []

    def discover(self, company):
        self.calls.append(company)
        if self.error is not None:
            raise self.error
        if not self.found:
            return self._fail(company, Exception("Timeout 15000ms exceeded."))
        return Discovery(references=list(self.references), found=True)


class FakeDownloader:
    """Writes canned bytes per URL; URLs mapped to an int fail with that status."""

    def __init__(self, payloads=None):
        self.payloads = payloads or {}
        self.fetched = []

    def fetch(self, url, destination):
        self.fetched.append(url)
        payload = self.payloads.get(url, b"%PDF-1.4 test")
        if isinstance(payload, int):
            raise TransferError(f"Failed to download '{url}' (Status {payload})", url=url,
                                status_code=payload)
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(payload)
        return DownloadedFile(path=destination, bytes=len(payload))


def build_zip(entries, pad_to=2048):
    """Zip ``{name: bytes}`` uncompressed, padding the first entry so the archive passes the size guard."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_STORED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
        if pad_to:
            zf.writestr("padding.txt", b"x" * pad_to)
    return buf.getvalue()


@pytest.fixture
def ledger():
    return ErrorLedger()


@pytest.fixture
def zip_bytes():
    return build_zip


@pytest.fixture
def make_source(ledger):
    def factory(name="BSE", folder_name="BSE_AnnualReports", **kwargs):
        return FakeSource(ledger, name, folder_name, **kwargs)
    return factory


@pytest.fixture
def make_downloader():
    return FakeDownloader
