"""
Report downloader with live transfer-speed reporting.
Streams each report straight to disk so large archives never sit in memory.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Callable, Optional

import requests

from .config import (
    DOWNLOAD_CHUNK_SIZE,
    PROGRESS_INTERVAL_SECONDS,
    REQUEST_HEADERS,
    REQUEST_TIMEOUT,
)
from .errors import TransferError
from .models import DownloadedFile

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def print_speed(bytes_per_interval: int) -> None:
    """Default progress reporter: one rewritten console line."""
    sys.stdout.write(f"\rDownloading: {bytes_per_interval / 1024:.2f} KB/s")
    sys.stdout.flush()


class ThroughputMonitor:
    """Samples a byte counter at a fixed cadence and reports the delta.

    The monitor only reads ``received``; the download loop is the only writer.
    """

    def __init__(self, on_progress: ProgressCallback = print_speed,
                 interval: float = PROGRESS_INTERVAL_SECONDS):
        self.on_progress = on_progress
        self.interval = interval
        self.received = 0
        self._last_sample = 0
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name="download-progress", daemon=True)

    def start(self) -> "ThroughputMonitor":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stopped.set()
        if self._thread.is_alive():
            self._thread.join()

    def sample(self) -> int:
        current = self.received
        delta = current - self._last_sample
        self._last_sample = current
        try:
            self.on_progress(delta)
        except Exception as e:
            logger.debug(f"Progress reporter failed: {e}")
        return delta

    def _run(self):
        while not self._stopped.wait(self.interval):
            self.sample()


class ReportDownloader:
    """Downloads one report URL to a local path."""

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = REQUEST_TIMEOUT,
                 chunk_size: int = DOWNLOAD_CHUNK_SIZE,
                 on_progress: Optional[ProgressCallback] = print_speed,
                 progress_interval: float = PROGRESS_INTERVAL_SECONDS):
        if session is None:
            session = requests.Session()
            session.headers.update(REQUEST_HEADERS)
        self.session = session
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.on_progress = on_progress
        self.progress_interval = progress_interval

    def fetch(self, url: str, destination: Path) -> DownloadedFile:
        """Download ``url`` to ``destination``.

        Raises TransferError on a non-200 status or a connection failure.
        A partially written file is left where it is.
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True, allow_redirects=True)
        except requests.RequestException as e:
            raise TransferError(f"Failed to download '{url}': {e}", url=url) from e

        with response:
            if response.status_code != 200:
                raise TransferError(
                    f"Failed to download '{url}' (Status {response.status_code})",
                    url=url,
                    status_code=response.status_code,
                )

            monitor = ThroughputMonitor(self.on_progress or (lambda _: None), self.progress_interval)
            monitor.start()
            completed = False
            try:
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
                            monitor.received += len(chunk)
                completed = True
            except requests.RequestException as e:
                raise TransferError(f"Connection failed while downloading '{url}': {e}", url=url) from e
            finally:
                monitor.stop()
                if self.on_progress is not None:
                    # Terminate the rewritten progress line either way
                    sys.stdout.write("\rDownload complete!           \n" if completed else "\n")
                    sys.stdout.flush()

        size = destination.stat().st_size
        logger.info(f"Downloaded {size / 1024 / 1024:.1f} MB -> {destination.name}")
        return DownloadedFile(path=destination, bytes=size)
