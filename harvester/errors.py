"""Exception types raised by the harvester."""

from typing import Optional


class HarvesterError(Exception):
    """Base class for harvester errors."""


class WorklistError(HarvesterError):
    """The worklist is missing, empty, or has no symbol column. Fatal at startup."""


class TransferError(HarvesterError):
    """A report download failed (bad status or a broken connection)."""

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
