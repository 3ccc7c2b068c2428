"""Error types raised and recorded during a sync run."""

from typing import Optional


class PhotoMirrorError(Exception):
    """Base class for all photomirror errors."""


class AuthFailure(PhotoMirrorError):
    """No usable access token could be obtained. Fatal to the whole run."""


class PageFetchFailure(PhotoMirrorError):
    """One page of the media listing could not be fetched or parsed."""

    def __init__(self, page_number: int, reason: str, status: Optional[int] = None):
        self.page_number = page_number
        self.reason = reason
        self.status = status
        super().__init__(f"page {page_number}: {reason}")


class ItemFailure(PhotoMirrorError):
    """A single local file could not be downloaded or deleted."""

    kind = "item"

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"{name}: {reason}")


class ItemDownloadFailure(ItemFailure):
    kind = "download"


class ItemDeleteFailure(ItemFailure):
    kind = "delete"
