import logging
from typing import List, Optional

from photomirror import google_photos_api as gapi
from photomirror.config import DEFAULT_TIMEOUT, PAGE_SIZE
from photomirror.errors import PageFetchFailure
from photomirror.models import RemoteMediaItem


class InventoryFetcher:
    """
    Walks mediaItems.list page by page and accumulates the whole library.

    A failed page is not retried: the loop stops and whatever was gathered
    so far is returned as the inventory. Only AuthFailure from the token
    provider escapes fetch().
    """

    def __init__(self, token_provider, page_size: int = PAGE_SIZE,
                 timeout: float = DEFAULT_TIMEOUT,
                 logger_obj: Optional[logging.Logger] = None):
        self.token_provider = token_provider
        self.page_size = page_size
        self.timeout = timeout
        self.logger = logger_obj or logging.getLogger(__name__)
        self.last_failure: Optional[PageFetchFailure] = None

    def fetch(self) -> List[RemoteMediaItem]:
        self.last_failure = None
        media_items: List[RemoteMediaItem] = []
        page_token = None
        page_number = 0

        while True:
            page_number += 1
            token = self.token_provider.current_token()

            try:
                items, page_token = self._fetch_page(token, page_token, page_number)
            except PageFetchFailure as failure:
                self.last_failure = failure
                self.logger.error(
                    "Listing stopped at %s; continuing with %d items",
                    failure, len(media_items),
                )
                break

            media_items.extend(items)
            self.logger.debug(
                "Page %d: %d items (total so far: %d)",
                page_number, len(items), len(media_items),
            )

            if not page_token:
                break

        self.logger.info("Fetched a total of %d media items.", len(media_items))
        return media_items

    def _fetch_page(self, token: str, page_token: Optional[str], page_number: int):
        """
        Returns (items, next_page_token) or raises PageFetchFailure.
        The page is parsed completely before anything is handed back.
        """
        try:
            data = gapi.list_media_items(
                token, page_token=page_token,
                page_size=self.page_size, timeout=self.timeout,
            )
        except gapi.RemoteRequestError as e:
            raise PageFetchFailure(page_number, str(e), status=e.status) from e

        raw_items = data.get("mediaItems") or []
        if not isinstance(raw_items, list):
            raise PageFetchFailure(page_number, "'mediaItems' is not a list")

        try:
            items = [RemoteMediaItem.from_api(item) for item in raw_items]
        except ValueError as e:
            raise PageFetchFailure(page_number, str(e)) from e

        next_token = data.get("nextPageToken") or None
        if next_token is not None and not isinstance(next_token, str):
            raise PageFetchFailure(page_number, "'nextPageToken' is not a string")
        return items, next_token
