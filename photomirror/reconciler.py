import logging
from typing import Iterable, Optional

from photomirror import google_photos_api as gapi
from photomirror.config import DEFAULT_TIMEOUT, DOWNLOAD_SUFFIX
from photomirror.errors import ItemDeleteFailure, ItemDownloadFailure
from photomirror.local_store import LocalDirectory
from photomirror.models import RemoteMediaItem, SyncStats

_INVALID_NAMES = {"", ".", ".."}


class Reconciler:
    """
    Makes a local directory's file set match a remote inventory.

    Two phases, strictly in this order:
     1) prune: delete every snapshot file whose name no remote item maps to
     2) fetch-missing: download every remote item whose name is not on disk

    Per-item failures are recorded in the returned SyncStats and the pass
    moves on to the next item.
    """

    def __init__(self, token_provider, download_suffix: str = DOWNLOAD_SUFFIX,
                 timeout: float = DEFAULT_TIMEOUT, preserve_timestamps: bool = True,
                 logger_obj: Optional[logging.Logger] = None):
        self.token_provider = token_provider
        self.download_suffix = download_suffix
        self.timeout = timeout
        self.preserve_timestamps = preserve_timestamps
        self.logger = logger_obj or logging.getLogger(__name__)

    def reconcile(self, remote: Iterable[RemoteMediaItem], local_dir: LocalDirectory) -> SyncStats:
        remote = list(remote)
        stats = SyncStats()

        try:
            local_dir.ensure_exists()
        except OSError as e:
            self._record(stats, ItemDownloadFailure(str(local_dir.path), f"cannot create directory: {e}"))

        try:
            snapshot = local_dir.list_names()
        except OSError as e:
            self.logger.error("Cannot list %s: %s", local_dir.path, e)
            snapshot = set()

        self._prune(remote, snapshot, local_dir, stats)
        self._fetch_missing(remote, local_dir, stats)

        self.logger.info(
            "Reconciliation done: %d downloaded, %d skipped, %d deleted, %d errors",
            stats.downloaded, stats.skipped, stats.deleted, stats.errors,
        )
        return stats

    # -----------------------------
    # 1) PRUNE
    # -----------------------------

    def _prune(self, remote, snapshot, local_dir: LocalDirectory, stats: SyncStats):
        remote_names = {item.local_name for item in remote}
        orphans = sorted(snapshot - remote_names)
        if not orphans:
            self.logger.debug("No local files to remove.")
            return

        for name in orphans:
            try:
                local_dir.delete(name)
            except OSError as e:
                self._record(stats, ItemDeleteFailure(name, str(e)))
                continue
            stats.deleted += 1
            self.logger.info("Deleted local file: %s", name)

    # -----------------------------
    # 2) FETCH MISSING
    # -----------------------------

    def _fetch_missing(self, remote, local_dir: LocalDirectory, stats: SyncStats):
        for item in remote:
            name = item.local_name
            if name in _INVALID_NAMES or "\x00" in name:
                self._record(stats, ItemDownloadFailure(item.filename, "filename has no usable base name"))
                continue

            # Checked against the live directory, so a name already written
            # earlier in this loop counts as present.
            if local_dir.exists(name):
                stats.skipped += 1
                self.logger.debug("Skipping existing image: %s", name)
                continue

            try:
                self._download(item, name, local_dir)
            except ItemDownloadFailure as failure:
                self._record(stats, failure)
                continue
            stats.downloaded += 1

    def _download(self, item: RemoteMediaItem, name: str, local_dir: LocalDirectory):
        """
        Fetch the bits for one item and store them under name.
        Raises ItemDownloadFailure on any network or write error.
        """
        token = self.token_provider.current_token()
        url = gapi.download_url(item.base_url, self.download_suffix)

        self.logger.info("Downloading image: %s", item.filename)
        try:
            content = gapi.download_media(token, url, timeout=self.timeout)
        except gapi.RemoteRequestError as e:
            raise ItemDownloadFailure(name, str(e)) from e

        mtime = item.metadata.creation_timestamp() if self.preserve_timestamps else None
        try:
            local_dir.write_bytes(name, content, mtime=mtime)
        except (OSError, ValueError) as e:
            raise ItemDownloadFailure(name, f"write failed: {e}") from e

        self.logger.info("Saved image: %s", name)

    def _record(self, stats: SyncStats, failure):
        stats.record_failure(failure)
        self.logger.warning("%s failed for %s", failure.kind.capitalize(), failure)
