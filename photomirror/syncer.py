import logging
from dataclasses import dataclass
from typing import List, Optional

from photomirror.auth import AuthManager
from photomirror.config import SyncConfig
from photomirror.fetcher import InventoryFetcher
from photomirror.local_store import LocalDirectory
from photomirror.models import RemoteMediaItem, SyncStats
from photomirror.reconciler import Reconciler


@dataclass
class SyncResult:
    inventory: List[RemoteMediaItem]
    stats: SyncStats
    partial: bool


class PhotoSync:
    """
    Orchestrates one mirror run:
     - authenticate
     - list the whole remote library
     - reconcile the local directory against it
    Only AuthFailure escapes run(); everything else ends up in the result.
    """

    def __init__(self, config: SyncConfig, token_provider=None,
                 logger_obj: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger_obj or logging.getLogger(__name__)
        self.auth_manager = token_provider or AuthManager(config)
        self.local_dir = LocalDirectory(config.media_dir)

        self.fetcher = InventoryFetcher(
            self.auth_manager,
            timeout=config.request_timeout,
        )
        self.reconciler = Reconciler(
            self.auth_manager,
            download_suffix=config.download_suffix,
            timeout=config.request_timeout,
            preserve_timestamps=config.preserve_timestamps,
        )

    def authenticate(self):
        # Fails fast, before any listing request is issued
        self.auth_manager.current_token()

    def run(self) -> SyncResult:
        self.authenticate()

        self.logger.info("Fetching media items...")
        inventory = self.fetcher.fetch()

        self.logger.info("Reconciling %s against %d remote items...", self.local_dir.path, len(inventory))
        stats = self.reconciler.reconcile(inventory, self.local_dir)

        return SyncResult(
            inventory=inventory,
            stats=stats,
            partial=self.fetcher.last_failure is not None,
        )
