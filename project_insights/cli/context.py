"""Shared state passed from the ``insights`` group to its commands."""

import datetime as dt
from pathlib import Path
from typing import Optional

from project_insights.config.settings import InsightsConfig
from project_insights.readers.snapshot_reader import SnapshotReader
from project_insights.services.backend_client import BackendClient
from project_insights.services.repository import EntityRepository


class AppContext:
    """
    Lazily built services for one CLI invocation.

    Args:
        config: Loaded configuration
        today: Reference date for every date-sensitive calculation
        snapshot: JSON snapshot to read instead of the backend
        debug: Whether to show full stack traces
        generated_at: Fixed timestamp for output files (defaults to the clock)
    """

    def __init__(
        self,
        config: InsightsConfig,
        today: dt.date,
        snapshot: Optional[Path] = None,
        debug: bool = False,
        generated_at: Optional[dt.datetime] = None,
    ):
        self.config = config
        self.today = today
        self.snapshot = snapshot
        self.debug = debug
        self.generated_at = generated_at
        self._client: Optional[BackendClient] = None
        self._repository: Optional[EntityRepository] = None

    @property
    def offline(self) -> bool:
        """True when records come from a snapshot and no backend is used."""
        return self.snapshot is not None

    def now(self) -> dt.datetime:
        return self.generated_at or dt.datetime.now()

    def client(self) -> BackendClient:
        if self._client is None:
            self._client = BackendClient.from_config(self.config)
        return self._client

    def repository(self) -> EntityRepository:
        if self._repository is None:
            if self.snapshot is not None:
                source = SnapshotReader(self.snapshot)
            else:
                source = self.client()
            self._repository = EntityRepository(source)
        return self._repository
