"""JSON snapshot reader.

A snapshot is one JSON object holding the backend collections, keyed either
by entity name ("Project", "Timesheet") or by a plural collection name
("projects", "timesheets"). It answers the same ``list_entities`` call as
the backend client, so the repository can read from either.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from project_insights.services.backend_client import normalize_record

logger = logging.getLogger(__name__)

COLLECTION_ALIASES = {
    "Project": ("projects",),
    "Timesheet": ("timesheets", "time_entries", "entries"),
    "Task": ("tasks",),
    "User": ("users",),
    "Sprint": ("sprints",),
    "Activity": ("activities",),
    "ProjectExpense": ("expenses", "project_expenses"),
}


class SnapshotError(Exception):
    """Raised when a snapshot file cannot be read."""


class SnapshotReader:
    """Reads backend collections from a JSON file.

    Args:
        path: Snapshot file path
        data: Already-decoded snapshot (skips the file)

    Example:
        >>> reader = SnapshotReader(data={"projects": [{"_id": "p1", "name": "Alpha"}]})
        >>> reader.list_entities("Project")
        [{'_id': 'p1', 'name': 'Alpha', 'id': 'p1'}]
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        if path is None and data is None:
            raise ValueError("Either path or data is required")
        self.path = Path(path) if path is not None else None
        self._data = data

    def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotError(f"Cannot read snapshot {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot {self.path} must contain a JSON object")

        logger.info(f"Loaded snapshot {self.path} ({len(data)} collections)")
        self._data = data
        return data

    def collection_names(self) -> List[str]:
        return sorted(self._load().keys())

    def list_entities(self, entity: str, **_ignored) -> List[Dict[str, Any]]:
        """Return the raw records of ``entity``, or [] when absent."""
        data = self._load()
        for key in (entity, *COLLECTION_ALIASES.get(entity, ())):
            if key in data:
                records = data[key]
                break
        else:
            logger.debug(f"Snapshot has no {entity} collection")
            return []

        if not isinstance(records, list):
            logger.warning(f"Snapshot collection {entity} is not a list")
            return []
        return [normalize_record(r) if isinstance(r, dict) else r for r in records]
