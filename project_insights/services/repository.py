"""
Read-through cache of backend collections with typed loaders.

The repository is an explicit object handed to whoever needs records; there
is no module-level cache. Each entity collection is fetched once, parsed into
models, and served from memory until invalidated.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Protocol

from project_insights.models import (
    Activity,
    BaseDataModel,
    Expense,
    Project,
    Sprint,
    Task,
    TimeEntry,
    User,
)
from project_insights.readers.record_reader import ENTITY_MODELS, parse_records
from project_insights.validators.validation_report import ValidationReport

logger = logging.getLogger(__name__)


class EntitySource(Protocol):
    """Anything that can list raw records of an entity."""

    def list_entities(self, entity: str) -> List[Dict[str, Any]]: ...


class EntityRepository:
    """
    Read-through cache over an EntitySource.

    Features:
    - One fetch per entity until ``invalidate`` is called
    - Records parsed into typed models at the boundary
    - Skipped records collected in a shared ValidationReport
    - Thread-safe cache access with lock protection
    - Hit/miss statistics

    Args:
        source: BackendClient or SnapshotReader
        report: Validation report to collect parse issues into

    Example:
        >>> repo = EntityRepository(SnapshotReader("snapshot.json"))
        >>> projects = repo.projects()
        >>> repo.projects() is projects
        True
    """

    def __init__(self, source: EntitySource, report: Optional[ValidationReport] = None):
        self.source = source
        self.report = report if report is not None else ValidationReport()
        self._raw: Dict[str, List[Dict[str, Any]]] = {}
        self._cache: Dict[str, List[BaseDataModel]] = {}
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "invalidations": 0}

    def raw(self, entity: str) -> List[Dict[str, Any]]:
        """Return the unparsed records of ``entity``, fetching on first use."""
        with self._lock:
            cached = self._raw.get(entity)
            if cached is not None:
                self._stats["hits"] += 1
                return cached
            self._stats["misses"] += 1

        records = list(self.source.list_entities(entity))
        with self._lock:
            self._raw[entity] = records
        logger.debug(f"Fetched {len(records)} raw {entity} records")
        return records

    def load(self, entity: str) -> List[BaseDataModel]:
        """
        Return the parsed records of ``entity``, fetching on first use.

        Raises:
            KeyError: If the entity has no known model
        """
        model = ENTITY_MODELS[entity]

        with self._lock:
            cached = self._cache.get(entity)
            if cached is not None:
                self._stats["hits"] += 1
                return cached

        records = parse_records(model, self.raw(entity), self.report, entity)

        with self._lock:
            self._cache[entity] = records
        logger.debug(f"Cached {len(records)} {entity} records")
        return records

    def invalidate(self, entity: Optional[str] = None) -> None:
        """Drop one cached collection, or all of them."""
        with self._lock:
            if entity is None:
                self._raw.clear()
                self._cache.clear()
            else:
                self._raw.pop(entity, None)
                self._cache.pop(entity, None)
            self._stats["invalidations"] += 1
        logger.info(f"Invalidated cache for {entity or 'all entities'}")

    def get_cache_statistics(self) -> Dict[str, Any]:
        with self._lock:
            return {**self._stats, "cached_entities": sorted(self._raw)}

    def projects(self) -> List[Project]:
        return self.load("Project")

    def time_entries(self) -> List[TimeEntry]:
        return self.load("Timesheet")

    def tasks(self) -> List[Task]:
        return self.load("Task")

    def users(self) -> List[User]:
        return self.load("User")

    def sprints(self) -> List[Sprint]:
        return self.load("Sprint")

    def activities(self) -> List[Activity]:
        return self.load("Activity")

    def expenses(self) -> List[Expense]:
        return self.load("ProjectExpense")

    def project(self, project_id: str) -> Optional[Project]:
        """Look up one project by id."""
        for project in self.projects():
            if project.id == project_id:
                return project
        return None

    def report_sources(self) -> Dict[str, List[Dict[str, Any]]]:
        """Raw collections keyed by the report builder's data-source names.

        Custom reports may select backend fields the typed models drop, so
        they read the unparsed records.
        """
        return {
            "projects": self.raw("Project"),
            "tasks": self.raw("Task"),
            "users": self.raw("User"),
            "timesheets": self.raw("Timesheet"),
            "activities": self.raw("Activity"),
        }
