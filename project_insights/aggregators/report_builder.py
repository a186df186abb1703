"""Custom report builder.

Builds table rows or count-by-group chart datasets over one of the backend
collections, for a user-selected list of fields.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

DATA_SOURCE_FIELDS: Dict[str, List[str]] = {
    "projects": ["name", "status", "priority", "progress", "deadline", "budget", "actual_cost"],
    "tasks": [
        "title",
        "status",
        "priority",
        "task_type",
        "estimated_hours",
        "assigned_to",
        "due_date",
    ],
    "users": ["full_name", "email", "role"],
    "timesheets": ["user_email", "date", "hours", "minutes", "status", "is_billable"],
    "activities": ["action", "entity_type", "user_email", "created_date"],
}

VISUALIZATION_TYPES = ("table", "bar", "line", "pie")
PIE_COLORS = ("#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#ec4899")

MISSING_VALUE = "N/A"
UNKNOWN_GROUP = "Unknown"


class ReportConfigurationError(ValueError):
    """Raised when a report configuration cannot produce a report."""


@dataclass(frozen=True)
class ReportConfig:
    """What to report on and how.

    Attributes:
        data_source: projects, tasks, users, timesheets or activities
        fields: Fields to include in table rows
        visualization: table, bar, line or pie
        group_by: Field to count by, required for charts
    """

    data_source: str
    fields: List[str] = field(default_factory=list)
    visualization: str = "table"
    group_by: Optional[str] = None

    def validate(self) -> None:
        """Check the configuration against the known data sources.

        Raises:
            ReportConfigurationError: If the configuration is invalid
        """
        if self.data_source not in DATA_SOURCE_FIELDS:
            raise ReportConfigurationError(
                f"Unknown data source '{self.data_source}'. "
                f"Must be one of: {', '.join(DATA_SOURCE_FIELDS)}"
            )
        if self.visualization not in VISUALIZATION_TYPES:
            raise ReportConfigurationError(
                f"Unknown visualization '{self.visualization}'. "
                f"Must be one of: {', '.join(VISUALIZATION_TYPES)}"
            )
        if not self.fields:
            raise ReportConfigurationError("Please select at least one field")

        available = DATA_SOURCE_FIELDS[self.data_source]
        unknown = [name for name in self.fields if name not in available]
        if unknown:
            raise ReportConfigurationError(
                f"Unknown fields for {self.data_source}: {', '.join(unknown)}"
            )

        if self.visualization != "table":
            if not self.group_by:
                raise ReportConfigurationError(
                    f"A group-by field is required for {self.visualization} charts"
                )
            if self.group_by not in available:
                raise ReportConfigurationError(
                    f"Unknown group-by field for {self.data_source}: {self.group_by}"
                )


def _as_mapping(record: Any) -> Mapping[str, Any]:
    if isinstance(record, Mapping):
        return record
    if hasattr(record, "model_dump"):
        return record.model_dump()
    return vars(record)


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _group_label(value: Any) -> str:
    if _is_missing(value):
        return UNKNOWN_GROUP
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def build_table(records: Iterable[Any], fields: List[str]) -> List[Dict[str, Any]]:
    """Project records onto the selected fields.

    Missing or empty values are shown as "N/A".

    Example:
        >>> build_table([{"name": "Alpha", "budget": None}], ["name", "budget"])
        [{'name': 'Alpha', 'budget': 'N/A'}]
    """
    rows = []
    for record in records:
        data = _as_mapping(record)
        rows.append(
            {
                name: MISSING_VALUE if _is_missing(data.get(name)) else data.get(name)
                for name in fields
            }
        )
    return rows


def count_by_group(records: Iterable[Any], group_by: str) -> List[Dict[str, Any]]:
    """Count records per value of ``group_by``, in first-seen order.

    Example:
        >>> count_by_group([{"status": "active"}, {}, {"status": "active"}], "status")
        [{'name': 'active', 'value': 2}, {'name': 'Unknown', 'value': 1}]
    """
    counts: "OrderedDict[str, int]" = OrderedDict()
    for record in records:
        label = _group_label(_as_mapping(record).get(group_by))
        counts[label] = counts.get(label, 0) + 1
    return [{"name": name, "value": value} for name, value in counts.items()]


class ReportBuilder:
    """Generates custom report datasets from backend collections.

    Args:
        sources: Mapping of data source name to its records

    Example:
        >>> builder = ReportBuilder({"projects": [{"name": "Alpha", "status": "active"}]})
        >>> builder.generate(ReportConfig("projects", ["name"], "pie", "status"))
        [{'name': 'active', 'value': 1, 'color': '#3b82f6'}]
    """

    def __init__(self, sources: Mapping[str, Iterable[Any]]):
        self.sources = sources

    def records_for(self, data_source: str) -> List[Any]:
        return list(self.sources.get(data_source) or [])

    def generate(self, config: ReportConfig) -> List[Dict[str, Any]]:
        """Build the dataset described by ``config``.

        Args:
            config: Report configuration

        Returns:
            Table rows for "table", ``{name, value}`` counts for bar and line
            charts, and ``{name, value, color}`` for pie charts

        Raises:
            ReportConfigurationError: If the configuration is invalid
        """
        config.validate()
        records = self.records_for(config.data_source)

        if config.visualization == "table":
            data = build_table(records, config.fields)
        else:
            data = count_by_group(records, config.group_by)
            if config.visualization == "pie":
                for index, item in enumerate(data):
                    item["color"] = PIE_COLORS[index % len(PIE_COLORS)]

        logger.info(
            f"Generated {config.visualization} report over {len(records)} "
            f"{config.data_source} records ({len(data)} rows)"
        )
        return data
