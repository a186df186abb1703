"""Timesheet aggregation for reports and charts.

This module groups time entries into chart-ready rows, computes summary
statistics, and builds weekly hours matrices for capacity reporting.

Every entry lands in exactly one group: entries with a missing key are
collected in a fixed fallback bucket ("Unassigned", "Unknown" or "Other")
instead of being dropped, so group entry counts always add up to the number
of input entries.
"""

import datetime as dt
import logging
from collections import OrderedDict, defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import pandas as pd

from project_insights.models.timesheet import TimeEntry

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")

GROUP_BY_OPTIONS = ("project", "user", "date", "work_type", "none")
GROUP_BY_ALIASES = {"task_type": "work_type", "total": "none"}


@dataclass(frozen=True)
class GroupedHours:
    """Totals for one group of time entries.

    Attributes:
        name: Display label of the group
        hours: Logged hours
        billable_hours: Billable hours
        amount: Billable hours times the entry hourly rate
        entries: Number of entries in the group

    Example:
        >>> row = GroupedHours("Alpha", Decimal("3.00"), Decimal("3.00"),
        ...     Decimal("150.00"), 3)
        >>> row.entries
        3
    """

    name: str
    hours: Decimal
    billable_hours: Decimal
    amount: Decimal
    entries: int


@dataclass(frozen=True)
class TimesheetSummary:
    """Summary statistics over a set of time entries."""

    total_hours: Decimal
    billable_hours: Decimal
    total_amount: Decimal
    approved_count: int
    total_entries: int


@dataclass(frozen=True)
class WeeklyHours:
    """Logged hours for one user in one ISO week."""

    user: str
    year: int
    week_number: int
    hours: Decimal
    billable_hours: Decimal
    entries_count: int


@dataclass
class _GroupAccumulator:
    name: str
    hours: Decimal = ZERO
    billable_hours: Decimal = ZERO
    amount: Decimal = ZERO
    entries: int = 0


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _entry_amount(entry: TimeEntry) -> Decimal:
    if entry.is_billable and entry.hourly_rate > 0:
        return entry.hours * entry.hourly_rate
    return ZERO


class TimesheetAggregator:
    """Groups, summarizes and filters time entries.

    Args:
        project_names: Optional project id to name mapping used when an
            entry carries no denormalized project name

    Example:
        >>> entries = [TimeEntry(project_id="p1", project_name="Alpha",
        ...     total_minutes=60, is_billable=True, hourly_rate=50)]
        >>> rows = TimesheetAggregator().group_entries(entries, "project")
        >>> rows[0].name, rows[0].amount
        ('Alpha', Decimal('50.00'))
    """

    def __init__(self, project_names: Optional[Dict[str, str]] = None):
        self.project_names = project_names or {}

    def _group_key(self, entry: TimeEntry, group_by: str) -> Tuple[str, str]:
        """Return the (key, label) for an entry under a grouping."""
        if group_by == "project":
            name = entry.project_name or self.project_names.get(entry.project_id or "")
            return entry.project_id or "unassigned", name or "Unassigned"
        if group_by == "user":
            return (
                entry.user_email or "unknown",
                entry.user_name or entry.user_email or "Unknown",
            )
        if group_by == "date":
            if entry.date is None:
                return "unknown", "Unknown"
            return entry.date.isoformat(), f"{entry.date:%b} {entry.date.day}"
        if group_by == "work_type":
            work_type = entry.work_type or "other"
            return work_type, _capitalize(work_type)
        return "total", "Total"

    def group_entries(self, entries: List[TimeEntry], group_by: str) -> List[GroupedHours]:
        """Group time entries and total their hours and amounts.

        Args:
            entries: Time entries to group
            group_by: project, user, date, work_type or none

        Returns:
            Groups ordered by descending hours (ties keep first-seen order),
            with hours and amounts rounded to cents

        Raises:
            ValueError: If group_by is not a supported grouping
        """
        group_by = GROUP_BY_ALIASES.get(group_by, group_by)
        if group_by not in GROUP_BY_OPTIONS:
            raise ValueError(
                f"Unsupported grouping '{group_by}'. "
                f"Must be one of: {', '.join(GROUP_BY_OPTIONS)}"
            )

        groups: "OrderedDict[str, _GroupAccumulator]" = OrderedDict()
        for entry in entries:
            key, label = self._group_key(entry, group_by)
            group = groups.get(key)
            if group is None:
                group = groups[key] = _GroupAccumulator(name=label)

            hours = entry.hours
            group.hours += hours
            group.entries += 1
            if entry.is_billable:
                group.billable_hours += hours
                group.amount += _entry_amount(entry)

        rows = [
            GroupedHours(
                name=group.name,
                hours=group.hours.quantize(CENT),
                billable_hours=group.billable_hours.quantize(CENT),
                amount=group.amount.quantize(CENT),
                entries=group.entries,
            )
            for group in groups.values()
        ]
        rows.sort(key=lambda row: row.hours, reverse=True)

        logger.debug(f"Grouped {len(entries)} entries by {group_by} into {len(rows)} groups")
        return rows

    def summarize(self, entries: List[TimeEntry]) -> TimesheetSummary:
        """Compute summary statistics.

        Hours are rounded to one decimal and amounts to cents.
        """
        total_hours = sum((entry.hours for entry in entries), ZERO)
        billable_hours = sum((entry.hours for entry in entries if entry.is_billable), ZERO)
        total_amount = sum((_entry_amount(entry) for entry in entries), ZERO)

        return TimesheetSummary(
            total_hours=total_hours.quantize(Decimal("0.1")),
            billable_hours=billable_hours.quantize(Decimal("0.1")),
            total_amount=total_amount.quantize(CENT),
            approved_count=sum(1 for entry in entries if entry.status == "approved"),
            total_entries=len(entries),
        )

    def filter_by_project(self, entries: List[TimeEntry], project_id: str) -> List[TimeEntry]:
        """Keep entries logged against one project."""
        filtered = [entry for entry in entries if entry.project_id == project_id]
        logger.info(f"Filtered to {len(filtered)} entries for project {project_id}")
        return filtered

    def filter_by_user(self, entries: List[TimeEntry], user_email: str) -> List[TimeEntry]:
        """Keep entries logged by one user."""
        filtered = [entry for entry in entries if entry.user_email == user_email]
        logger.info(f"Filtered to {len(filtered)} entries for user {user_email}")
        return filtered

    def filter_by_date_range(
        self,
        entries: List[TimeEntry],
        start_date: dt.date,
        end_date: dt.date,
    ) -> List[TimeEntry]:
        """Keep entries dated within the range (inclusive); undated entries are dropped."""
        filtered = [
            entry
            for entry in entries
            if entry.date is not None and start_date <= entry.date <= end_date
        ]
        logger.info(
            f"Filtered to {len(filtered)} entries between {start_date} and {end_date}"
        )
        return filtered

    def calculate_weekly_hours(self, entries: List[TimeEntry]) -> List[WeeklyHours]:
        """Aggregate hours per user and ISO week.

        Entries without a date are skipped. The user is the user name,
        falling back to the email and then "Unknown".
        """
        weekly: Dict[Tuple[str, int, int], List[TimeEntry]] = defaultdict(list)
        for entry in entries:
            if entry.date is None:
                continue
            iso_year, iso_week, _ = entry.date.isocalendar()
            user = entry.user_name or entry.user_email or "Unknown"
            weekly[(user, iso_year, iso_week)].append(entry)

        result = []
        for (user, year, week_number), group in weekly.items():
            result.append(
                WeeklyHours(
                    user=user,
                    year=year,
                    week_number=week_number,
                    hours=sum((e.hours for e in group), ZERO).quantize(CENT),
                    billable_hours=sum(
                        (e.hours for e in group if e.is_billable), ZERO
                    ).quantize(CENT),
                    entries_count=len(group),
                )
            )

        logger.info(f"Calculated {len(result)} weekly hour records")
        return result

    def generate_weekly_matrix(self, weekly_data: List[WeeklyHours]) -> pd.DataFrame:
        """Build a users x weeks DataFrame of logged hours.

        Columns are labelled ``YYYY-W##`` and sorted chronologically; weeks
        without time for a user are 0.

        Example:
            >>> matrix = aggregator.generate_weekly_matrix(weekly_data)
            >>> matrix.loc["Ann", "2024-W02"]
            3.0
        """
        if not weekly_data:
            logger.info("No weekly data, returning empty DataFrame")
            return pd.DataFrame()

        matrix_data: Dict[str, Dict[str, float]] = defaultdict(dict)
        for record in weekly_data:
            week_label = f"{record.year}-W{record.week_number:02d}"
            matrix_data[record.user][week_label] = float(record.hours)

        df = pd.DataFrame.from_dict(matrix_data, orient="index")
        df = df.reindex(columns=sorted(df.columns)).fillna(0.0).sort_index()

        logger.info(f"Generated matrix with {len(df)} users and {len(df.columns)} weeks")
        return df
