"""Time entry data model.

This module defines the TimeEntry model which represents minutes logged by a
user against a project (and optionally a task and sprint) on a given date.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from project_insights.models.base import (
    BaseDataModel,
    to_bool,
    to_date,
    to_decimal,
    to_int,
    to_optional_str,
    to_relation_id,
)

TIME_ENTRY_STATUSES = ("draft", "submitted", "approved", "rejected", "pending")


class TimeEntry(BaseDataModel):
    """Represents a single logged time entry.

    Attributes:
        id: Backend identifier
        date: Date the work was done
        project_id: Project the time was logged against
        project_name: Denormalized project name, if the backend supplied it
        user_email: Email of the user who logged the time
        user_name: Denormalized user name
        task_id: Task the time was logged against
        task_title: Denormalized task title
        sprint_id: Sprint the task belonged to
        work_type: Free-form category of work (development, meeting, ...)
        total_minutes: Logged minutes, never negative
        is_billable: Whether the time may be billed
        status: Approval status (draft, submitted, approved, rejected)
        hourly_rate: Rate recorded on the entry
        snapshot_rate: Rate captured at approval time (legacy field)
        snapshot_hourly_rate: Rate captured at approval time

    Example:
        >>> entry = TimeEntry(
        ...     project_id={"id": "p1"},
        ...     user_email="a@x.com",
        ...     total_minutes="90",
        ...     is_billable=True,
        ...     status="Approved",
        ... )
        >>> entry.project_id, entry.total_minutes, entry.status
        ('p1', 90, 'approved')
    """

    id: Optional[str] = None
    date: Optional[dt.date] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    task_id: Optional[str] = None
    task_title: Optional[str] = None
    sprint_id: Optional[str] = None
    work_type: Optional[str] = None
    total_minutes: int = Field(0, ge=0, description="Logged minutes")
    is_billable: bool = False
    status: str = "draft"
    hourly_rate: Decimal = Decimal("0")
    snapshot_rate: Decimal = Decimal("0")
    snapshot_hourly_rate: Decimal = Decimal("0")

    @field_validator("id", "project_id", "task_id", "sprint_id", mode="before")
    @classmethod
    def flatten_relation(cls, v):
        """Reduce embedded relation objects to their id."""
        return to_relation_id(v)

    @field_validator(
        "project_name", "user_email", "user_name", "task_title", "work_type",
        mode="before",
    )
    @classmethod
    def strip_text(cls, v):
        """Strip text fields, mapping empty strings to None."""
        return to_optional_str(v)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        """Accept ISO dates and timestamps; anything unparseable becomes None."""
        return to_date(v)

    @field_validator("total_minutes", mode="before")
    @classmethod
    def default_minutes(cls, v):
        """Missing, null or negative minutes count as zero."""
        return to_int(v)

    @field_validator("is_billable", mode="before")
    @classmethod
    def default_billable(cls, v):
        """Null billable flags count as non-billable; "false" strings are False."""
        return to_bool(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        """Lower-case the status, defaulting to draft."""
        text = to_optional_str(v)
        return text.lower() if text else "draft"

    @field_validator(
        "hourly_rate", "snapshot_rate", "snapshot_hourly_rate", mode="before"
    )
    @classmethod
    def default_rate(cls, v):
        """Missing or malformed rates count as zero."""
        return to_decimal(v)

    @property
    def hours(self) -> Decimal:
        """Logged time in decimal hours."""
        return Decimal(self.total_minutes) / Decimal("60")

    @property
    def is_approved_billable(self) -> bool:
        """Whether the entry contributes to labor cost."""
        return self.status == "approved" and self.is_billable
