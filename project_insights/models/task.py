"""Task, sprint and activity data models.

Tasks drive completion rates, risk factors and workload estimates. Activities
are the audit trail ("user completed task X") used for velocity forecasts.
"""

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator

from project_insights.models.base import (
    BaseDataModel,
    to_date,
    to_datetime,
    to_decimal,
    to_optional_str,
    to_relation_id,
)

TASK_STATUSES = ("todo", "in_progress", "review", "completed", "cancelled")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")


class Task(BaseDataModel):
    """Represents a project task.

    Attributes:
        id: Backend identifier
        project_id: Owning project
        title: Task title
        status: todo, in_progress, review, completed or cancelled
        priority: low, medium, high or urgent
        assigned_to: Assignee emails (a single string is wrapped in a list)
        due_date: Due date
        estimated_hours: Estimated effort in hours
        milestone_id: Linked milestone, if any
        sprint_id: Linked sprint, if any

    Example:
        >>> task = Task(id="t1", assigned_to="a@x.com", estimated_hours=None)
        >>> task.assigned_to, task.estimated_hours
        (['a@x.com'], Decimal('0'))
    """

    id: Optional[str] = None
    project_id: Optional[str] = None
    title: str = "Untitled Task"
    status: str = "todo"
    priority: Optional[str] = None
    assigned_to: List[str] = []
    due_date: Optional[dt.date] = None
    estimated_hours: Decimal = Decimal("0")
    milestone_id: Optional[str] = None
    sprint_id: Optional[str] = None

    @field_validator("id", "project_id", "milestone_id", "sprint_id", mode="before")
    @classmethod
    def flatten_relation(cls, v):
        """Reduce embedded relation objects to their id."""
        return to_relation_id(v)

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v):
        """Missing titles fall back to a placeholder."""
        return to_optional_str(v) or "Untitled Task"

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        """Lower-case the status, defaulting to todo."""
        text = to_optional_str(v)
        return text.lower() if text else "todo"

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v):
        """Lower-case the priority."""
        text = to_optional_str(v)
        return text.lower() if text else None

    @field_validator("assigned_to", mode="before")
    @classmethod
    def normalize_assignees(cls, v):
        """Accept a single email, a list of emails or nothing."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return []
        emails = []
        for item in v:
            email = to_optional_str(item)
            if email:
                emails.append(email)
        return emails

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v):
        """Accept ISO dates and timestamps."""
        return to_date(v)

    @field_validator("estimated_hours", mode="before")
    @classmethod
    def default_hours(cls, v):
        """Missing or malformed estimates count as zero."""
        return to_decimal(v)

    @property
    def is_completed(self) -> bool:
        """Whether the task is done."""
        return self.status == "completed"

    @property
    def is_active(self) -> bool:
        """Whether the task still represents open work."""
        return self.status not in ("completed", "cancelled")

    def is_overdue(self, today: dt.date) -> bool:
        """Whether the task is past its due date and not completed."""
        return (
            self.due_date is not None
            and self.due_date < today
            and not self.is_completed
        )


class Sprint(BaseDataModel):
    """Represents a sprint."""

    id: Optional[str] = None
    name: str = "Unnamed Sprint"
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    @field_validator("id", mode="before")
    @classmethod
    def flatten_id(cls, v):
        return to_relation_id(v)

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v):
        return to_optional_str(v) or "Unnamed Sprint"

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return to_date(v)


class Activity(BaseDataModel):
    """Represents an audit trail entry.

    Example:
        >>> activity = Activity(action="completed", entity_type="task")
        >>> activity.is_task_completion
        True
    """

    project_id: Optional[str] = None
    action: Optional[str] = None
    entity_type: Optional[str] = None
    entity_name: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    created_date: Optional[dt.date] = None
    created_at: Optional[dt.datetime] = Field(
        default=None, validation_alias=AliasChoices("created_at", "created_date")
    )

    @field_validator(
        "action", "entity_type", "entity_name", "user_name", "user_email",
        mode="before",
    )
    @classmethod
    def strip_text(cls, v):
        return to_optional_str(v)

    @field_validator("project_id", mode="before")
    @classmethod
    def flatten_project(cls, v):
        return to_relation_id(v)

    @field_validator("created_date", mode="before")
    @classmethod
    def parse_created(cls, v):
        return to_date(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        return to_datetime(v)

    @property
    def is_task_completion(self) -> bool:
        """Whether the activity records a completed task."""
        return self.action == "completed" and self.entity_type == "task"
