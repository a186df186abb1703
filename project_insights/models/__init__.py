"""Data models for the insights engine.

This package contains Pydantic models for all backend records:
- BaseDataModel: Base class with common configuration
- TimeEntry: Logged time against a project/task
- Project: Project information and commercial terms
- Expense: Non-labor project cost
- Task, Sprint, Activity: Delivery tracking records
- User: Platform user with cost rate

and the derived report document structure used by the renderers.
"""

from project_insights.models.base import BaseDataModel
from project_insights.models.project import Expense, Project
from project_insights.models.report import (
    BlockType,
    ReportBlock,
    ReportDocument,
    parse_html,
    parse_markdown,
)
from project_insights.models.task import Activity, Sprint, Task
from project_insights.models.timesheet import TimeEntry
from project_insights.models.user import User

__all__ = [
    "BaseDataModel",
    "TimeEntry",
    "Project",
    "Expense",
    "Task",
    "Sprint",
    "Activity",
    "User",
    "BlockType",
    "ReportBlock",
    "ReportDocument",
    "parse_markdown",
    "parse_html",
]
