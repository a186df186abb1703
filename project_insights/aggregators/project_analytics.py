"""Per-project delivery analytics for summary reports."""

import datetime as dt
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

from project_insights.models.task import Activity, Task

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10
STATUS_COUNT_KEYS = ("todo", "in_progress", "review", "completed")


@dataclass(frozen=True)
class ProjectAnalytics:
    """Task and team statistics for one project.

    Attributes:
        completed_tasks: Tasks with status completed
        pending_tasks: Every other task
        overdue_tasks: Open tasks past their due date
        tasks_by_status: Counts for todo, in_progress, review and completed
        assigned_users: Distinct assignee emails in first-seen order
        recent_activities: The first 10 activities as supplied
        completion_rate: Percent of tasks completed, rounded
    """

    completed_tasks: Tuple[Task, ...]
    pending_tasks: Tuple[Task, ...]
    overdue_tasks: Tuple[Task, ...]
    tasks_by_status: Dict[str, int]
    assigned_users: Tuple[str, ...]
    recent_activities: Tuple[Activity, ...]
    completion_rate: int

    @property
    def total_tasks(self) -> int:
        return len(self.completed_tasks) + len(self.pending_tasks)


def build_project_analytics(
    tasks: List[Task], activities: List[Activity], today: dt.date
) -> ProjectAnalytics:
    """Summarize a project's tasks and activity log.

    Args:
        tasks: Tasks belonging to the project
        activities: Project activities, newest first
        today: Reference date for overdue detection

    Returns:
        ProjectAnalytics

    Example:
        >>> tasks = [Task(status="completed", assigned_to="a@x.com"),
        ...          Task(status="todo", assigned_to=["a@x.com", "b@x.com"])]
        >>> analytics = build_project_analytics(tasks, [], dt.date(2024, 1, 1))
        >>> analytics.assigned_users, analytics.completion_rate
        (('a@x.com', 'b@x.com'), 50)
    """
    completed = tuple(task for task in tasks if task.is_completed)
    pending = tuple(task for task in tasks if not task.is_completed)
    overdue = tuple(task for task in tasks if task.is_overdue(today))

    by_status = {
        status: sum(1 for task in tasks if task.status == status)
        for status in STATUS_COUNT_KEYS
    }

    assignees: List[str] = []
    for task in tasks:
        for email in task.assigned_to:
            if email not in assignees:
                assignees.append(email)

    completion_rate = 0
    if tasks:
        completion_rate = math.floor(len(completed) / len(tasks) * 100 + 0.5)

    logger.debug(
        f"Project analytics: {len(completed)}/{len(tasks)} tasks completed, "
        f"{len(overdue)} overdue, {len(assignees)} assignees"
    )

    return ProjectAnalytics(
        completed_tasks=completed,
        pending_tasks=pending,
        overdue_tasks=overdue,
        tasks_by_status=by_status,
        assigned_users=tuple(assignees),
        recent_activities=tuple(activities[:RECENT_ACTIVITY_LIMIT]),
        completion_rate=completion_rate,
    )
