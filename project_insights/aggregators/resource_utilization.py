"""Resource utilization across staff users.

Workload is estimated from active tasks: each task's estimated hours are
split evenly across its assignees, so a shared task is not counted in full
for every person. Platform totals count each active task once, however many
people it is assigned to.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Tuple

from project_insights.models.task import Task
from project_insights.models.timesheet import TimeEntry
from project_insights.models.user import User

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 30
TOP_PERFORMER_COUNT = 5

WORKLOAD_BANDS = (
    ("overloaded", "Overloaded", "#ef4444"),
    ("high", "High Load", "#f59e0b"),
    ("optimal", "Optimal", "#10b981"),
    ("underutilized", "Underutilized", "#3b82f6"),
)


@dataclass(frozen=True)
class UserUtilization:
    """Workload metrics for one staff user.

    Attributes:
        email: User email
        full_name: User name
        total_tasks: Tasks assigned to the user
        active_tasks: Assigned tasks not completed or cancelled
        active_task_ids: Ids of the active tasks
        completed_tasks: Completed assigned tasks
        total_estimated_hours: User's share of active task estimates (1 decimal)
        total_logged_hours: Logged hours, rounded to whole hours
        recent_logged_hours: Hours logged in the last 30 days, rounded
        workload_status: overloaded, high, optimal or underutilized
        task_completion_rate: Percent of assigned tasks completed
    """

    email: str
    full_name: str
    total_tasks: int
    active_tasks: int
    active_task_ids: Tuple[str, ...]
    completed_tasks: int
    total_estimated_hours: Decimal
    total_logged_hours: int
    recent_logged_hours: int
    workload_status: str
    task_completion_rate: int


@dataclass(frozen=True)
class UtilizationSummary:
    """Platform-wide utilization totals."""

    users: Tuple[UserUtilization, ...]
    total_team: int
    overloaded_users: int
    underutilized_users: int
    total_active_tasks: int
    total_logged_hours: int
    workload_distribution: Tuple[Dict[str, object], ...]
    top_performers: Tuple[Dict[str, object], ...]


def _round_hours(minutes: int) -> int:
    """Round minutes to whole hours, half up."""
    return int((Decimal(minutes) / Decimal("60")).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def workload_status(estimated_hours: Decimal) -> str:
    """Classify estimated hours: >80 overloaded, >50 high, <20 underutilized."""
    if estimated_hours > 80:
        return "overloaded"
    if estimated_hours > 50:
        return "high"
    if estimated_hours < 20:
        return "underutilized"
    return "optimal"


def _task_key(task: Task, index: int) -> str:
    return task.id or f"task-{index}"


def calculate_user_utilization(
    user: User,
    tasks: List[Task],
    entries: List[TimeEntry],
    today: dt.date,
) -> UserUtilization:
    """Calculate workload metrics for one user.

    Args:
        user: Staff user
        tasks: All tasks
        entries: All time entries
        today: Reference date for the 30-day window

    Returns:
        UserUtilization

    Example:
        >>> task = Task(id="t1", assigned_to=["a@x.com", "b@x.com"], estimated_hours=10)
        >>> metrics = calculate_user_utilization(
        ...     User(email="a@x.com"), [task], [], dt.date(2024, 1, 1))
        >>> metrics.total_estimated_hours
        Decimal('5.0')
    """
    user_tasks = [
        (index, task) for index, task in enumerate(tasks) if user.email in task.assigned_to
    ]
    active = [(index, task) for index, task in user_tasks if task.is_active]
    completed = sum(1 for _, task in user_tasks if task.is_completed)

    estimated = Decimal("0")
    for _, task in active:
        assignees = max(1, len(task.assigned_to))
        estimated += task.estimated_hours / Decimal(assignees)

    user_entries = [entry for entry in entries if entry.user_email == user.email]
    logged_minutes = sum(entry.total_minutes for entry in user_entries)

    window_start = today - dt.timedelta(days=RECENT_WINDOW_DAYS)
    recent_minutes = sum(
        entry.total_minutes
        for entry in user_entries
        if entry.date is not None and entry.date >= window_start
    )

    completion_rate = 0
    if user_tasks:
        completion_rate = int(
            (Decimal(completed) / Decimal(len(user_tasks)) * 100).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
        )

    return UserUtilization(
        email=user.email,
        full_name=user.display_name,
        total_tasks=len(user_tasks),
        active_tasks=len(active),
        active_task_ids=tuple(_task_key(task, index) for index, task in active),
        completed_tasks=completed,
        total_estimated_hours=estimated.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP),
        total_logged_hours=_round_hours(logged_minutes),
        recent_logged_hours=_round_hours(recent_minutes),
        workload_status=workload_status(estimated),
        task_completion_rate=completion_rate,
    )


def _short_name(metrics: UserUtilization) -> str:
    if metrics.full_name and metrics.full_name != metrics.email:
        return metrics.full_name.split(" ")[0]
    return metrics.email.split("@")[0]


def calculate_resource_utilization(
    users: List[User],
    tasks: List[Task],
    entries: List[TimeEntry],
    today: dt.date,
) -> UtilizationSummary:
    """Calculate utilization for every staff user plus platform totals.

    Client users are excluded. Platform logged hours sum the minutes of
    staff entries before rounding; active tasks are de-duplicated by id.

    Args:
        users: All users
        tasks: All tasks
        entries: All time entries
        today: Reference date for the 30-day window

    Returns:
        UtilizationSummary
    """
    staff = [user for user in users if user.is_staff]
    metrics = [calculate_user_utilization(user, tasks, entries, today) for user in staff]

    active_task_ids = set()
    for user_metrics in metrics:
        active_task_ids.update(user_metrics.active_task_ids)

    staff_emails = {user.email for user in staff}
    staff_minutes = sum(
        entry.total_minutes for entry in entries if entry.user_email in staff_emails
    )

    distribution = tuple(
        {
            "name": label,
            "value": sum(1 for m in metrics if m.workload_status == status),
            "color": color,
        }
        for status, label, color in WORKLOAD_BANDS
    )

    ranked = sorted(metrics, key=lambda m: m.recent_logged_hours, reverse=True)
    top_performers = tuple(
        {"name": _short_name(m), "hours": m.recent_logged_hours}
        for m in ranked[:TOP_PERFORMER_COUNT]
    )

    logger.info(
        f"Calculated utilization for {len(staff)} staff users "
        f"({len(users) - len(staff)} clients excluded)"
    )

    return UtilizationSummary(
        users=tuple(metrics),
        total_team=len(staff),
        overloaded_users=sum(1 for m in metrics if m.workload_status == "overloaded"),
        underutilized_users=sum(1 for m in metrics if m.workload_status == "underutilized"),
        total_active_tasks=len(active_task_ids),
        total_logged_hours=_round_hours(staff_minutes),
        workload_distribution=distribution,
        top_performers=top_performers,
    )
