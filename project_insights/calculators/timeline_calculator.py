"""Project completion forecasting.

Velocity blends three estimators:
- Recent velocity: tasks completed in the last 30 days, per day (weight 0.5)
- Overall velocity: tasks completed over the project lifetime (weight 0.3)
- Progress rate: percent progress per day (weight 0.2)

The remaining duration blends a task-based and a progress-based estimate,
and the buffer against the deadline is classified into a status.
"""

import datetime as dt
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from project_insights.models.project import Project
from project_insights.models.task import Activity, Task

DEFAULT_PROJECT_AGE_DAYS = 30
FALLBACK_PROGRESS_DAYS = 60


@dataclass(frozen=True)
class TimelinePrediction:
    """Completion forecast for a project.

    Attributes:
        estimated_days: Days until predicted completion
        predicted_date: today + estimated_days
        velocity: Blended velocity
        recent_velocity: Completions per day over the last 30 days
        overall_velocity: Completions per day over the project lifetime
        progress_rate: Percent progress per day
        confidence: high, medium or low
        confidence_score: 90, 65 or 40
        status: critical, at-risk, tight, moderate or on-track
        message: Human readable status
        days_buffer: Days until deadline minus estimated days (0 without deadline)
        completion_rate: Percent of tasks completed, rounded
        velocity_trend: accelerating, decelerating or stable
        recent_week_completions: Completions in the last 7 days
        previous_week_completions: Completions 8-14 days ago
    """

    estimated_days: int
    predicted_date: dt.date
    velocity: float
    recent_velocity: float
    overall_velocity: float
    progress_rate: float
    confidence: str
    confidence_score: int
    status: str
    message: str
    days_buffer: int
    completion_rate: int
    velocity_trend: str
    recent_week_completions: int
    previous_week_completions: int


def _completions_between(
    activities: List[Activity], today: dt.date, newest: Optional[int], oldest: int
) -> int:
    """Count task completions whose age in days is in ``(newest, oldest]``."""
    count = 0
    for activity in activities:
        if not activity.is_task_completion or activity.created_date is None:
            continue
        age = (today - activity.created_date).days
        if age <= oldest and (newest is None or age > newest):
            count += 1
    return count


def classify_buffer(days_buffer: int) -> Tuple[str, str]:
    """Classify a deadline buffer into (status, message)."""
    if days_buffer < -7:
        return (
            "critical",
            f"Predicted to finish {abs(days_buffer)} days after deadline - "
            "immediate action required",
        )
    if days_buffer < 0:
        return "at-risk", f"Predicted to finish {abs(days_buffer)} days after deadline"
    if days_buffer < 3:
        return "tight", f"Very tight timeline with only {days_buffer} days buffer"
    if days_buffer < 7:
        return "moderate", f"Moderate buffer of {days_buffer} days before deadline"
    return "on-track", f"Comfortable {days_buffer} days buffer before deadline"


def velocity_trend(recent_week: int, previous_week: int) -> str:
    """Compare the last 7 days with the 7 before (1.2x / 0.8x thresholds)."""
    if recent_week > previous_week * 1.2:
        return "accelerating"
    if recent_week < previous_week * 0.8:
        return "decelerating"
    return "stable"


def predict_timeline(
    project: Project,
    tasks: List[Task],
    activities: List[Activity],
    today: dt.date,
) -> TimelinePrediction:
    """Forecast when a project will complete.

    Args:
        project: Project to forecast
        tasks: Tasks belonging to the project
        activities: Activity log (task completions drive recent velocity)
        today: Reference date

    Returns:
        TimelinePrediction

    Example:
        >>> done = Task(status="completed")
        >>> prediction = predict_timeline(
        ...     Project(progress=100), [done], [], dt.date(2024, 1, 1))
        >>> prediction.estimated_days, prediction.status
        (0, 'on-track')
    """
    progress = project.progress
    completed = sum(1 for task in tasks if task.is_completed)
    total = len(tasks)

    recent_completions = _completions_between(activities, today, None, 30)
    recent_velocity = recent_completions / 30

    start_date = project.created_date or (today - dt.timedelta(days=DEFAULT_PROJECT_AGE_DAYS))
    days_in_project = max(1, (today - start_date).days)
    overall_velocity = completed / days_in_project
    progress_rate = progress / days_in_project

    velocity = recent_velocity * 0.5 + overall_velocity * 0.3 + progress_rate * 0.2

    remaining_tasks = total - completed
    remaining_progress = 100 - progress

    task_based_days = (
        math.ceil(remaining_tasks / velocity) if velocity > 0 else remaining_tasks * 2
    )
    progress_based_days = (
        math.ceil(remaining_progress / progress_rate)
        if progress_rate > 0
        else FALLBACK_PROGRESS_DAYS
    )

    if remaining_tasks == 0 and progress >= 100:
        estimated_days = 0
    elif velocity > 0 and progress_rate > 0:
        estimated_days = math.ceil(task_based_days * 0.6 + progress_based_days * 0.4)
    elif velocity > 0:
        estimated_days = task_based_days
    elif progress_rate > 0:
        estimated_days = progress_based_days
    else:
        estimated_days = remaining_tasks * 2

    if recent_completions >= 10:
        confidence, confidence_score = "high", 90
    elif recent_completions >= 5:
        confidence, confidence_score = "medium", 65
    else:
        confidence, confidence_score = "low", 40

    status, message = "on-track", "Project is progressing well"
    days_buffer = 0
    if project.deadline is not None:
        days_buffer = (project.deadline - today).days - estimated_days
        status, message = classify_buffer(days_buffer)

    recent_week = _completions_between(activities, today, None, 7)
    previous_week = _completions_between(activities, today, 7, 14)

    return TimelinePrediction(
        estimated_days=estimated_days,
        predicted_date=today + dt.timedelta(days=estimated_days),
        velocity=round(velocity, 2),
        recent_velocity=round(recent_velocity, 2),
        overall_velocity=round(overall_velocity, 2),
        progress_rate=round(progress_rate, 2),
        confidence=confidence,
        confidence_score=confidence_score,
        status=status,
        message=message,
        days_buffer=days_buffer,
        completion_rate=math.floor(completed / total * 100 + 0.5) if total else 0,
        velocity_trend=velocity_trend(recent_week, previous_week),
        recent_week_completions=recent_week,
        previous_week_completions=previous_week,
    )
