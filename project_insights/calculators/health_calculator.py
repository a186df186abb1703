"""Project health scoring.

Health is a 0-100 composite of progress, task completion, deadline
proximity, project status and declared risk level. Budget health compares
actual cost with the budget.
"""

import datetime as dt
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from project_insights.models.project import Project
from project_insights.models.task import Task

BASE_SCORE = 70
RISK_PENALTIES = {"critical": 20, "high": 15, "medium": 5}


@dataclass(frozen=True)
class BudgetHealth:
    """Budget variance classification.

    Attributes:
        status: critical, warning, caution, good or unknown
        variance: Percent by which actual cost exceeds budget (one decimal)
    """

    status: str
    variance: float


@dataclass(frozen=True)
class ProjectHealth:
    """Health metrics for one project."""

    project_id: Optional[str]
    project_name: str
    health_score: int
    health_label: str
    budget_health: BudgetHealth
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    task_completion_rate: int


@dataclass(frozen=True)
class HealthSummary:
    """Portfolio counts by health band."""

    critical_projects: int
    at_risk_projects: int
    healthy_projects: int
    budget_issues: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def task_completion_rate(tasks: List[Task]) -> float:
    """Fraction of tasks completed, 0.0 for an empty list."""
    if not tasks:
        return 0.0
    completed = sum(1 for task in tasks if task.is_completed)
    return completed / len(tasks)


def calculate_health_score(project: Project, tasks: List[Task], today: dt.date) -> int:
    """Calculate the health score of a project.

    The score starts at 70, adds ``progress * 0.3`` and ``completion_rate *
    20``, and subtracts 20 when the deadline has passed (10 when it is less
    than 7 days away), 15 when the project is on hold and 20/15/5 for a
    critical/high/medium risk level. A completed project scores exactly 100.

    Args:
        project: Project to score
        tasks: Tasks belonging to the project
        today: Reference date for deadline checks

    Returns:
        Score rounded half-up and clamped to 0-100

    Example:
        >>> calculate_health_score(
        ...     Project(progress=100, status="completed", risk_level="critical"),
        ...     [], dt.date(2024, 1, 1))
        100
    """
    if project.status == "completed":
        return 100

    score = float(BASE_SCORE)
    score += project.progress * 0.3
    score += task_completion_rate(tasks) * 20

    if project.deadline is not None:
        days_until_deadline = (project.deadline - today).days
        if days_until_deadline < 0:
            score -= 20
        elif days_until_deadline < 7:
            score -= 10

    if project.status == "on_hold":
        score -= 15

    score -= RISK_PENALTIES.get(project.risk_level, 0)

    return _clamp(_round_half_up(score))


def health_label(score: int) -> str:
    """Map a health score to Excellent, Good, Fair or At Risk."""
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    return "At Risk"


def calculate_budget_health(project: Project) -> BudgetHealth:
    """Classify how far actual cost exceeds the budget.

    Example:
        >>> calculate_budget_health(Project(budget=1000, actual_cost=1150))
        BudgetHealth(status='warning', variance=15.0)
    """
    if not project.budget or not project.actual_cost:
        return BudgetHealth(status="unknown", variance=0.0)

    variance = float((project.actual_cost - project.budget) / project.budget * 100)
    if variance > 20:
        status = "critical"
    elif variance > 10:
        status = "warning"
    elif variance > 0:
        status = "caution"
    else:
        status = "good"
    return BudgetHealth(status=status, variance=round(variance, 1))


def assess_projects(
    projects: List[Project], tasks: List[Task], today: dt.date
) -> List[ProjectHealth]:
    """Compute health metrics for each project, in input order."""
    tasks_by_project: Dict[Optional[str], List[Task]] = {}
    for task in tasks:
        tasks_by_project.setdefault(task.project_id, []).append(task)

    results = []
    for project in projects:
        project_tasks = tasks_by_project.get(project.id, []) if project.id else []
        completed = sum(1 for task in project_tasks if task.is_completed)
        overdue = sum(1 for task in project_tasks if task.is_overdue(today))
        score = calculate_health_score(project, project_tasks, today)
        rate = _round_half_up(completed / len(project_tasks) * 100) if project_tasks else 0

        results.append(
            ProjectHealth(
                project_id=project.id,
                project_name=project.name,
                health_score=score,
                health_label=health_label(score),
                budget_health=calculate_budget_health(project),
                total_tasks=len(project_tasks),
                completed_tasks=completed,
                overdue_tasks=overdue,
                task_completion_rate=rate,
            )
        )
    return results


def summarize_health(results: List[ProjectHealth]) -> HealthSummary:
    """Count projects per health band and with budget issues."""
    return HealthSummary(
        critical_projects=sum(1 for r in results if r.health_score < 40),
        at_risk_projects=sum(1 for r in results if 40 <= r.health_score < 60),
        healthy_projects=sum(1 for r in results if r.health_score >= 80),
        budget_issues=sum(
            1 for r in results if r.budget_health.status in ("warning", "critical")
        ),
    )
