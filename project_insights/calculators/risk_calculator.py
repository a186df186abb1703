"""Project risk assessment.

The risk score is additive: each detected factor contributes a weighted
number of points and is recorded, in detection order, as a
``RiskFactor(factor, impact)``. Most factors also yield a displayable
RiskItem with a mitigation hint.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import List, Tuple

from project_insights.models.project import Project
from project_insights.models.task import Task

logger = logging.getLogger(__name__)

ASSUMED_PROJECT_DAYS = 90


@dataclass(frozen=True)
class RiskFactor:
    """A single contribution to the risk score."""

    factor: str
    impact: float


@dataclass(frozen=True)
class RiskItem:
    """A displayable risk with its mitigation.

    Attributes:
        level: critical, high or medium
        category: Deadline, Progress, Tasks, Workflow or Resources
        title: Short title
        description: Human readable detail
        mitigation: Suggested action
    """

    level: str
    category: str
    title: str
    description: str
    mitigation: str


@dataclass(frozen=True)
class RiskAssessment:
    """Risk score, level, factors and items for one project."""

    score: float
    level: str
    factors: Tuple[RiskFactor, ...]
    risks: Tuple[RiskItem, ...]

    def top_factors(self, count: int = 3) -> List[RiskFactor]:
        """The first ``count`` factors in detection order."""
        return list(self.factors[:count])

    def count_by_level(self, level: str) -> int:
        return sum(1 for risk in self.risks if risk.level == level)


def risk_level(score: float) -> str:
    """Map a risk score to critical (>=60), high (>=40), medium (>=20) or low."""
    if score >= 60:
        return "critical"
    if score >= 40:
        return "high"
    if score >= 20:
        return "medium"
    return "low"


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def assess_risk(project: Project, tasks: List[Task], today: dt.date) -> RiskAssessment:
    """Assess the delivery risk of a project.

    Factors, in detection order:
        - Overdue deadline (not completed): +30
        - Otherwise tight deadline (<= 7 days, progress < 80):
          ``min(25, (80 - progress) / 3)``
        - Otherwise behind schedule against a 90-day linear plan, gap > 20:
          ``min(15, gap / 5)``
        - Low completion (< 25% with more than 10 tasks): +20, or moderate
          completion (< 50% with more than 5 tasks): +10
        - Overdue tasks: ``min(20, 2 * count)``
        - In-progress tasks above 40% of all tasks: +10
        - More than 5 tasks in review: +8
        - Unassigned, not completed tasks: ``min(10, count)``

    Args:
        project: Project to assess
        tasks: Tasks belonging to the project
        today: Reference date

    Returns:
        RiskAssessment with the score capped to 0-100

    Example:
        >>> result = assess_risk(Project(deadline="2024-01-01", progress=50),
        ...     [], dt.date(2024, 1, 11))
        >>> result.score, result.level, result.factors[0].factor
        (30.0, 'medium', 'Overdue deadline')
    """
    score = 0.0
    factors: List[RiskFactor] = []
    risks: List[RiskItem] = []

    def add(factor: str, impact: float) -> None:
        nonlocal score
        score += impact
        factors.append(RiskFactor(factor, impact))

    if project.deadline is not None:
        days_until_deadline = (project.deadline - today).days
        progress = project.progress
        expected_progress = 100 - (days_until_deadline / ASSUMED_PROJECT_DAYS) * 100
        progress_gap = max(0.0, expected_progress - progress)

        if days_until_deadline < 0 and project.status != "completed":
            add("Overdue deadline", 30.0)
            risks.append(
                RiskItem(
                    level="critical",
                    category="Deadline",
                    title="Project Overdue",
                    description=f"Project is {abs(days_until_deadline)} days past deadline",
                    mitigation="Immediate action required: reassess scope, add "
                    "resources, or extend deadline",
                )
            )
        elif days_until_deadline <= 7 and progress < 80:
            add("Tight deadline", min(25.0, (80 - progress) / 3))
            risks.append(
                RiskItem(
                    level="high",
                    category="Deadline",
                    title="Tight Timeline",
                    description=f"Only {days_until_deadline} days remaining with "
                    f"{100 - progress}% work left",
                    mitigation="Prioritize critical tasks, consider overtime, or "
                    "negotiate deadline extension",
                )
            )
        elif progress_gap > 20:
            add("Behind schedule", min(15.0, progress_gap / 5))
            risks.append(
                RiskItem(
                    level="medium",
                    category="Progress",
                    title="Behind Schedule",
                    description=f"Project {progress_gap:.0f}% behind expected progress",
                    mitigation="Review task priorities and remove blockers",
                )
            )

    total = len(tasks)
    if total > 0:
        completed = sum(1 for task in tasks if task.is_completed)
        completion_rate = completed / total * 100
        if completion_rate < 25 and total > 10:
            add("Low completion rate", 20.0)
            risks.append(
                RiskItem(
                    level="high",
                    category="Progress",
                    title="Low Completion Rate",
                    description=f"Only {completion_rate:.0f}% of tasks completed "
                    f"({completed}/{total})",
                    mitigation="Break down complex tasks, reassign resources, "
                    "identify and remove blockers",
                )
            )
        elif completion_rate < 50 and total > 5:
            add("Moderate completion rate", 10.0)

    overdue = sum(1 for task in tasks if task.is_overdue(today))
    if overdue > 0:
        add("Overdue tasks", float(min(20, overdue * 2)))
        level = "critical" if overdue > 5 else "high"
        risks.append(
            RiskItem(
                level=level,
                category="Tasks",
                title="Overdue Tasks",
                description=f"{overdue} task{_plural(overdue)} past due date",
                mitigation="Review with task owners, reassign if needed, update "
                "deadlines if realistic",
            )
        )

    in_progress = sum(1 for task in tasks if task.status == "in_progress")
    if in_progress > total * 0.4:
        add("Too many in-progress tasks", 10.0)
        risks.append(
            RiskItem(
                level="medium",
                category="Workflow",
                title="Work-in-Progress Overload",
                description=f"{in_progress} tasks in progress - possible "
                "multitasking issues",
                mitigation="Encourage team to finish tasks before starting new ones",
            )
        )

    in_review = sum(1 for task in tasks if task.status == "review")
    if in_review > 5:
        add("Review backlog", 8.0)
        risks.append(
            RiskItem(
                level="medium",
                category="Workflow",
                title="Review Backlog",
                description=f"{in_review} tasks waiting for review",
                mitigation="Assign dedicated reviewers, set review time limits",
            )
        )

    unassigned = sum(1 for task in tasks if not task.assigned_to and not task.is_completed)
    if unassigned > 0:
        add("Unassigned tasks", float(min(10, unassigned)))
        risks.append(
            RiskItem(
                level="medium",
                category="Resources",
                title="Unassigned Tasks",
                description=f"{unassigned} task{_plural(unassigned)} need assignment",
                mitigation="Use auto-assignment or manually assign to available "
                "team members",
            )
        )

    capped = max(0.0, min(100.0, score))
    logger.debug(f"Risk score for {project.name}: {capped} ({len(factors)} factors)")
    return RiskAssessment(
        score=capped,
        level=risk_level(capped),
        factors=tuple(factors),
        risks=tuple(risks),
    )
