"""Cross-record consistency checks on loaded collections.

These checks never change data. They report records the calculators will
drop or default, so a run's data quality is visible in the logs.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from project_insights.models import Expense, Project, Task, TimeEntry, User
from project_insights.validators.validation_report import ValidationReport

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


class RecordValidator:
    """Checks references and plausibility across record collections.

    Example:
        >>> validator = RecordValidator()
        >>> report = validator.validate_time_entries(
        ...     [TimeEntry(project_id="p9", total_minutes=60)], projects=[])
        >>> report.warning_count
        1
    """

    def validate_time_entries(
        self, entries: List[TimeEntry], projects: List[Project]
    ) -> ValidationReport:
        """Flag entries for unknown projects and days logged past 24 hours."""
        report = ValidationReport()
        project_ids = {p.id for p in projects if p.id}
        per_day: Dict[Tuple[Optional[str], object], int] = defaultdict(int)

        for index, entry in enumerate(entries):
            context = {"entity": "Timesheet", "id": entry.id or index}
            if not entry.project_id:
                report.add_warning("project_id", "Entry has no project", None, context)
            elif entry.project_id not in project_ids:
                report.add_warning(
                    "project_id",
                    "Entry references an unknown project and is ignored",
                    entry.project_id,
                    context,
                )
            if entry.user_email and entry.date:
                per_day[(entry.user_email, entry.date)] += entry.total_minutes

        for (email, day), minutes in per_day.items():
            if minutes > MINUTES_PER_DAY:
                report.add_warning(
                    "total_minutes",
                    "More than 24 hours logged in one day",
                    minutes,
                    {"user": email, "date": day},
                )

        return report

    def validate_expenses(
        self, expenses: List[Expense], projects: List[Project]
    ) -> ValidationReport:
        report = ValidationReport()
        project_ids = {p.id for p in projects if p.id}

        for index, expense in enumerate(expenses):
            context = {"entity": "ProjectExpense", "id": expense.id or index}
            if expense.project_id not in project_ids:
                report.add_warning(
                    "project_id",
                    "Expense references an unknown project and is ignored",
                    expense.project_id,
                    context,
                )
            elif not expense.is_approved:
                report.add_info("status", "Expense is not approved", expense.status, context)

        return report

    def validate_tasks(self, tasks: List[Task], users: List[User]) -> ValidationReport:
        report = ValidationReport()
        emails = {u.email for u in users}

        for index, task in enumerate(tasks):
            context = {"entity": "Task", "id": task.id or index}
            for email in task.assigned_to:
                if email not in emails:
                    report.add_info(
                        "assigned_to", "Task assigned to an unknown user", email, context
                    )

        return report

    def validate_all(
        self,
        projects: List[Project],
        entries: List[TimeEntry],
        tasks: List[Task],
        users: List[User],
        expenses: Optional[List[Expense]] = None,
    ) -> ValidationReport:
        """Run every check and log a one-line summary."""
        report = ValidationReport()
        report.merge(self.validate_time_entries(entries, projects))
        report.merge(self.validate_tasks(tasks, users))
        report.merge(self.validate_expenses(expenses or [], projects))
        logger.info(f"Record validation: {report.summary()}")
        return report
