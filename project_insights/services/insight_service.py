"""
AI insight generation through the backend's LLM integration.

Prompts are built from already-aggregated data. Any failure of the LLM call
is logged and reported as ``None`` ("no insights"); callers never see an
exception from here.
"""

import datetime as dt
import json
import logging
from typing import Any, Dict, List, Optional

from project_insights.aggregators.project_analytics import ProjectAnalytics
from project_insights.models import Activity, Project, Task, TimeEntry, User
from project_insights.services.backend_client import SERVICE_ERRORS, BackendClient
from project_insights.utils.logging_utils import log_function_call

logger = logging.getLogger(__name__)

VELOCITY_WINDOW_DAYS = 30
QUESTION_WORD_LIMIT = 200
REPORT_WORD_LIMIT = 300


def format_day(value: Optional[dt.date]) -> str:
    """Format a date as "Jan 15, 2026", or "Not set"."""
    if value is None:
        return "Not set"
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def completion_velocity(activities: List[Activity], today: dt.date) -> float:
    """Completed tasks per day over the last 30 days of activity."""
    recent = 0
    for activity in activities:
        if not activity.is_task_completion or activity.created_date is None:
            continue
        if (today - activity.created_date).days <= VELOCITY_WINDOW_DAYS:
            recent += 1
    return round(recent / VELOCITY_WINDOW_DAYS, 2)


def build_question_context(
    projects: List[Project], tasks: List[Task], users: List[User], today: dt.date
) -> Dict[str, Any]:
    """
    Build the context document sent with a free-form question.

    Emails and ids are replaced with names so the answer can quote them.
    """
    names = {user.email: user.display_name for user in users}
    project_names = {p.id: p.name for p in projects if p.id}

    def assignee_names(task: Task) -> List[str]:
        labels = [names.get(email) or email.split("@")[0] for email in task.assigned_to]
        return labels or ["Unassigned"]

    return {
        "projects": [
            {
                "name": project.name,
                "status": project.status,
                "progress": project.progress,
                "deadline": format_day(project.deadline),
            }
            for project in projects
        ],
        "tasks": [
            {
                "title": task.title,
                "status": task.status,
                "priority": task.priority,
                "due_date": format_day(task.due_date),
                "assigned_to": assignee_names(task),
                "project_name": project_names.get(task.project_id, "Unknown Project"),
            }
            for task in tasks
        ],
        "summary": {
            "totalProjects": len(projects),
            "activeProjects": sum(1 for p in projects if p.status == "active"),
            "totalTasks": len(tasks),
            "completedTasks": sum(1 for t in tasks if t.is_completed),
            "overdueTasks": sum(1 for t in tasks if t.is_overdue(today)),
        },
    }


def build_question_prompt(question: str, context: Dict[str, Any]) -> str:
    return (
        "You are an expert project management analyst. Analyze the following "
        "project data and provide a VERY CONCISE, actionable answer that fits "
        "on ONE PAGE.\n\n"
        "INSTRUCTIONS:\n"
        "- Use team member and project NAMES, never emails or IDs\n"
        '- Format dates as "Jan 15, 2026"\n'
        f"- Maximum {QUESTION_WORD_LIMIT} words, bullet points only\n"
        "- Focus on the 3-4 most critical insights\n"
        "- Provide 2-3 actionable recommendations\n\n"
        f"PROJECT DATA:\n{json.dumps(context, indent=2, default=str)}\n\n"
        f"QUESTION: {question}\n\n"
        "Answer with:\n"
        "1. Direct answer (1-2 sentences)\n"
        "2. Top 3-4 key insights\n"
        "3. 2-3 actionable recommendations"
    )


def build_project_report_prompt(
    project: Project,
    analytics: ProjectAnalytics,
    activities: List[Activity],
    today: dt.date,
) -> str:
    """Prompt for the one-page executive report of a single project."""
    velocity = completion_velocity(activities, today)
    status_counts = analytics.tasks_by_status
    recent = "\n".join(
        f"- {a.user_name or 'Someone'} {a.action or 'updated'} "
        f"{a.entity_type or 'item'}: {a.entity_name or ''}".rstrip()
        for a in analytics.recent_activities[:5]
    )

    return (
        "Generate an executive project report for the following project:\n\n"
        f"Project Name: {project.name}\n"
        f"Status: {project.status or 'Not set'}\n"
        f"Progress: {project.progress}%\n"
        f"Deadline: {format_day(project.deadline)}\n\n"
        "Task Statistics:\n"
        f"- Total Tasks: {analytics.total_tasks}\n"
        f"- Completed: {len(analytics.completed_tasks)} ({analytics.completion_rate}%)\n"
        f"- In Progress: {status_counts.get('in_progress', 0)}\n"
        f"- Pending: {status_counts.get('todo', 0)}\n"
        f"- In Review: {status_counts.get('review', 0)}\n"
        f"- Overdue: {len(analytics.overdue_tasks)}\n\n"
        "Performance Metrics:\n"
        f"- Completion Velocity: {velocity:.2f} tasks/day\n"
        f"- Team Members: {len(analytics.assigned_users)}\n\n"
        f"Recent Activities:\n{recent or '- None'}\n\n"
        f"Provide a VERY CONCISE executive report (max {REPORT_WORD_LIMIT} words, "
        "ONE PAGE) with:\n"
        "1. **Executive Summary**\n"
        "2. **Key Achievements**\n"
        "3. **Current Bottlenecks**\n"
        "4. **Risk Assessment**\n"
        "5. **Team Performance**\n"
        "6. **Strategic Recommendations**\n\n"
        "Use bullet points only."
    )


def build_portfolio_prompt(
    projects: List[Project],
    tasks: List[Task],
    users: List[User],
    entries: List[TimeEntry],
    today: dt.date,
) -> str:
    """Prompt for organization-wide business intelligence insights."""
    active = sum(1 for p in projects if p.status == "active")
    completed = sum(1 for p in projects if p.status == "completed")
    on_hold = sum(1 for p in projects if p.status == "on_hold")
    done = sum(1 for t in tasks if t.is_completed)
    overdue = sum(1 for t in tasks if t.is_overdue(today))
    high_priority = sum(
        1 for t in tasks if t.priority in ("high", "urgent") and not t.is_completed
    )
    logged_hours = round(sum(e.total_minutes for e in entries) / 60)

    workloads = []
    for user in users:
        minutes = sum(e.total_minutes for e in entries if e.user_email == user.email)
        task_count = sum(1 for t in tasks if user.email in t.assigned_to)
        workloads.append((minutes, user.display_name, task_count))
    workloads.sort(key=lambda item: item[0], reverse=True)
    workload_lines = "\n".join(
        f"- {name}: {round(minutes / 60)} hours across {count} tasks"
        for minutes, name, count in workloads[:5]
    )

    return (
        "As an AI business intelligence analyst, analyze the following project "
        "management data and provide actionable insights:\n\n"
        "**Organization Overview:**\n"
        f"- Total Projects: {len(projects)} ({active} active, {completed} completed)\n"
        f"- Total Tasks: {len(tasks)} ({done} completed, {overdue} overdue)\n"
        f"- Team Size: {len(users)} members\n"
        f"- Total Logged Hours: {logged_hours}\n\n"
        "**Current Challenges:**\n"
        f"- High Priority Tasks Pending: {high_priority}\n"
        f"- Overdue Tasks: {overdue}\n"
        f"- Projects On Hold: {on_hold}\n\n"
        f"**Team Workload:**\n{workload_lines or '- No logged time'}\n\n"
        "Please provide:\n"
        "1. **Key Findings**\n"
        "2. **Risk Assessment**\n"
        "3. **Opportunities**\n"
        "4. **Actionable Recommendations**\n"
        "5. **Resource Optimization**\n"
        "6. **Predictive Insights**\n\n"
        "Format the response in clear sections with bullet points."
    )


class InsightService:
    """
    Sends prompts to ``POST /integrations/llm``.

    Example:
        >>> service = InsightService(client)
        >>> answer = service.ask("Which projects are at risk?", context)
        >>> answer is None or isinstance(answer, str)
        True
    """

    def __init__(self, client: BackendClient):
        self.client = client

    @log_function_call(level="INFO")
    def invoke(self, prompt: str) -> Optional[str]:
        """
        Invoke the LLM with ``prompt``.

        Returns:
            Response text, or None if the call failed or returned nothing
        """
        try:
            data = self.client.post(
                "integrations/llm", {"prompt": prompt, "add_context_from_internet": False}
            )
        except SERVICE_ERRORS as e:
            logger.error(f"LLM invocation failed: {e}")
            return None

        text = _response_text(data)
        if not text:
            logger.warning("LLM returned an empty response")
            return None
        logger.info(f"LLM returned {len(text)} characters")
        return text

    def ask(self, question: str, context: Dict[str, Any]) -> Optional[str]:
        return self.invoke(build_question_prompt(question, context))

    def project_report(
        self,
        project: Project,
        analytics: ProjectAnalytics,
        activities: List[Activity],
        today: dt.date,
    ) -> Optional[str]:
        return self.invoke(build_project_report_prompt(project, analytics, activities, today))

    def portfolio_insights(
        self,
        projects: List[Project],
        tasks: List[Task],
        users: List[User],
        entries: List[TimeEntry],
        today: dt.date,
    ) -> Optional[str]:
        """Organization-wide findings, risks and recommendations."""
        return self.invoke(build_portfolio_prompt(projects, tasks, users, entries, today))


def _response_text(data: Any) -> Optional[str]:
    """Extract text from a plain-string or ``{response|result|text}`` answer."""
    if isinstance(data, str):
        return data.strip() or None
    if isinstance(data, dict):
        for key in ("response", "result", "text", "content"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None
