"""Project summary and sprint reports.

Both are fixed-schema documents: a header, field/metric sections and lists,
laid out top to bottom with a page check before each section or item.
"""

import datetime as dt
import logging
import re
from typing import Dict, List, Optional

from project_insights.aggregators.project_analytics import ProjectAnalytics
from project_insights.models.project import Project
from project_insights.models.task import Sprint, Task
from project_insights.models.user import User
from project_insights.renderers.layout import PageLayout, RenderedDocument

logger = logging.getLogger(__name__)

MARGIN = 20
TOP = 20
PAGE_BOTTOM = 280
ACTIVITY_LIMIT = 8
DETAIL_LIMIT = 90

BRAND_COLOR = (79, 70, 229)

SPRINT_GROUPS = (
    ("Completed", "completed", (22, 163, 74)),
    ("In Progress", "in_progress", (37, 99, 235)),
    ("Review", "review", (234, 179, 8)),
    ("To Do", "todo", (107, 114, 128)),
)

SUMMARY_DATE_PATTERNS = (
    re.compile(r"\b\d{1,2}/\d{1,2}/\d{2,4}\b"),
    re.compile(
        r"\b(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+\d{1,2},?\s+\d{4}\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
)
_HEADER_CAPS = re.compile(r"^[A-Z\s]+$")


def _format_date(value: dt.date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


class _ReportWriter:
    """Section helpers shared by the fixed-schema reports."""

    def __init__(self, layout: PageLayout):
        self.layout = layout

    def check_page_break(self, height: float = 10) -> bool:
        if self.layout.y + height > PAGE_BOTTOM:
            self.layout.new_page(TOP)
            return True
        return False

    def title(self, text: str) -> None:
        layout = self.layout
        self.check_page_break(15)
        layout.set_font(14, bold=True)
        layout.set_text_color((33, 33, 33))
        layout.draw_text(text, MARGIN)
        layout.advance(2)
        layout.draw_rule(width=0.5)
        layout.advance(8)

    def field(self, label: str, value, x_offset: float = 0, inline: bool = False) -> None:
        """Draw "Label:" in bold with its value 35 mm to the right ("N/A" when None)."""
        layout = self.layout
        layout.set_font(10, bold=True)
        layout.set_text_color((100, 100, 100))
        layout.draw_text(f"{label}:", MARGIN + x_offset)
        layout.set_font(10)
        layout.set_text_color((0, 0, 0))
        layout.draw_text("N/A" if value is None else str(value), MARGIN + x_offset + 35)
        if not inline:
            layout.advance(6)


def clean_summary_text(text: str) -> str:
    """Strip markdown emphasis and heading marks, turning "- " items into bullets.

    Example:
        >>> clean_summary_text("## Status\\n- **On** track")
        'Status\\n•  On track'
    """
    text = re.sub(r"\*\*(.*?)\*\*", r"\1", text)
    text = re.sub(r"__(.*?)__", r"\1", text)
    text = re.sub(r"#+\s?", "", text)
    return re.sub(r"^\s*-\s", "•  ", text, flags=re.MULTILINE)


def _is_summary_header(line: str) -> bool:
    trimmed = line.strip()
    return 0 < len(trimmed) < 60 and (trimmed.endswith(":") or bool(_HEADER_CAPS.match(trimmed)))


def _mentions(name: Optional[str], line: str) -> bool:
    if not name:
        return False
    return re.search(rf"\b{re.escape(name)}\b", line, re.IGNORECASE) is not None


def should_bold_summary_line(line: str, project_name: str, user_names: List[str]) -> bool:
    """Whether an AI summary line is a header or mentions a date, the project or a user."""
    if not line:
        return False
    if _is_summary_header(line):
        return True
    if any(pattern.search(line) for pattern in SUMMARY_DATE_PATTERNS):
        return True
    if _mentions(project_name, line):
        return True
    return any(len(name) > 2 and _mentions(name, line) for name in user_names)


def _team_label(email: str, users: Dict[str, User]) -> str:
    user = users.get(email)
    if user is None:
        return email
    return f"{user.full_name or email} ({user.job_title or 'Team Member'})"


def _write_ai_summary(
    writer: _ReportWriter, summary: str, project_name: str, users: Dict[str, User]
) -> None:
    layout = writer.layout
    layout.new_page(TOP)
    layout.set_font(18, bold=True)
    layout.set_text_color(BRAND_COLOR)
    layout.draw_text("AI Executive Summary", MARGIN)
    layout.advance(15)

    names = [user.full_name for user in users.values() if user.full_name]
    layout.set_font(10)
    layout.set_text_color((0, 0, 0))
    lines: List[str] = []
    for paragraph in clean_summary_text(summary).split("\n"):
        lines.extend(layout.split_text(paragraph, layout.content_width) or [""])

    for line in lines:
        writer.check_page_break(5)
        if should_bold_summary_line(line, project_name, names):
            layout.advance(2)
            layout.set_font(10, bold=True)
        else:
            layout.set_font(10)
        if line:
            layout.draw_text(line, MARGIN)
        layout.advance(5)


def render_project_report(
    project: Project,
    analytics: ProjectAnalytics,
    generated_at: dt.datetime,
    users: Optional[Dict[str, User]] = None,
    ai_summary: Optional[str] = None,
) -> RenderedDocument:
    """Render a project summary report.

    Args:
        project: Project being reported on
        analytics: Task and team statistics for the project
        generated_at: Render timestamp (unused dates fall back to it)
        users: Users by email, for team member names and titles
        ai_summary: Optional AI summary text, rendered on its own page

    Returns:
        RenderedDocument
    """
    users = users or {}
    layout = PageLayout(margin=MARGIN, title=f"{project.name} Report")
    layout.y = TOP
    writer = _ReportWriter(layout)

    layout.set_font(22, bold=True)
    layout.set_text_color(BRAND_COLOR)
    layout.draw_text("Project Summary Report", MARGIN)
    layout.advance(10)
    layout.set_font(16, bold=True)
    layout.set_text_color((50, 50, 50))
    layout.draw_text(project.name, MARGIN)
    layout.advance(15)

    writer.title("Project Overview")
    writer.field("Status", project.status.upper() if project.status else None)
    writer.field("Progress", f"{project.progress}%")
    if project.deadline:
        writer.field("Deadline", _format_date(project.deadline))
    writer.field("Created", _format_date(project.created_date or generated_at.date()))
    layout.advance(5)

    writer.title("Key Metrics")
    writer.field("Completed", len(analytics.completed_tasks), 0, inline=True)
    writer.field("In Progress", analytics.tasks_by_status.get("in_progress", 0), 80, inline=True)
    layout.advance(8)
    writer.field("Pending", analytics.tasks_by_status.get("todo", 0), 0, inline=True)
    writer.field("Overdue", len(analytics.overdue_tasks), 80, inline=True)
    layout.advance(12)

    writer.title("Team Members")
    if analytics.assigned_users:
        layout.set_font(10)
        layout.set_text_color((0, 0, 0))
        team = ", ".join(_team_label(email, users) for email in analytics.assigned_users)
        lines = layout.split_text(team, layout.content_width)
        writer.check_page_break(len(lines) * 5)
        for line in lines:
            layout.draw_text(line, MARGIN)
            layout.advance(5)
        layout.advance(5)
    else:
        layout.set_font(10, italic=True)
        layout.set_text_color((150, 150, 150))
        layout.draw_text("No team members assigned.", MARGIN)
        layout.advance(10)

    writer.title("Recent Activity")
    if analytics.recent_activities:
        for activity in analytics.recent_activities[:ACTIVITY_LIMIT]:
            writer.check_page_break(12)
            layout.set_font(9, bold=True)
            layout.set_text_color((50, 50, 50))
            layout.draw_text(
                f"•  {activity.user_name or activity.user_email or 'Someone'} "
                f"{activity.action or ''} {activity.entity_type or ''}".rstrip(),
                MARGIN,
            )
            layout.advance(4)

            detail = activity.entity_name or ""
            if len(detail) > DETAIL_LIMIT:
                detail = detail[:DETAIL_LIMIT] + "..."
            stamp = activity.created_at
            when = f"{stamp:%b} {stamp.day}, {stamp:%H:%M}" if stamp else "-"
            layout.set_font(9)
            layout.set_text_color((100, 100, 100))
            layout.draw_text(f"   {detail} - {when}", MARGIN)
            layout.advance(6)
        layout.advance(5)
    else:
        layout.set_font(9)
        layout.set_text_color((0, 0, 0))
        layout.draw_text("No recent activity.", MARGIN)
        layout.advance(10)

    if ai_summary:
        _write_ai_summary(writer, ai_summary, project.name, users)

    logger.info(f"Rendered project report for {project.name}")
    return layout.finish()


def render_sprint_report(
    sprint: Sprint,
    tasks: List[Task],
    generated_at: dt.datetime,
    project: Optional[Project] = None,
    users: Optional[Dict[str, User]] = None,
) -> RenderedDocument:
    """Render a sprint report: header, status counts and tasks grouped by status.

    Args:
        sprint: Sprint being reported on
        tasks: Tasks in the sprint
        generated_at: Render timestamp
        project: Owning project, if known
        users: Users by email, for assignee names

    Returns:
        RenderedDocument
    """
    users = users or {}
    layout = PageLayout(margin=MARGIN, title=f"{sprint.name} Sprint Report")
    layout.y = TOP
    writer = _ReportWriter(layout)

    layout.set_font(22, bold=True)
    layout.set_text_color(BRAND_COLOR)
    layout.draw_text("Sprint Report", MARGIN)
    layout.advance(10)

    layout.set_font(16, bold=True)
    layout.set_text_color((50, 50, 50))
    layout.draw_text(sprint.name, MARGIN)
    layout.advance(6)

    layout.set_font(10)
    layout.set_text_color((100, 100, 100))
    layout.draw_text(f"Project: {project.name if project else 'Unknown'}", MARGIN)
    layout.advance(6)
    if sprint.start_date and sprint.end_date:
        start = f"{sprint.start_date:%b} {sprint.start_date.day}"
        layout.draw_text(f"Duration: {start} - {_format_date(sprint.end_date)}", MARGIN)
        layout.advance(6)
    layout.draw_text(
        f"Generated on: {_format_date(generated_at.date())} {generated_at:%H:%M}", MARGIN
    )
    layout.advance(12)

    by_status = {
        status: [task for task in tasks if task.status == status]
        for _, status, _ in SPRINT_GROUPS
    }

    layout.draw_rule(width=0.1)
    layout.advance(10)
    stats = (
        ("Total Tasks", len(tasks)),
        ("To Do", len(by_status["todo"])),
        ("In Progress", len(by_status["in_progress"])),
        ("Completed", len(by_status["completed"])),
    )
    for index, (label, value) in enumerate(stats):
        x = MARGIN + index * 40
        layout.set_font(14, bold=True)
        layout.set_text_color((50, 50, 50))
        layout.draw_text(str(value), x)
        layout.set_font(10)
        layout.set_text_color((120, 120, 120))
        layout.draw_text(label, x, layout.y + 6)
    layout.advance(20)
    layout.draw_rule(width=0.1)
    layout.advance(15)

    for title, status, color in SPRINT_GROUPS:
        group = by_status[status]
        if not group:
            continue
        writer.check_page_break(20)
        layout.set_font(12, bold=True)
        layout.set_text_color(color)
        layout.draw_text(f"{title} ({len(group)})", MARGIN)
        layout.advance(8)

        for task in group:
            writer.check_page_break(15)
            layout.set_font(10, bold=True)
            layout.set_text_color((50, 50, 50))
            layout.draw_text(f"•  {task.title}", MARGIN)

            assignees = [
                users[email].display_name if email in users else email
                for email in task.assigned_to
            ]
            priority = _capitalize(task.priority) if task.priority else "Normal"
            layout.set_font(9)
            layout.set_text_color((100, 100, 100))
            layout.draw_text(
                f"   Assignee: {', '.join(assignees) or 'Unassigned'}  |  Priority: {priority}",
                MARGIN,
                layout.y + 5,
            )
            layout.advance(12)
        layout.advance(5)

    logger.info(f"Rendered sprint report for {sprint.name} with {len(tasks)} tasks")
    return layout.finish()
