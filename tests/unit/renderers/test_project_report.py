"""Tests for project summary and sprint reports."""

import datetime as dt

from project_insights.aggregators.project_analytics import build_project_analytics
from project_insights.models import Sprint, Task
from project_insights.renderers.project_report import (
    clean_summary_text,
    render_project_report,
    render_sprint_report,
    should_bold_summary_line,
)

GENERATED_AT = dt.datetime(2024, 6, 15, 9, 30)


class TestRenderProjectReport:
    """Test suite for render_project_report."""

    def test_sections(self, sample_project, sample_tasks, sample_activities, sample_users, today):
        analytics = build_project_analytics(sample_tasks, sample_activities, today)
        users = {u.email: u for u in sample_users}

        document = render_project_report(sample_project, analytics, GENERATED_AT, users)

        texts = [run.text for run in document.runs]
        for expected in (
            "Project Summary Report",
            "Website Redesign",
            "Project Overview",
            "ACTIVE",
            "40%",
            "Jul 31, 2024",
            "Mar 1, 2024",
            "Key Metrics",
            "Team Members",
            "Recent Activity",
        ):
            assert expected in texts
        assert "Ann Lee (Developer), Bob Roy (Team Member)" in texts
        assert "•  Ann Lee completed task" in texts
        assert "   Design mockups - Jun 10, 09:00" in texts
        assert document.page_count == 1

    def test_empty_project(self, sample_project, today):
        analytics = build_project_analytics([], [], today)

        document = render_project_report(sample_project, analytics, GENERATED_AT)

        assert "No team members assigned." in document.text()
        assert "No recent activity." in document.text()

    def test_ai_summary_on_its_own_page(self, sample_project, today):
        analytics = build_project_analytics([], [], today)

        document = render_project_report(
            sample_project, analytics, GENERATED_AT, ai_summary="## Status\n- **On** track"
        )

        assert document.page_count == 2
        page_two = [run.text for run in document.runs_on_page(2)]
        assert page_two[0] == "AI Executive Summary"
        assert "• On track" in page_two

    def test_long_ai_summary_keeps_every_line(self, sample_project, today):
        analytics = build_project_analytics([], [], today)
        summary = "\n".join(f"- Point {i} needs follow-up" for i in range(150))

        document = render_project_report(sample_project, analytics, GENERATED_AT, ai_summary=summary)

        assert document.page_count >= 3
        assert document.page_count * document.page_height > document.line_height_total
        texts = {run.text for run in document.runs}
        assert all(f"• Point {i} needs follow-up" in texts for i in range(150))


class TestSummaryText:
    def test_clean_summary_text(self):
        assert clean_summary_text("## Status\n- **On** track") == "Status\n•  On track"

    def test_bold_rules(self):
        assert should_bold_summary_line("KEY RISKS", "Alpha", [])
        assert should_bold_summary_line("Next steps:", "Alpha", [])
        assert should_bold_summary_line("Due 2024-07-01", "Alpha", [])
        assert should_bold_summary_line("Alpha is on track", "Alpha", [])
        assert should_bold_summary_line("Ann Lee leads QA", "Alpha", ["Ann Lee"])
        assert not should_bold_summary_line("Work continues as planned", "Alpha", ["Al"])
        assert not should_bold_summary_line("", "Alpha", [])


class TestRenderSprintReport:
    """Test suite for render_sprint_report."""

    def test_groups_by_status(self, sample_sprints, sample_tasks, sample_project, sample_users):
        users = {u.email: u for u in sample_users}

        document = render_sprint_report(
            sample_sprints[0], sample_tasks, GENERATED_AT, sample_project, users
        )

        texts = [run.text for run in document.runs]
        assert "Project: Website Redesign" in texts
        assert "Duration: Jun 1 - Jun 14, 2024" in texts
        assert "Generated on: Jun 15, 2024 09:30" in texts
        assert "Completed (1)" in texts
        assert "In Progress (1)" in texts
        assert "To Do (1)" in texts
        assert "Review (0)" not in texts
        assert "   Assignee: Bob Roy  |  Priority: Urgent" in texts

    def test_unknown_project_and_unassigned(self):
        document = render_sprint_report(
            Sprint(name="Sprint 9"), [Task(title="Loose end")], GENERATED_AT
        )

        texts = [run.text for run in document.runs]
        assert "Project: Unknown" in texts
        assert "   Assignee: Unassigned  |  Priority: Normal" in texts
