"""Unit tests for the PDF export commands."""

import pytest
from click.testing import CliRunner

from project_insights.cli import cli


@pytest.fixture
def invoke(mock_env, snapshot_file, tmp_path):
    runner = CliRunner()

    def run(*args):
        return runner.invoke(
            cli,
            [
                "--snapshot",
                str(snapshot_file),
                "--today",
                "2024-06-15",
                "export-pdf",
                *args,
                "--output-dir",
                str(tmp_path / "pdf"),
            ],
        )

    return run


def written(tmp_path, name):
    path = tmp_path / "pdf" / name
    assert path.exists(), f"{name} not written"
    assert path.read_bytes().startswith(b"%PDF")
    return path


class TestExportProject:
    """Test suite for the project report export."""

    def test_writes_dated_report(self, invoke, tmp_path):
        result = invoke("project", "p1")

        assert result.exit_code == 0, result.output
        written(tmp_path, "Website-Redesign-report-2024-06-15.pdf")
        assert "PDF written to" in result.output

    def test_ai_summary_skipped_offline(self, invoke, tmp_path):
        result = invoke("project", "p1", "--ai-summary")

        assert result.exit_code == 0, result.output
        assert "AI summary needs the backend" in result.output

    def test_unknown_project(self, invoke):
        result = invoke("project", "p9")

        assert result.exit_code == 3
        assert "Project 'p9' not found" in result.output


class TestExportExecutive:
    """Test suite for the executive report export."""

    def test_content_file_rendered(self, invoke, tmp_path):
        content = tmp_path / "report.md"
        content.write_text("## Summary\n- **Status:** on track\n", encoding="utf-8")

        result = invoke("executive", "p1", "--content-file", str(content))

        assert result.exit_code == 0, result.output
        written(tmp_path, "Website-Redesign-ai-executive-report-2024-06-15.pdf")

    def test_offline_requires_content_file(self, invoke):
        result = invoke("executive", "p1")

        assert result.exit_code == 3
        assert "Pass --content-file" in result.output


class TestExportSprintAndTimesheet:
    """Test suite for the sprint and timesheet exports."""

    def test_sprint_report(self, invoke, tmp_path):
        result = invoke("sprint", "s1")

        assert result.exit_code == 0, result.output
        written(tmp_path, "Sprint_Report_Sprint_1.pdf")

    def test_unknown_sprint(self, invoke):
        result = invoke("sprint", "s9")

        assert result.exit_code == 3

    def test_timesheet_for_user_month(self, invoke, tmp_path):
        result = invoke(
            "timesheet", "--start", "2024-06", "--end", "2024-06", "--user", "ann@example.com"
        )

        assert result.exit_code == 0, result.output
        written(tmp_path, "Timesheet_Report_Ann_Lee_2024-06-01_to_2024-06-30.pdf")

    def test_empty_period_still_written(self, invoke, tmp_path):
        result = invoke("timesheet", "--start", "2023-01-01", "--end", "2023-01-31")

        assert result.exit_code == 0, result.output
        assert "No time entries in this period" in result.output
        written(tmp_path, "Timesheet_Report_All_2023-01-01_to_2023-01-31.pdf")

    def test_reversed_period(self, invoke):
        result = invoke("timesheet", "--start", "2024-06-30", "--end", "2024-06-01")

        assert result.exit_code == 3

    def test_bad_date(self, invoke):
        result = invoke("timesheet", "--start", "June", "--end", "2024-06")

        assert result.exit_code == 2
        assert "Invalid date format" in result.output


class TestExportDocument:
    """Test suite for the branded document export."""

    def test_html_document(self, invoke, tmp_path):
        html = tmp_path / "notes.html"
        html.write_text("<h1>Kickoff</h1><p>Scope agreed.</p>", encoding="utf-8")

        result = invoke("document", str(html), "--title", "Kickoff Notes", "--company", "Acme")

        assert result.exit_code == 0, result.output
        written(tmp_path, "Kickoff_Notes.pdf")
