"""Tests for the one-page AI executive and question reports."""

import datetime as dt

from project_insights.renderers.executive_report import (
    TRUNCATION_NOTICE,
    render_executive_report,
    render_question_report,
    truncate_content,
)

TODAY = dt.date(2024, 6, 15)

REPORT = """# Executive Summary
The project is **on track** for the Jul 31, 2024 deadline.

## Risks
- **Budget:** 40% consumed
- **Schedule:** one overdue task

1. Review scope
2. Confirm staffing
"""


class TestTruncateContent:
    def test_short_content_is_untouched(self):
        assert truncate_content("abc", 5) == ("abc", False)

    def test_long_content_is_cut(self):
        assert truncate_content("abcdef", 3) == ("abc...", True)

    def test_none(self):
        assert truncate_content(None, 5) == ("", False)


class TestRenderExecutiveReport:
    """Test suite for render_executive_report."""

    def test_header(self):
        document = render_executive_report("Website Redesign", REPORT, TODAY)

        texts = [run.text for run in document.runs]
        assert texts[:3] == ["AI Executive Report", "Website Redesign", "Jun 15, 2024"]

    def test_body_blocks(self):
        document = render_executive_report("Website Redesign", REPORT, TODAY)

        texts = [run.text for run in document.runs]
        assert "Executive Summary" in texts
        assert "•" in texts
        assert "Budget:" in texts
        assert "1." in texts
        assert document.page_count == 1
        assert document.truncated is False

    def test_character_budget(self):
        document = render_executive_report("P", "x" * 50, TODAY, max_chars=10)

        assert document.truncated is True
        assert "x" * 10 + "..." in document.text()

    def test_long_report_stays_on_one_page(self):
        content = "\n".join(f"Point {i} is on track." for i in range(200))

        document = render_executive_report("P", content, TODAY, max_chars=100000)

        assert document.page_count == 1
        assert document.truncated is True
        assert document.runs[-1].text == TRUNCATION_NOTICE

    def test_long_trailing_paragraph_stays_on_one_page(self):
        bullets = "\n".join("- item" for _ in range(46))
        content = bullets + "\n" + " ".join(["word"] * 300)
        assert len(content) < 2000

        document = render_executive_report("P", content, TODAY)

        assert document.page_count == 1
        assert document.truncated is True
        assert document.runs[-1].text == TRUNCATION_NOTICE
        assert all(run.page == 1 for run in document.runs)

    def test_empty_content(self):
        document = render_executive_report("P", None, TODAY)

        assert document.page_count == 1
        assert document.truncated is False


class TestRenderQuestionReport:
    def test_header_and_answer(self):
        document = render_question_report(
            "Who is overloaded?", "Nobody is overloaded.", "ann@example.com", TODAY
        )

        texts = [run.text for run in document.runs]
        assert texts[0] == "AI Insights Report"
        assert "Q: Who is overloaded?" in texts
        assert "ann@example.com | Jun 15, 2024" in texts
        assert "Nobody is overloaded." in texts

    def test_default_budget_is_1500(self):
        document = render_question_report("Q", "y" * 1600, "me", TODAY)

        assert document.truncated is True
