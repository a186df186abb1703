"""PDF renderers.

Every renderer lays out onto an A4 ``PageLayout`` and returns a
``RenderedDocument`` holding the PDF bytes plus the text runs drawn on each
page.
"""

from project_insights.renderers.branded_document import (
    DocumentMetadata,
    render_branded_document,
)
from project_insights.renderers.executive_report import (
    render_executive_report,
    render_question_report,
    truncate_content,
)
from project_insights.renderers.layout import PageLayout, RenderedDocument, TextRun
from project_insights.renderers.project_report import (
    render_project_report,
    render_sprint_report,
)
from project_insights.renderers.timesheet_report import render_timesheet_report

__all__ = [
    "DocumentMetadata",
    "render_branded_document",
    "render_executive_report",
    "render_question_report",
    "truncate_content",
    "PageLayout",
    "RenderedDocument",
    "TextRun",
    "render_project_report",
    "render_sprint_report",
    "render_timesheet_report",
]
