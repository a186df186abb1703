"""Timesheet table report.

One row per time entry under a filled header row that is repeated at the
top of every page. Text cells are cut to fit their column and the status
cell is colored by approval state.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import List, Optional

from project_insights.models.timesheet import TimeEntry
from project_insights.renderers.layout import PageLayout, RenderedDocument

logger = logging.getLogger(__name__)

MARGIN = 15
TOP = 20
PAGE_BOTTOM = 280
ROW_HEIGHT = 7
HEADER_HEIGHT = 8
DIVIDER_EVERY = 5

# (title, column width in mm, max characters before truncation)
COLUMNS = (
    ("Date", 25, None),
    ("Project", 40, 22),
    ("User", 35, 20),
    ("Task", 45, 25),
    ("Hours", 15, None),
    ("Status", None, None),
)

TITLE_COLOR = (79, 70, 229)
HEADER_FILL = (240, 240, 240)
DIVIDER_COLOR = (240, 240, 240)
STATUS_COLORS = {
    "approved": (22, 163, 74),
    "rejected": (220, 38, 38),
}
PENDING_COLOR = (202, 138, 4)


def truncate_cell(value: Optional[str], length: int) -> str:
    """Cut ``value`` to ``length`` characters plus "...", "-" when empty.

    Example:
        >>> truncate_cell("Website redesign phase two", 22)
        'Website redesign phase...'
        >>> truncate_cell(None, 22)
        '-'
    """
    if not value:
        return "-"
    if len(value) > length:
        return value[:length] + "..."
    return value


def status_color(status: str):
    """Text color for a status: approved green, rejected red, else amber."""
    return STATUS_COLORS.get(status, PENDING_COLOR)


def _format_date(value: dt.date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def _row_cells(entry: TimeEntry) -> List[str]:
    hours = (Decimal(entry.total_minutes) / Decimal("60")).quantize(Decimal("0.01"))
    status = entry.status or "pending"
    values = [
        _format_date(entry.date) if entry.date else "-",
        entry.project_name,
        entry.user_name or entry.user_email,
        entry.task_title,
        f"{hours}",
        status[:1].upper() + status[1:],
    ]
    return [
        truncate_cell(value, max_chars) if max_chars else value
        for (_, _, max_chars), value in zip(COLUMNS, values)
    ]


def _draw_table_header(layout: PageLayout) -> None:
    layout.fill_rect(MARGIN, layout.y, layout.content_width, HEADER_HEIGHT, HEADER_FILL)
    layout.set_font(9, bold=True)
    layout.set_text_color((50, 50, 50))
    x = MARGIN + 2
    for title, width, _ in COLUMNS:
        layout.draw_text(title, x, layout.y + 5)
        x += width or 0
    layout.advance(10)


def _use_row_font(layout: PageLayout) -> None:
    layout.set_font(9)
    layout.set_text_color((0, 0, 0))


def render_timesheet_report(
    entries: List[TimeEntry],
    period_start: dt.date,
    period_end: dt.date,
    generated_at: dt.datetime,
) -> RenderedDocument:
    """Render time entries as a paginated table.

    Args:
        entries: Entries in display order
        period_start: First day of the reported period
        period_end: Last day of the reported period
        generated_at: Timestamp printed in the header

    Returns:
        RenderedDocument
    """
    layout = PageLayout(margin=MARGIN, title="Timesheet Report")
    layout.y = TOP

    layout.set_font(18, bold=True)
    layout.set_text_color(TITLE_COLOR)
    layout.draw_text("Timesheet Report", MARGIN)
    layout.advance(8)

    layout.set_font(10)
    layout.set_text_color((100, 100, 100))
    layout.draw_text(
        f"Generated on: {_format_date(generated_at.date())} {generated_at:%H:%M}", MARGIN
    )
    layout.advance(6)
    layout.draw_text(f"Period: {period_start.isoformat()} to {period_end.isoformat()}", MARGIN)
    layout.advance(10)

    total_minutes = sum(entry.total_minutes for entry in entries)
    billable_minutes = sum(entry.total_minutes for entry in entries if entry.is_billable)
    layout.draw_rule(width=0.1)
    layout.advance(8)

    layout.set_font(10, bold=True)
    layout.set_text_color((50, 50, 50))
    layout.draw_text(f"Total Records: {len(entries)}", MARGIN)
    layout.draw_text(f"Total Hours: {total_minutes / 60:.2f}", MARGIN + 60)
    layout.draw_text(f"Billable Hours: {billable_minutes / 60:.2f}", MARGIN + 120)
    layout.advance(12)

    _draw_table_header(layout)
    _use_row_font(layout)

    for index, entry in enumerate(entries):
        if layout.y + 10 > PAGE_BOTTOM:
            layout.new_page(TOP)
            _draw_table_header(layout)
            _use_row_font(layout)

        cells = _row_cells(entry)
        x = MARGIN + 2
        for (title, width, _), text in zip(COLUMNS, cells):
            if title == "Status":
                layout.set_text_color(status_color(entry.status))
            layout.draw_text(text, x)
            x += width or 0
        layout.set_text_color((0, 0, 0))

        layout.advance(ROW_HEIGHT)
        if (index + 1) % DIVIDER_EVERY == 0:
            layout.draw_line(
                MARGIN, layout.y - 4, layout.page_width - MARGIN, layout.y - 4, DIVIDER_COLOR
            )

    logger.info(f"Rendered timesheet report with {len(entries)} rows")
    return layout.finish()
