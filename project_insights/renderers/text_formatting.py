"""Inline formatting for markdown-flavoured report text.

A line is drawn bold when it carried ``**bold**`` markers (the markers are
stripped), when bold is forced (headings), or when it contains a date. In
list items with a colon only the label up to and including the colon is
bold; the rest continues in normal weight on the same line when it fits.
"""

import re
from typing import Optional

from project_insights.models.report import strip_bold_markers
from project_insights.renderers.layout import PageLayout

BOLD_COLOR = (20, 20, 20)
NORMAL_COLOR = (50, 50, 50)

# Cursor position on a continuation page
CONTINUATION_Y = 15
BOTTOM_GUARD = 20

DATE_PATTERNS = (
    re.compile(r"\b\d{1,2}/\d{1,2}/\d{2,4}\b"),
    re.compile(
        r"\b(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+\d{1,2},?\s+\d{4}\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b\d{1,2}\s+(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+\d{4}\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
)

_BOLD_MARKERS = re.compile(r"\*\*.*?\*\*")


def contains_date(text: str) -> bool:
    """Whether ``text`` contains a date in any recognized form.

    Example:
        >>> contains_date("Due Mar 5, 2024"), contains_date("Due soon")
        (True, False)
    """
    return any(pattern.search(text) for pattern in DATE_PATTERNS)


def has_bold_markers(text: str) -> bool:
    return bool(_BOLD_MARKERS.search(text))


def _use_weight(layout: PageLayout, size: float, bold: bool) -> None:
    layout.set_font(size, bold=bold)
    layout.set_text_color(BOLD_COLOR if bold else NORMAL_COLOR)


def _break_if_low(layout: PageLayout) -> None:
    if layout.y > layout.page_height - BOTTOM_GUARD:
        layout.new_page(CONTINUATION_Y)


def _has_room(layout: PageLayout, stop_at: Optional[float]) -> bool:
    """Whether another line may be drawn; breaks the page when there is no stop line."""
    if stop_at is None:
        _break_if_low(layout)
        return True
    return layout.y <= stop_at


def write_formatted_text(
    layout: PageLayout,
    text: str,
    x: float,
    max_width: float,
    font_size: float = 8,
    force_bold: bool = False,
    list_item: bool = False,
    stop_at: Optional[float] = None,
) -> bool:
    """Draw wrapped text at the cursor and advance it past the last line.

    Args:
        layout: Target layout
        text: Source text, possibly with ``**bold**`` markers
        x: Left edge in mm
        max_width: Wrap width in mm
        font_size: Font size in points
        force_bold: Draw every line bold
        list_item: Split a leading "Label:" into a bold label and normal text
        stop_at: Cursor position past which no further line is drawn. Without
            it, text that reaches the bottom continues on a new page.

    Returns:
        True if lines were left undrawn at ``stop_at``
    """
    bold_markers = has_bold_markers(text)
    text = strip_bold_markers(text)

    if list_item and ":" in text:
        return _write_label_text(layout, text, x, max_width, font_size, stop_at)

    line_height = font_size * 0.45
    layout.set_font(font_size)
    for line in layout.split_text(text, max_width):
        if not _has_room(layout, stop_at):
            return True
        _use_weight(layout, font_size, force_bold or bold_markers or contains_date(line))
        layout.draw_text(line, x)
        layout.advance(line_height)
    return False


def _write_label_text(
    layout: PageLayout,
    text: str,
    x: float,
    max_width: float,
    font_size: float,
    stop_at: Optional[float],
) -> bool:
    colon = text.index(":")
    label = text[: colon + 1]
    rest = text[colon + 1:].strip()
    line_height = font_size * 0.4

    _use_weight(layout, font_size, True)
    label_lines = layout.split_text(label, max_width)
    label_width = 0.0
    for line in label_lines:
        if not _has_room(layout, stop_at):
            return True
        layout.draw_text(line, x)
        label_width = layout.text_width(line)
        layout.advance(line_height)

    if not rest:
        return False

    _use_weight(layout, font_size, False)
    if len(label_lines) == 1 and label_width < max_width - 5:
        remaining_width = max_width - label_width
        first, *_ = layout.split_text(rest, remaining_width)
        layout.draw_text(f" {first}", x + label_width, layout.y - line_height)
        rest = " ".join(rest.split()[len(first.split()):])
        if not rest:
            return False

    for line in layout.split_text(rest, max_width):
        if not _has_room(layout, stop_at):
            return True
        _use_weight(layout, font_size, contains_date(line))
        layout.draw_text(line, x)
        layout.advance(line_height)
    return False
