"""One-page AI executive report.

The report content is markdown-flavoured text from the insight service. It
is cut to a character budget before layout, and layout stops once the
cursor nears the bottom of the page, so the report always fits one page.
"""

import datetime as dt
import logging
from typing import Optional, Tuple

from project_insights.models.report import BlockType, ReportBlock, parse_markdown
from project_insights.renderers.layout import PageLayout, RenderedDocument
from project_insights.renderers.text_formatting import write_formatted_text

logger = logging.getLogger(__name__)

MARGIN = 10
BULLET_INDENT = 3
DEFAULT_MAX_CHARS = 2000
QUESTION_MAX_CHARS = 1500

HEADING_SIZES = {1: 11, 2: 10, 3: 9}
BODY_SIZE = 8

TITLE_COLOR = (100, 50, 150)
LABEL_COLOR = (50, 50, 50)
MUTED_COLOR = (100, 100, 100)

TRUNCATION_NOTICE = "[Report shortened to fit one page]"


def truncate_content(content: Optional[str], max_chars: int) -> Tuple[str, bool]:
    """Cut ``content`` to ``max_chars`` characters plus "...".

    Example:
        >>> truncate_content("abcdef", 3)
        ('abc...', True)
    """
    content = content or ""
    if len(content) > max_chars:
        return content[:max_chars] + "...", True
    return content, False


def _render_block(layout: PageLayout, block: ReportBlock, stop_at: float) -> bool:
    """Draw one block; returns True if the stop line cut it short."""
    width = layout.content_width

    if block.kind == BlockType.HEADING:
        layout.advance(2)
        cut = write_formatted_text(
            layout,
            block.text,
            MARGIN,
            width,
            HEADING_SIZES.get(block.level, 11),
            force_bold=True,
            stop_at=stop_at,
        )
        layout.advance(2)
        return cut
    if block.kind in (BlockType.BULLET, BlockType.NUMBERED):
        marker = "•" if block.kind == BlockType.BULLET else f"{block.number}."
        layout.set_font(BODY_SIZE, bold=True)
        layout.set_text_color(LABEL_COLOR)
        layout.draw_text(marker, MARGIN)
        cut = write_formatted_text(
            layout,
            block.text,
            MARGIN + BULLET_INDENT,
            width - BULLET_INDENT,
            BODY_SIZE,
            list_item=True,
            stop_at=stop_at,
        )
        layout.advance(1.5)
        return cut
    if block.kind == BlockType.PARAGRAPH:
        cut = write_formatted_text(layout, block.text, MARGIN, width, BODY_SIZE, stop_at=stop_at)
        layout.advance(2)
        return cut
    layout.advance(1)
    return False


def _render_body(layout: PageLayout, content: str) -> bool:
    """Lay out blocks until the page is full; returns True if content was left over."""
    blocks = list(parse_markdown(content))
    stop_at = layout.page_height - MARGIN - 20

    for index, block in enumerate(blocks):
        if layout.y > stop_at:
            remaining = blocks[index:]
            if any(b.kind != BlockType.BLANK for b in remaining):
                logger.info(
                    f"Executive report full, {len(remaining)} block(s) not rendered"
                )
                return True
            return False
        if _render_block(layout, block, stop_at):
            logger.info(
                f"Executive report full, block {index + 1} of {len(blocks)} cut short"
            )
            return True
    return False


def _draw_notice(layout: PageLayout) -> None:
    layout.set_font(7, italic=True)
    layout.set_text_color(MUTED_COLOR)
    layout.draw_text(TRUNCATION_NOTICE, MARGIN)


def render_executive_report(
    entity_name: str,
    content: Optional[str],
    today: dt.date,
    max_chars: int = DEFAULT_MAX_CHARS,
) -> RenderedDocument:
    """Render an AI executive report for a project.

    Args:
        entity_name: Project name shown under the title
        content: Markdown-flavoured report text
        today: Date printed in the header
        max_chars: Character budget for the content

    Returns:
        RenderedDocument; ``truncated`` is set when content was cut either
        by the character budget or by the page
    """
    layout = PageLayout(margin=MARGIN, title="AI Executive Report")

    layout.set_font(14, bold=True)
    layout.set_text_color(TITLE_COLOR)
    layout.draw_text("AI Executive Report", MARGIN)
    layout.advance(5)

    layout.set_font(9, bold=True)
    layout.set_text_color(LABEL_COLOR)
    layout.draw_text(entity_name or "", MARGIN)
    layout.advance(5)

    layout.set_font(7)
    layout.set_text_color(MUTED_COLOR)
    layout.draw_text(f"{today:%b} {today.day}, {today.year}", MARGIN)
    layout.advance(5)

    layout.draw_rule()
    layout.advance(4)

    text, cut = truncate_content(content, max_chars)
    overflow = _render_body(layout, text)
    if overflow:
        _draw_notice(layout)
    return layout.finish(truncated=cut or overflow)


def render_question_report(
    question: str,
    content: Optional[str],
    generated_by: str,
    created: dt.date,
    max_chars: int = QUESTION_MAX_CHARS,
) -> RenderedDocument:
    """Render the answer to an ad-hoc AI question as a one-page report.

    The header carries the question and a "generated by | date" line.
    """
    layout = PageLayout(margin=MARGIN, title="AI Insights Report")

    layout.set_font(14, bold=True)
    layout.set_text_color(TITLE_COLOR)
    layout.draw_text("AI Insights Report", MARGIN)
    layout.advance(6)

    layout.set_font(9, bold=True)
    layout.set_text_color(LABEL_COLOR)
    question_lines = layout.split_text(f"Q: {question}", layout.content_width)
    for offset, line in enumerate(question_lines):
        layout.draw_text(line, MARGIN, layout.y + offset * 4)
    layout.advance(len(question_lines) * 4 + 3)

    layout.set_font(7)
    layout.set_text_color(MUTED_COLOR)
    layout.draw_text(f"{generated_by} | {created:%b} {created.day}, {created.year}", MARGIN)
    layout.advance(5)

    layout.draw_rule()
    layout.advance(4)

    text, cut = truncate_content(content, max_chars)
    overflow = _render_body(layout, text)
    if overflow:
        _draw_notice(layout)
    return layout.finish(truncated=cut or overflow)
