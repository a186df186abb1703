"""Branded document export.

Lays out an editor document (simple HTML) under a company header with an
optional logo, the document title and an author/category/date line.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import requests

from project_insights.models.report import BlockType, ReportBlock, parse_html
from project_insights.renderers.layout import PageLayout, RenderedDocument

logger = logging.getLogger(__name__)

MARGIN = 15
PAGE_BOTTOM = 280
CONTINUATION_Y = 20
LOGO_WIDTH = 20
LOGO_TIMEOUT = 10


@dataclass(frozen=True)
class DocumentMetadata:
    """Header information for a branded document.

    Attributes:
        title: Document title
        author: Author name
        category: Document category (defaults to "General" when empty)
        created_date: Creation date (defaults to the render date)
        company_name: Organization shown top right
        logo_url: Optional logo image URL
    """

    title: str
    author: str = ""
    category: Optional[str] = None
    created_date: Optional[dt.date] = None
    company_name: Optional[str] = None
    logo_url: Optional[str] = None


def _format_date(value: dt.date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def fetch_logo(url: str, timeout: float = LOGO_TIMEOUT) -> Optional[bytes]:
    """Download a logo image, returning None on any HTTP failure."""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Could not fetch logo from {url}: {e}")
        return None
    return response.content


class _BlockWriter:
    """Writes document blocks with a page check before every line."""

    def __init__(self, layout: PageLayout):
        self.layout = layout

    def check_page_break(self, height: float) -> bool:
        if self.layout.y + height > PAGE_BOTTOM:
            self.layout.new_page(CONTINUATION_Y)
            return True
        return False

    def lines(self, lines: List[str], x: float, line_height: float) -> None:
        for line in lines:
            self.check_page_break(line_height)
            self.layout.draw_text(line, x)
            self.layout.advance(line_height)

    def write(self, block: ReportBlock) -> None:
        layout = self.layout
        width = layout.content_width

        if block.kind == BlockType.HEADING and block.level <= 2:
            self.check_page_break(15)
            layout.advance(5)
            layout.set_font(16, bold=True)
            layout.set_text_color((30, 30, 30))
            self.lines(layout.split_text(block.text, width), MARGIN, 7)
            layout.advance(2)
        elif block.kind == BlockType.HEADING:
            self.check_page_break(12)
            layout.advance(3)
            layout.set_font(13, bold=True)
            layout.set_text_color((50, 50, 50))
            self.lines(layout.split_text(block.text, width), MARGIN, 6)
            layout.advance(2)
        elif block.kind == BlockType.PARAGRAPH:
            self.check_page_break(8)
            layout.set_font(11)
            layout.set_text_color((20, 20, 20))
            self.lines(layout.split_text(block.text, width), MARGIN, 5)
            layout.advance(3)
        elif block.kind in (BlockType.BULLET, BlockType.NUMBERED):
            self.check_page_break(8)
            layout.set_font(11)
            layout.set_text_color((0, 0, 0))
            marker = f"{block.number}." if block.kind == BlockType.NUMBERED else "•"
            layout.draw_text(marker, MARGIN + 2)
            self.lines(layout.split_text(block.text, width - 8), MARGIN + 8, 5)
            layout.advance(2)
        elif block.kind == BlockType.QUOTE:
            self.check_page_break(10)
            layout.set_font(11, italic=True)
            layout.set_text_color((80, 80, 80))
            lines = layout.split_text(block.text, width - 10)
            top, page = layout.y, layout.page
            layout.advance(4)
            self.lines(lines, MARGIN + 5, 5)
            if layout.page == page:
                layout.draw_line(MARGIN, top, MARGIN, top + len(lines) * 5, width=1)
            layout.advance(4)
        elif block.kind == BlockType.RULE:
            self.check_page_break(6)
            layout.advance(2)
            layout.draw_rule(color=(220, 220, 220))
            layout.advance(4)


def _draw_header(
    layout: PageLayout,
    metadata: DocumentMetadata,
    today: dt.date,
    logo_loader: Callable[[str], Optional[bytes]],
) -> None:
    right = layout.page_width - MARGIN
    top = layout.y

    if metadata.logo_url:
        data = logo_loader(metadata.logo_url)
        if data:
            try:
                layout.draw_image(data, MARGIN, top, LOGO_WIDTH)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not add logo to PDF: {e}")

    layout.set_font(16, bold=True)
    layout.set_text_color((50, 50, 50))
    layout.draw_text(metadata.company_name or "Organization", right, top + 8, align="right")
    layout.set_font(10)
    layout.set_text_color((100, 100, 100))
    layout.draw_text(_format_date(today), right, top + 14, align="right")

    layout.advance(25)
    layout.draw_rule(color=(220, 220, 220), width=0.5)
    layout.advance(10)

    layout.set_font(22, bold=True)
    layout.set_text_color((0, 0, 0))
    for line in layout.split_text(metadata.title, layout.content_width):
        layout.draw_text(line, MARGIN)
        layout.advance(8)

    created = metadata.created_date or today
    layout.set_font(10)
    layout.set_text_color((100, 100, 100))
    layout.draw_text(
        f"Author: {metadata.author}  |  Category: {metadata.category or 'General'}  |  "
        f"Created: {_format_date(created)}",
        MARGIN,
    )
    layout.advance(15)


def render_branded_document(
    html: Optional[str],
    metadata: DocumentMetadata,
    today: dt.date,
    logo_loader: Optional[Callable[[str], Optional[bytes]]] = None,
) -> RenderedDocument:
    """Render an editor document as a branded PDF.

    Args:
        html: Document body as simple HTML
        metadata: Header information
        today: Render date shown under the company name
        logo_loader: Callable returning logo bytes for a URL, or None on
            failure (defaults to an HTTP fetch)

    Returns:
        RenderedDocument

    Example:
        >>> doc = render_branded_document("<p>Hello</p>", DocumentMetadata("Plan"),
        ...     dt.date(2024, 3, 5))
        >>> "Hello" in doc.text()
        True
    """
    layout = PageLayout(margin=MARGIN, title=metadata.title)
    _draw_header(layout, metadata, today, logo_loader or fetch_logo)

    writer = _BlockWriter(layout)
    for block in parse_html(html):
        writer.write(block)

    return layout.finish()
