"""Page layout engine over a reportlab canvas.

Positions are given in millimetres from the top-left corner of an A4 page,
the way the report layouts are specified, and converted to reportlab points
(bottom-left origin) when drawn. The layout keeps a vertical cursor ``y``
and records every text run it draws, so pagination can be inspected
without parsing the produced PDF.
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

logger = logging.getLogger(__name__)

PAGE_WIDTH = A4[0] / mm
PAGE_HEIGHT = A4[1] / mm

BLACK = (0, 0, 0)

Color = Tuple[int, int, int]

_FONTS = {
    (False, False): "Helvetica",
    (True, False): "Helvetica-Bold",
    (False, True): "Helvetica-Oblique",
    (True, True): "Helvetica-BoldOblique",
}


@dataclass(frozen=True)
class TextRun:
    """One piece of text drawn on a page.

    Attributes:
        page: 1-based page number
        x: Left edge in mm (right edge for right-aligned runs)
        y: Baseline in mm from the top of the page
        text: Text drawn
        size: Font size in points
        bold: Bold weight
        italic: Oblique style
        color: RGB text color, 0-255 per channel
    """

    page: int
    x: float
    y: float
    text: str
    size: float
    bold: bool
    italic: bool = False
    color: Color = BLACK


class PageLayout:
    """A4 document with a vertical cursor.

    Args:
        margin: Page margin in mm, also the cursor start on each page
        title: Optional document title stored in the PDF metadata

    Example:
        >>> layout = PageLayout(margin=10)
        >>> layout.set_font(8, bold=True)
        >>> layout.draw_text("Hello", 10, layout.y)
        >>> layout.runs[0].text, layout.page_count
        ('Hello', 1)
    """

    def __init__(self, margin: float = 15.0, title: Optional[str] = None):
        self.margin = margin
        self.page_width = PAGE_WIDTH
        self.page_height = PAGE_HEIGHT
        self._buffer = io.BytesIO()
        self._canvas = Canvas(self._buffer, pagesize=A4, invariant=1)
        if title:
            self._canvas.setTitle(title)

        self.page = 1
        self.y = margin
        self.runs: List[TextRun] = []
        self.line_height_total = 0.0

        self.font_size = 10.0
        self.bold = False
        self.italic = False
        self.text_color: Color = BLACK
        self._apply_font()

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin * 2

    @property
    def page_count(self) -> int:
        return self.page

    @property
    def font_name(self) -> str:
        return _FONTS[(self.bold, self.italic)]

    def _apply_font(self) -> None:
        self._canvas.setFont(self.font_name, self.font_size)
        self._canvas.setFillColorRGB(*(channel / 255 for channel in self.text_color))

    def set_font(self, size: float, bold: bool = False, italic: bool = False) -> None:
        """Select the Helvetica variant and size for following text."""
        self.font_size = size
        self.bold = bold
        self.italic = italic
        self._apply_font()

    def set_text_color(self, color: Color) -> None:
        self.text_color = color
        self._apply_font()

    def text_width(self, text: str) -> float:
        """Width of ``text`` in mm with the current font."""
        return stringWidth(text, self.font_name, self.font_size) / mm

    def split_text(self, text: str, max_width: float) -> List[str]:
        """Wrap ``text`` into lines no wider than ``max_width`` mm.

        Empty or whitespace-only text yields no lines. A single word wider
        than ``max_width`` is kept on its own line.
        """
        if not text or not text.strip():
            return []
        return simpleSplit(text, self.font_name, self.font_size, max(max_width, 1) * mm)

    def draw_text(
        self, text: str, x: float, y: Optional[float] = None, align: str = "left"
    ) -> None:
        """Draw one line of text at ``(x, y)``, defaulting ``y`` to the cursor."""
        if y is None:
            y = self.y
        baseline = (self.page_height - y) * mm
        if align == "right":
            self._canvas.drawRightString(x * mm, baseline, text)
        elif align == "center":
            self._canvas.drawCentredString(x * mm, baseline, text)
        else:
            self._canvas.drawString(x * mm, baseline, text)

        self.runs.append(
            TextRun(
                page=self.page,
                x=x,
                y=y,
                text=text,
                size=self.font_size,
                bold=self.bold,
                italic=self.italic,
                color=self.text_color,
            )
        )

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: Color = (200, 200, 200),
        width: float = 0.3,
    ) -> None:
        self._canvas.setStrokeColorRGB(*(channel / 255 for channel in color))
        self._canvas.setLineWidth(width * mm)
        self._canvas.line(
            x1 * mm,
            (self.page_height - y1) * mm,
            x2 * mm,
            (self.page_height - y2) * mm,
        )

    def draw_rule(self, color: Color = (200, 200, 200), width: float = 0.3) -> None:
        """Horizontal line across the content width at the cursor."""
        self.draw_line(self.margin, self.y, self.page_width - self.margin, self.y, color, width)

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        """Filled rectangle whose top-left corner is ``(x, y)``."""
        self._canvas.setFillColorRGB(*(channel / 255 for channel in color))
        self._canvas.rect(
            x * mm,
            (self.page_height - y - height) * mm,
            width * mm,
            height * mm,
            stroke=0,
            fill=1,
        )
        self._apply_font()

    def draw_image(self, data: bytes, x: float, y: float, width: float) -> float:
        """Draw an image scaled to ``width`` mm and return its height in mm.

        Raises:
            OSError: If the image data cannot be decoded
        """
        reader = ImageReader(io.BytesIO(data))
        pixel_width, pixel_height = reader.getSize()
        height = width * pixel_height / pixel_width if pixel_width else width
        self._canvas.drawImage(
            reader,
            x * mm,
            (self.page_height - y - height) * mm,
            width=width * mm,
            height=height * mm,
            mask="auto",
        )
        return height

    def advance(self, height: float) -> None:
        """Move the cursor down by ``height`` mm."""
        self.y += height
        self.line_height_total += height

    def fits(self, height: float) -> bool:
        """Whether ``height`` more mm fit above the bottom margin."""
        return self.y + height <= self.page_height - self.margin

    def new_page(self, y: Optional[float] = None) -> None:
        """Start a new page and reset the cursor to ``y`` (the margin by default)."""
        self._canvas.showPage()
        self.page += 1
        self.y = self.margin if y is None else y
        self._apply_font()
        logger.debug(f"Started page {self.page}")

    def ensure_space(self, height: float, reset_y: Optional[float] = None) -> bool:
        """Break the page unless ``height`` more mm fit; returns True on a break."""
        if self.fits(height):
            return False
        self.new_page(reset_y)
        return True

    def to_bytes(self) -> bytes:
        """Finish the document and return the PDF bytes."""
        self._canvas.save()
        data = self._buffer.getvalue()
        logger.info(f"Rendered PDF with {self.page} page(s), {len(data)} bytes")
        return data

    def finish(self, truncated: bool = False) -> "RenderedDocument":
        """Finish the document and return its bytes with the layout record."""
        return RenderedDocument(
            data=self.to_bytes(),
            page_count=self.page,
            runs=tuple(self.runs),
            line_height_total=self.line_height_total,
            page_height=self.page_height,
            truncated=truncated,
        )


@dataclass(frozen=True)
class RenderedDocument:
    """A rendered PDF plus the record of what was laid out.

    Attributes:
        data: PDF bytes
        page_count: Number of pages
        runs: Every text run drawn, in drawing order
        line_height_total: Sum of all cursor advances in mm
        page_height: Page height in mm
        truncated: Whether source content was cut to fit
    """

    data: bytes
    page_count: int
    runs: Tuple[TextRun, ...]
    line_height_total: float
    page_height: float
    truncated: bool = False

    def runs_on_page(self, page: int) -> List[TextRun]:
        return [run for run in self.runs if run.page == page]

    def text(self) -> str:
        """All drawn text joined by newlines."""
        return "\n".join(run.text for run in self.runs)
