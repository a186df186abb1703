"""Structured report documents.

A ReportDocument is the block sequence the PDF renderers lay out. It is built
either from the markdown-flavored text returned by the insight service or
from the simple HTML produced by the document editor.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from html.parser import HTMLParser
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

BOLD_MARKER_PATTERN = re.compile(r"\*\*(.*?)\*\*")
BULLET_PATTERN = re.compile(r"^[-*+]\s+")
NUMBERED_PATTERN = re.compile(r"^(\d+)\.\s+(.*)")


class BlockType(str, Enum):
    """Kinds of block a report document is made of."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    BULLET = "bullet"
    NUMBERED = "numbered"
    BLANK = "blank"
    QUOTE = "quote"
    RULE = "rule"


@dataclass(frozen=True)
class ReportBlock:
    """A single block of a report document.

    Attributes:
        kind: Block type
        text: Block text (bold markers kept, except in headings)
        level: Heading level 1-3, 0 for other blocks
        number: Item number for numbered list items
    """

    kind: BlockType
    text: str = ""
    level: int = 0
    number: Optional[int] = None


@dataclass(frozen=True)
class ReportDocument:
    """Ordered sequence of report blocks."""

    blocks: Tuple[ReportBlock, ...] = ()

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)

    def of_kind(self, kind: BlockType) -> List[ReportBlock]:
        """Return the blocks of one kind, in document order."""
        return [block for block in self.blocks if block.kind == kind]


def strip_bold_markers(text: str) -> str:
    """Remove ``**`` bold markers, keeping the enclosed text.

    Example:
        >>> strip_bold_markers("**Risk:** high")
        'Risk: high'
    """
    return BOLD_MARKER_PATTERN.sub(r"\1", text)


def parse_markdown_line(line: str) -> ReportBlock:
    """Classify one source line.

    Dispatch order is ``### ``, ``## ``, ``# ``, bullet, numbered item,
    paragraph and finally blank. Anything unrecognized is a paragraph.
    """
    trimmed = line.strip()

    if trimmed.startswith("### "):
        return ReportBlock(BlockType.HEADING, strip_bold_markers(trimmed[4:]), level=3)
    if trimmed.startswith("## "):
        return ReportBlock(BlockType.HEADING, strip_bold_markers(trimmed[3:]), level=2)
    if trimmed.startswith("# "):
        return ReportBlock(BlockType.HEADING, strip_bold_markers(trimmed[2:]), level=1)
    if BULLET_PATTERN.match(trimmed):
        return ReportBlock(BlockType.BULLET, BULLET_PATTERN.sub("", trimmed, count=1))

    match = NUMBERED_PATTERN.match(trimmed)
    if match:
        return ReportBlock(BlockType.NUMBERED, match.group(2), number=int(match.group(1)))

    if trimmed:
        return ReportBlock(BlockType.PARAGRAPH, trimmed)
    return ReportBlock(BlockType.BLANK)


def parse_markdown(text: Optional[str]) -> ReportDocument:
    """Split markdown-flavored text into report blocks, one per line.

    Args:
        text: Markdown-ish text; None is treated as empty

    Returns:
        ReportDocument with one block per source line

    Example:
        >>> doc = parse_markdown("## Summary\\n- **Status:** on track")
        >>> [block.kind.value for block in doc]
        ['heading', 'bullet']
    """
    if not text:
        return ReportDocument()
    return ReportDocument(tuple(parse_markdown_line(line) for line in text.split("\n")))


class _BlockCollector(HTMLParser):
    """Collects top-level HTML elements as report blocks."""

    TRANSPARENT_TAGS = {"html", "body"}
    SKIPPED_TAGS = {"head", "script", "style"}
    VOID_TAGS = {"br", "hr", "img", "input", "meta", "link", "wbr"}

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.blocks: List[ReportBlock] = []
        self._stack: List[str] = []
        self._text: List[str] = []
        self._items: List[str] = []
        self._item_text: Optional[List[str]] = None
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in self.TRANSPARENT_TAGS:
            return
        if tag in self.SKIPPED_TAGS:
            self._skip_depth += 1
            return
        if tag in self.VOID_TAGS:
            if tag == "hr" and not self._stack:
                self.blocks.append(ReportBlock(BlockType.RULE))
            return

        if not self._stack:
            self._text = []
            self._items = []
            self._item_text = None
        elif tag == "li" and len(self._stack) == 1 and self._stack[0] in ("ul", "ol"):
            self._close_item()
            self._item_text = []
        self._stack.append(tag)

    def handle_endtag(self, tag):
        if tag in self.TRANSPARENT_TAGS or tag in self.VOID_TAGS:
            return
        if tag in self.SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if tag not in self._stack:
            return

        while self._stack:
            open_tag = self._stack.pop()
            if open_tag == "li" and len(self._stack) == 1:
                self._close_item()
            if open_tag == tag:
                break
        if not self._stack:
            self._finish_element(tag)

    def handle_data(self, data):
        if self._skip_depth or not self._stack:
            return
        self._text.append(data)
        if self._item_text is not None:
            self._item_text.append(data)

    def close(self):
        super().close()
        if self._stack:
            top = self._stack[0]
            self._stack = []
            self._close_item()
            self._finish_element(top)

    def _close_item(self):
        if self._item_text is not None:
            self._items.append(_collapse(self._item_text))
            self._item_text = None

    def _finish_element(self, tag: str) -> None:
        text = _collapse(self._text)

        if tag in ("ul", "ol"):
            number = 0
            for item in self._items:
                if not item:
                    continue
                number += 1
                if tag == "ol":
                    self.blocks.append(ReportBlock(BlockType.NUMBERED, item, number=number))
                else:
                    self.blocks.append(ReportBlock(BlockType.BULLET, item))
            return

        if not text:
            return
        if tag in ("h1", "h2"):
            self.blocks.append(ReportBlock(BlockType.HEADING, text, level=int(tag[1])))
        elif tag in ("h3", "h4"):
            self.blocks.append(ReportBlock(BlockType.HEADING, text, level=3))
        elif tag in ("p", "div"):
            self.blocks.append(ReportBlock(BlockType.PARAGRAPH, text))
        elif tag == "blockquote":
            self.blocks.append(ReportBlock(BlockType.QUOTE, text))
        else:
            logger.debug(f"Ignoring unsupported top-level element <{tag}>")


def _collapse(parts: List[str]) -> str:
    return " ".join("".join(parts).split())


def parse_html(html: Optional[str]) -> ReportDocument:
    """Parse simple editor HTML into report blocks.

    Only top-level elements are considered: ``h1``-``h4`` become headings,
    ``p`` and ``div`` paragraphs, ``ul``/``ol`` list items, ``blockquote``
    quotes and ``hr`` rules. Other elements and bare text are skipped.

    Args:
        html: HTML fragment or document; None is treated as empty

    Returns:
        ReportDocument with the recognized blocks
    """
    if not html:
        return ReportDocument()
    collector = _BlockCollector()
    collector.feed(html)
    collector.close()
    return ReportDocument(tuple(collector.blocks))
