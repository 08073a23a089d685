"""
Markdown segmenter for Hugo articles.

Splits an article into its front-matter block and an ordered list of typed
body segments (heading, paragraph, list, code, shortcode reference).

This is a heuristic line scanner, not a markdown grammar: nested lists,
tables and block quotes have no dedicated kind and fall through as
paragraph content. All line patterns live behind classify_line() so they
can be tested independently of the scan loop.
"""

from __future__ import annotations

import re
from enum import Enum, auto

from doctrans_llms.errors import MalformedDocument
from doctrans_llms.models import Document, Segment, SegmentKind


# ============================================================================
# Pattern Definitions
# ============================================================================

# Front matter: first ``---`` line to the next ``---`` line (\n or \r\n)
FRONT_MATTER_PATTERN = re.compile(r"^---\r?\n([\s\S]*?)\r?\n---")

HEADING_PATTERN = re.compile(r"^#{1,6}\s+")

FENCE_PATTERN = re.compile(r"^```")

GIST_PATTERN = re.compile(r"\{\{<\s*gist\s+([\w-]+)\s+([\w-]+)\s*>\}\}")

# A line that is nothing but a single shortcode directive
SHORTCODE_LINE_PATTERN = re.compile(r"^\s*\{\{<.*>\}\}\s*$")

LIST_ITEM_PATTERN = re.compile(r"^\s*(\d+\.|\*|-|\+)\s+")


class LineKind(Enum):
    """Classification of a single body line."""
    HEADING = auto()
    FENCE = auto()
    SHORTCODE = auto()
    LIST_ITEM = auto()
    BLANK = auto()
    TEXT = auto()


def classify_line(line: str) -> LineKind:
    """Classify one body line. Checks run in priority order."""
    if HEADING_PATTERN.match(line):
        return LineKind.HEADING
    if FENCE_PATTERN.match(line):
        return LineKind.FENCE
    if GIST_PATTERN.search(line) or SHORTCODE_LINE_PATTERN.match(line):
        return LineKind.SHORTCODE
    if LIST_ITEM_PATTERN.match(line):
        return LineKind.LIST_ITEM
    if not line.strip():
        return LineKind.BLANK
    return LineKind.TEXT


def split_front_matter(raw_text: str) -> tuple[str, str]:
    """Split raw article text into (front_matter, body).

    Raises:
        MalformedDocument: no front-matter delimiter pair at the top
    """
    match = FRONT_MATTER_PATTERN.match(raw_text)
    if not match:
        raise MalformedDocument("No frontmatter found in the article")
    front_matter = match.group(1)
    body = raw_text[match.end():].strip()
    return front_matter, body


def parse_document(raw_text: str) -> Document:
    """Parse raw article text into a Document."""
    front_matter, body = split_front_matter(raw_text)
    return Document(front_matter=front_matter, sections=parse_sections(body))


def parse_sections(body: str) -> list[Segment]:
    """Segment an article body with a single left-to-right scan."""
    sections: list[Segment] = []
    lines = body.replace("\r\n", "\n").split("\n")
    current: list[str] = []
    kind = SegmentKind.PARAGRAPH

    def flush() -> None:
        text = "\n".join(current).strip()
        if text:
            sections.append(Segment(kind, text))
        current.clear()

    i = 0
    while i < len(lines):
        line = lines[i]
        line_kind = classify_line(line)

        if line_kind is LineKind.HEADING:
            flush()
            current.append(line)
            kind = SegmentKind.HEADING

        elif line_kind is LineKind.FENCE:
            flush()
            code = [line]
            i += 1
            while i < len(lines) and not FENCE_PATTERN.match(lines[i]):
                code.append(lines[i])
                i += 1
            if i < len(lines):
                code.append(lines[i])
            sections.append(Segment(SegmentKind.CODE, "\n".join(code)))
            kind = SegmentKind.PARAGRAPH

        elif line_kind is LineKind.SHORTCODE:
            flush()
            sections.append(Segment(SegmentKind.SHORTCODE_REF, line))
            kind = SegmentKind.PARAGRAPH

        elif line_kind is LineKind.LIST_ITEM:
            if kind is not SegmentKind.LIST:
                flush()
                kind = SegmentKind.LIST
            current.append(line)

        elif line_kind is LineKind.BLANK:
            if kind is SegmentKind.LIST:
                flush()
                kind = SegmentKind.PARAGRAPH
            elif current:
                current.append(line)

        else:
            if kind is not SegmentKind.PARAGRAPH:
                flush()
                kind = SegmentKind.PARAGRAPH
            current.append(line)

        i += 1

    flush()
    return sections
