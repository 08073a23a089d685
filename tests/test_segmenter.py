"""
Tests for markdown segmentation.

Tests cover:
- Line classification
- Front-matter split (LF and CRLF)
- Segment kinds and ordering
- Structure-count preservation
- Serialization back to markdown
"""

import pytest

from doctrans_llms.errors import MalformedDocument
from doctrans_llms.models import SegmentKind
from doctrans_llms.segmenter import (
    LineKind,
    classify_line,
    parse_document,
    parse_sections,
    split_front_matter,
)


ARTICLE = """---
title: "Add Watermark to PDF"
description: "Learn how to add a watermark."
---

## Overview

This article shows how to add a watermark.
It uses the `Watermarker` class.

## Steps

1. Load the document
2. Add the watermark
3. Save the result

```csharp
using (Watermarker w = new Watermarker("in.pdf"))
{
    w.Save();
}
```

{{< gist groupdocs-watermark-gists 2a5b7c >}}

### Notes

- First note
- Second note
"""


class TestClassifyLine:
    """Test single-line classification."""

    @pytest.mark.parametrize("line,kind", [
        ("# Title", LineKind.HEADING),
        ("###### Deep", LineKind.HEADING),
        ("```java", LineKind.FENCE),
        ("```", LineKind.FENCE),
        ("{{< gist user abc123 >}}", LineKind.SHORTCODE),
        ("  {{< tabs >}}  ", LineKind.SHORTCODE),
        ("1. First", LineKind.LIST_ITEM),
        ("* Star", LineKind.LIST_ITEM),
        ("  - Indented dash", LineKind.LIST_ITEM),
        ("+ Plus", LineKind.LIST_ITEM),
        ("", LineKind.BLANK),
        ("   ", LineKind.BLANK),
        ("Just text.", LineKind.TEXT),
        ("#hashtag", LineKind.TEXT),
    ])
    def test_classification(self, line, kind):
        assert classify_line(line) is kind

    def test_gist_inside_text_line(self):
        assert classify_line("See {{< gist user abc123 >}} for code") is LineKind.SHORTCODE


class TestFrontMatter:
    """Test front-matter splitting."""

    def test_split(self):
        front_matter, body = split_front_matter('---\ntitle: "T"\n---\n\nBody text\n')
        assert front_matter == 'title: "T"'
        assert body == "Body text"

    def test_crlf(self):
        front_matter, body = split_front_matter('---\r\ntitle: "T"\r\n---\r\nBody\r\n')
        assert front_matter == 'title: "T"'
        assert body == "Body"

    def test_missing_front_matter(self):
        with pytest.raises(MalformedDocument):
            parse_document("# Heading only\n\nText")


class TestParseSections:
    """Test segment production."""

    def test_article_kinds_in_order(self):
        document = parse_document(ARTICLE)
        kinds = [s.kind for s in document.sections]
        assert kinds == [
            SegmentKind.HEADING,
            SegmentKind.PARAGRAPH,
            SegmentKind.HEADING,
            SegmentKind.LIST,
            SegmentKind.CODE,
            SegmentKind.SHORTCODE_REF,
            SegmentKind.HEADING,
            SegmentKind.LIST,
        ]

    def test_structure_counts_preserved(self):
        document = parse_document(ARTICLE)
        body = split_front_matter(ARTICLE)[1]
        headings = [l for l in body.splitlines() if classify_line(l) is LineKind.HEADING]
        items = [l for l in body.splitlines() if classify_line(l) is LineKind.LIST_ITEM]

        assert document.count(SegmentKind.HEADING) == len(headings)
        assert document.count(SegmentKind.CODE) == 1
        listed = sum(len(s.content.splitlines()) for s in document.sections if s.kind is SegmentKind.LIST)
        assert listed == len(items)

    def test_code_block_verbatim(self):
        document = parse_document(ARTICLE)
        code = next(s for s in document.sections if s.kind is SegmentKind.CODE)
        assert code.content.startswith("```csharp\n")
        assert code.content.endswith("\n```")
        assert "    w.Save();" in code.content

    def test_unterminated_fence_runs_to_end(self):
        sections = parse_sections("Intro\n```\ncode line")
        assert sections[-1].kind is SegmentKind.CODE
        assert sections[-1].content == "```\ncode line"

    def test_text_after_heading_starts_paragraph(self):
        sections = parse_sections("## Step 1\nDo X.")
        assert [s.kind for s in sections] == [SegmentKind.HEADING, SegmentKind.PARAGRAPH]
        assert sections[0].content == "## Step 1"
        assert sections[1].content == "Do X."

    def test_blank_separated_paragraph_stays_out_of_heading(self):
        sections = parse_sections("## Overview\n\nFirst line.\nSecond line.")
        assert [s.kind for s in sections] == [SegmentKind.HEADING, SegmentKind.PARAGRAPH]
        assert sections[0].content == "## Overview"
        assert sections[1].content == "First line.\nSecond line."

    def test_blank_line_ends_list(self):
        sections = parse_sections("- a\n- b\n\nAfter the list.")
        assert [s.kind for s in sections] == [SegmentKind.LIST, SegmentKind.PARAGRAPH]
        assert sections[0].content == "- a\n- b"

    def test_text_after_list_starts_paragraph(self):
        sections = parse_sections("- a\nnot an item")
        assert [s.kind for s in sections] == [SegmentKind.LIST, SegmentKind.PARAGRAPH]

    def test_empty_body(self):
        assert parse_sections("") == []

    def test_table_falls_through_as_paragraph(self):
        sections = parse_sections("| a | b |\n|---|---|\n| 1 | 2 |")
        assert [s.kind for s in sections] == [SegmentKind.PARAGRAPH]


class TestSerialization:
    """Test Document.to_text()."""

    def test_reserialize_reparses_identically(self):
        document = parse_document(ARTICLE)
        again = parse_document(document.to_text())
        assert again.front_matter == document.front_matter
        assert again.sections == document.sections

    def test_layout(self):
        document = parse_document('---\ntitle: "T"\n---\n\n# H\n\nText')
        assert document.to_text() == '---\ntitle: "T"\n---\n\n# H\n\nText\n'

    def test_summary_mentions_counts(self):
        summary = parse_document(ARTICLE).summary()
        assert "heading=3" in summary
        assert "code=1" in summary
