"""
Core data models for DocTrans-LLMs.

These models describe a markdown article as it moves through the
translation workflow:

- Article / TranslationTask: what to translate and into which languages
- Document / Segment: a parsed article (front matter + typed body segments)
- TranslationResult: outcome of one article x language attempt
- ValidationFinding: one structural issue found after translation

Design Philosophy:
- Immutable where the workflow does not need mutation (frozen dataclasses)
- Serializable: everything that ends up in a report has to_dict()
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from doctrans_llms.errors import MalformedDocument


class SegmentKind(Enum):
    """Types of body segments produced by the segmenter.

    The kind decides how a segment is handled during translation:
    CODE and SHORTCODE_REF are always passed through verbatim.
    """
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    CODE = "code"
    SHORTCODE_REF = "shortcode"

    @property
    def is_translatable(self) -> bool:
        return self in {SegmentKind.HEADING, SegmentKind.PARAGRAPH, SegmentKind.LIST}


@dataclass(frozen=True)
class Segment:
    """One classified unit of an article body."""
    kind: SegmentKind
    content: str

    @property
    def is_translatable(self) -> bool:
        return self.kind.is_translatable

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "content": self.content}


_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


@dataclass
class Document:
    """A parsed markdown article.

    Attributes:
        front_matter: Raw text between the two ``---`` delimiters
        sections: Ordered body segments
    """
    front_matter: str
    sections: list[Segment] = field(default_factory=list)

    def to_text(self) -> str:
        """Serialize back to markdown.

        Segments are joined by one blank line. Runs of blank lines inside
        prose segments are collapsed; code segments are written verbatim.
        """
        parts = []
        for section in self.sections:
            content = section.content.strip("\n")
            if section.kind is not SegmentKind.CODE:
                content = _EXCESS_BLANK_LINES.sub("\n\n", content)
            if content.strip():
                parts.append(content)
        body = "\n\n".join(parts)
        text = f"---\n{self.front_matter}\n---\n\n{body}"
        return text.rstrip() + "\n"

    def count(self, kind: SegmentKind) -> int:
        return sum(1 for s in self.sections if s.kind is kind)

    def summary(self) -> str:
        """Human-readable one-line summary."""
        counts = ", ".join(
            f"{kind.value}={self.count(kind)}" for kind in SegmentKind if self.count(kind)
        )
        return f"Document: {len(self.sections)} segments ({counts or 'empty'})"

    def to_dict(self) -> dict:
        return {
            "frontMatter": self.front_matter,
            "sections": [s.to_dict() for s in self.sections],
        }


@dataclass(frozen=True)
class Article:
    """A source article on disk. Identity is its file path."""
    full_path: Path
    product: str
    platform: str
    article_path: str
    title: str

    def read_text(self) -> str:
        """Read the source as UTF-8.

        Raises:
            OSError: the file cannot be read
            MalformedDocument: the file is not valid UTF-8
        """
        try:
            return Path(self.full_path).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocument(f"{self.full_path} is not valid UTF-8: {e}") from e


@dataclass(frozen=True)
class TranslationTask:
    """One article and the languages it must be translated into.

    Languages are processed in the given order, each independently.
    """
    article: Article
    target_languages: tuple[str, ...]

    @property
    def title(self) -> str:
        return self.article.title

    def to_dict(self) -> dict:
        """Manifest representation (camelCase keys, as stored on disk)."""
        return {
            "title": self.article.title,
            "product": self.article.product,
            "platform": self.article.platform,
            "articlePath": self.article.article_path,
            "fullPath": str(self.article.full_path),
            "targetLanguages": list(self.target_languages),
        }


@dataclass
class TranslationResult:
    """Outcome of translating one article into one language.

    Attributes:
        language: Target language code
        success: Whether an output file was written
        output_path: Where the file was (or would have been) written
        attempts: Number of attempts used (1-4)
        failure_reason: Last error message when success is False
        recovered: True when the troubleshooting fallback produced the file
    """
    language: str
    success: bool
    output_path: Optional[Path] = None
    attempts: int = 0
    failure_reason: Optional[str] = None
    recovered: bool = False

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "success": self.success,
            "outputPath": str(self.output_path) if self.output_path else None,
            "attempts": self.attempts,
            "failureReason": self.failure_reason,
            "recovered": self.recovered,
        }


class Severity(Enum):
    """Finding severity. Only errors fail a validation run."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationFinding:
    """A structural issue found when comparing source and translation."""
    severity: Severity
    message: str
    article: str = ""
    language: str = ""
    product: str = ""
    platform: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict:
        return {
            "type": self.severity.value,
            "message": self.message,
            "article": self.article,
            "product": self.product,
            "platform": self.platform,
            "language": self.language,
        }
