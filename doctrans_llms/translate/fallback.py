"""
Troubleshooting fallback payload.

On the last attempt for a language the orchestrator sends one simplified,
combined request: the front matter plus the first few translatable
segments, with the previous error in the system prompt. The reply is
expected to echo the FRONTMATTER / CONTENT SECTIONS markers, which are
pattern-matched back into a structured result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from doctrans_llms.errors import TranslationError
from doctrans_llms.models import Segment

FRONT_MATTER_REPLY_PATTERN = re.compile(r"FRONTMATTER:\s*---\s*([\s\S]*?)\s*---", re.IGNORECASE)

SECTIONS_REPLY_PATTERN = re.compile(r"CONTENT SECTIONS:\s*([\s\S]*)$", re.IGNORECASE)

SECTION_MARKER_PATTERN = re.compile(r"^[ \t]*Section (\d+) \([^)]*\):[ \t]*$", re.IGNORECASE | re.MULTILINE)


@dataclass
class TroubleshootRequest:
    """Simplified content for the final attempt (placeholders already inserted)."""
    front_matter: str
    sections: list[Segment]
    target_language: str
    previous_error: str


@dataclass
class TroubleshootResult:
    """Recovered translation. ``sections`` is index-aligned with the request."""
    front_matter: str
    sections: list[str] = field(default_factory=list)


def format_simplified_content(request: TroubleshootRequest, language: str) -> str:
    """Build the combined user payload with section markers."""
    lines = [
        f"Translate this technical article content to {language}:",
        "",
        "FRONTMATTER:",
        "---",
        request.front_matter,
        "---",
        "",
        "CONTENT SECTIONS:",
    ]
    for i, section in enumerate(request.sections, start=1):
        lines.append("")
        lines.append(f"Section {i} ({section.kind.value}):")
        lines.append(section.content)
    lines.append("")
    lines.append(
        "Please return the translation in the same format with FRONTMATTER and "
        "CONTENT SECTIONS clearly marked."
    )
    return "\n".join(lines)


def parse_simplified_result(reply: str, request: TroubleshootRequest) -> TroubleshootResult:
    """Recover front matter and sections from a troubleshooting reply.

    Anything the reply does not contain falls back to the request content.

    Raises:
        TranslationError: the reply contains none of the expected markers
    """
    front_matter = request.front_matter
    sections = [s.content for s in request.sections]
    recovered = False

    fm_match = FRONT_MATTER_REPLY_PATTERN.search(reply)
    if fm_match and fm_match.group(1).strip():
        front_matter = fm_match.group(1).strip()
        recovered = True

    body_match = SECTIONS_REPLY_PATTERN.search(reply)
    if body_match:
        body = body_match.group(1)
        markers = list(SECTION_MARKER_PATTERN.finditer(body))
        for n, marker in enumerate(markers):
            index = int(marker.group(1)) - 1
            end = markers[n + 1].start() if n + 1 < len(markers) else len(body)
            content = body[marker.end():end].strip()
            if 0 <= index < len(sections) and content:
                sections[index] = content
                recovered = True

    if not recovered:
        raise TranslationError("Troubleshooting reply did not contain FRONTMATTER or section markers")

    return TroubleshootResult(front_matter=front_matter, sections=sections)
