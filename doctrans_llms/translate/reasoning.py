"""
Reasoning-content decoder.

Some reasoning models answer with an empty ``message.content`` and put their
thinking (including the final wording) into ``message.reasoning_content``.
This module recovers a usable translation from that text.

Strategy, in order:
1. Quoted strings. In keyword-list mode the filtered quotes are joined back
   into a keyword list; otherwise the first plausible quote wins.
2. Marker lines such as ``translation: ...`` or ``-> ...``.

It is heuristic and lossy; every invocation is logged.
"""

from __future__ import annotations

import logging
import re

from doctrans_llms.config import LANGUAGE_NAMES
from doctrans_llms.errors import ExtractionFailure

logger = logging.getLogger(__name__)

QUOTED_PATTERN = re.compile(r'"([^"]+)"')

MARKER_PATTERNS = (
    re.compile(r"equivalents?:\s*(.+?)(?:\n|$)", re.IGNORECASE),
    re.compile(r"translation:\s*(.+?)(?:\n|$)", re.IGNORECASE),
    re.compile(r"(?:->|→)\s*(.+?)(?:\n|$)", re.IGNORECASE),
    re.compile(r"produce:\s*(.+?)(?:\n|$)", re.IGNORECASE),
)

KEYWORD_SEPARATOR = ",\n        "

# Quotes containing these are instructions or prompt echoes, not output
_NOISE_WORDS = ("translate", "API", "rule", "field")


def _is_keyword_mode(text: str) -> bool:
    return "keywords" in text or "translate these" in text


def _is_keyword_candidate(value: str) -> bool:
    if len(value) <= 8:
        return False
    if any(word in value for word in _NOISE_WORDS):
        return False
    if "using" in value.lower():
        return False
    return not any(name in value for name in LANGUAGE_NAMES.values())


def extract_translation_from_reasoning(reasoning: str) -> str:
    """Recover a translation from a model's reasoning text.

    Raises:
        ExtractionFailure: nothing usable was found
    """
    logger.info("Response content empty, extracting translation from reasoning_content")
    if not reasoning:
        raise ExtractionFailure("Empty reasoning content")

    quoted = QUOTED_PATTERN.findall(reasoning)
    if quoted:
        if _is_keyword_mode(reasoning):
            keywords = [f'"{q}"' for q in quoted if _is_keyword_candidate(q)]
            if keywords:
                return KEYWORD_SEPARATOR.join(keywords)
        else:
            for value in quoted:
                if len(value) > 5 and "translate" not in value:
                    return value

    for pattern in MARKER_PATTERNS:
        match = pattern.search(reasoning)
        if match and match.group(1).strip():
            return match.group(1).strip()

    logger.warning("Could not extract translation from reasoning content")
    raise ExtractionFailure("Could not extract translation from reasoning content")
