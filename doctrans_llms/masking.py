"""
Masking module for protecting non-translatable markdown constructs.

This module handles the insertion and restoration of placeholders for:
- Fenced code blocks
- Inline code spans
- Hugo shortcodes ({{< ... >}})
- Hugo template directives ({{ ... }})

Design:
- Each mask type has a unique prefix (e.g., <<SHORTCODE_000>>)
- Placeholders are upper-case so they survive case changes by the model
- A PlaceholderMap lives for exactly one translation call: extract right
  before the call, restore right after, then discard
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass
class PlaceholderMap:
    """Stores mappings between placeholders and original content."""
    mappings: dict[str, str] = field(default_factory=dict)  # placeholder -> original
    counters: dict[str, int] = field(default_factory=dict)  # prefix -> count

    def register(self, prefix: str, original: str) -> str:
        """Register content and return a placeholder."""
        count = self.counters.get(prefix, 0)
        self.counters[prefix] = count + 1
        placeholder = f"<<{prefix}_{count:03d}>>"
        self.mappings[placeholder] = original
        return placeholder

    def restore(self, text: str) -> str:
        """Restore every occurrence of every placeholder in text."""
        result = text
        for placeholder, original in self.mappings.items():
            result = result.replace(placeholder, original)
        return result

    def __len__(self) -> int:
        return len(self.mappings)


# ============================================================================
# Pattern Definitions
# ============================================================================

# Alternation order is the priority order; the scan is a single left-to-right
# pass, so matches never overlap.
PROTECTED_PATTERN = re.compile(
    r"(?P<CODEBLK>```[\s\S]*?```)"
    r"|(?P<CODE>`[^`\n]+`)"
    r"|(?P<SHORTCODE>\{\{<[\s\S]*?>\}\})"
    r"|(?P<TEMPLATE>\{\{[^}]*\}\})"
)

PLACEHOLDER_PATTERN = re.compile(r"<<[A-Z]+_\d{3}>>")


# ============================================================================
# Masking Functions
# ============================================================================

def extract_placeholders(text: str) -> tuple[str, PlaceholderMap]:
    """Replace protected spans with placeholders.

    Args:
        text: Input text (a segment or the raw front matter)

    Returns:
        (protected_text, placeholder_map)
    """
    registry = PlaceholderMap()
    if not text:
        return text or "", registry

    def replacer(match: re.Match) -> str:
        return registry.register(match.lastgroup, match.group(0))

    return PROTECTED_PATTERN.sub(replacer, text), registry


def restore_placeholders(text: str, registry: PlaceholderMap | None) -> str:
    """Restore all placeholders in text.

    Tolerates the model reordering or duplicating tokens. A token the model
    dropped cannot be recovered; see missing_placeholders().
    """
    if not text or not registry:
        return text
    return registry.restore(text)


def missing_placeholders(protected: str, translated: str) -> list[str]:
    """Return placeholders present in protected text but absent from the translation."""
    source = set(PLACEHOLDER_PATTERN.findall(protected))
    target = set(PLACEHOLDER_PATTERN.findall(translated))
    return sorted(source - target)

