"""
Front-matter helpers.

Front matter is treated as flat ``key: value`` / ``key: "quoted"`` lines plus
a ``keywords: [...]`` block. Translation works by regex field replacement
against the original text: only title, description, keywords and
step1..step10 are rewritten, everything else passes through untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from doctrans_llms.masking import PlaceholderMap, restore_placeholders

MAX_STEPS = 10

FIELD_LINE_PATTERN = re.compile(r"^([A-Za-z_][\w-]*):[ \t]*(.*?)[ \t]*$", re.MULTILINE)

KEYWORDS_PATTERN = re.compile(r"keywords:\s*\[([\s\S]*?)\]")


def _quoted_field_pattern(name: str) -> re.Pattern:
    return re.compile(rf'^{re.escape(name)}:[ \t]*"(.+)"[ \t]*$', re.MULTILINE)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_fields(front_matter: str) -> dict[str, str]:
    """Key-value view of the single-line fields (quotes stripped).

    The first occurrence of a key wins; multi-line values (the keywords
    array) are returned as their first line only.
    """
    fields: dict[str, str] = {}
    for match in FIELD_LINE_PATTERN.finditer(front_matter):
        key, value = match.group(1), match.group(2)
        fields.setdefault(key, _unquote(value))
    return fields


def extract_field(front_matter: str, name: str) -> str | None:
    """Return a field value with quotes removed, or None when absent/empty."""
    value = parse_fields(front_matter).get(name)
    if value is None:
        return None
    value = value.replace('"', "")
    return value or None


def quoted_field(front_matter: str, name: str) -> str | None:
    """Return the inner text of a double-quoted field (translation candidates)."""
    match = _quoted_field_pattern(name).search(front_matter)
    return match.group(1) if match else None


def keywords_block(front_matter: str) -> str | None:
    """Return the inside of the keywords array, stripped."""
    match = KEYWORDS_PATTERN.search(front_matter)
    if not match:
        return None
    return match.group(1).strip() or None


def step_fields(front_matter: str) -> dict[str, str]:
    """Return non-empty quoted step1..step10 values, keyed by field name."""
    steps = {}
    for i in range(1, MAX_STEPS + 1):
        key = f"step{i}"
        value = quoted_field(front_matter, key)
        if value and value.strip():
            steps[key] = value
    return steps


def escape_quotes(value: str) -> str:
    """Escape bare double quotes so the value stays a valid quoted scalar."""
    return re.sub(r'(?<!\\)"', r'\\"', value.strip())


@dataclass
class FrontMatterTranslation:
    """Translated front-matter field values (empty string = not translated)."""
    title: str = ""
    description: str = ""
    keywords: str = ""
    steps: dict[str, str] = field(default_factory=dict)

    def restored(self, registry: PlaceholderMap) -> FrontMatterTranslation:
        """Return a copy with placeholders restored in every value."""
        return FrontMatterTranslation(
            title=restore_placeholders(self.title, registry),
            description=restore_placeholders(self.description, registry),
            keywords=restore_placeholders(self.keywords, registry),
            steps={k: restore_placeholders(v, registry) for k, v in self.steps.items()},
        )


def rebuild_front_matter(original: str, translations: FrontMatterTranslation) -> str:
    """Write translated values into the original front matter.

    Fields the patterns do not recognise are left as they are.
    """
    result = original

    def replace_quoted(text: str, name: str, value: str) -> str:
        replacement = f'{name}: "{escape_quotes(value)}"'
        return _quoted_field_pattern(name).sub(lambda _: replacement, text, count=1)

    if translations.title:
        result = replace_quoted(result, "title", translations.title)
    if translations.description:
        result = replace_quoted(result, "description", translations.description)
    if translations.keywords:
        block = f"keywords: [\n    {translations.keywords.strip()}\n    ]"
        result = KEYWORDS_PATTERN.sub(lambda _: block, result, count=1)
    for key, value in translations.steps.items():
        if value:
            result = replace_quoted(result, key, value)
    return result
