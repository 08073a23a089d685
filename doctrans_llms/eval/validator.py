"""
Structural validation of translated articles.

Compares a source article with its translation and reports findings:

Errors (fail validation):
- gist shortcode count or identity changed
- fenced code block count changed
- required front-matter field present in source but missing in target
- target cannot be parsed at all

Warnings:
- heading count changed
- link URL from the source missing in the target
- code block content changed (counts equal)
- occurrences of a technical term dropped by more than 20%
- technical front-matter field changed

Both documents are parsed here with direct regex extraction, not through the
segmenter's segment kinds. Only the front-matter split and the gist pattern
are shared with the segmenter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from doctrans_llms.errors import MalformedDocument
from doctrans_llms.frontmatter import extract_field
from doctrans_llms.models import Severity, ValidationFinding
from doctrans_llms.segmenter import GIST_PATTERN, split_front_matter

LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
HEADING_LINE_PATTERN = re.compile(r"^#{1,6}\s+(.+)$", re.MULTILINE)

REQUIRED_FIELDS = ("title", "description", "productname", "productkey", "platformkey")

TECHNICAL_FIELDS = (
    "productname", "productkey", "platformkey", "productplatform",
    "date", "lastmod", "weight", "draft", "type",
)

# label -> pattern; "Java" must not count the prefix of "JavaScript"
TECHNICAL_TERMS = {
    "C#": re.compile(r"C#"),
    ".NET": re.compile(r"\.NET"),
    "PDF": re.compile(r"PDF"),
    "API": re.compile(r"API"),
    "JSON": re.compile(r"JSON"),
    "XML": re.compile(r"XML"),
    "HTML": re.compile(r"HTML"),
    "CSS": re.compile(r"CSS"),
    "JavaScript": re.compile(r"JavaScript"),
    "Java": re.compile(r"Java(?!Script)"),
}

# A target keeping less than this share of a term's occurrences is flagged
TERM_RETENTION_THRESHOLD = 0.8


@dataclass
class Gist:
    full: str
    user: str
    id: str


@dataclass
class ParsedMarkdown:
    """Regex view of an article used for comparison."""
    front_matter: str
    body: str
    gists: list[Gist] = field(default_factory=list)
    links: list[tuple[str, str]] = field(default_factory=list)  # (text, url)
    code_blocks: list[str] = field(default_factory=list)
    headings: list[str] = field(default_factory=list)


def parse_markdown_file(text: str) -> ParsedMarkdown:
    """Extract gists, links, code blocks and headings from an article.

    Raises:
        MalformedDocument: no front matter
    """
    front_matter, body = split_front_matter(text)
    return ParsedMarkdown(
        front_matter=front_matter,
        body=body,
        gists=[Gist(m.group(0), m.group(1), m.group(2)) for m in GIST_PATTERN.finditer(body)],
        links=[(m.group(1), m.group(2)) for m in LINK_PATTERN.finditer(body)],
        code_blocks=CODE_BLOCK_PATTERN.findall(body),
        headings=HEADING_LINE_PATTERN.findall(body),
    )


class _Findings(list):
    """Collects findings stamped with the same article/language context."""

    def __init__(self, **context):
        super().__init__()
        self.context = context

    def error(self, message: str):
        self.append(ValidationFinding(Severity.ERROR, message, **self.context))

    def warning(self, message: str):
        self.append(ValidationFinding(Severity.WARNING, message, **self.context))


def _check_structure(source: ParsedMarkdown, target: ParsedMarkdown, out: _Findings):
    if len(source.gists) != len(target.gists):
        out.error(f"Gist count mismatch: source={len(source.gists)}, target={len(target.gists)}")
    if len(source.code_blocks) != len(target.code_blocks):
        out.error(
            f"Code block count mismatch: source={len(source.code_blocks)}, "
            f"target={len(target.code_blocks)}"
        )
    if len(source.headings) != len(target.headings):
        out.warning(
            f"Heading count mismatch: source={len(source.headings)}, target={len(target.headings)}"
        )


def _check_front_matter(source: ParsedMarkdown, target: ParsedMarkdown, out: _Findings):
    for name in REQUIRED_FIELDS:
        if extract_field(source.front_matter, name) and not extract_field(target.front_matter, name):
            out.error(f"Missing frontmatter field: {name}")

    for name in TECHNICAL_FIELDS:
        before = extract_field(source.front_matter, name)
        after = extract_field(target.front_matter, name)
        if before and after and before != after:
            out.warning(f"Technical field '{name}' was modified: '{before}' -> '{after}'")


def _check_preservation(source: ParsedMarkdown, target: ParsedMarkdown, out: _Findings):
    for before, after in zip(source.gists, target.gists):
        if (before.user, before.id) != (after.user, after.id):
            out.error(f"Gist modified: source='{before.full}', target='{after.full}'")

    target_urls = {url for _, url in target.links}
    for _, url in source.links:
        if url not in target_urls:
            out.warning(f"URL missing in translation: {url}")

    for i, (before, after) in enumerate(zip(source.code_blocks, target.code_blocks), start=1):
        if before != after:
            out.warning(f"Code block {i} was modified")


def _check_technical_terms(source: ParsedMarkdown, target: ParsedMarkdown, out: _Findings):
    for term, pattern in TECHNICAL_TERMS.items():
        before = len(pattern.findall(source.body))
        after = len(pattern.findall(target.body))
        if before > 0 and after < before * TERM_RETENTION_THRESHOLD:
            out.warning(f"Technical term '{term}' count significantly reduced: {before} -> {after}")


def validate(
    source_text: str,
    target_text: str,
    article: str = "",
    language: str = "",
    product: str = "",
    platform: str = "",
) -> list[ValidationFinding]:
    """Compare a translation with its source.

    Returns:
        Findings in check order; the translation passes when none is an error.
    """
    out = _Findings(article=article, language=language, product=product, platform=platform)
    try:
        source = parse_markdown_file(source_text)
        target = parse_markdown_file(target_text)
    except MalformedDocument as e:
        out.error(f"Validation failed: {e}")
        return list(out)

    _check_structure(source, target, out)
    _check_front_matter(source, target, out)
    _check_preservation(source, target, out)
    _check_technical_terms(source, target, out)
    return list(out)


def passed(findings: list[ValidationFinding]) -> bool:
    return not any(f.is_error for f in findings)
