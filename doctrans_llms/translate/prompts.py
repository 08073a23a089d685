"""Prompt builders for the chat-completions translation calls.

Every call uses two roles: the system message carries the behaviour
constraints for the kind of content, the user message carries the payload.
"""

from __future__ import annotations

from enum import Enum

from doctrans_llms.models import SegmentKind


class PromptKind(Enum):
    """What is being translated; decides constraints and output budget."""
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    TITLE = "title"
    DESCRIPTION = "description"
    KEYWORDS = "keywords"
    STEP = "step"
    TROUBLESHOOT = "troubleshoot"

    @classmethod
    def for_segment(cls, kind: SegmentKind) -> PromptKind:
        if kind is SegmentKind.HEADING:
            return cls.HEADING
        if kind is SegmentKind.LIST:
            return cls.LIST
        if kind is SegmentKind.PARAGRAPH:
            return cls.PARAGRAPH
        raise ValueError(f"{kind.value} segments are never translated")


# max_tokens per call before scaling for long content
MAX_TOKENS = {
    PromptKind.HEADING: 200,
    PromptKind.TITLE: 200,
    PromptKind.STEP: 300,
    PromptKind.DESCRIPTION: 500,
    PromptKind.KEYWORDS: 1200,
    PromptKind.PARAGRAPH: 1500,
    PromptKind.LIST: 2000,
    PromptKind.TROUBLESHOOT: 2000,
}

MAX_TOKENS_CEILING = 8000

PLACEHOLDER_RULE = (
    "Keep every placeholder such as <<CODE_000>>, <<SHORTCODE_001>> or "
    "<<TEMPLATE_002>> exactly as written, in the same position."
)


def max_tokens_for(kind: PromptKind, content: str) -> int:
    """Output budget: the kind's base, raised for long inputs (~1 token/char)."""
    return min(max(MAX_TOKENS[kind], len(content)), MAX_TOKENS_CEILING)


def _field_system_prompt(language: str) -> str:
    return f"""You are a professional technical translator specializing in software documentation translation.

CRITICAL TRANSLATION RULES:
1. Translate ONLY the specified fields to {language}
2. Maintain technical accuracy and professional tone
3. Keep all formatting, quotes, and structure exactly as provided
4. Do NOT translate technical terms, API names, or product names
5. Preserve all special characters and punctuation
6. {PLACEHOLDER_RULE}
7. Return ONLY the translated content without any additional text or explanation

Your response must contain ONLY the translated text with no additional commentary."""


def _heading_system_prompt(language: str) -> str:
    return f"""You are a professional technical translator specializing in software documentation.

CRITICAL RULES:
1. Translate ONLY the heading text to {language}
2. Maintain technical accuracy and professional tone
3. Keep markdown heading markers (##, ###, etc.) exactly as provided
4. Do NOT translate technical terms, API names, file extensions, or product names
5. {PLACEHOLDER_RULE}
6. Return ONLY the translated heading with no additional text

Your response must contain ONLY the translated heading."""


def _paragraph_system_prompt(language: str) -> str:
    return f"""You are a professional technical translator specializing in software documentation.

CRITICAL PRESERVATION RULES:
1. Do NOT modify any URLs or links - keep them exactly as provided
2. Do NOT modify any markdown link syntax: [text](url) - translate only the text part
3. Do NOT modify any code snippets, file paths, or technical identifiers
4. Do NOT modify any HTML tags or attributes
5. Preserve all markdown formatting (bold, italic, code backticks)
6. {PLACEHOLDER_RULE}

TRANSLATION RULES:
1. Translate the content to {language}
2. Maintain technical accuracy and professional tone
3. Do NOT translate technical terms, product names, or API names
4. Return ONLY the translated content without additional commentary

Your response must contain ONLY the translated paragraph."""


def _list_system_prompt(language: str) -> str:
    return f"""You are a professional technical translator. Translate the following list content to {language} while:
1. PRESERVING the exact list numbering/bullet structure
2. PRESERVING all technical terms, API names, class names, method names, and URLs exactly as they appear
3. PRESERVING all markdown links [text](url) with exact URLs
4. TRANSLATING only the descriptive text while keeping technical elements intact
5. {PLACEHOLDER_RULE}

Return ONLY the translated list content, no additional text."""


def _keywords_system_prompt(language: str) -> str:
    return (
        f"You are a translator. Translate only the text content to {language} while keeping "
        "technical terms unchanged. Return ONLY the translated keywords in the same format. "
        "Do not provide explanations or reasoning."
    )


def troubleshooting_system_prompt(language: str, previous_error: str) -> str:
    return f"""You are a specialized technical translator. A previous translation attempt failed with the error: "{previous_error}".

Please provide a simplified but accurate translation to {language}. Focus on:
1. Preserving technical terms and code elements exactly
2. Using simpler sentence structures if needed
3. Maintaining all links and references
4. Keeping the same structure and formatting
5. {PLACEHOLDER_RULE}

If the content is too complex, prioritize accuracy over natural flow."""


def _user_prompt(kind: PromptKind, content: str, language: str) -> str:
    if kind is PromptKind.HEADING:
        return (
            f"Translate this heading to {language}: {content}\n\n"
            "Return only the translated heading with the same markdown formatting."
        )
    if kind is PromptKind.PARAGRAPH:
        return (
            f"Translate this paragraph to {language} while preserving all links, URLs, "
            f"technical terms, and formatting:\n\n{content}\n\n"
            "Return only the translated paragraph with all links and formatting preserved."
        )
    if kind is PromptKind.LIST:
        return f"Translate this list to {language}:\n\n{content}"
    if kind is PromptKind.KEYWORDS:
        return f"""Please translate only the text within quotes to {language}. Keep technical terms like "pdf", "c#", "powerpoint" unchanged. Keep the exact same format with quotes and commas.

Input: {content}

Expected output format example:
"translated keyword 1",
"translated keyword 2",
"translated keyword 3"

Translate now:"""
    if kind is PromptKind.TROUBLESHOOT:
        return content
    label = {
        PromptKind.TITLE: "title",
        PromptKind.DESCRIPTION: "description",
        PromptKind.STEP: "step description",
    }[kind]
    short = label.split()[0]
    return (
        f'Translate this {label} to {language}: "{content}"\n\n'
        f"Return only the translated {short} text without quotes."
    )


def build_messages(kind: PromptKind, content: str, language: str) -> list[dict]:
    """Build the [system, user] message pair for one call.

    Args:
        kind: What is being translated
        content: Protected text (placeholders already inserted)
        language: Target language name (e.g. "French")
    """
    if kind is PromptKind.HEADING:
        system = _heading_system_prompt(language)
    elif kind is PromptKind.PARAGRAPH:
        system = _paragraph_system_prompt(language)
    elif kind is PromptKind.LIST:
        system = _list_system_prompt(language)
    elif kind is PromptKind.KEYWORDS:
        system = _keywords_system_prompt(language)
    elif kind is PromptKind.TROUBLESHOOT:
        system = troubleshooting_system_prompt(language, "unknown error")
    else:
        system = _field_system_prompt(language)
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": _user_prompt(kind, content, language)},
    ]
