"""
Base translator interface and implementations.

This module defines:
- Abstract Translator interface that all backends implement
- DummyTranslator for testing and dry runs (echo or simple transformations)
- create_translator() factory

Design Philosophy:
- Translators are stateless: one call = (kind, content, language) -> text
- Inputs are never mutated; placeholders are handled by the caller
- Front-matter fields and the troubleshooting payload are built on top of
  translate(), so every backend gets them for free
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from doctrans_llms.config import language_name
from doctrans_llms.frontmatter import (
    FrontMatterTranslation,
    keywords_block,
    quoted_field,
    step_fields,
)
from doctrans_llms.translate.fallback import (
    TroubleshootRequest,
    TroubleshootResult,
    format_simplified_content,
    parse_simplified_result,
)
from doctrans_llms.translate.prompts import PromptKind


class Translator(ABC):
    """Abstract base class for all translation backends.

    All translators must implement:
    - name: backend identifier used in logs
    - translate(): translate one piece of content of a given kind

    The ``verbose`` flag asks the backend to log request/response details;
    the orchestrator flips it for retries and troublesome languages.
    """

    verbose: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the translator name (e.g., 'llm-gpt-oss', 'dummy-upper')."""
        pass

    @abstractmethod
    def translate(self, kind: PromptKind, content: str, target_language: str) -> str:
        """Translate a single piece of content.

        Args:
            kind: What the content is (heading, paragraph, title, ...)
            content: Text to translate, placeholders already inserted
            target_language: Target language code (e.g. 'fr')

        Returns:
            Translated text

        Raises:
            TranslationError: after the backend gave up
        """
        pass

    def translate_front_matter(self, front_matter: str, target_language: str) -> FrontMatterTranslation:
        """Translate title, description, keywords and step1..step10.

        Each field is a separate, bounded call. Missing fields stay empty.
        """
        result = FrontMatterTranslation()

        title = quoted_field(front_matter, "title")
        if title:
            result.title = self.translate(PromptKind.TITLE, title, target_language)

        description = quoted_field(front_matter, "description")
        if description:
            result.description = self.translate(PromptKind.DESCRIPTION, description, target_language)

        keywords = keywords_block(front_matter)
        if keywords:
            result.keywords = self.translate(PromptKind.KEYWORDS, keywords, target_language)

        for key, value in step_fields(front_matter).items():
            result.steps[key] = self.translate(PromptKind.STEP, value, target_language)

        return result

    def translate_with_troubleshooting(self, request: TroubleshootRequest) -> TroubleshootResult:
        """Send the simplified combined payload and parse it back."""
        payload = format_simplified_content(request, language_name(request.target_language))
        reply = self.translate(PromptKind.TROUBLESHOOT, payload, request.target_language)
        return parse_simplified_result(reply, request)


class DummyTranslator(Translator):
    """A dummy translator for testing.

    Modes:
    - 'echo': Return the input unchanged
    - 'upper': Return uppercase version
    - 'prefix': Add [lang] prefix
    """

    def __init__(self, mode: str = "prefix"):
        self.mode = mode

    @property
    def name(self) -> str:
        return f"dummy-{self.mode}"

    def translate(self, kind: PromptKind, content: str, target_language: str) -> str:
        if self.mode == "echo":
            return content
        if self.mode == "upper":
            return content.upper()
        if kind in (PromptKind.TROUBLESHOOT, PromptKind.KEYWORDS):
            return content
        return f"[{target_language}] {content}"


def create_translator(backend: str, **kwargs) -> Translator:
    """Factory function to create a translator by name.

    Supported backends and aliases:
        - llm, openai, litellm: OpenAI-compatible chat completions endpoint
        - dummy, prefix: prefix each text with the language code
        - echo: return input unchanged
        - upper: upper-case the input
    """
    backend_lower = backend.lower().replace("_", "-")

    if backend_lower in ("llm", "openai", "litellm"):
        from doctrans_llms.translate.llm import LLMConfig, LLMTranslator
        config = kwargs.get("config") or LLMConfig.from_env()
        if kwargs.get("model"):
            config.model = kwargs["model"]
        if kwargs.get("verbose"):
            config.verbose = True
        return LLMTranslator(config=config)

    elif backend_lower in ("dummy", "prefix"):
        return DummyTranslator(mode=kwargs.get("mode", "prefix"))

    elif backend_lower in ("echo", "upper"):
        return DummyTranslator(mode=backend_lower)

    raise ValueError(
        f"Unknown translator backend: {backend}. "
        "Available backends: llm, dummy, echo, upper"
    )
