"""
Translation pipeline for DocTrans-LLMs.

This module orchestrates the per-article workflow:
1. Parse the source article once (front matter + typed segments)
2. For each target language, independently:
   a. Protect the front matter, translate its fields, restore placeholders
   b. Protect, translate and restore every translatable segment
   c. Rebuild the front matter and write content/{lang}/{product}/{platform}/...
3. Retry failed languages with exponential backoff; the last attempt is a
   simplified troubleshooting request
4. Aggregate everything into a ProcessingReport

Design Philosophy:
- One language failing never affects another
- Only source read/parse failures abort an article
- Translators are injected, so tests run against stubs
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from doctrans_llms.config import VERBOSE_LANGUAGES
from doctrans_llms.errors import MalformedDocument, TranslationError
from doctrans_llms.frontmatter import (
    FrontMatterTranslation,
    keywords_block,
    rebuild_front_matter,
    quoted_field,
    step_fields,
)
from doctrans_llms.masking import (
    PlaceholderMap,
    extract_placeholders,
    missing_placeholders,
    restore_placeholders,
)
from doctrans_llms.models import Document, Segment, SegmentKind, TranslationResult, TranslationTask
from doctrans_llms.segmenter import parse_document
from doctrans_llms.tasks import target_path, utc_timestamp
from doctrans_llms.translate.base import Translator
from doctrans_llms.translate.fallback import TroubleshootRequest
from doctrans_llms.translate.prompts import PromptKind

logger = logging.getLogger(__name__)

# Type alias for progress callbacks
ProgressCallback = Callable[[str, float], None]

_ANY_SHORTCODE = re.compile(r"\{\{<[\s\S]*?>\}\}")


def _log_wait(retry_state: RetryCallState) -> None:
    logger.info("Waiting %.1fs before retry...", retry_state.next_action.sleep)


def is_primarily_technical(segment: Segment) -> bool:
    """Paragraphs carrying a shortcode, or wholly one code fence, are kept as-is."""
    if segment.kind is not SegmentKind.PARAGRAPH:
        return False
    content = segment.content.strip()
    if _ANY_SHORTCODE.search(content):
        return True
    return content.startswith("```") and content.endswith("```") and content.count("```") == 2


@dataclass
class PipelineConfig:
    """Configuration for the translation pipeline.

    Attributes:
        repo_root: Site root; outputs go under repo_root/content/{lang}/
        max_retries: Normal attempts per language before troubleshooting
        backoff_base: Seconds to wait after the first failed attempt
        backoff_cap: Upper bound for the exponential backoff, in seconds
        troubleshoot_sections: Leading segments sent in the fallback request
        verbose_languages: Languages that always get request/response logging
    """
    repo_root: Path = field(default_factory=Path.cwd)
    max_retries: int = 3
    backoff_base: float = 1.0
    backoff_cap: float = 10.0
    troubleshoot_sections: int = 3
    verbose_languages: frozenset = VERBOSE_LANGUAGES

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def wait_strategy(self) -> wait_exponential:
        """base, 2*base, 4*base ... seconds after each failed attempt, capped."""
        return wait_exponential(multiplier=self.backoff_base, max=self.backoff_cap)

    def to_dict(self) -> dict:
        """Serialize config for logging/debugging."""
        return {
            "repo_root": str(self.repo_root),
            "max_retries": self.max_retries,
            "backoff_base": self.backoff_base,
            "backoff_cap": self.backoff_cap,
            "troubleshoot_sections": self.troubleshoot_sections,
            "verbose_languages": sorted(self.verbose_languages),
        }


@dataclass
class ArticleResult:
    """Outcome of one task: per-language results, or a critical error."""
    task: TranslationTask
    results: list[TranslationResult] = field(default_factory=list)
    critical_error: Optional[str] = None

    @property
    def succeeded(self) -> list[TranslationResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[TranslationResult]:
        return [r for r in self.results if not r.success]


@dataclass
class ProcessingReport:
    """Aggregated outcome of a processing run."""
    articles: list[ArticleResult] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def total_articles(self) -> int:
        return len(self.articles)

    @property
    def processed_articles(self) -> int:
        return sum(1 for a in self.articles if a.critical_error is None)

    @property
    def critical_errors(self) -> int:
        return sum(1 for a in self.articles if a.critical_error is not None)

    @property
    def total_translations(self) -> int:
        return sum(len(a.results) for a in self.articles)

    @property
    def successful_translations(self) -> int:
        return sum(len(a.succeeded) for a in self.articles)

    @property
    def failed_translations(self) -> int:
        return sum(len(a.failed) for a in self.articles)

    @property
    def success_rate(self) -> float:
        if not self.total_translations:
            return 0.0
        return round(self.successful_translations / self.total_translations * 100, 1)

    @property
    def success(self) -> bool:
        return self.critical_errors == 0

    def failures(self) -> list[dict]:
        return [
            {
                "article": a.task.title,
                "language": r.language,
                "product": a.task.article.product,
                "platform": a.task.article.platform,
            }
            for a in self.articles
            for r in a.failed
        ]

    def failures_by_language(self) -> dict[str, list[str]]:
        """Failed articles grouped per language, as 'title (platform)'."""
        grouped: dict[str, list[str]] = {}
        for failure in self.failures():
            grouped.setdefault(failure["language"], []).append(
                f"{failure['article']} ({failure['platform']})"
            )
        return grouped

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "summary": {
                "totalArticles": self.total_articles,
                "processedArticles": self.processed_articles,
                "criticalErrors": self.critical_errors,
                "totalTranslations": self.total_translations,
                "successfulTranslations": self.successful_translations,
                "failedTranslations": self.failed_translations,
                "successRate": self.success_rate,
            },
            "failedTranslations": self.failures(),
            "processedArticles": [
                {
                    "title": a.task.title,
                    "product": a.task.article.product,
                    "platform": a.task.article.platform,
                    "targetLanguages": len(a.task.target_languages),
                    "estimatedFiles": len(a.task.target_languages),
                }
                for a in self.articles
            ],
        }

    def save(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Processing report saved to: %s", path)
        return path


class TranslationPipeline:
    """Translate articles into their target languages and write the results.

    Usage:
        translator = create_translator("llm")
        pipeline = TranslationPipeline(translator, PipelineConfig(repo_root=root))
        report = pipeline.process_tasks(load_tasks(root / "translation-tasks.json"))
    """

    def __init__(
        self,
        translator: Translator,
        config: PipelineConfig | None = None,
        progress_callback: ProgressCallback | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.translator = translator
        self.config = config or PipelineConfig()
        self.progress_callback = progress_callback
        self._sleep = sleep
        self._translator_verbose = translator.verbose

    def _report_progress(self, message: str, progress: float):
        if self.progress_callback:
            self.progress_callback(message, progress)

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def process_tasks(self, tasks: Sequence[TranslationTask]) -> ProcessingReport:
        """Run every task sequentially and aggregate the outcome."""
        report = ProcessingReport()
        logger.info("Starting translation processing for %d articles...", len(tasks))

        for i, task in enumerate(tasks):
            self._report_progress(f"Processing {task.title}", i / max(len(tasks), 1))
            logger.info("Processing: %s (%s/%s)", task.title, task.article.product, task.article.platform)
            try:
                report.articles.append(self.translate_article(task))
            except (OSError, MalformedDocument) as e:
                logger.error("Critical error processing %s: %s", task.title, e)
                report.articles.append(ArticleResult(task=task, critical_error=str(e)))

        self._report_progress("Done", 1.0)
        logger.info(
            "Translation processing completed: %d/%d articles, %d/%d translations succeeded (%.1f%%)",
            report.processed_articles, report.total_articles,
            report.successful_translations, report.total_translations, report.success_rate,
        )
        return report

    # ------------------------------------------------------------------
    # Article
    # ------------------------------------------------------------------

    def translate_article(self, task: TranslationTask) -> ArticleResult:
        """Translate one article into all of its target languages.

        Raises:
            OSError: the source file cannot be read
            MalformedDocument: the source has no front matter
        """
        document = parse_document(task.article.read_text())
        logger.debug(document.summary())
        logger.info("Target languages: %s", ", ".join(task.target_languages))

        result = ArticleResult(task=task)
        for language in task.target_languages:
            logger.info("Translating to %s...", language)
            outcome = self.translate_with_retry(task, document, language)
            result.results.append(outcome)
            if outcome.success:
                logger.info("Successfully translated to %s", language)
            else:
                logger.error("Failed to translate to %s after all retry attempts", language)

        logger.info(
            "Summary: %d/%d languages translated successfully",
            len(result.succeeded), len(task.target_languages),
        )
        return result

    def translate_with_retry(self, task: TranslationTask, document: Document, language: str) -> TranslationResult:
        """Translate one language with retries; never raises for translation failures.

        Attempts before the last use the normal per-segment path; the last
        one is the troubleshooting request.
        """
        output_path = target_path(self.config.repo_root, task, language)
        total = self.config.total_attempts
        last_error = "unknown error"

        retrying = Retrying(
            stop=stop_after_attempt(total),
            wait=self.config.wait_strategy(),
            retry=retry_if_exception_type((TranslationError, OSError)),
            before_sleep=_log_wait,
            sleep=self._sleep,
        )
        try:
            for attempt in retrying:
                number = attempt.retry_state.attempt_number
                self.translator.verbose = (
                    self._translator_verbose
                    or number > 1
                    or language in self.config.verbose_languages
                )
                with attempt:
                    try:
                        if number < total:
                            logger.info("Attempt %d/%d for %s...", number, total, language)
                            translated = self.translate_content(document, language)
                        else:
                            logger.info("Final attempt with troubleshooting for %s...", language)
                            translated = self.troubleshoot(document, language, last_error)
                        self.write_output(translated, output_path)
                    except (TranslationError, OSError) as e:
                        last_error = str(e)
                        logger.error("Attempt %d failed: %s", number, e)
                        raise

                    logger.info("Saved to: %s", output_path)
                    return TranslationResult(
                        language=language,
                        success=True,
                        output_path=output_path,
                        attempts=number,
                        recovered=number == total,
                    )
        except RetryError:
            return TranslationResult(
                language=language,
                success=False,
                output_path=output_path,
                attempts=total,
                failure_reason=last_error,
            )
        finally:
            self.translator.verbose = self._translator_verbose

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def translate_content(self, document: Document, language: str) -> Document:
        """Translate front matter and segments; returns a new Document."""
        protected_fm, fm_registry = extract_placeholders(document.front_matter)
        fields = self.translator.translate_front_matter(protected_fm, language).restored(fm_registry)

        sections = []
        for i, segment in enumerate(document.sections, start=1):
            logger.debug("Processing section %d/%d (%s)", i, len(document.sections), segment.kind.value)
            if not segment.is_translatable or is_primarily_technical(segment):
                sections.append(segment)
            else:
                sections.append(self.translate_segment(segment, language))

        return Document(
            front_matter=rebuild_front_matter(document.front_matter, fields),
            sections=sections,
        )

    def translate_segment(self, segment: Segment, language: str) -> Segment:
        """Protect, translate and restore one heading, paragraph or list."""
        protected, registry = extract_placeholders(segment.content)
        translated = self.translator.translate(PromptKind.for_segment(segment.kind), protected, language)
        return Segment(segment.kind, self._restore(protected, translated, registry))

    def troubleshoot(self, document: Document, language: str, previous_error: str) -> Document:
        """Simplified last attempt over the front matter and the leading segments.

        Segments that were not sent, or not recovered, stay in the source
        language.
        """
        protected_fm, fm_registry = extract_placeholders(document.front_matter)

        head = document.sections[: self.config.troubleshoot_sections]
        indices = [i for i, s in enumerate(head) if s.is_translatable and not is_primarily_technical(s)]
        protections: list[tuple[str, PlaceholderMap]] = [
            extract_placeholders(document.sections[i].content) for i in indices
        ]

        request = TroubleshootRequest(
            front_matter=protected_fm,
            sections=[Segment(document.sections[i].kind, p[0]) for i, p in zip(indices, protections)],
            target_language=language,
            previous_error=previous_error,
        )
        result = self.translator.translate_with_troubleshooting(request)

        front_matter = restore_placeholders(result.front_matter, fm_registry)
        fields = FrontMatterTranslation(
            title=quoted_field(front_matter, "title") or "",
            description=quoted_field(front_matter, "description") or "",
            keywords=keywords_block(front_matter) or "",
            steps=step_fields(front_matter),
        )

        sections = list(document.sections)
        for i, (protected, registry), text in zip(indices, protections, result.sections):
            sections[i] = Segment(sections[i].kind, self._restore(protected, text, registry))

        return Document(
            front_matter=rebuild_front_matter(document.front_matter, fields),
            sections=sections,
        )

    def write_output(self, document: Document, output_path: Path) -> None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(document.to_text(), encoding="utf-8")

    @staticmethod
    def _restore(protected: str, translated: str, registry: PlaceholderMap) -> str:
        missing = missing_placeholders(protected, translated)
        if missing:
            logger.warning("Translation dropped placeholders: %s", ", ".join(missing))
        return restore_placeholders(translated, registry)
