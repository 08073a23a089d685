"""
Tests for the translation pipeline.

Tests cover:
- End-to-end output for a minimal article
- Code and shortcode segments never reach the translator
- Per-language independence
- Retry/backoff and the troubleshooting fallback
- Processing report aggregation
"""

import json

import pytest

from conftest import FULL_ARTICLE, SCENARIO_ARTICLE, make_task, write_article
from doctrans_llms.errors import TranslationError
from doctrans_llms.models import Segment, SegmentKind
from doctrans_llms.pipeline import PipelineConfig, TranslationPipeline, is_primarily_technical
from doctrans_llms.segmenter import parse_document
from doctrans_llms.tasks import target_path
from doctrans_llms.translate.base import DummyTranslator
from doctrans_llms.translate.fallback import TroubleshootResult
from doctrans_llms.translate.prompts import PromptKind


def make_pipeline(translator, repo_root, sleeps=None):
    config = PipelineConfig(repo_root=repo_root)
    return TranslationPipeline(
        translator,
        config,
        sleep=(sleeps.append if sleeps is not None else lambda _: None),
    )


class SpyTranslator(DummyTranslator):
    """Upper-cases input; fails the test if it sees code or shortcode text."""

    def __init__(self):
        super().__init__(mode="upper")
        self.seen = []

    def translate(self, kind, content, target_language):
        assert "```" not in content, f"code reached the translator: {content!r}"
        assert "{{<" not in content, f"shortcode reached the translator: {content!r}"
        self.seen.append((kind, content))
        return super().translate(kind, content, target_language)


class FailingFor(DummyTranslator):
    """Always fails for the given languages, upper-cases otherwise."""

    def __init__(self, *languages):
        super().__init__(mode="upper")
        self.languages = set(languages)

    def translate(self, kind, content, target_language):
        if target_language in self.languages:
            raise TranslationError(f"LLM API failed after 3 attempts: {target_language} unavailable")
        return super().translate(kind, content, target_language)


class RecoversWithTroubleshooting(DummyTranslator):
    """Normal calls fail; the troubleshooting call returns a fixed reply."""

    def __init__(self, reply):
        super().__init__(mode="echo")
        self.reply = reply
        self.requests = []
        self.verbose_history = []

    def translate(self, kind, content, target_language):
        self.verbose_history.append(self.verbose)
        raise TranslationError("HTTP 500: Internal Server Error")

    def translate_with_troubleshooting(self, request):
        self.requests.append(request)
        return self.reply


class TestScenario:
    """Minimal article with an upper-casing translator."""

    def test_output_file(self, repo_root, scenario_task):
        pipeline = make_pipeline(DummyTranslator(mode="upper"), repo_root)
        result = pipeline.translate_article(scenario_task)

        assert [r.success for r in result.results] == [True]
        output = target_path(repo_root, scenario_task, "fr")
        assert output == repo_root / "content" / "fr" / "watermark" / "net" / "add-watermark" / "_index.md"

        text = output.read_text(encoding="utf-8")
        assert 'title: "ADD WATERMARK TO PDF"' in text
        assert "\n## STEP 1\n" in text
        assert "{{< gist user id >}}" in text
        assert text == (
            '---\ntitle: "ADD WATERMARK TO PDF"\n---\n\n'
            "## STEP 1\n\nDO X.\n\n{{< gist user id >}}\n"
        )

    def test_result_details(self, repo_root, scenario_task):
        result = make_pipeline(DummyTranslator(mode="upper"), repo_root).translate_article(scenario_task)
        outcome = result.results[0]
        assert outcome.language == "fr"
        assert outcome.attempts == 1
        assert outcome.recovered is False
        assert outcome.failure_reason is None


class TestSegmentExclusivity:
    """Code and shortcode segments pass through untouched."""

    def test_spy_never_sees_code(self, repo_root):
        task = make_task(write_article(repo_root, FULL_ARTICLE), ["fr"])
        spy = SpyTranslator()
        result = make_pipeline(spy, repo_root).translate_article(task)

        assert result.results[0].success
        kinds = {kind for kind, _ in spy.seen}
        assert PromptKind.HEADING in kinds
        assert PromptKind.LIST in kinds

        text = target_path(repo_root, task, "fr").read_text(encoding="utf-8")
        source = parse_document(FULL_ARTICLE)
        code = next(s.content for s in source.sections if s.kind is SegmentKind.CODE)
        assert code in text
        assert "{{< gist groupdocs-watermark add-watermark-net >}}" in text

    def test_inline_code_protected(self, repo_root):
        task = make_task(write_article(repo_root, FULL_ARTICLE), ["fr"])
        spy = SpyTranslator()
        make_pipeline(spy, repo_root).translate_article(task)

        assert all("`Watermarker`" not in content for _, content in spy.seen)
        text = target_path(repo_root, task, "fr").read_text(encoding="utf-8")
        assert "USE THE `Watermarker` CLASS" in text

    def test_technical_fields_untouched(self, repo_root):
        task = make_task(write_article(repo_root, FULL_ARTICLE), ["fr"])
        make_pipeline(DummyTranslator(mode="upper"), repo_root).translate_article(task)
        text = target_path(repo_root, task, "fr").read_text(encoding="utf-8")

        assert 'productname: "GroupDocs.Watermark for .NET"' in text
        assert 'platformkey: "net"' in text
        assert 'step1: "LOAD THE PDF DOCUMENT"' in text
        assert '"ADD WATERMARK TO PDF",' in text


class TestIndependence:
    """One language failing does not affect another."""

    def test_failed_language_isolated(self, repo_root, full_task):
        sleeps = []
        pipeline = make_pipeline(FailingFor("fr"), repo_root, sleeps)
        result = pipeline.translate_article(full_task)

        by_lang = {r.language: r for r in result.results}
        assert by_lang["fr"].success is False
        assert by_lang["fr"].attempts == 4
        assert "unavailable" in by_lang["fr"].failure_reason
        assert by_lang["de"].success is True

        assert not target_path(repo_root, full_task, "fr").exists()
        assert target_path(repo_root, full_task, "de").exists()
        assert sleeps == [1.0, 2.0, 4.0]


class TestRetry:
    """Retries and the troubleshooting fallback."""

    def test_troubleshooting_recovers_on_fourth_attempt(self, repo_root):
        task = make_task(write_article(repo_root, SCENARIO_ARTICLE), ["hy"])
        reply = TroubleshootResult(
            front_matter='title: "Ավելացնել ջրանիշ PDF-ին"',
            sections=["## Քայլ 1", "Արեք X."],
        )
        translator = RecoversWithTroubleshooting(reply)
        result = make_pipeline(translator, repo_root).translate_article(task)

        outcome = result.results[0]
        assert outcome.success is True
        assert outcome.attempts == 4
        assert outcome.recovered is True

        request = translator.requests[0]
        assert request.previous_error == "HTTP 500: Internal Server Error"
        assert [s.kind for s in request.sections] == [SegmentKind.HEADING, SegmentKind.PARAGRAPH]

        text = target_path(repo_root, task, "hy").read_text(encoding="utf-8")
        assert 'title: "Ավելացնել ջրանիշ PDF-ին"' in text
        assert "## Քայլ 1" in text
        assert "{{< gist user id >}}" in text

    def test_verbose_for_troublesome_language(self, repo_root):
        task = make_task(write_article(repo_root, SCENARIO_ARTICLE), ["hy"])
        translator = RecoversWithTroubleshooting(TroubleshootResult(front_matter='title: "T"'))
        make_pipeline(translator, repo_root).translate_article(task)

        assert translator.verbose_history and all(translator.verbose_history)
        assert translator.verbose is False

    def test_verbose_only_on_retries(self, repo_root):
        task = make_task(write_article(repo_root, SCENARIO_ARTICLE), ["fr"])
        translator = RecoversWithTroubleshooting(TroubleshootResult(front_matter='title: "T"'))
        make_pipeline(translator, repo_root).translate_article(task)

        assert translator.verbose_history == [False, True, True]

    def test_unsent_segments_stay_source(self, repo_root):
        task = make_task(write_article(repo_root, FULL_ARTICLE), ["fr"])
        reply = TroubleshootResult(front_matter='title: "Titre"', sections=["## Aperçu"])
        result = make_pipeline(RecoversWithTroubleshooting(reply), repo_root).translate_article(task)

        assert result.results[0].recovered
        text = target_path(repo_root, task, "fr").read_text(encoding="utf-8")
        assert "## Aperçu" in text
        assert "## Conclusion" in text
        assert 'description: "Learn how to add a text watermark to a PDF document in C#."' in text

    def test_backoff_is_capped(self, repo_root, scenario_task):
        sleeps = []
        config = PipelineConfig(repo_root=repo_root, max_retries=5, backoff_base=1.0, backoff_cap=10.0)
        pipeline = TranslationPipeline(FailingFor("fr"), config, sleep=sleeps.append)
        outcome = pipeline.translate_with_retry(scenario_task, parse_document(SCENARIO_ARTICLE), "fr")

        assert outcome.success is False
        assert outcome.attempts == 6
        assert sleeps == [1.0, 2.0, 4.0, 8.0, 10.0]


class TestProcessTasks:
    """Batch processing and reporting."""

    def test_missing_source_is_critical(self, repo_root, full_task):
        missing = make_task(repo_root / "content" / "en" / "nope.md", ["fr"], title="Missing")
        report = make_pipeline(DummyTranslator(), repo_root).process_tasks([missing, full_task])

        assert report.critical_errors == 1
        assert report.processed_articles == 1
        assert report.total_translations == 2
        assert report.success is False

    def test_malformed_source_is_critical(self, repo_root):
        task = make_task(write_article(repo_root, "# No front matter\n"), ["fr"])
        report = make_pipeline(DummyTranslator(), repo_root).process_tasks([task])
        assert report.critical_errors == 1
        assert "frontmatter" in report.articles[0].critical_error

    def test_undecodable_source_is_critical(self, repo_root, full_task):
        bad_path = write_article(repo_root, "", slug="cafe")
        bad_path.write_bytes(b'---\ntitle: "Caf\xe9"\n---\n\nBody\n')
        bad = make_task(bad_path, ["fr"], title="Cafe")

        report = make_pipeline(DummyTranslator(), repo_root).process_tasks([bad, full_task])

        assert report.critical_errors == 1
        assert "UTF-8" in report.articles[0].critical_error
        assert report.articles[1].results[0].success
        assert target_path(repo_root, full_task, "fr").exists()

    def test_report_json(self, repo_root, full_task):
        report = make_pipeline(FailingFor("fr"), repo_root).process_tasks([full_task])
        path = report.save(repo_root / "processing-report.json")
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["summary"] == {
            "totalArticles": 1,
            "processedArticles": 1,
            "criticalErrors": 0,
            "totalTranslations": 2,
            "successfulTranslations": 1,
            "failedTranslations": 1,
            "successRate": 50.0,
        }
        assert data["failedTranslations"] == [
            {"article": "Add Watermark to PDF", "language": "fr", "product": "watermark", "platform": "net"}
        ]
        assert data["processedArticles"][0]["targetLanguages"] == 2
        assert data["timestamp"].endswith("Z")
        assert report.failures_by_language() == {"fr": ["Add Watermark to PDF (net)"]}

    def test_empty_run(self, repo_root):
        report = make_pipeline(DummyTranslator(), repo_root).process_tasks([])
        assert report.success_rate == 0.0
        assert report.success


class TestTechnicalParagraphs:
    """Paragraphs kept verbatim."""

    @pytest.mark.parametrize("content,expected", [
        ("Intro {{< tabs >}} text", True),
        ("```\ncode\n```", True),
        ("Plain prose.", False),
        ("Mixed ```a``` and ```b```", False),
    ])
    def test_is_primarily_technical(self, content, expected):
        assert is_primarily_technical(Segment(SegmentKind.PARAGRAPH, content)) is expected

    def test_only_paragraphs(self):
        assert is_primarily_technical(Segment(SegmentKind.LIST, "- {{< x >}}")) is False
