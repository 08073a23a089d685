"""
Tests for the reasoning_content decoder.
"""

import logging

import pytest

from doctrans_llms.errors import ExtractionFailure, TranslationError
from doctrans_llms.translate.reasoning import extract_translation_from_reasoning


class TestQuotedStrings:
    """Test quote-based extraction."""

    def test_first_plausible_quote(self):
        reasoning = 'The user wants "translate this" rendered. Result: "Ajouter un filigrane".'
        assert extract_translation_from_reasoning(reasoning) == "Ajouter un filigrane"

    def test_short_quotes_skipped(self):
        reasoning = 'Maybe "PDF" or "Ajouter un filigrane au PDF".'
        assert extract_translation_from_reasoning(reasoning) == "Ajouter un filigrane au PDF"

    def test_keyword_mode_joins_filtered_quotes(self):
        reasoning = (
            'We need to translate these keywords into French. '
            '"ajouter un filigrane", "filigrane pdf en ligne", "pdf", '
            '"translate carefully", "French output"'
        )
        result = extract_translation_from_reasoning(reasoning)
        assert result == '"ajouter un filigrane",\n        "filigrane pdf en ligne"'

    def test_keyword_mode_filters_instructions(self):
        reasoning = 'keywords: "using the API rule", "field mapping here", "conversion de documents"'
        assert extract_translation_from_reasoning(reasoning) == '"conversion de documents"'


class TestMarkers:
    """Test marker-line extraction when there are no usable quotes."""

    @pytest.mark.parametrize("reasoning,expected", [
        ("Thinking...\nTranslation: Ajouter un filigrane\nDone", "Ajouter un filigrane"),
        ("Bulgarian equivalent: Добавяне на воден знак", "Добавяне на воден знак"),
        ("Add watermark -> Ajouter un filigrane", "Ajouter un filigrane"),
        ("Add watermark → Ajouter un filigrane", "Ajouter un filigrane"),
        ("I will produce: Ajouter un filigrane", "Ajouter un filigrane"),
    ])
    def test_marker_patterns(self, reasoning, expected):
        assert extract_translation_from_reasoning(reasoning) == expected


class TestFailure:
    """Test the failure path."""

    def test_nothing_usable(self):
        with pytest.raises(ExtractionFailure):
            extract_translation_from_reasoning("I am not sure what to do here.")

    def test_empty(self):
        with pytest.raises(ExtractionFailure):
            extract_translation_from_reasoning("")

    def test_is_translation_error(self):
        assert issubclass(ExtractionFailure, TranslationError)

    def test_invocation_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="doctrans_llms.translate.reasoning"):
            extract_translation_from_reasoning("translation: Bonjour")
        assert "reasoning_content" in caplog.text
