"""
Exception hierarchy for DocTrans-LLMs.

Failures are caught at the narrowest useful boundary:
- MalformedDocument aborts one article (recorded as a critical error)
- TranslationError / ExtractionFailure fail one language attempt
- ManifestError aborts the whole run (nothing to process)
"""

from __future__ import annotations


class DocTransError(Exception):
    """Base class for all DocTrans-LLMs errors."""


class MalformedDocument(DocTransError, ValueError):
    """Source text has no parseable front-matter block."""


class TranslationError(DocTransError):
    """The external translation call failed after exhausting retries."""


class ExtractionFailure(TranslationError):
    """Neither the response content nor its reasoning field held usable text."""


class ManifestError(DocTransError):
    """The task manifest is missing or does not have the expected shape."""
