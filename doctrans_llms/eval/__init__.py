"""
Validation of translated articles.

This module provides:
- Source vs. translation structural comparison (validator)
- Batch validation over a task manifest and JSON reporting (runner)
"""

from doctrans_llms.eval.validator import ParsedMarkdown, parse_markdown_file, passed, validate
from doctrans_llms.eval.runner import ValidationReport, ValidationRunner

__all__ = [
    "validate",
    "passed",
    "parse_markdown_file",
    "ParsedMarkdown",
    "ValidationRunner",
    "ValidationReport",
]
