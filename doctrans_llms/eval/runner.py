"""
Validation runner for a batch of translated articles.

This module provides:
- ValidationRunner: validates every task x language output on disk
- ValidationReport: aggregated findings, JSON export
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from doctrans_llms.errors import MalformedDocument
from doctrans_llms.eval.validator import validate
from doctrans_llms.models import Severity, TranslationTask, ValidationFinding
from doctrans_llms.tasks import target_path, utc_timestamp

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """All findings of a validation run."""
    findings: list[ValidationFinding] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def errors(self) -> list[ValidationFinding]:
        return [f for f in self.findings if f.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationFinding]:
        return [f for f in self.findings if f.severity is Severity.WARNING]

    @property
    def passed(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "summary": {
                "totalErrors": len(self.errors),
                "totalWarnings": len(self.warnings),
                "validationPassed": self.passed,
            },
            "results": [f.to_dict() for f in self.findings],
        }

    def save(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Validation report saved to: %s", path)
        return path


class ValidationRunner:
    """Validate the translated files produced for a list of tasks.

    Usage:
        runner = ValidationRunner(repo_root)
        report = runner.validate_tasks(load_tasks(repo_root / "translation-tasks.json"))
        report.save(repo_root / "translation-validation-report.json")
    """

    def __init__(self, repo_root: Path):
        self.repo_root = Path(repo_root)

    def validate_tasks(self, tasks: Sequence[TranslationTask]) -> ValidationReport:
        report = ValidationReport()
        logger.info("Starting validation for %d articles...", len(tasks))
        for task in tasks:
            logger.info("Validating: %s (%s/%s)", task.title, task.article.product, task.article.platform)
            report.findings.extend(self.validate_task(task))
        logger.info("Validation completed: %d errors, %d warnings", len(report.errors), len(report.warnings))
        return report

    def validate_task(self, task: TranslationTask) -> list[ValidationFinding]:
        """Findings for every target language of one task."""
        context = {
            "article": task.title,
            "product": task.article.product,
            "platform": task.article.platform,
        }
        try:
            source_text = task.article.read_text()
        except (OSError, MalformedDocument) as e:
            return [
                ValidationFinding(Severity.ERROR, f"Cannot read source article: {e}", language=lang, **context)
                for lang in task.target_languages
            ]

        findings: list[ValidationFinding] = []
        for language in task.target_languages:
            path = target_path(self.repo_root, task, language)
            if not path.exists():
                finding = ValidationFinding(Severity.ERROR, f"Missing translated file: {path}", language=language, **context)
                logger.error("%s: %s", language, finding.message)
                findings.append(finding)
                continue

            try:
                target_text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                findings.append(
                    ValidationFinding(Severity.ERROR, f"Validation failed: {e}", language=language, **context)
                )
                continue

            results = validate(source_text, target_text, language=language, **context)
            for finding in results:
                log = logger.error if finding.is_error else logger.warning
                log("%s: %s", language, finding.message)
            if not any(f.is_error for f in results):
                logger.info("Validation passed for %s", language)
            findings.extend(results)
        return findings
