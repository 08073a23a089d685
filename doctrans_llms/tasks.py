"""
Task manifest handling.

The manifest (``translation-tasks.json``) lists which English articles must
be translated into which languages. It is normally produced by an upstream
change detector; build_manifest() produces the same shape from an explicit
list of article files.

On disk the keys are camelCase:

    {"timestamp", "targetDate", "totalArticles", "totalTasks",
     "tasks": [{"title", "product", "platform", "articlePath",
                "fullPath", "targetLanguages"}]}
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence

from doctrans_llms.config import CONTENT_DIR_NAME, SOURCE_LANGUAGE, SUPPORTED_LANGUAGES
from doctrans_llms.errors import MalformedDocument, ManifestError
from doctrans_llms.frontmatter import quoted_field
from doctrans_llms.models import Article, TranslationTask
from doctrans_llms.segmenter import split_front_matter

logger = logging.getLogger(__name__)

_REQUIRED_TASK_KEYS = ("title", "product", "platform", "articlePath", "fullPath", "targetLanguages")


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def target_path(repo_root: Path, task: TranslationTask, language: str) -> Path:
    """Output location: content/{lang}/{product}/{platform}/{article_path}."""
    article = task.article
    return Path(repo_root) / CONTENT_DIR_NAME / language / article.product / article.platform / article.article_path


def task_from_dict(entry: dict, repo_root: Optional[Path] = None) -> TranslationTask:
    """Build a TranslationTask from one manifest entry.

    A relative ``fullPath`` is resolved against repo_root.

    Raises:
        ManifestError: required keys missing or mistyped
    """
    if not isinstance(entry, dict):
        raise ManifestError(f"Task entry must be an object, got {type(entry).__name__}")
    missing = [key for key in _REQUIRED_TASK_KEYS if key not in entry]
    if missing:
        raise ManifestError(f"Task entry is missing keys: {', '.join(missing)}")
    languages = entry["targetLanguages"]
    if not isinstance(languages, list) or not all(isinstance(lang, str) for lang in languages):
        raise ManifestError("targetLanguages must be a list of language codes")

    full_path = Path(entry["fullPath"])
    if repo_root is not None and not full_path.is_absolute():
        full_path = Path(repo_root) / full_path

    article = Article(
        full_path=full_path,
        product=str(entry["product"]),
        platform=str(entry["platform"]),
        article_path=str(entry["articlePath"]),
        title=str(entry["title"]),
    )
    return TranslationTask(article=article, target_languages=tuple(languages))


def load_tasks(path: Path, repo_root: Optional[Path] = None) -> list[TranslationTask]:
    """Load translation tasks from a manifest file.

    Raises:
        ManifestError: file missing, not JSON, or wrong shape
    """
    path = Path(path)
    if not path.exists():
        raise ManifestError(f"No translation tasks file found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ManifestError(f"Cannot read task manifest {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("tasks", []), list):
        raise ManifestError(f"Task manifest {path} must be an object with a 'tasks' list")

    tasks = [task_from_dict(entry, repo_root) for entry in data.get("tasks", [])]
    logger.info("Loaded %d translation tasks from %s", len(tasks), path)
    return tasks


def article_from_path(path: Path, repo_root: Path) -> Article:
    """Describe a source article from its location under content/en/.

    The product and platform come from ``content/en/{product}/{platform}/...``
    and the title from the quoted ``title`` front-matter field.

    Raises:
        ManifestError: path is not inside content/en/{product}/{platform}/
        MalformedDocument: no front matter or no quoted title
    """
    path = Path(path)
    try:
        relative = path.resolve().relative_to(Path(repo_root).resolve())
    except ValueError:
        raise ManifestError(f"{path} is not inside {repo_root}")

    parts = relative.parts
    if len(parts) < 5 or parts[0] != CONTENT_DIR_NAME or parts[1] != SOURCE_LANGUAGE:
        raise ManifestError(
            f"{relative} is not under {CONTENT_DIR_NAME}/{SOURCE_LANGUAGE}/{{product}}/{{platform}}/"
        )

    front_matter, _ = split_front_matter(path.read_text(encoding="utf-8"))
    title = quoted_field(front_matter, "title")
    if not title:
        raise MalformedDocument(f"Missing title in: {path}")

    return Article(
        full_path=path,
        product=parts[2],
        platform=parts[3],
        article_path="/".join(parts[4:]),
        title=title,
    )


def build_manifest(
    paths: Iterable[Path],
    repo_root: Path,
    languages: Sequence[str] = SUPPORTED_LANGUAGES,
    target_date: Optional[str] = None,
) -> dict:
    """Build a manifest dict for the given article files.

    Files that cannot be described are skipped with a warning.
    """
    tasks = []
    for path in paths:
        try:
            article = article_from_path(path, repo_root)
        except (ManifestError, MalformedDocument, OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping %s: %s", path, e)
            continue
        tasks.append(TranslationTask(article=article, target_languages=tuple(languages)))
        logger.info("Found article: %s (%s/%s)", article.title, article.product, article.platform)

    if target_date is None:
        target_date = (date.today() - timedelta(days=1)).isoformat()

    return {
        "timestamp": utc_timestamp(),
        "targetDate": target_date,
        "totalArticles": len(tasks),
        "totalTasks": len(tasks),
        "tasks": [task.to_dict() for task in tasks],
    }


def write_manifest(manifest: dict, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
