"""Environment diagnostics for DocTrans-LLMs.

This module inspects dependencies, credentials and the content tree so users
get actionable guidance before a long translation run.
"""

from __future__ import annotations

from dataclasses import dataclass
import importlib.util
import os
from pathlib import Path
from typing import Dict, List, Optional

from doctrans_llms.config import CONTENT_DIR_NAME, DEFAULT_API_ENDPOINT, DEFAULT_TASKS_FILE, SOURCE_LANGUAGE
from doctrans_llms.keys import KeyManager


@dataclass
class CheckResult:
    """Represents a diagnostic check with status and human-readable detail."""

    name: str
    status: str  # ok | warn | error
    detail: str


def _module_available(module_name: str) -> bool:
    return importlib.util.find_spec(module_name) is not None


def _check_dependency(module: str, friendly: str, required: bool = False) -> CheckResult:
    available = _module_available(module)
    status = "ok" if available else ("error" if required else "warn")
    detail = f"{friendly} available" if available else f"{friendly} missing"
    return CheckResult(friendly, status, detail)


def _check_api_key(key_manager: KeyManager) -> CheckResult:
    info = key_manager.get_key_info("llm")
    if not info.is_set:
        return CheckResult(
            "LLM API key",
            "error",
            "Missing; set LLM_API_KEY or run 'doctrans keys set llm'.",
        )
    return CheckResult("LLM API key", "ok", f"{info.masked_value} (from {info.source})")


def _check_endpoint() -> CheckResult:
    endpoint = os.getenv("LLM_API_ENDPOINT") or DEFAULT_API_ENDPOINT
    if not endpoint.startswith(("http://", "https://")):
        return CheckResult("LLM endpoint", "error", f"Not an HTTP(S) URL: {endpoint}")
    return CheckResult("LLM endpoint", "ok", endpoint)


def _check_content_tree(repo_root: Path) -> CheckResult:
    source_dir = repo_root / CONTENT_DIR_NAME / SOURCE_LANGUAGE
    if not source_dir.is_dir():
        return CheckResult(
            "Content tree",
            "warn",
            f"{source_dir} not found; pass --repo-root pointing at the site root.",
        )
    count = sum(1 for _ in source_dir.rglob("*.md"))
    return CheckResult("Content tree", "ok", f"{count} English article(s) under {source_dir}")


def _check_manifest(repo_root: Path) -> CheckResult:
    manifest = repo_root / DEFAULT_TASKS_FILE
    if manifest.exists():
        return CheckResult("Task manifest", "ok", str(manifest))
    return CheckResult(
        "Task manifest",
        "warn",
        f"{manifest} not found; create one with 'doctrans tasks'.",
    )


def collect_diagnostics(repo_root: Optional[Path] = None, key_manager: Optional[KeyManager] = None) -> List[CheckResult]:
    """Run a series of lightweight checks and return their results."""
    repo_root = Path(repo_root) if repo_root else Path.cwd()

    checks: List[CheckResult] = []

    # Core dependencies
    checks.append(_check_dependency("requests", "Requests", required=True))
    checks.append(_check_dependency("keyring", "Keyring"))

    # Credentials and endpoint
    checks.append(_check_api_key(key_manager or KeyManager()))
    checks.append(_check_endpoint())

    # Site layout
    checks.append(_check_content_tree(repo_root))
    checks.append(_check_manifest(repo_root))

    return checks


def summarize_checks(checks: List[CheckResult]) -> Dict[str, int]:
    summary = {"ok": 0, "warn": 0, "error": 0}
    for c in checks:
        if c.status in summary:
            summary[c.status] += 1
    return summary
