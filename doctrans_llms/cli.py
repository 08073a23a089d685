"""
Command-line interface for DocTrans-LLMs.

Provides commands for:
- Translating the articles listed in a task manifest
- Validating the translated files against their sources
- Comparing a single source/translation pair
- Inspecting how an article is segmented
- Building a task manifest from article files
- Managing the LLM API key
- System diagnostics

Usage:
    doctrans tasks content/en/viewer/net/add-watermark/_index.md
    doctrans translate --languages fr,de
    doctrans validate
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from doctrans_llms import __version__
from doctrans_llms.config import (
    APP_NAME,
    DEFAULT_PROCESSING_REPORT,
    DEFAULT_TASKS_FILE,
    DEFAULT_VALIDATION_REPORT,
    SUPPORTED_LANGUAGES,
    language_name,
)
from doctrans_llms.errors import DocTransError, ManifestError
from doctrans_llms.models import TranslationTask
from doctrans_llms.pipeline import PipelineConfig, TranslationPipeline
from doctrans_llms.tasks import build_manifest, load_tasks, write_manifest

app = typer.Typer(
    name="doctrans",
    help="DocTrans-LLMs: LLM translation and structural validation for Hugo documentation",
    add_completion=False,
)
console = Console()

logger = logging.getLogger("doctrans_llms")


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through rich."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # Keep urllib3 connection chatter out of debug output
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def version_callback(value: bool):
    if value:
        console.print(f"{APP_NAME} v{__version__}")
        raise typer.Exit()


def _parse_languages(value: Optional[str]) -> Optional[tuple[str, ...]]:
    if not value:
        return None
    languages = tuple(code.strip() for code in value.split(",") if code.strip())
    unknown = [code for code in languages if code not in SUPPORTED_LANGUAGES]
    if unknown:
        console.print(f"[red]Error:[/] Unsupported language(s): {', '.join(unknown)}")
        raise typer.Exit(1)
    return languages


def _load_tasks_or_exit(tasks_file: Optional[Path], repo_root: Path) -> list[TranslationTask]:
    path = tasks_file or repo_root / DEFAULT_TASKS_FILE
    try:
        return load_tasks(path, repo_root=repo_root)
    except ManifestError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """DocTrans-LLMs: translate and validate documentation articles."""
    pass


@app.command()
def translate(
    tasks_file: Optional[Path] = typer.Option(
        None, "--tasks", "-t",
        help=f"Task manifest (default: <repo-root>/{DEFAULT_TASKS_FILE})",
    ),
    repo_root: Path = typer.Option(
        Path("."), "--repo-root", "-r",
        help="Site root containing content/",
    ),
    backend: str = typer.Option(
        "llm", "--backend", "-b",
        help="Translation backend (llm, dummy, echo, upper)",
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m",
        help="Model name for the llm backend",
    ),
    languages: Optional[str] = typer.Option(
        None, "--languages", "-l",
        help="Comma-separated language codes overriding the manifest",
    ),
    report_file: Optional[Path] = typer.Option(
        None, "--report",
        help=f"Processing report path (default: <repo-root>/{DEFAULT_PROCESSING_REPORT})",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log every LLM request and response",
    ),
):
    """Translate every article in the task manifest."""
    setup_logging(verbose)
    tasks = _load_tasks_or_exit(tasks_file, repo_root)

    override = _parse_languages(languages)
    if override:
        tasks = [TranslationTask(article=t.article, target_languages=override) for t in tasks]

    if not tasks:
        console.print("[yellow]No translation tasks to process[/]")
        return

    try:
        from doctrans_llms.translate.base import create_translator
        translator = create_translator(backend, model=model, verbose=verbose)
    except ValueError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    pipeline = TranslationPipeline(translator, PipelineConfig(repo_root=repo_root))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=console,
    ) as progress:
        bar = progress.add_task("Translating...", total=100)
        pipeline.progress_callback = lambda msg, pct: progress.update(
            bar, description=msg, completed=int(pct * 100)
        )
        report = pipeline.process_tasks(tasks)

    report.save(report_file or repo_root / DEFAULT_PROCESSING_REPORT)

    table = Table(title="Translation Processing")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Articles processed", f"{report.processed_articles}/{report.total_articles}")
    table.add_row("Critical article errors", str(report.critical_errors))
    table.add_row("Total translations", str(report.total_translations))
    table.add_row("Successful", str(report.successful_translations))
    table.add_row("Failed", str(report.failed_translations))
    table.add_row("Success rate", f"{report.success_rate:.1f}%")
    console.print(table)

    failures = report.failures_by_language()
    if failures:
        console.print("\n[bold]Failed translations:[/]")
        for lang, articles in failures.items():
            console.print(f"  [red]{lang}[/]: {', '.join(articles)}")

    if not report.success:
        raise typer.Exit(1)


@app.command()
def validate(
    tasks_file: Optional[Path] = typer.Option(
        None, "--tasks", "-t",
        help=f"Task manifest (default: <repo-root>/{DEFAULT_TASKS_FILE})",
    ),
    repo_root: Path = typer.Option(
        Path("."), "--repo-root", "-r",
        help="Site root containing content/",
    ),
    report_file: Optional[Path] = typer.Option(
        None, "--report",
        help=f"Validation report path (default: <repo-root>/{DEFAULT_VALIDATION_REPORT})",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Validate translated files against their English sources."""
    from doctrans_llms.eval.runner import ValidationRunner

    setup_logging(verbose)
    tasks = _load_tasks_or_exit(tasks_file, repo_root)
    if not tasks:
        console.print("[yellow]No translation tasks to validate[/]")
        return

    report = ValidationRunner(repo_root).validate_tasks(tasks)
    report.save(report_file or repo_root / DEFAULT_VALIDATION_REPORT)

    console.print(f"Errors: [red]{len(report.errors)}[/]  Warnings: [yellow]{len(report.warnings)}[/]")
    if report.passed:
        console.print("[bold green]Translation validation passed[/]")
    else:
        console.print("[bold red]Translation validation failed[/]")
        raise typer.Exit(1)


@app.command()
def check(
    source: Path = typer.Argument(..., help="English source article"),
    target: Path = typer.Argument(..., help="Translated article"),
):
    """Compare one translated file with its source."""
    from doctrans_llms.eval.validator import passed, validate as validate_pair

    try:
        source_text = source.read_text(encoding="utf-8")
        target_text = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    findings = validate_pair(source_text, target_text, article=str(source))

    if not findings:
        console.print("[green]✓[/] No issues found")
        return

    table = Table(title=f"Findings for {target}")
    table.add_column("Type")
    table.add_column("Message")
    for finding in findings:
        style = "red" if finding.is_error else "yellow"
        table.add_row(f"[{style}]{finding.severity.value}[/]", finding.message)
    console.print(table)

    if not passed(findings):
        raise typer.Exit(1)


@app.command()
def segment(
    file: Path = typer.Argument(..., help="Markdown article"),
    as_json: bool = typer.Option(False, "--json", help="Print the parsed document as JSON"),
):
    """Show how an article is split into segments."""
    from doctrans_llms.segmenter import parse_document

    try:
        document = parse_document(file.read_text(encoding="utf-8"))
    except (DocTransError, OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(document.to_dict(), ensure_ascii=False))
        return

    console.print(f"[bold]{document.summary()}[/]\n")
    table = Table()
    table.add_column("#", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Translated", style="green")
    table.add_column("Content")
    for i, seg in enumerate(document.sections, start=1):
        preview = seg.content if len(seg.content) <= 80 else seg.content[:77] + "..."
        table.add_row(str(i), seg.kind.value, "yes" if seg.is_translatable else "no", preview)
    console.print(table)


@app.command()
def tasks(
    files: List[Path] = typer.Argument(..., help="English articles under content/en/"),
    repo_root: Path = typer.Option(Path("."), "--repo-root", "-r"),
    languages: Optional[str] = typer.Option(
        None, "--languages", "-l",
        help="Comma-separated language codes (default: all supported)",
    ),
    target_date: Optional[str] = typer.Option(None, "--date", help="Date recorded in the manifest (YYYY-MM-DD)"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help=f"Manifest path (default: <repo-root>/{DEFAULT_TASKS_FILE})",
    ),
):
    """Build a task manifest from explicit article files."""
    setup_logging()
    manifest = build_manifest(
        files,
        repo_root,
        languages=_parse_languages(languages) or SUPPORTED_LANGUAGES,
        target_date=target_date,
    )
    path = write_manifest(manifest, output or repo_root / DEFAULT_TASKS_FILE)
    console.print(f"[green]✓[/] {manifest['totalTasks']} task(s) saved to {path}")


@app.command()
def keys(
    action: str = typer.Argument(..., help="Action: list, set, delete, status"),
    service: str = typer.Argument("llm", help="Service name"),
    key: Optional[str] = typer.Option(None, "--key", help="Key value (prompted when omitted)"),
):
    """Manage the LLM API key.

    Examples:
        doctrans keys list
        doctrans keys set llm
        doctrans keys status llm
        doctrans keys delete llm
    """
    from doctrans_llms.keys import KeyManager, env_var_for

    km = KeyManager()

    if action == "list":
        table = Table(title="API Keys Status")
        table.add_column("Service", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Source", style="yellow")
        table.add_column("Value", style="dim")
        for key_info in km.list_keys():
            status = "[green]✓ Set[/]" if key_info.is_set else "[red]✗ Not set[/]"
            table.add_row(key_info.service, status, key_info.source, key_info.masked_value or "-")
        console.print(table)
        console.print("\n[dim]Priority: env > keychain > config file[/]")

    elif action == "set":
        value = key or typer.prompt(f"Enter API key for {service}", hide_input=True)
        if not value:
            console.print("[red]Error:[/] Key cannot be empty")
            raise typer.Exit(1)
        storage = km.set_key(service, value)
        console.print(f"[green]✓[/] API key for {service} saved to {storage}")
        if storage == "config":
            console.print(f"[yellow]Note:[/] Key stored in local file ({km.config_file})")

    elif action == "status":
        key_info = km.get_key_info(service)
        if key_info.is_set:
            console.print(f"[green]✓[/] API key for {service} is set")
            console.print(f"    Source: {key_info.source}")
            console.print(f"    Value: {key_info.masked_value}")
        else:
            console.print(f"[red]✗[/] No API key found for {service}")
            console.print(f"  Option 1: [cyan]doctrans keys set {service}[/]")
            console.print(f"  Option 2: [cyan]export {env_var_for(service)}='your-key-here'[/]")

    elif action == "delete":
        if km.delete_key(service):
            console.print(f"[green]✓[/] API key for {service} deleted")
        else:
            console.print(f"[yellow]⚠[/] No key found to delete for {service}")

    else:
        console.print(f"[red]Error:[/] Unknown action '{action}'")
        console.print("Available actions: list, set, delete, status")
        raise typer.Exit(1)


@app.command()
def info(
    repo_root: Path = typer.Option(Path("."), "--repo-root", "-r"),
):
    """Show configuration and environment checks."""
    from doctrans_llms.diagnostics import collect_diagnostics, summarize_checks

    console.print(f"[bold]{APP_NAME} v{__version__}[/]\n")

    checks = collect_diagnostics(repo_root)
    table = Table(title="Environment")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Detail")
    icons = {"ok": "[green]✓[/]", "warn": "[yellow]⚠[/]", "error": "[red]✗[/]"}
    for check_result in checks:
        table.add_row(check_result.name, icons.get(check_result.status, check_result.status), check_result.detail)
    console.print(table)

    summary = summarize_checks(checks)
    console.print(f"\n{summary['ok']} ok, {summary['warn']} warning(s), {summary['error']} error(s)")
    console.print(
        f"\n[bold]Languages ({len(SUPPORTED_LANGUAGES)}):[/] "
        + ", ".join(f"{code} ({language_name(code)})" for code in SUPPORTED_LANGUAGES)
    )


if __name__ == "__main__":
    app()
