"""
CLI Interface
=============
Command-line interface for the question import engine.

Usage:
    python -m question_import parse <file> [options]
    python -m question_import batch <directory> [options]
    python -m question_import validate <json_path>
    python -m question_import formats
"""

from __future__ import annotations

import json
import os
import sys
from collections import Counter
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from . import __version__
from .dispatcher import FormatDispatcher, file_extension
from .engine import ParserConfig, ParserEngine, result_to_dict, save_result
from .errors import ExtractionError, UnsupportedFormatError
from .models import ParseResult
from .text_extraction import GridExtractor

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="question-import")
def cli():
    """Question Import Engine: exam documents to question records."""
    pass


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o",
    default=None,
    help="Directory to save the parsed JSON into",
)
@click.option(
    "--max-questions", "-m",
    default=1000,
    type=click.IntRange(min=1),
    help="Maximum questions collected per document",
)
@click.option(
    "--max-errors",
    default=10,
    type=click.IntRange(min=0),
    help="Number of item errors to display",
)
@click.option(
    "--strict-answers",
    is_flag=True,
    default=False,
    help="Reject blocks without an answer instead of defaulting to option A",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option(
    "--log-file",
    default=None,
    help="Path to log file",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only JSON result to stdout (for programmatic use)",
)
def parse(
    file_path: str,
    output: str,
    max_questions: int,
    max_errors: int,
    strict_answers: bool,
    log_level: str,
    log_file: str,
    json_output: bool,
):
    """Parse a single document into question records."""

    if json_output:
        # Suppress console output for JSON mode
        log_level = "ERROR"

    config = ParserConfig(
        max_questions=max_questions,
        default_to_first_option=not strict_answers,
        log_level=log_level,
        log_file=log_file,
    )

    if not json_output:
        console.print()
        console.print(
            Panel.fit(
                f"[bold cyan]Question Import Engine v{__version__}[/]\n"
                f"[dim]Parsing: {os.path.basename(file_path)}[/]",
                border_style="cyan",
            )
        )
        console.print()

    try:
        engine = ParserEngine(config)
        result = engine.parse_file(file_path)
    except (UnsupportedFormatError, ExtractionError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/] {e}")
        if log_level == "DEBUG":
            console.print_exception()
        sys.exit(1)

    if output:
        out_file = Path(output) / f"{Path(file_path).stem}_questions.json"
        save_result(result, out_file)

    if json_output:
        print(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False))
        return

    _display_result(result, max_errors)


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--output", "-o", default=None, help="Output directory")
@click.option(
    "--max-questions", "-m",
    default=1000,
    type=click.IntRange(min=1),
    help="Maximum questions collected per document",
)
@click.option("--log-level", default="WARNING", help="Logging level")
def batch(directory: str, output: str, max_questions: int, log_level: str):
    """Batch parse every supported document in a directory."""

    supported = set(FormatDispatcher().supported_extensions())
    files = sorted(
        p for p in Path(directory).iterdir()
        if p.is_file() and file_extension(p.name) in supported
    )

    if not files:
        console.print(f"[yellow]No supported documents found in: {directory}[/]")
        return

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Batch Question Import[/]\n"
            f"[dim]Found {len(files)} documents in: {directory}[/]",
            border_style="cyan",
        )
    )
    console.print()

    engine = ParserEngine(
        ParserConfig(max_questions=max_questions, log_level=log_level)
    )
    results = []
    errors = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Processing documents...", total=len(files))

        for doc_file in files:
            progress.update(task, description=f"Parsing: {doc_file.name}")

            try:
                result = engine.parse_file(str(doc_file))
                results.append((doc_file.name, result))
                if output:
                    save_result(
                        result, Path(output) / f"{doc_file.stem}_questions.json"
                    )
            except Exception as e:
                errors.append((doc_file.name, str(e)))

            progress.advance(task)

    _display_batch_summary(results, errors)


@cli.command()
@click.argument("json_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--max-errors", default=10, type=click.IntRange(min=0))
def validate(json_path: str, max_errors: int):
    """Validate a previously saved parse result JSON."""

    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Validation Report[/]\n"
            f"[dim]File: {json_path}[/]",
            border_style="cyan",
        )
    )

    try:
        result = ParseResult.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]✗ Invalid parse result:[/] {e.error_count()} problems")
        for err in e.errors()[:max_errors]:
            location = ".".join(str(part) for part in err["loc"])
            console.print(f"  [red]•[/] {location}: {err['msg']}")
        sys.exit(1)

    console.print("[green]✓ Parse result is structurally valid[/]")
    _display_result(result, max_errors)


@cli.command()
def formats():
    """List the supported upload formats."""

    table = Table(title="Supported Formats", border_style="cyan")
    table.add_column("Extension", style="bold")
    table.add_column("Extractor")
    table.add_column("Kind")

    for ext, extractor in sorted(FormatDispatcher().extractors().items()):
        kind = "tabular" if isinstance(extractor, GridExtractor) else "text"
        table.add_row(f".{ext}", type(extractor).__name__, kind)

    console.print()
    console.print(table)
    console.print()


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _display_result(result: ParseResult, max_errors: int):
    """Display parse results as rich tables."""
    console.print()

    table = Table(title="Import Summary", border_style="green")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="center")

    table.add_row(
        "Questions Found",
        str(result.total_found),
        "[green]✓[/]" if result.total_found > 0 else "[red]✗[/]",
    )
    table.add_row(
        "Duplicates Removed",
        str(result.duplicates_removed),
        "[green]✓[/]" if result.duplicates_removed == 0 else "[yellow]⚠[/]",
    )
    table.add_row(
        "Items Rejected",
        str(len(result.errors)),
        "[green]✓[/]" if not result.errors else "[yellow]⚠[/]",
    )
    console.print(table)
    console.print()

    if result.questions:
        breakdown = Table(title="Question Breakdown", border_style="cyan")
        breakdown.add_column("Field", style="bold")
        breakdown.add_column("Value")
        breakdown.add_column("Count", justify="right")

        for label, counts in (
            ("Type", Counter(q.question_type.value for q in result.questions)),
            ("Category", Counter(q.category.value for q in result.questions)),
            ("Difficulty", Counter(q.difficulty.value for q in result.questions)),
        ):
            for value, count in counts.most_common():
                breakdown.add_row(label, value, str(count))

        console.print(breakdown)
        console.print()

    if result.errors and max_errors:
        console.print("[bold yellow]Rejected items:[/]")
        for message in result.errors[:max_errors]:
            console.print(f"  [yellow]•[/] {message}")
        hidden = len(result.errors) - max_errors
        if hidden > 0:
            console.print(f"  [dim]… and {hidden} more[/]")
        console.print()


def _display_batch_summary(results, errors):
    """Display batch processing summary."""
    console.print()

    table = Table(title="Batch Processing Summary", border_style="cyan")
    table.add_column("Document", style="bold")
    table.add_column("Questions", justify="right")
    table.add_column("Duplicates", justify="right")
    table.add_column("Rejected", justify="right")
    table.add_column("Status", justify="center")

    total_questions = 0
    total_duplicates = 0

    for name, result in results:
        total_questions += result.total_found
        total_duplicates += result.duplicates_removed

        status = "[green]✓[/]" if not result.errors else "[yellow]⚠[/]"
        table.add_row(
            name,
            str(result.total_found),
            str(result.duplicates_removed),
            str(len(result.errors)),
            status,
        )

    for name, error in errors:
        table.add_row(name, "-", "-", "-", "[red]✗ FAILED[/]")

    console.print(table)
    console.print()
    console.print(
        f"[bold]Total:[/] {total_questions} questions from "
        f"{len(results)} documents, {total_duplicates} duplicates removed, "
        f"{len(errors)} failures"
    )
    for name, error in errors:
        console.print(f"  [red]•[/] {name}: {error}")
    console.print()


# ─── Entry point (for python -m question_import.cli) ──────────────────────────


if __name__ == "__main__":
    cli()
