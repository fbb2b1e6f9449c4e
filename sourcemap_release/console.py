"""Rich console utilities for sourcemap-release.

Shared Rich Console instance plus helpers that render release reports,
emitting GitHub Actions annotations when running inside a workflow.
"""

import os
from contextlib import contextmanager
from typing import Any, Generator, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from ._release import ReleaseReport

# Detect CI environments
IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "step": "bold blue",
        "highlight": "magenta",
    }
)

# Force colors ON in GitHub Actions (it supports ANSI colors but Rich may incorrectly disable them)
console = Console(
    theme=custom_theme,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


def print_banner(version: str = "unknown") -> None:
    """Print a one-line tool banner."""
    version_display = f"v{version}" if version and version[0:1].isdigit() else version
    console.print(f"[step]sourcemap-release[/step] [highlight]{version_display}[/highlight]")


@contextmanager
def gha_group(title: str) -> Generator[None, None, None]:
    """
    Context manager for GitHub Actions collapsible groups.

    Args:
        title: Group title
    """
    if IS_GITHUB_ACTIONS:
        print(f"::group::{title}")
    try:
        yield
    finally:
        if IS_GITHUB_ACTIONS:
            print("::endgroup::")


def gha_warning(message: str, title: Optional[str] = None) -> None:
    """
    Emit a warning that appears in GitHub Actions job summary.

    Args:
        message: Warning message
        title: Optional title for the warning
    """
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::warning title={title}::{message}")
        else:
            print(f"::warning::{message}")
    else:
        if title:
            console.print(f"[warning]Warning ({title}):[/warning] {message}")
        else:
            console.print(f"[warning]Warning:[/warning] {message}")


def gha_error(message: str, title: Optional[str] = None) -> None:
    """
    Emit an error that appears in GitHub Actions job summary.

    Args:
        message: Error message
        title: Optional title for the error
    """
    if IS_GITHUB_ACTIONS:
        # Annotations are single-line
        first_line = message.splitlines()[0] if message else message
        if title:
            print(f"::error title={title}::{first_line}")
        else:
            print(f"::error::{first_line}")
    else:
        if title:
            console.print(f"[error]Error ({title}):[/error] {message}")
        else:
            console.print(f"[error]Error:[/error] {message}")


def print_summary_table(
    title: str,
    data: List[Tuple[str, Any]],
    show_if_empty: bool = False,
) -> None:
    """
    Print a summary table.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show the table if all values are 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]

    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in data:
        table.add_row(label, str(value))

    console.print(table)


def print_release_summary(report: ReleaseReport) -> None:
    """
    Print the outcome of a release upload.

    Args:
        report: Report returned by the orchestrator
    """
    if report.skipped:
        console.print("[info]Release upload disabled, nothing was uploaded[/info]")
        return

    print_summary_table(
        f"Release {report.version}",
        [
            ("Artifacts uploaded", report.uploaded_count),
            ("Artifacts failed", len(report.failed_uploads)),
            ("Duplicate artifact names", len(report.collisions)),
        ],
        show_if_empty=True,
    )

    for warning in report.warnings:
        gha_warning(warning, title="Source map upload")

    if report.collisions:
        gha_warning(
            f"Artifact names emitted by more than one chunk: {', '.join(report.collisions)}",
            title="Duplicate artifacts",
        )

    if report.failed_uploads:
        with gha_group("Failed uploads"):
            for outcome in report.failed_uploads:
                console.print(f"  {outcome.public_name}: {outcome.error}")


def print_final_success(partial: bool = False) -> None:
    """Print final success message."""
    console.print()
    if partial:
        console.print("[warning]Release finalized with some artifacts missing[/warning]")
    elif IS_GITHUB_ACTIONS:
        console.print("[bold green]✓ SUCCESS![/bold green] Release uploaded and finalized.")
    else:
        console.rule("[bold green]SUCCESS[/bold green]", style="green")
        console.print("[bold green]Release uploaded and finalized![/bold green]", justify="center")
    console.print()


def print_final_failure(message: str) -> None:
    """Print final failure message."""
    console.print()
    gha_error(message, title="Source Map Upload Failed")
    if not IS_GITHUB_ACTIONS:
        console.rule("[bold red]FAILED[/bold red]", style="red")
    console.print()
