"""
Console output for kubecraft.

Status messages are styled with Rich and filtered by verbosity. Command
results (rendered templates, serialized manifests) are written unstyled
to stdout so they can be piped.
"""

import sys
from enum import IntEnum
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from kubecraft.validation import ValidationResult


class Verbosity(IntEnum):
    """How much the CLI prints."""

    QUIET = 0  # errors and results only
    NORMAL = 1
    VERBOSE = 2  # adds per-file progress and validation warnings


class OutputManager:
    """Prints status, errors and results at a given verbosity."""

    def __init__(self, verbosity: Verbosity = Verbosity.NORMAL):
        self.verbosity = verbosity
        self.console = Console(highlight=False)
        self.error_console = Console(stderr=True, highlight=False)

    @property
    def quiet(self) -> bool:
        return self.verbosity == Verbosity.QUIET

    def set_verbosity(self, verbosity: Verbosity) -> None:
        self.verbosity = verbosity

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, suggestion: Optional[str] = None) -> None:
        """Print an error to stderr. Errors are shown at every verbosity."""
        self.error_console.print(f"[bold red]✗[/bold red] [red]{message}[/red]")
        if suggestion and not self.quiet:
            self.error_console.print(f"  [yellow]hint:[/yellow] {suggestion}")

    def warning(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[blue]•[/blue] {message}")

    def print(self, message: str, style: Optional[str] = None) -> None:
        if not self.quiet:
            self.console.print(message, style=style)

    def verbose(self, message: str) -> None:
        """Print a dimmed message, only in VERBOSE mode."""
        if self.verbosity >= Verbosity.VERBOSE:
            self.console.print(message, style="dim")

    def newline(self) -> None:
        if not self.quiet:
            self.console.print()

    def table(self, title: str, columns: List[str], rows: List[List[str]]) -> None:
        """Print a table with one column per header."""
        if self.quiet:
            return
        table = Table(title=title, box=box.ROUNDED)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*row)
        self.console.print(table)

    def validation(self, subject: str, result: ValidationResult) -> None:
        """
        Report a manifest's validation result.

        Errors are always printed; warnings only in VERBOSE mode.
        """
        for message in result.errors:
            self.error(f"{subject}: {message}")
        for message in result.warnings:
            self.verbose(f"{subject}: {message}")

    def result(self, content: str) -> None:
        """Write command output to stdout as plain text, ending with a newline."""
        sys.stdout.write(content if content.endswith("\n") else content + "\n")


_output_manager: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the shared OutputManager, creating one at NORMAL verbosity if needed."""
    global _output_manager
    if _output_manager is None:
        _output_manager = OutputManager()
    return _output_manager


def set_output(manager: OutputManager) -> None:
    """Replace the shared OutputManager (the CLI does this after parsing flags)."""
    global _output_manager
    _output_manager = manager
