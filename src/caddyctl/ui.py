from __future__ import annotations

import difflib
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """Route caddyctl loggers to stderr through rich."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=err_console, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger("caddyctl")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


def unified_diff(old: str, new: str, *, path: Path) -> str:
    return "".join(
        difflib.unified_diff(
            old.splitlines(keepends=True),
            new.splitlines(keepends=True),
            fromfile=str(path),
            tofile=str(path) + " (proposed)",
        )
    )


def print_diff(diff: str) -> None:
    if not diff:
        console.print("No changes.")
        return
    console.print(diff, markup=False, highlight=False, soft_wrap=True, end="")


def success(message: str, *, quiet: bool = False) -> None:
    if quiet:
        return
    console.print(f"[green]✅ {escape(message)}[/green]", highlight=False, soft_wrap=True)


def warning(message: str) -> None:
    err_console.print(f"[yellow]⚠️  Warning: {escape(message)}[/yellow]", highlight=False, soft_wrap=True)


def error(message: str) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False, soft_wrap=True)
