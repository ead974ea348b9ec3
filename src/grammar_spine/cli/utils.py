"""
CLI utility helpers — consoles and error output.
"""

from __future__ import annotations

import typer
from rich.console import Console

from grammar_spine.core.errors import GrammarServiceError

console = Console()
err_console = Console(stderr=True)


def fail(message: str, *, code: str = "ERROR") -> typer.Exit:
    """Print an error line to stderr and return the exit to raise."""
    err_console.print(f"[bold red]Error[/bold red] ({code}): {message}")
    return typer.Exit(code=1)


def fail_service_error(exc: GrammarServiceError) -> typer.Exit:
    return fail(str(exc), code=exc.code)
