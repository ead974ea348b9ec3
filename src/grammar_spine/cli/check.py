"""
CLI: ``grammar-spine check`` — run the check pipeline locally.

Reads a file (or stdin when the path is omitted or ``-``), applies the
same size guard, engine, localizer and classifier as ``POST /v1/check``
and prints the findings as a table, or as the HTTP response body with
``--json``.  Exits 1 when the text is rejected or the engine fails.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from grammar_spine.api.schemas.check import CheckResponseSchema
from grammar_spine.api.settings import GrammarAPISettings
from grammar_spine.checking.engine import load_engine
from grammar_spine.checking.models import CheckOptions, CheckResult
from grammar_spine.checking.service import CheckService
from grammar_spine.cli.utils import console, fail, fail_service_error
from grammar_spine.core.errors import GrammarServiceError
from grammar_spine.core.logging import LogContext, configure_logging


def _read_text(path: Path | None) -> str:
    if path is None or str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise fail(f"cannot read {path}: {exc.strerror or exc}", code="READ_FAILED") from exc
    except UnicodeDecodeError as exc:
        raise fail(f"{path} is not valid UTF-8", code="READ_FAILED") from exc


def _print_table(result: CheckResult) -> None:
    if not result.findings:
        console.print("[green]No issues found.[/green]")
    else:
        table = Table(show_lines=False, pad_edge=False)
        table.add_column("offset", justify="right")
        table.add_column("length", justify="right")
        table.add_column("category")
        table.add_column("rule")
        table.add_column("message", overflow="fold")
        table.add_column("replacements", overflow="fold")
        table.add_column("context", overflow="fold")
        for f in result.findings:
            color = "magenta" if f.category.value == "spelling" else "yellow"
            table.add_row(
                str(f.offset),
                str(f.length),
                f"[{color}]{f.category.value}[/{color}]",
                escape(f.rule_id),
                escape(f.message),
                escape(", ".join(f.replacements[:5])),
                escape(f.context.text),
            )
        console.print(table)
    console.print(f"\n[dim]{len(result.findings)} finding(s) in {result.processing_time_ms} ms[/dim]")


def check(
    path: Path | None = typer.Argument(None, help="File to check; omit or '-' for stdin"),
    json_out: bool = typer.Option(False, "--json", help="Print the HTTP response body"),
    spelling: bool = typer.Option(True, "--spelling/--no-spelling", help="Report spelling findings"),
    grammar: bool = typer.Option(True, "--grammar/--no-grammar", help="Report grammar findings"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level (logs go to stderr)"),
) -> None:
    """Check a file (or stdin) and print findings."""
    configure_logging(log_level, json_format=False, stream=sys.stderr)
    settings = GrammarAPISettings()
    text = _read_text(path)

    with LogContext(command="check", source=str(path or "-")):
        try:
            engine = load_engine(language=settings.engine_language, remote_url=settings.engine_remote_url)
        except Exception as exc:
            raise fail(f"could not load the analysis engine: {exc}", code="ENGINE_LOAD_FAILED") from exc

        try:
            service = CheckService(engine, max_text_bytes=settings.max_text_bytes)
            result = service.check(text, CheckOptions(spelling=spelling, grammar=grammar))
        except GrammarServiceError as exc:
            raise fail_service_error(exc) from exc
        finally:
            engine.close()

    if json_out:
        body = CheckResponseSchema.from_result(result).model_dump(by_alias=True)
        typer.echo(json.dumps(body, ensure_ascii=False))
        return
    _print_table(result)
