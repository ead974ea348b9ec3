"""
Root Typer application for the grammar-spine CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from grammar_spine import __version__

app = Typer(
    name="grammar-spine",
    help="grammar-spine — grammar and spelling checks over HTTP.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("grammar-spine")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"grammar-spine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """grammar-spine CLI — run the service or check text locally."""


# ── Command registration ─────────────────────────────────────────────────

from grammar_spine.cli.check import check  # noqa: E402
from grammar_spine.cli.serve import serve  # noqa: E402

app.command("serve", help="Start the HTTP service.")(serve)
app.command("check", help="Check a file (or stdin) and print findings.")(check)
