"""
CLI layer for grammar-spine.

A Typer application with two commands: ``serve`` runs the HTTP service,
``check`` runs the same pipeline on a file or stdin.  All analysis logic
lives in ``grammar_spine.checking``; this package only handles the
terminal: argument parsing, coloured output and tables.

Entry point::

    grammar-spine --help
"""

from grammar_spine.cli.app import app

__all__ = ["app"]
