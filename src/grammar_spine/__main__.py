"""``python -m grammar_spine`` entry point."""

from grammar_spine.cli.app import app

if __name__ == "__main__":
    app()
