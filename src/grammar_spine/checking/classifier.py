"""Category classification of engine findings.

The engine exposes no structural spelling/grammar flag, only a
free-text rule-kind tag (LanguageTool's issue type, e.g.
``misspelling``, ``grammar``, ``typographical``).  A tag containing
``spell`` in any case is a spelling finding; everything else is grammar.
"""

from __future__ import annotations

from grammar_spine.checking.models import Category

SPELLING_MARKER = "spell"


def classify(kind: str | None) -> Category:
    """Map a rule-kind tag to :class:`Category`."""
    if kind and SPELLING_MARKER in kind.casefold():
        return Category.SPELLING
    return Category.GRAMMAR
