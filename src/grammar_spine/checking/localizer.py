"""
Span localisation — context windows around findings.

Given the checked text and a finding's code-point span ``[start, end)``,
:func:`context_window` returns the snippet ``text[start - 20 : end + 20]``
(clamped to the text) together with the span's position inside the
snippet.

Python ``str`` indexing is by code point, so the slice can never split a
UTF-8 sequence.  On top of that the window edges are widened to the
nearest extended grapheme cluster boundary (``\\X`` in the ``regex``
module), so flags, emoji sequences, Hangul syllables built from jamo
and ``\\r\\n`` pairs are never cut in half.  For text made of single
code point characters the window is exactly
``[max(0, start - 20), min(len, end + 20))``.

Example:
    >>> ctx = context_window("This is an test.", 8, 10)
    >>> ctx.text, ctx.offset, ctx.length
    ('This is an test.', 8, 2)

Tags:
    grammar-spine, checking, unicode, context-window

Doc-Types:
    api-reference
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Sequence

import regex

from grammar_spine.checking.models import Context

CONTEXT_RADIUS = 20

_GRAPHEME = regex.compile(r"\X")


def grapheme_boundaries(text: str) -> list[int]:
    """Code-point indices where an extended grapheme cluster starts or *text* ends."""
    return [0] + [match.end() for match in _GRAPHEME.finditer(text)]


def context_window(
    text: str,
    start: int,
    end: int,
    radius: int = CONTEXT_RADIUS,
    boundaries: Sequence[int] | None = None,
) -> Context:
    """Build the bounded context for span ``[start, end)`` of *text*.

    *boundaries* may carry :func:`grapheme_boundaries` of *text* when
    several windows are cut from the same text.

    Raises:
        ValueError: if the span is not ``0 <= start <= end <= len(text)``.
    """
    if not 0 <= start <= end <= len(text):
        raise ValueError(f"span [{start}, {end}) out of bounds for text of length {len(text)}")
    if boundaries is None:
        boundaries = grapheme_boundaries(text)

    context_start = boundaries[bisect_right(boundaries, max(0, start - radius)) - 1]
    context_end = boundaries[bisect_left(boundaries, min(len(text), end + radius))]

    return Context(
        text=text[context_start:context_end],
        offset=start - context_start,
        length=end - start,
    )


def clamp_span(text_length: int, start: int, length: int) -> tuple[int, int]:
    """Clamp an engine-reported ``(start, length)`` into ``[0, text_length]``.

    Returns ``(start, end)`` with ``0 <= start <= end <= text_length``.
    """
    start = min(max(0, start), text_length)
    end = min(max(start, start + max(0, length)), text_length)
    return start, end
