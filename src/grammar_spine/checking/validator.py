"""Request validation — reject oversized text before any engine work."""

from __future__ import annotations

from grammar_spine.core.errors import PayloadTooLarge

MAX_TEXT_BYTES = 100 * 1024


def text_size_bytes(text: str) -> int:
    """UTF-8 encoded size of *text*.

    Lone surrogates (legal in JSON ``\\ud800`` escapes) are counted as
    their 3-byte encoding instead of raising.
    """
    return len(text.encode("utf-8", errors="surrogatepass"))


def validate_text_size(text: str, limit_bytes: int = MAX_TEXT_BYTES) -> int:
    """Return the byte size of *text*, or raise :class:`PayloadTooLarge`.

    Text whose encoded size exceeds *limit_bytes* is rejected; text of
    exactly *limit_bytes* passes.
    """
    size = text_size_bytes(text)
    if size > limit_bytes:
        raise PayloadTooLarge(limit_bytes=limit_bytes, actual_bytes=size)
    return size
