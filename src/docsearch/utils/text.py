"""Text helpers: whitespace normalisation and snippet highlighting."""

from __future__ import annotations

import re
from typing import Iterable, Tuple

HIGHLIGHT_MARKER: Tuple[str, str] = ("<mark>", "</mark>")


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Collapse whitespace and join lines."""
    return "\n".join(line.strip() for line in lines if line.strip())


def snippet_with_highlight(
    text: str,
    query: str,
    *,
    pre_chars: int = 60,
    post_chars: int = 140,
    marker: Tuple[str, str] = HIGHLIGHT_MARKER,
) -> str:
    """Build a fragment of ``text`` around the first literal ``query`` match.

    Matching is a case-insensitive substring search on the raw query, not on
    engine tokens. Offsets are code point counts, so multi-byte characters are
    never split. When the query does not occur, the head of the text is
    returned without markup.
    """
    if not text or not query:
        return ""

    match = re.search(re.escape(query), text, flags=re.IGNORECASE)
    if match is None:
        return text[: pre_chars + post_chars]

    start = max(match.start() - pre_chars, 0)
    end = min(match.end() + post_chars, len(text))
    open_tag, close_tag = marker
    return (
        text[start : match.start()]
        + open_tag
        + text[match.start() : match.end()]
        + close_tag
        + text[match.end() : end]
    )
