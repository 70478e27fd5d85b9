"""Render matched positions as Pango-style markup."""

from __future__ import annotations

from collections.abc import Iterable
from html import escape

MAX_PREVIEW_SIZE = 5000
SPAN_CLOSE = "</span>"


def span_open(color: str) -> str:
    return f'<span foreground="{color}" weight="bold">'


def escape_markup(text: str) -> str:
    """Escape ``& < > " '`` so *text* can sit inside a markup label."""

    return escape(text, quote=True)


def highlight_matches(text: str, positions: Iterable[int], color: str) -> str:
    """Wrap every run of matched characters of *text* in one colored span.

    Positions are character indexes into *text*; indexes outside it are
    ignored. All literal characters are escaped, and a run still open at the
    end of the text is closed.
    """

    matched = set(positions)
    if not matched:
        return escape_markup(text)

    parts: list[str] = []
    inside = False
    for index, char in enumerate(text):
        is_match = index in matched
        if is_match and not inside:
            parts.append(span_open(color))
        elif not is_match and inside:
            parts.append(SPAN_CLOSE)
        inside = is_match
        parts.append(escape_markup(char))

    if inside:
        parts.append(SPAN_CLOSE)
    return "".join(parts)


def preview_markup(
    content: str,
    positions: Iterable[int],
    color: str,
    max_size: int = MAX_PREVIEW_SIZE,
) -> str:
    """Highlight the leading *max_size* characters of a note body."""

    window = content[:max_size]
    return highlight_matches(window, (p for p in positions if p < len(window)), color)
