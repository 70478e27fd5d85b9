"""Rank a corpus of notes against a fuzzy query."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

from .matcher import fuzzy_match
from .notes import Note

FILENAME_WEIGHT = 3
MAX_SEARCH_RESULTS = 100


class MatchType(enum.Enum):
    FILENAME = "filename"
    CONTENT = "content"


@dataclass(frozen=True)
class SearchResult:
    """A note that survived filtering, with the positions to highlight."""

    document: Note
    combined_score: int
    match_type: MatchType | None
    filename_positions: tuple[int, ...] = ()
    content_positions: tuple[int, ...] = ()


def search_notes(corpus: Sequence[Note], query: str) -> list[SearchResult]:
    """Return the notes of *corpus* matching *query*, best first.

    An empty query lists the whole corpus unscored. Otherwise a note is kept
    when its filename or its content matches; filename scores weigh three
    times as much as content scores. Equal scores keep corpus order.
    """

    if not query:
        return [SearchResult(document=note, combined_score=0, match_type=None) for note in corpus]

    ranked: list[tuple[int, int, SearchResult]] = []
    for index, note in enumerate(corpus):
        by_name = fuzzy_match(query, note.filename)
        by_content = fuzzy_match(query, note.content)
        if not (by_name.matched or by_content.matched):
            continue

        combined = by_name.score * FILENAME_WEIGHT + by_content.score
        result = SearchResult(
            document=note,
            combined_score=combined,
            match_type=MatchType.FILENAME if by_name.matched else MatchType.CONTENT,
            filename_positions=by_name.positions if by_name.matched else (),
            content_positions=by_content.positions if by_content.matched else (),
        )
        ranked.append((-combined, index, result))

    ranked.sort(key=lambda item: (item[0], item[1]))
    return [result for _, _, result in ranked]


def limit_results(results: Sequence[SearchResult], limit: int = MAX_SEARCH_RESULTS) -> list[SearchResult]:
    """Truncate a ranked result list for display."""

    if limit <= 0:
        return []
    return list(results[:limit])
