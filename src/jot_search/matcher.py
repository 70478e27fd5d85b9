"""Greedy fuzzy matching of a query against a single string."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchOutcome:
    """Verdict, score and matched indexes of one :func:`fuzzy_match` call."""

    matched: bool
    score: int
    positions: tuple[int, ...]


EMPTY_MATCH = MatchOutcome(matched=True, score=0, positions=())


def fuzzy_match(query: str, target: str) -> MatchOutcome:
    """Match *query* as a subsequence of *target*, ignoring case.

    The scan is greedy and leftmost: each query character is taken at its
    first occurrence after the previous one. A character adjacent to the
    previous match scores 2, any other scores 1. The last-match marker
    starts at -1, so a match anchored at index 0 counts as adjacent.

    Characters are lowered one at a time, so ``positions`` index into
    *target* itself even where lowering changes a string's length.
    """

    if not query:
        return EMPTY_MATCH

    needle = [char.lower() for char in query]

    cursor = 0
    score = 0
    last = -1
    positions: list[int] = []
    for index, char in enumerate(target):
        if cursor == len(needle):
            break
        if char.lower() != needle[cursor]:
            continue
        score += 2 if index == last + 1 else 1
        last = index
        positions.append(index)
        cursor += 1

    return MatchOutcome(
        matched=cursor == len(needle),
        score=score,
        positions=tuple(positions),
    )
