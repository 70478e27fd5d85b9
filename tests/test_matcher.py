from jot_search.matcher import fuzzy_match


def test_empty_query_matches_without_positions():
    outcome = fuzzy_match("", "anything at all")
    assert outcome.matched
    assert outcome.score == 0
    assert outcome.positions == ()


def test_prefix_match_scores_every_character_as_consecutive():
    outcome = fuzzy_match("shop", "shopping-list.md")
    assert outcome.matched
    assert outcome.positions == (0, 1, 2, 3)
    assert outcome.score == 8


def test_match_is_case_insensitive():
    outcome = fuzzy_match("SHOP", "ShOpPiNg")
    assert outcome.matched
    assert outcome.positions == (0, 1, 2, 3)


def test_first_match_at_start_counts_as_consecutive():
    assert fuzzy_match("a", "ab").score == 2
    assert fuzzy_match("a", "ba").score == 1


def test_gapped_match_mixes_bonuses():
    outcome = fuzzy_match("ac", "abc")
    assert outcome.positions == (0, 2)
    assert outcome.score == 3


def test_greedy_leftmost_does_not_look_for_better_runs():
    # A later "ab" run would score higher, but the first "a" is taken.
    outcome = fuzzy_match("ab", "a-xab")
    assert outcome.positions == (0, 4)
    assert outcome.score == 3


def test_partial_match_keeps_partial_score_and_positions():
    outcome = fuzzy_match("xyz9", "xylophone")
    assert not outcome.matched
    assert outcome.positions == (0, 1)
    assert outcome.score == 4


def test_no_match_at_all():
    outcome = fuzzy_match("q", "")
    assert not outcome.matched
    assert outcome.score == 0
    assert outcome.positions == ()


def test_positions_strictly_increasing_and_sized_like_query():
    samples = [
        ("note", "a note on notation"),
        ("aaa", "banana bread"),
        ("md", "shopping-list.md"),
        ("zz", "z"),
        ("İ", "İstanbul"),
        ("straße", "Straßenbahn"),
    ]
    for query, target in samples:
        outcome = fuzzy_match(query, target)
        assert all(a < b for a, b in zip(outcome.positions, outcome.positions[1:]))
        assert outcome.matched == (len(outcome.positions) == len(query))


def test_repeated_query_characters_consume_distinct_positions():
    outcome = fuzzy_match("oo", "foo")
    assert outcome.positions == (1, 2)
    assert outcome.score == 3


def test_positions_index_the_original_text_when_lowering_changes_length():
    # "İ".lower() is two code points.
    outcome = fuzzy_match("İst", "İstanbul")
    assert outcome.matched
    assert outcome.positions == (0, 1, 2)
    assert outcome.score == 6

    later = fuzzy_match("bul", "İİİstanbul")
    assert later.positions == (7, 8, 9)
