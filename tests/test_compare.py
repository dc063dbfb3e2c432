# tests/test_compare.py
# How to run:
#   pytest -q
#
# What this covers:
#   - Jaccard similarity incl. the empty/empty guard
#   - Containment ignores order and repeats
#   - includes_score: exact embeds, reordering, partial edges, minimum cut-off

import pytest

from scd_core.text.compare import containment, includes_score, similarity


def test_similarity_of_sequence_with_itself_is_one():
    a = ["the", "quick", "fox", "the"]
    assert similarity(a, a) == 1.0

def test_similarity_of_two_empty_sequences_is_zero():
    assert similarity([], []) == 0.0

def test_similarity_is_jaccard_over_sets():
    assert similarity(["a", "b"], ["b", "c"]) == pytest.approx(1 / 3)

def test_containment_full_vocabulary_regardless_of_order_and_repeats():
    assert containment(["c", "b", "a"], ["a", "a", "b"]) == 1.0

def test_containment_partial_and_empty():
    assert containment(["a"], ["a", "b"]) == 0.5
    assert containment(["a"], []) == 0.0
    assert containment([], ["a"]) == 0.0

def test_includes_score_exact_embed_is_one():
    container = ["x", "a", "b", "c", "y"]
    assert includes_score(container, ["a", "b", "c"], 0.7) == pytest.approx(1.0)

def test_includes_score_identical_sequences():
    seq = ["one", "two", "three", "four"]
    assert includes_score(seq, seq, 0.0) == pytest.approx(1.0)

def test_includes_score_swapped_pair_scores_two_thirds():
    # each token aligns on itself; its neighbour falls outside the container
    assert includes_score(["b", "a"], ["a", "b"], 0.0) == pytest.approx(2 / 3)

def test_includes_score_applies_minimum_relevant():
    # "a" matches at the container edge (1 / 1.5), "b" is absent -> mean 1/3
    assert includes_score(["a"], ["a", "b"], 0.3) == pytest.approx(1 / 3)
    assert includes_score(["a"], ["a", "b"], 0.7) == 0.0

def test_includes_score_scores_every_position_not_only_the_first():
    # only the last token of `contained` is present; a first-index-only loop would return 0
    assert includes_score(["z"], ["x", "y", "z"], 0.0) > 0.0

def test_includes_score_disjoint_or_empty():
    assert includes_score(["a", "b"], ["c", "d"], 0.0) == 0.0
    assert includes_score(["a"], [], 0.0) == 0.0
    assert includes_score([], ["a"], 0.0) == 0.0
