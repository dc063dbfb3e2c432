# tests/test_tokenizer.py
# How to run:
#   pytest -q
#
# What this covers:
#   - Segmentation on whitespace and the fixed punctuation set
#   - One prefix + one suffix stripped, lower-casing, accent folding
#   - Empty tokens dropped; memoisation is transparent

from scd_core.text.tokenizer import normalize_token, tokenize
from scd_core.utils.ttl_cache import TTLCache


def test_running_quickly_example():
    assert tokenize("Running, quickly!") == ["runn", ",", "quick", "!"]

def test_empty_and_whitespace_only_inputs():
    assert tokenize("") == []
    assert tokenize("   \n\t ") == []

def test_punctuation_splits_and_is_emitted_alone():
    assert tokenize("Hello.World") == ["hello", ".", "world"]
    assert tokenize("(a)") == ["(", "a", ")"]

def test_only_one_prefix_and_one_suffix_are_stripped():
    # "un" first, then "y" is the first listed suffix that matches
    assert normalize_token("unhappy") == "happ"
    # lower-casing happens before the prefix check
    assert normalize_token("UNHAPPY") == "happ"

def test_accents_are_folded_after_stripping():
    assert tokenize("Café résumé") == ["cafe", "resume"]

def test_tokens_that_normalize_to_empty_are_dropped():
    # "s" is itself a suffix, "un" itself a prefix
    assert tokenize("s un cat") == ["cat"]

def test_cache_returns_fresh_lists():
    cache = TTLCache(ttl_s=60.0)
    first = tokenize("copy me please", cache=cache)
    first.append("mutated")
    assert tokenize("copy me please", cache=cache) == ["cop", "me", "please"]
    assert len(cache) == 1
