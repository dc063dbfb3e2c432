# scd_core/text/tokenizer.py
from __future__ import annotations
from typing import List, Optional, Tuple

from scd_core.utils.ttl_cache import TTLCache

PUNCTUATION = frozenset(".,!?;:()")

# Ordered: first match wins, at most one of each is stripped.
COMMON_PREFIXES: Tuple[str, ...] = (
    "un", "re", "in", "im", "dis", "en", "non", "non-", "pre", "pre-", "mis",
    "sub", "inter", "fore", "de", "trans", "super", "semi", "anti", "mid", "under",
)
COMMON_SUFFIXES: Tuple[str, ...] = (
    "s", "es", "ed", "ing", "ly", "er", "or", "ion", "tion", "ation", "ity",
    "ment", "ness", "ful", "less", "est", "ive", "y", "ize", "ise", "ify", "en",
    "ssa", "lla", "aa",
)

_ACCENT_FOLD = str.maketrans({
    "á": "a", "é": "e", "í": "i", "ó": "o", "ú": "u",
    "ñ": "n", "ä": "a", "ö": "o", "ü": "u",
})

DEFAULT_CACHE_TTL_S = 60.0

_cache: TTLCache[str, Tuple[str, ...]] = TTLCache(ttl_s=DEFAULT_CACHE_TTL_S)


def normalize_token(token: str) -> str:
    """Lower-case, strip one common prefix and one common suffix, fold accents."""
    token = token.lower()
    for prefix in COMMON_PREFIXES:
        if token.startswith(prefix):
            token = token[len(prefix):]
            break
    for suffix in COMMON_SUFFIXES:
        if token.endswith(suffix):
            token = token[: len(token) - len(suffix)]
            break
    return token.translate(_ACCENT_FOLD)


def _segment(text: str) -> List[str]:
    tokens: List[str] = []
    current: List[str] = []
    for ch in text:
        if ch.isspace():
            if current:
                tokens.append("".join(current))
                current = []
        elif ch in PUNCTUATION:
            if current:
                tokens.append("".join(current))
                current = []
            tokens.append(ch)
        else:
            current.append(ch)
    if current:
        tokens.append("".join(current))
    return tokens


def tokenize(text: str, cache: Optional[TTLCache[str, Tuple[str, ...]]] = None) -> List[str]:
    """
    Split text into normalized word and punctuation tokens.
    Results are memoised per input string; callers get a fresh list each time.
    """
    c = _cache if cache is None else cache
    hit = c.get(text)
    if hit is not None:
        return list(hit)
    normalized = tuple(t for t in (normalize_token(tok) for tok in _segment(text)) if t)
    c.put(text, normalized)
    return list(normalized)


def tokenizer_cache() -> TTLCache[str, Tuple[str, ...]]:
    return _cache
