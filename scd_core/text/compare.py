# scd_core/text/compare.py
from __future__ import annotations
from typing import Dict, Sequence

import numpy as np


def similarity(tokens_a: Sequence[str], tokens_b: Sequence[str]) -> float:
    """Jaccard index of the two token sets; 0.0 when both are empty."""
    set_a, set_b = set(tokens_a), set(tokens_b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def containment(container: Sequence[str], contained: Sequence[str]) -> float:
    """Fraction of `contained`'s vocabulary that also appears in `container`."""
    set_contained = set(contained)
    if not set_contained:
        return 0.0
    return len(set_contained & set(container)) / len(set_contained)


def includes_score(container: Sequence[str], contained: Sequence[str], minimum_relevant: float) -> float:
    """
    Positional fuzzy match of `contained` inside `container`.

    For every index i of `contained` and every index j of `container` holding the
    same token, the two sequences are aligned so that i sits on j and each offset
    k in [-i, n - i) contributes weight 1 - |k|/n to the maximum, and to the
    achieved total when the tokens at j+k and i+k agree (positions outside
    `container` never agree). A token scores its best achieved/maximum ratio over
    all candidate j; the result is the mean over i, or 0 below `minimum_relevant`.
    """
    n = len(contained)
    m = len(container)
    if n == 0 or m == 0:
        return 0.0

    vocab: Dict[str, int] = {}
    contained_ids = np.array([vocab.setdefault(t, len(vocab)) for t in contained], dtype=np.int64)
    # -1 never matches a vocabulary id; pad covers every reachable offset
    padded = np.full(m + 2 * n, -1, dtype=np.int64)
    padded[n:n + m] = [vocab.get(t, -1) for t in container]
    container_ids = padded[n:n + m]

    total = 0.0
    for i in range(n):
        js = np.nonzero(container_ids == contained_ids[i])[0]
        if js.size == 0:
            continue
        ks = np.arange(-i, n - i)
        weights = 1.0 - np.abs(ks) / n
        windows = padded[js[:, None] + ks[None, :] + n]
        achieved = (windows == contained_ids[None, :]).astype(np.float64) @ weights
        total += float(achieved.max() / weights.sum())

    final = total / n
    if final >= minimum_relevant:
        return final
    return 0.0
