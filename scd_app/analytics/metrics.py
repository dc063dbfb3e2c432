# scd_app/analytics/metrics.py
from __future__ import annotations
import re
from typing import List, Sequence

import numpy as np

from scd_core.focus.focus_tracker import TabFocusInterval
from scd_core.text.compare import includes_score
from scd_core.text.tokenizer import tokenize
from scd_app.analytics.config import Reason, WatchdogConfig
from scd_app.analytics.state import CopyPasteContribution, WatchdogHandleState

# sentence end (punctuation stays with its fragment) or any line break
_FRAGMENT_SPLIT = re.compile(r"(?<=[.!?])\s+|[\r\n]+")


def split_fragments(text: str) -> List[str]:
    return [f.strip() for f in _FRAGMENT_SPLIT.split(text) if f and f.strip()]


def _weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float) * np.asarray(weights, dtype=float)))


def presence_scores(
    contributions: Sequence[CopyPasteContribution],
    content_tokens: Sequence[str],
    minimum_relevant: float,
) -> List[float]:
    """How much of each contribution still sits in the field, via includes_score."""
    return [includes_score(content_tokens, tokenize(c.content), minimum_relevant) for c in contributions]


def copy_relates_to_paste(contributions: Sequence[CopyPasteContribution], presence: Sequence[float]) -> float:
    return _weighted_mean([c.score for c in contributions], presence)


def content_contains_ai_signatures(contributions: Sequence[CopyPasteContribution], presence: Sequence[float]) -> float:
    return _weighted_mean([c.ai_score for c in contributions], presence)


def unmodified_pastes(contributions: Sequence[CopyPasteContribution], content: str) -> float:
    """
    Average of:
      - share of contributions still present verbatim (fragment share when only partly)
      - share of the field's characters consumed by those verbatim matches
        (1.0 for an empty field)
    Matches are removed from a working copy so overlapping pastes count once.
    """
    total = len(contributions)
    if total == 0:
        return 0.0

    working = content
    unmodified = 0.0
    for c in contributions:
        if c.content and c.content in working:
            unmodified += 1.0
            working = working.replace(c.content, "", 1)
            continue
        fragments = split_fragments(c.content)
        if not fragments:
            continue
        found = 0
        for frag in fragments:
            if frag in working:
                found += 1
                working = working.replace(frag, "", 1)
        unmodified += found / len(fragments)

    unmodified_ratio = unmodified / total
    # an empty field has nothing left unconsumed
    remaining_ratio = len(working) / len(content) if content else 0.0
    return (unmodified_ratio + (1.0 - remaining_ratio)) / 2.0


def keeps_switching_tabs(
    contributions: Sequence[CopyPasteContribution],
    presence: Sequence[float],
    intervals: Sequence[TabFocusInterval],
    now: float,
) -> float:
    """
    Mean over consecutive focus-interval pairs (a, b) of the strongest paste made
    between a's close and b's close (or now while b is still open).
    """
    if len(intervals) < 2:
        return 0.0

    samples: List[float] = []
    for prev, nxt in zip(intervals, intervals[1:]):
        start = prev.focused_out if prev.focused_out is not None else prev.focused_in
        end = nxt.focused_out if nxt.focused_out is not None else now
        bucket = [p * c.score for c, p in zip(contributions, presence) if start <= c.timestamp <= end]
        if bucket:
            samples.append(max(bucket))

    if not samples:
        return 0.0
    return float(np.mean(samples))


def recompute(
    state: WatchdogHandleState,
    content: str,
    intervals: Sequence[TabFocusInterval],
    config: WatchdogConfig,
    now: float,
) -> WatchdogHandleState:
    """Full recompute of all four factors from the contribution list and current content."""
    contributions = list(state.contributions)
    presence = presence_scores(contributions, tokenize(content), config.includes_minimum_relevant)
    factors = {
        Reason.COPY_RELATES_TO_PASTE: copy_relates_to_paste(contributions, presence),
        Reason.CONTENT_CONTAINS_AI_SIGNATURES: content_contains_ai_signatures(contributions, presence),
        Reason.UNMODIFIED_PASTES: unmodified_pastes(contributions, content),
        Reason.KEEPS_SWITCHING_TABS_AND_COPY_PASTING: keeps_switching_tabs(contributions, presence, intervals, now),
    }
    return WatchdogHandleState(contributions=contributions, factors=factors)
