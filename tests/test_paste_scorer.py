# tests/test_paste_scorer.py
# How to run:
#   pytest -q
#
# Verifies:
#   - Linear time decay with floor and window cut-off
#   - Re-paste of the last copy is discarded; short pastes are ignored
#   - paste_score is the product of containment, copy and tab factors
#   - Combination rule between ai_score and paste_score

import pytest

from scd_core.clipboard.copy_history import CopiedInfo
from scd_core.focus.focus_tracker import TabFocusInterval
from scd_core.text.compare import containment
from scd_core.text.tokenizer import tokenize
from scd_app.analytics.config import WatchdogConfig
from scd_app.analytics.paste_scorer import PasteScorer, time_decay_factor

COPIED = "alpha beta gamma delta epsilon zeta eta theta iota kappa"
PASTED = COPIED + " lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor"


def copied_at(t: float, text: str = COPIED) -> CopiedInfo:
    return CopiedInfo(timestamp=t, content=text, tokens=tuple(tokenize(text)), size=len(text))


def test_time_decay_two_minutes_into_five_minute_window():
    assert time_decay_factor(120.0, 5, 0.5) == pytest.approx(0.6)

def test_time_decay_is_floored_near_window_edge():
    assert time_decay_factor(4.9 * 60, 5, 0.5) == 0.5

def test_time_decay_outside_window_is_zero():
    assert time_decay_factor(300.0, 5, 0.5) == 0.0
    assert time_decay_factor(10.0, 0, 0.5) == 0.0

def test_copy_factor_from_contribution():
    scorer = PasteScorer(WatchdogConfig(relevant_copy_event_minutes=5, min_copy_event_time_weight=0.5))
    focus = TabFocusInterval(focused_in=0.0)
    c = scorer.score(PASTED, copied_at(0.0), focus, now=120.0)
    assert c is not None
    assert c.copy_factor == pytest.approx(0.6)
    assert c.tab_switch_factor == pytest.approx(0.6)

def test_paste_score_is_multiplicative():
    scorer = PasteScorer()
    focus = TabFocusInterval(focused_in=50.0)
    c = scorer.score(PASTED, copied_at(10.0), focus, now=60.0)
    expected_cont = containment(tokenize(COPIED), tokenize(PASTED))
    assert c.containment == pytest.approx(expected_cont)
    assert 0.0 < c.containment < 1.0
    assert c.paste_score == pytest.approx(expected_cont * c.copy_factor * c.tab_switch_factor)
    assert c.ai_score == 0.0
    assert c.score == pytest.approx(c.paste_score)

def test_no_prior_copy_gives_zero_paste_score():
    scorer = PasteScorer()
    c = scorer.score(PASTED, None, TabFocusInterval(focused_in=0.0), now=1.0)
    assert c is not None
    assert c.similarity == 0.0
    assert c.containment == 0.0
    assert c.copy_factor == 0.0
    assert c.score == 0.0

def test_no_open_focus_interval_gives_zero_tab_factor():
    scorer = PasteScorer()
    c = scorer.score(PASTED, copied_at(0.0), None, now=1.0)
    assert c.tab_switch_factor == 0.0
    assert c.paste_score == 0.0

def test_identical_repaste_is_discarded():
    scorer = PasteScorer()
    assert scorer.score(PASTED, copied_at(0.0, PASTED), TabFocusInterval(focused_in=0.0), now=1.0) is None

def test_short_paste_is_ignored():
    scorer = PasteScorer()
    assert scorer.score("short text", copied_at(0.0), TabFocusInterval(focused_in=0.0), now=1.0) is None
    assert scorer.score("", copied_at(0.0), TabFocusInterval(focused_in=0.0), now=1.0) is None

def test_ai_text_with_zero_paste_score_discounts_to_zero():
    scorer = PasteScorer()
    text = "As an AI language model — " + "I will now explain the topic in great detail. " * 3
    c = scorer.score(text, None, None, now=1.0)
    assert c.ai_score == 1.0
    assert c.paste_score == 0.0
    assert c.score == 0.0
