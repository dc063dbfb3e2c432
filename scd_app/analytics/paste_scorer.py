# scd_app/analytics/paste_scorer.py
from __future__ import annotations
from typing import Optional
import structlog

from scd_core.clipboard.copy_history import CopiedInfo
from scd_core.focus.focus_tracker import TabFocusInterval
from scd_core.hooks.events import text_digest
from scd_core.text.ai_signatures import ai_signature_score
from scd_core.text.compare import containment, similarity
from scd_core.text.tokenizer import tokenize
from scd_app.analytics.config import WatchdogConfig
from scd_app.analytics.state import CopyPasteContribution

log = structlog.get_logger()


def time_decay_factor(elapsed_s: float, window_minutes: float, floor: float) -> float:
    """
    1.0 at elapsed 0, decaying linearly towards 0 at the window edge but never
    below `floor`; 0.0 once the event falls outside the window.
    """
    window_s = window_minutes * 60.0
    if window_s <= 0 or elapsed_s >= window_s:
        return 0.0
    return max(min(1.0 - elapsed_s / window_s, 1.0), floor)


class PasteScorer:
    """
    Turns one paste into a CopyPasteContribution, or None when it does not qualify:
      - paste shorter than paste_size_threshold
      - near-identical re-paste of the last copy (similarity > discard_similarity)
    """
    def __init__(self, config: Optional[WatchdogConfig] = None):
        self.cfg = config or WatchdogConfig()

    def score(
        self,
        text: str,
        last_copy: Optional[CopiedInfo],
        active_focus: Optional[TabFocusInterval],
        now: float,
    ) -> Optional[CopyPasteContribution]:
        if not text:
            return None
        if len(text) < self.cfg.paste_size_threshold:
            log.debug("paste.too_short", size=len(text), min_size=self.cfg.paste_size_threshold)
            return None

        tokens = tokenize(text)
        copied = list(last_copy.tokens) if last_copy else []

        sim = similarity(tokens, copied)
        if sim > self.cfg.discard_similarity:
            log.info("paste.discarded", similarity=round(sim, 4), digest=text_digest(text))
            return None

        cont = containment(copied, tokens)
        copy_factor = self._copy_factor(last_copy, now)
        tab_factor = self._tab_switch_factor(active_focus, now)

        # all three must be present for a non-zero paste score
        paste_score = cont * copy_factor * tab_factor
        ai_score = float(ai_signature_score(text, self.cfg.ai_signature_threshold))
        score = paste_score * ai_score if ai_score >= paste_score else paste_score

        contribution = CopyPasteContribution(
            timestamp=now,
            content=text,
            similarity=sim,
            containment=cont,
            copy_factor=copy_factor,
            tab_switch_factor=tab_factor,
            paste_score=paste_score,
            ai_score=ai_score,
            score=score,
        )
        log.info(
            "paste.scored",
            size=len(text),
            similarity=round(sim, 4),
            containment=round(cont, 4),
            copy_factor=round(copy_factor, 4),
            tab_factor=round(tab_factor, 4),
            ai=ai_score,
            score=round(score, 4),
        )
        return contribution

    # ---- time factors ----

    def _copy_factor(self, last_copy: Optional[CopiedInfo], now: float) -> float:
        if last_copy is None:
            return 0.0
        return time_decay_factor(
            now - last_copy.timestamp,
            self.cfg.relevant_copy_event_minutes,
            self.cfg.min_copy_event_time_weight,
        )

    def _tab_switch_factor(self, active_focus: Optional[TabFocusInterval], now: float) -> float:
        if active_focus is None:
            return 0.0
        return time_decay_factor(
            now - active_focus.focused_in,
            self.cfg.relevant_tab_in_out_event_minutes,
            self.cfg.min_tab_event_time_weight,
        )
