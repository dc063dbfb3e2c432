from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from scd_app.analytics.config import Reason, WatchdogConfig


@dataclass(frozen=True)
class CopyPasteContribution:
    """One qualifying paste and the scores derived from it."""
    timestamp: float
    content: str
    similarity: float       # Jaccard vs the last copy
    containment: float      # share of the paste's vocabulary found in the last copy
    copy_factor: float      # time-decayed closeness to the last copy
    tab_switch_factor: float  # time-decayed closeness to the last focus gain
    paste_score: float
    ai_score: float
    score: float

    def to_record(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "content": self.content,
            "similarity": self.similarity,
            "containment": self.containment,
            "copyFactor": self.copy_factor,
            "tabSwitchFactor": self.tab_switch_factor,
            "pasteScore": self.paste_score,
            "aiScore": self.ai_score,
            "score": self.score,
        }

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> "CopyPasteContribution":
        return cls(
            timestamp=float(rec["timestamp"]),
            content=str(rec["content"]),
            similarity=float(rec.get("similarity", 0.0)),
            containment=float(rec.get("containment", 0.0)),
            copy_factor=float(rec.get("copyFactor", 0.0)),
            tab_switch_factor=float(rec.get("tabSwitchFactor", 0.0)),
            paste_score=float(rec.get("pasteScore", 0.0)),
            ai_score=float(rec.get("aiScore", 0.0)),
            score=float(rec["score"]),
        )


@dataclass
class WatchdogHandleState:
    """Four running factor values plus the append-only contribution list of one field."""
    contributions: List[CopyPasteContribution] = field(default_factory=list)
    factors: Dict[Reason, float] = field(default_factory=lambda: {r: 0.0 for r in Reason})

    def factor(self, reason: Reason) -> float:
        return self.factors.get(reason, 0.0)

    def to_record(self) -> Dict[str, Any]:
        rec: Dict[str, Any] = {r.value: self.factor(r) for r in Reason}
        rec["COPY_PASTE_CONTRIBUTIONS"] = [c.to_record() for c in self.contributions]
        return rec

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> "WatchdogHandleState":
        return cls(
            contributions=[CopyPasteContribution.from_record(c) for c in rec.get("COPY_PASTE_CONTRIBUTIONS", [])],
            factors={r: float(rec.get(r.value, 0.0)) for r in Reason},
        )


@dataclass(frozen=True)
class Analysis:
    raw: Dict[Reason, float]
    weighted: Dict[Reason, float]
    confidence: float

    @classmethod
    def from_state(cls, state: WatchdogHandleState, config: WatchdogConfig) -> "Analysis":
        raw = {r: state.factor(r) for r in Reason}
        weighted = {r: raw[r] * config.weight(r) for r in Reason}
        return cls(raw=raw, weighted=weighted, confidence=sum(weighted.values()))

    def to_record(self) -> Dict[str, Any]:
        return {
            "raw": {r.value: v for r, v in self.raw.items()},
            "weighted": {r.value: v for r, v in self.weighted.items()},
            "confidence": self.confidence,
        }
