from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from scd_app.errors import ConfigError


class Reason(str, Enum):
    COPY_RELATES_TO_PASTE = "COPY_RELATES_TO_PASTE"
    CONTENT_CONTAINS_AI_SIGNATURES = "CONTENT_CONTAINS_AI_SIGNATURES"
    UNMODIFIED_PASTES = "UNMODIFIED_PASTES"
    KEEPS_SWITCHING_TABS_AND_COPY_PASTING = "KEEPS_SWITCHING_TABS_AND_COPY_PASTING"


def default_reason_weights() -> Dict[Reason, float]:
    return {
        Reason.KEEPS_SWITCHING_TABS_AND_COPY_PASTING: 0.3,
        Reason.COPY_RELATES_TO_PASTE: 0.3,
        Reason.CONTENT_CONTAINS_AI_SIGNATURES: 0.2,
        Reason.UNMODIFIED_PASTES: 0.2,
    }


def _merge(obj, overrides: Optional[Mapping[str, Any]]):
    if not overrides:
        return obj
    known = {f.name for f in fields(obj)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigError(f"unknown {type(obj).__name__} keys: {unknown}")
    return replace(obj, **dict(overrides))


@dataclass(frozen=True)
class WatchdogConfig:
    # weights per reason; keep them summing to 1.0 for a 0..1 confidence
    reason_weights: Dict[Reason, float] = field(default_factory=default_reason_weights)
    # floors for the linear time decay near the window edge
    min_copy_event_time_weight: float = 0.5
    min_tab_event_time_weight: float = 0.5

    # size filters (characters)
    paste_size_threshold: int = 100
    copy_size_threshold: int = 30

    # relevance windows (minutes)
    relevant_copy_event_minutes: float = 5.0
    relevant_tab_in_out_event_minutes: float = 5.0

    # paste pipeline
    discard_similarity: float = 0.9   # re-paste of the last copy above this is ignored
    includes_minimum_relevant: float = 0.7
    ai_signature_threshold: float = 1.0

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> "WatchdogConfig":
        """Shallow merge: a supplied key replaces the default wholesale."""
        cfg = _merge(self, overrides)
        if overrides and "reason_weights" in overrides:
            weights = {Reason(k): float(v) for k, v in overrides["reason_weights"].items()}
            cfg = replace(cfg, reason_weights=weights)
        return cfg

    def weight(self, reason: Reason) -> float:
        return self.reason_weights.get(reason, 0.0)

    def weights_sum(self) -> float:
        return sum(self.reason_weights.values())


@dataclass(frozen=True)
class WatchdogFactors:
    """Exogenous signals; stored with the session, not yet part of the score."""
    deadline: float = 0.0            # minutes remaining, <= 0 means no deadline
    caught_rate: float = 0.0         # prior detection rate, 0..1
    non_native_language: bool = False

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> "WatchdogFactors":
        return _merge(self, overrides)
