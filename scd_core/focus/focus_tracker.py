from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple
import structlog

log = structlog.get_logger()


@dataclass(frozen=True)
class TabFocusInterval:
    """A span during which the monitored page was the active tab (times in seconds)."""
    focused_in: float
    gap_ms: float = 0.0
    is_focused: bool = True
    focused_out: Optional[float] = None
    duration_ms: Optional[float] = None

    def close(self, t: float) -> "TabFocusInterval":
        return replace(
            self,
            focused_out=t,
            duration_ms=(t - self.focused_in) * 1000.0,
            is_focused=False,
        )


class FocusTracker:
    """
    Gapless sequence of focus intervals.
    One interval is open at a time; losing visibility closes it into the
    history, regaining visibility opens the next one.
    """
    def __init__(self):
        self.active: Optional[TabFocusInterval] = None
        self._history: List[TabFocusInterval] = []

    def start(self, t: float) -> None:
        self._history = []
        self.active = TabFocusInterval(focused_in=t)
        log.debug("focus.start", t=t)

    def focus_lost(self, t: float) -> Optional[TabFocusInterval]:
        if self.active is None:
            # already hidden; duplicate notification
            return None
        closed = self.active.close(t)
        self._history.append(closed)
        self.active = None
        log.debug("focus.out", dwell_ms=closed.duration_ms)
        return closed

    def focus_gained(self, t: float) -> Optional[TabFocusInterval]:
        if self.active is not None:
            return None
        prev = self._history[-1] if self._history else None
        gap_ms = (t - prev.focused_out) * 1000.0 if prev and prev.focused_out is not None else 0.0
        self.active = TabFocusInterval(focused_in=t, gap_ms=gap_ms)
        log.debug("focus.in", gap_ms=gap_ms)
        return self.active

    def history(self) -> Tuple[TabFocusInterval, ...]:
        """Closed intervals only, oldest first."""
        return tuple(self._history)
