from __future__ import annotations
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from scd_core.clipboard.copy_history import CopiedInfo, CopyHistory
from scd_core.focus.focus_tracker import FocusTracker, TabFocusInterval


@dataclass(frozen=True)
class EventSnapshot:
    last_copy: Optional[CopiedInfo]
    active_focus: Optional[TabFocusInterval]
    focus_history: Tuple[TabFocusInterval, ...]

    def intervals(self) -> Tuple[TabFocusInterval, ...]:
        """Closed history followed by the open interval, if any."""
        if self.active_focus is None:
            return self.focus_history
        return self.focus_history + (self.active_focus,)


class EventLog:
    """Session-wide copy and tab-focus history, shared by every field handle."""
    def __init__(self, copy_size_threshold: int = 30):
        self._lock = threading.RLock()
        self.copies = CopyHistory(min_size=copy_size_threshold)
        self.focus = FocusTracker()

    def reset(self, t: float, copy_size_threshold: Optional[int] = None) -> None:
        with self._lock:
            if copy_size_threshold is not None:
                self.copies.min_size = copy_size_threshold
            self.copies.reset()
            self.focus.start(t)

    def set_copy_size_threshold(self, min_size: int) -> None:
        with self._lock:
            self.copies.min_size = min_size

    def record_copy(self, text: str, t: float) -> Optional[CopiedInfo]:
        with self._lock:
            return self.copies.record(text, t)

    def focus_lost(self, t: float) -> Optional[TabFocusInterval]:
        with self._lock:
            return self.focus.focus_lost(t)

    def focus_gained(self, t: float) -> Optional[TabFocusInterval]:
        with self._lock:
            return self.focus.focus_gained(t)

    def snapshot(self) -> EventSnapshot:
        # copy and focus state read under one lock so a paste sees a consistent view
        with self._lock:
            return EventSnapshot(
                last_copy=self.copies.last,
                active_focus=self.focus.active,
                focus_history=self.focus.history(),
            )
