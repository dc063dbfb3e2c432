from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional
import time
from datetime import datetime, timezone

from blake3 import blake3

# --- timing helpers ---
def wall_ts() -> float:
    # Wall-clock seconds; contributions are persisted and compared across reloads
    return time.time()

def utc_iso(ts: Optional[float] = None) -> str:
    dt = datetime.now(timezone.utc) if ts is None else datetime.fromtimestamp(ts, timezone.utc)
    return dt.isoformat(timespec="milliseconds")

def text_digest(text: str, salt: bytes = b"") -> str:
    """Salted BLAKE3 digest so that content can be correlated in logs without plaintext."""
    h = blake3()
    h.update(salt)
    h.update(text.encode("utf-8", errors="ignore"))
    return h.hexdigest()[:16]

# --- core enums ---
class EventType(Enum):
    """Top-level classifier for event routing."""
    COPY = auto()
    PASTE = auto()
    INPUT = auto()
    VISIBILITY = auto()

# --- base event ---
@dataclass(frozen=True)
class BaseEvent:
    """Common shape for all events."""
    etype: EventType = field(init=False)         # auto-set by subclasses
    t: float = field(default_factory=wall_ts)

    def to_record(self) -> Dict[str, Any]:
        return {
            "etype": self.etype.name,
            "t_utc": utc_iso(self.t),
            "t": self.t,
        }

# --- session-level events ---
@dataclass(frozen=True)
class CopyEvent(BaseEvent):
    """Text copied somewhere on the monitored page."""
    text: str = ""

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.COPY)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base.update({"length": len(self.text), "digest": text_digest(self.text)})
        return base


@dataclass(frozen=True)
class VisibilityEvent(BaseEvent):
    """Page visibility transition: hidden=True when the tab loses focus."""
    hidden: bool = False

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.VISIBILITY)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base["hidden"] = self.hidden
        return base

# --- field-level events ---
@dataclass(frozen=True)
class PasteEvent(BaseEvent):
    """Plain-text paste into a monitored field."""
    field_id: str = ""
    text: str = ""

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.PASTE)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base.update({
            "field_id": self.field_id,
            "length": len(self.text),
            "digest": text_digest(self.text),
        })
        return base


@dataclass(frozen=True)
class InputEvent(BaseEvent):
    """Field content changed; carries no payload, only triggers a recompute."""
    field_id: str = ""

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.INPUT)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base["field_id"] = self.field_id
        return base
