# scd_core/clipboard/copy_history.py
from __future__ import annotations
import os
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Tuple
import structlog

from scd_core.hooks.events import text_digest
from scd_core.text.tokenizer import tokenize

log = structlog.get_logger()

HISTORY_CAPACITY = 10


@dataclass(frozen=True)
class CopiedInfo:
    timestamp: float
    content: str
    tokens: Tuple[str, ...]
    size: int
    digest: str = ""


@dataclass
class CopyHistory:
    """
    Last copied text plus a bounded FIFO of recent copies.
    - Copies shorter than min_size are ignored.
    - Only lengths and session-salted digests are logged, never content.
    """
    min_size: int = 30
    capacity: int = HISTORY_CAPACITY
    session_salt: bytes = field(default_factory=lambda: os.urandom(16))

    def __post_init__(self):
        self.last: Optional[CopiedInfo] = None
        self._ring: Deque[CopiedInfo] = deque(maxlen=self.capacity)

    def record(self, content: str, t: float) -> Optional[CopiedInfo]:
        size = len(content)
        if size < self.min_size:
            log.debug("copy.ignored", size=size, min_size=self.min_size)
            return None
        info = CopiedInfo(
            timestamp=t,
            content=content,
            tokens=tuple(tokenize(content)),
            size=size,
            digest=text_digest(content, self.session_salt),
        )
        self.last = info
        self._ring.append(info)
        log.debug("copy.recorded", size=size, digest=info.digest, history=len(self._ring))
        return info

    def recent(self) -> List[CopiedInfo]:
        """Oldest first; includes the last copy as the final element."""
        return list(self._ring)

    def reset(self) -> None:
        self.last = None
        self._ring.clear()
        self.session_salt = os.urandom(16)
