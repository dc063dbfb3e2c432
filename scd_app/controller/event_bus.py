# scd_app/controller/event_bus.py
from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
import structlog

from scd_core.hooks.events import BaseEvent, EventType

log = structlog.get_logger()

Handler = Callable[[BaseEvent], None]


@dataclass(eq=False)
class Subscription:
    """Returned by EventBus.subscribe; unsubscribe() detaches exactly this listener."""
    bus: "EventBus"
    etype: EventType
    handler: Handler
    field_id: Optional[str] = None
    active: bool = field(default=True)

    def unsubscribe(self) -> None:
        if self.active:
            self.bus._remove(self)
            self.active = False

    def matches(self, ev: BaseEvent) -> bool:
        if self.field_id is None:
            return True
        return getattr(ev, "field_id", None) == self.field_id


class EventBus:
    """Synchronous in-process fan-out of events to subscribers, keyed by event type."""
    def __init__(self):
        self._lock = threading.RLock()
        self._subs: Dict[EventType, List[Subscription]] = {}

    def subscribe(self, etype: EventType, handler: Handler, field_id: Optional[str] = None) -> Subscription:
        sub = Subscription(bus=self, etype=etype, handler=handler, field_id=field_id)
        with self._lock:
            self._subs.setdefault(etype, []).append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subs.get(sub.etype, [])
            if sub in subs:
                subs.remove(sub)

    def subscriber_count(self, etype: EventType) -> int:
        with self._lock:
            return len(self._subs.get(etype, []))

    def publish(self, ev: BaseEvent) -> int:
        """Deliver to every matching subscriber; returns how many handled it."""
        with self._lock:
            targets = [s for s in self._subs.get(ev.etype, []) if s.matches(ev)]
        delivered = 0
        for sub in targets:
            try:
                sub.handler(ev)
                delivered += 1
            except Exception as e:
                log.warning("bus.handler.error", etype=ev.etype.name, err=str(e))
        return delivered
