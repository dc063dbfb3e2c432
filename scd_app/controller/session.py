from __future__ import annotations
import math
import time
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union
import structlog

from scd_core.hooks.events import BaseEvent, CopyEvent, EventType, VisibilityEvent
from scd_core.text.tokenizer import tokenizer_cache
from scd_app.analytics.config import WatchdogConfig, WatchdogFactors
from scd_app.analytics.paste_scorer import PasteScorer
from scd_app.controller.event_bus import EventBus, Subscription
from scd_app.controller.event_log import EventLog
from scd_app.controller.field_handle import FieldHandle
from scd_app.errors import SelectorCardinalityError
from scd_app.logging_config import bind_session_context
from scd_app.policy.field_kind import ElementRef, FieldKindPolicy

log = structlog.get_logger()

# Selector -> matching elements; supplied by the page glue
ElementResolver = Callable[[str], Sequence[ElementRef]]


def _no_resolver(selector: str) -> Sequence[ElementRef]:
    return []


class Session:
    """
    One monitoring session: configuration, the shared event log and the
    registry of field handles. Several sessions can coexist.
    """
    def __init__(
        self,
        resolver: Optional[ElementResolver] = None,
        clock: Callable[[], float] = time.time,
        policy: Optional[FieldKindPolicy] = None,
    ):
        self.resolver = resolver or _no_resolver
        self.clock = clock
        self.policy = policy or FieldKindPolicy()

        self.config = WatchdogConfig()
        self.factors = WatchdogFactors()
        self.scorer = PasteScorer(self.config)
        self.user_id: Optional[str] = None
        self.is_monitoring = False

        self.bus = EventBus()
        self.event_log = EventLog(copy_size_threshold=self.config.copy_size_threshold)
        self.handles: List[FieldHandle] = []
        self._subs: List[Subscription] = []

    # ---- registration ----

    def register_field(self, target: Union[str, ElementRef]) -> FieldHandle:
        if isinstance(target, str):
            found = list(self.resolver(target))
            if len(found) != 1:
                raise SelectorCardinalityError(target, len(found))
            target = found[0]
        return self._add_handle(target)

    def register_fields(self, targets: Union[str, Sequence[ElementRef]]) -> List[FieldHandle]:
        elements = list(self.resolver(targets)) if isinstance(targets, str) else list(targets)
        if not elements:
            raise SelectorCardinalityError(targets, 0, expected="at least one")
        return [self._add_handle(el) for el in elements]

    def _add_handle(self, element: ElementRef) -> FieldHandle:
        verdict = self.policy.decide(element)
        handle = FieldHandle(element, self, verdict)
        self.handles.append(handle)
        log.debug("field.register", field_id=handle.field_id, kind=verdict.kind and verdict.kind.value, reason=verdict.reason)
        return handle

    def _forget(self, handle: FieldHandle) -> None:
        self.handles = [h for h in self.handles if h is not handle]

    # ---- lifecycle ----

    def initialize(
        self,
        user_id: str,
        config: Optional[Mapping[str, Any]] = None,
        factors: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Set user, config and factors (merged over defaults); starts monitoring if idle."""
        self.config = WatchdogConfig().merged(config)
        self.factors = WatchdogFactors().merged(factors)
        self.scorer = PasteScorer(self.config)
        self.user_id = user_id
        bind_session_context(user_id)
        # a running session keeps its history but picks up the new copy filter
        self.event_log.set_copy_size_threshold(self.config.copy_size_threshold)

        total = self.config.weights_sum()
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            log.warning("config.weights.sum", total=round(total, 6))

        if not self.is_monitoring:
            self.begin_monitoring()

    def begin_monitoring(self) -> None:
        self.is_monitoring = True
        self.event_log.reset(self.clock(), copy_size_threshold=self.config.copy_size_threshold)
        self._detach()
        self._subs = [
            self.bus.subscribe(EventType.COPY, self.on_copy),
            self.bus.subscribe(EventType.VISIBILITY, self.on_visibility_change),
        ]
        for handle in self.handles:
            if handle.is_initialized:
                handle.restart()
        log.info("session.start", user_id=self.user_id, fields=len(self.handles))

    def stop(self) -> None:
        was_monitoring = self.is_monitoring
        self.is_monitoring = False
        for handle in self.handles:
            handle.stop()
        self._detach()
        if was_monitoring:
            swept = tokenizer_cache().sweep()
            log.info("session.stop", user_id=self.user_id, tokenizer_cache_swept=swept)

    async def change_user(self, user_id: str) -> None:
        """Stop, reload every initialized field's state for the new user, resume."""
        self.user_id = user_id
        bind_session_context(user_id)
        self.stop()
        for handle in self.handles:
            if handle.is_initialized:
                await handle.load_state()
        self.begin_monitoring()
        log.info("session.change_user", user_id=user_id)

    def _detach(self) -> None:
        for sub in self._subs:
            sub.unsubscribe()
        self._subs = []

    # ---- global event ingestion ----

    def on_copy(self, ev: CopyEvent) -> None:
        if not self.is_monitoring:
            return
        self.event_log.record_copy(ev.text, ev.t)

    def on_visibility_change(self, ev: VisibilityEvent) -> None:
        if not self.is_monitoring:
            return
        if ev.hidden:
            self.event_log.focus_lost(ev.t)
        else:
            self.event_log.focus_gained(ev.t)

    def dispatch(self, ev: BaseEvent) -> int:
        """Entry point for the page glue: route an event to whoever is attached."""
        return self.bus.publish(ev)
