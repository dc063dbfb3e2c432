from __future__ import annotations
import threading
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional
import structlog

from scd_core.hooks.events import EventType, InputEvent, PasteEvent
from scd_app.analytics import metrics
from scd_app.analytics.state import Analysis, WatchdogHandleState
from scd_app.controller.event_bus import Subscription
from scd_app.errors import HandleNotInitializedError, InvalidFieldTypeError, UninitializedSessionError
from scd_app.policy.field_kind import ElementRef, FieldVerdict

if TYPE_CHECKING:
    from scd_app.controller.session import Session

log = structlog.get_logger()

StateLoader = Callable[[], Awaitable[WatchdogHandleState]]


class HandleStatus(Enum):
    REGISTERED = "registered"
    LOADING = "loading"
    ACTIVE = "active"
    STOPPED = "stopped"
    DESTROYED = "destroyed"


class FieldHandle:
    """
    Monitored text field. Builds a contribution per qualifying paste and
    recomputes the four factors from scratch on every paste or input.
    """
    def __init__(self, element: ElementRef, session: "Session", verdict: FieldVerdict):
        self.element = element
        self.session = session
        self.verdict = verdict
        self.status = HandleStatus.REGISTERED
        self.state = WatchdogHandleState()
        self.state_loader: Optional[StateLoader] = None
        self._lock = threading.RLock()
        self._subs: List[Subscription] = []
        self.log = log.bind(field_id=self.field_id)

    @property
    def field_id(self) -> str:
        return self.element.element_id

    @property
    def kind(self):
        return self.verdict.kind

    @property
    def is_initialized(self) -> bool:
        return self.status in (HandleStatus.ACTIVE, HandleStatus.STOPPED)

    @property
    def is_active(self) -> bool:
        return self.status == HandleStatus.ACTIVE

    # ---- lifecycle ----

    def set_state_loader(self, loader: Optional[StateLoader]) -> None:
        self.state_loader = loader

    async def initialize(self, state_loader: Optional[StateLoader] = None) -> None:
        if not self.session.is_monitoring:
            raise UninitializedSessionError()
        if not self.verdict.allowed:
            raise InvalidFieldTypeError(self.verdict.reason)
        if state_loader is not None:
            self.state_loader = state_loader

        self.status = HandleStatus.LOADING
        try:
            await self.load_state()
        except Exception:
            self.status = HandleStatus.REGISTERED
            raise
        self.status = HandleStatus.STOPPED
        self.restart()
        self.log.info("field.initialize", kind=self.kind.value, contributions=len(self.state.contributions))

    async def load_state(self) -> None:
        if self.state_loader is None:
            return
        loaded = await self.state_loader()
        with self._lock:
            self.state = loaded if loaded is not None else WatchdogHandleState()

    def restart(self) -> None:
        if not self.is_initialized:
            raise HandleNotInitializedError(self.field_id)
        self._detach()
        bus = self.session.bus
        self._subs = [
            bus.subscribe(EventType.PASTE, self.on_paste, field_id=self.field_id),
            bus.subscribe(EventType.INPUT, self.on_input, field_id=self.field_id),
        ]
        self.status = HandleStatus.ACTIVE
        self.log.debug("field.restart")

    def stop(self) -> None:
        self._detach()
        if self.status == HandleStatus.ACTIVE:
            self.status = HandleStatus.STOPPED
            self.log.debug("field.stop")

    def destroy(self) -> None:
        self.stop()
        self.session._forget(self)
        self.status = HandleStatus.DESTROYED
        self.log.info("field.destroy")

    def _detach(self) -> None:
        for sub in self._subs:
            sub.unsubscribe()
        self._subs = []

    # ---- event ingestion ----

    def on_paste(self, ev: PasteEvent) -> None:
        if not self.is_active:
            self.log.debug("field.paste.ignored", status=self.status.value)
            return
        snap = self.session.event_log.snapshot()
        contribution = self.session.scorer.score(ev.text, snap.last_copy, snap.active_focus, ev.t)
        if contribution is None:
            return
        with self._lock:
            self.state.contributions.append(contribution)
            self._recompute(ev.t, snap.intervals())

    def on_input(self, ev: InputEvent) -> None:
        if not self.is_active:
            self.log.debug("field.input.ignored", status=self.status.value)
            return
        snap = self.session.event_log.snapshot()
        with self._lock:
            self._recompute(ev.t, snap.intervals())

    def _recompute(self, now: float, intervals) -> None:
        self.state = metrics.recompute(self.state, self.read_content(), intervals, self.session.config, now)
        self.log.debug(
            "field.recompute",
            contributions=len(self.state.contributions),
            confidence=round(self.get_last_analysis().confidence, 4),
        )

    # ---- accessors ----

    def read_content(self) -> str:
        return self.element.value or ""

    def get_state(self) -> WatchdogHandleState:
        return self.state

    def get_last_analysis(self) -> Analysis:
        return Analysis.from_state(self.state, self.session.config)
