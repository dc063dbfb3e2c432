from __future__ import annotations
from typing import Callable

from scd_core.storage.state_store import StateStore
from scd_app.analytics.state import WatchdogHandleState
from scd_app.controller.field_handle import StateLoader


def state_key(user_id: str, field_id: str) -> str:
    return f"scd:{user_id}:{field_id}"


def save_state(store: StateStore, key: str, state: WatchdogHandleState) -> None:
    store.set_item(key, state.to_record())


def load_state(store: StateStore, key: str) -> WatchdogHandleState:
    rec = store.get_item(key)
    if rec is None:
        return WatchdogHandleState()
    return WatchdogHandleState.from_record(rec)


def make_state_loader(store: StateStore, key: str) -> StateLoader:
    """Loader for FieldHandle.initialize; a missing key yields an empty state."""
    async def _load() -> WatchdogHandleState:
        return load_state(store, key)
    return _load


def make_user_state_loader(store: StateStore, user_id: Callable[[], str], field_id: str) -> StateLoader:
    """Resolves the user at call time, so a reload after change_user reads the new user's key."""
    async def _load() -> WatchdogHandleState:
        return load_state(store, state_key(user_id(), field_id))
    return _load
