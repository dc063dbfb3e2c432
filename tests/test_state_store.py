# tests/test_state_store.py
# How to run:
#   pytest -q
#
# What this covers:
#   - Plain and sealed JSON round-trips through SQLite
#   - Sealed values are bound to their key and unreadable without the sealer
#   - Per-user key derivation
#   - Persistence loaders used by FieldHandle.initialize / Session.change_user

import asyncio
import sqlite3

import pytest
from cryptography.exceptions import InvalidTag

from scd_core.crypto.aead import StateSealer, derive_user_key
from scd_core.storage.state_store import StateStore
from scd_app.analytics.config import Reason
from scd_app.analytics.state import CopyPasteContribution, WatchdogHandleState
from scd_app.controller.persistence import (
    load_state, make_state_loader, make_user_state_loader, save_state, state_key,
)

MASTER = b"m" * 32


def sample_state(score: float = 0.42) -> WatchdogHandleState:
    c = CopyPasteContribution(
        timestamp=12.5, content="pasted text", similarity=0.1, containment=0.8,
        copy_factor=0.9, tab_switch_factor=0.7, paste_score=0.504, ai_score=0.0, score=score,
    )
    return WatchdogHandleState(contributions=[c], factors={r: score for r in Reason})


def test_plain_round_trip(tmp_path):
    store = StateStore(str(tmp_path / "s.sqlite3"))
    store.set_item("k", {"a": 1, "b": [1, 2]})
    assert store.get_item("k") == {"a": 1, "b": [1, 2]}
    assert store.get_item("missing") is None
    store.delete_item("k")
    assert store.get_item("k") is None

def test_sealed_round_trip_and_no_plaintext_on_disk(tmp_path):
    db = str(tmp_path / "s.sqlite3")
    store = StateStore(db, sealer=StateSealer(derive_user_key(MASTER, "alice")))
    store.set_item("k", {"content": "secret answer"})
    assert store.get_item("k") == {"content": "secret answer"}

    conn = sqlite3.connect(db)
    raw, sealed = conn.execute("SELECT value, sealed FROM kv WHERE key='k'").fetchone()
    conn.close()
    assert sealed == 1
    assert b"secret answer" not in bytes(raw)

def test_sealed_value_needs_sealer_and_right_key(tmp_path):
    db = str(tmp_path / "s.sqlite3")
    StateStore(db, sealer=StateSealer(derive_user_key(MASTER, "alice"))).set_item("k", {"x": 1})
    with pytest.raises(RuntimeError):
        StateStore(db).get_item("k")
    with pytest.raises(InvalidTag):
        StateStore(db, sealer=StateSealer(derive_user_key(MASTER, "bob"))).get_item("k")

def test_sealer_rejects_wrong_key_length():
    with pytest.raises(ValueError):
        StateSealer(b"short")

def test_state_persistence_round_trip(tmp_path):
    store = StateStore(str(tmp_path / "s.sqlite3"))
    key = state_key("alice", "essay")
    assert key == "scd:alice:essay"
    assert load_state(store, key).contributions == []

    save_state(store, key, sample_state())
    loaded = asyncio.run(make_state_loader(store, key)())
    assert loaded.contributions == sample_state().contributions
    assert loaded.factor(Reason.UNMODIFIED_PASTES) == pytest.approx(0.42)

def test_user_loader_follows_current_user(tmp_path):
    store = StateStore(str(tmp_path / "s.sqlite3"))
    save_state(store, state_key("alice", "f"), sample_state(0.1))
    save_state(store, state_key("bob", "f"), sample_state(0.9))
    current = {"user": "alice"}
    loader = make_user_state_loader(store, lambda: current["user"], "f")
    assert asyncio.run(loader()).factor(Reason.COPY_RELATES_TO_PASTE) == pytest.approx(0.1)
    current["user"] = "bob"
    assert asyncio.run(loader()).factor(Reason.COPY_RELATES_TO_PASTE) == pytest.approx(0.9)
