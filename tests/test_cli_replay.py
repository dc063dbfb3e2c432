# tests/test_cli_replay.py
# How to run:
#   pytest -q
#
# Replays a recorded event log through a fresh session and checks the
# per-field analysis and the saved state.

import asyncio
import json

import pytest

from scd_core.storage.state_store import StateStore
from scd_app.analytics.config import Reason
from scd_app.controller.persistence import load_state, state_key
from tools.scd_cli import read_events, replay

COPIED = "alpha beta gamma delta epsilon zeta eta theta iota kappa"
PASTED = COPIED + " lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor"

LOG = [
    "# recorded session",
    json.dumps({"t": 1000.0, "type": "visibility", "hidden": False}),
    json.dumps({"t": 1061.0, "type": "input", "field": "essay", "value": PASTED}),
    json.dumps({"t": 1010.0, "type": "copy", "text": COPIED}),
    json.dumps({"t": 1020.0, "type": "visibility", "hidden": True}),
    json.dumps({"t": 1050.0, "type": "visibility", "hidden": False}),
    json.dumps({"t": 1060.0, "type": "paste", "field": "essay", "text": PASTED}),
    "",
]


def test_read_events_sorts_and_skips_comments():
    events = read_events(LOG)
    assert len(events) == 6
    assert [e["t"] for e in events] == sorted(e["t"] for e in events)

def test_read_events_rejects_bad_json():
    with pytest.raises(SystemExit):
        read_events(["{not json"])

def test_replay_scores_and_saves(tmp_path):
    store = StateStore(str(tmp_path / "s.sqlite3"))
    results = asyncio.run(replay(read_events(LOG), "alice", store=store))

    a = results["essay"]
    assert a.raw[Reason.UNMODIFIED_PASTES] == pytest.approx(1.0)
    assert a.raw[Reason.COPY_RELATES_TO_PASTE] > 0.0
    assert a.raw[Reason.KEEPS_SWITCHING_TABS_AND_COPY_PASTING] == pytest.approx(a.raw[Reason.COPY_RELATES_TO_PASTE])
    assert 0.0 < a.confidence <= 1.0

    saved = load_state(store, state_key("alice", "essay"))
    assert len(saved.contributions) == 1
    assert saved.factor(Reason.UNMODIFIED_PASTES) == pytest.approx(1.0)

def test_replay_resumes_from_store(tmp_path):
    store = StateStore(str(tmp_path / "s.sqlite3"))
    asyncio.run(replay(read_events(LOG), "alice", store=store))
    again = [{"t": 2000.0, "type": "input", "field": "essay", "value": PASTED}]
    results = asyncio.run(replay(again, "alice", store=store))
    assert len(load_state(store, state_key("alice", "essay")).contributions) == 1
    assert results["essay"].raw[Reason.UNMODIFIED_PASTES] == pytest.approx(1.0)
