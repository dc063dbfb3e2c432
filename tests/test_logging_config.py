# tests/test_logging_config.py
# How to run:
#   pytest -q
#
# What this covers:
#   - Plaintext-bearing keys are replaced by their length before rendering
#   - Session context binding and clearing

import structlog

from scd_app.logging_config import bind_session_context, drop_plaintext


def test_plaintext_keys_become_lengths():
    out = drop_plaintext(None, "info", {"event": "paste.scored", "text": "secret answer", "digest": "abc"})
    assert out == {"event": "paste.scored", "text_len": 13, "digest": "abc"}

def test_events_without_plaintext_pass_through():
    ev = {"event": "focus.in", "gap_ms": 1500.0}
    assert drop_plaintext(None, "debug", dict(ev)) == ev

def test_bind_session_context_replaces_previous_user():
    bind_session_context("alice")
    bind_session_context("bob")
    assert structlog.contextvars.get_contextvars() == {"user_id": "bob"}
    bind_session_context(None)
    assert structlog.contextvars.get_contextvars() == {}
