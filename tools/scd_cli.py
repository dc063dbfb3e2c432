from __future__ import annotations
import argparse, asyncio, json, sys
from typing import Any, Dict, Iterable, List, Optional

import structlog

from scd_core.crypto.aead import StateSealer, derive_user_key
from scd_core.hooks.events import CopyEvent, InputEvent, PasteEvent, VisibilityEvent
from scd_core.storage.state_store import StateStore
from scd_core.text.ai_signatures import ai_signature_breakdown, ai_signature_score
from scd_core.text.tokenizer import tokenize
from scd_app.analytics.state import Analysis
from scd_app.analytics.config import WatchdogConfig
from scd_app.controller.persistence import load_state, make_state_loader, save_state, state_key
from scd_app.controller.session import Session
from scd_app.logging_config import configure_logging
from scd_app.policy.field_kind import ElementRef

log = structlog.get_logger()


class ReplayClock:
    """Clock pinned to the timestamp of the event being replayed."""
    def __init__(self, t: float = 0.0):
        self.t = t

    def __call__(self) -> float:
        return self.t


def read_events(lines: Iterable[str]) -> List[Dict[str, Any]]:
    events = []
    for n, line in enumerate(lines, 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            events.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise SystemExit(f"line {n}: invalid JSON ({e.msg})")
    return sorted(events, key=lambda e: float(e["t"]))


def _open_store(db: Optional[str], secret: Optional[str], user_id: str) -> Optional[StateStore]:
    if not db:
        return None
    sealer = StateSealer(derive_user_key(secret.encode(), user_id)) if secret else None
    return StateStore(db, sealer=sealer)


async def replay(
    events: List[Dict[str, Any]],
    user_id: str,
    config: Optional[Dict[str, Any]] = None,
    store: Optional[StateStore] = None,
) -> Dict[str, Analysis]:
    """Drive a session from recorded page events; returns the final analysis per field."""
    clock = ReplayClock(float(events[0]["t"]) if events else 0.0)
    session = Session(clock=clock)
    session.initialize(user_id, config=config)
    elements: Dict[str, ElementRef] = {}

    async def field(name: str) -> ElementRef:
        if name not in elements:
            el = ElementRef(tag="textarea", element_id=name)
            handle = session.register_field(el)
            if store is not None:
                handle.set_state_loader(make_state_loader(store, state_key(user_id, name)))
            await handle.initialize()
            elements[name] = el
        return elements[name]

    for ev in events:
        t = float(ev["t"])
        clock.t = t
        kind = ev["type"]
        if kind == "copy":
            session.dispatch(CopyEvent(t=t, text=ev["text"]))
        elif kind == "visibility":
            session.dispatch(VisibilityEvent(t=t, hidden=bool(ev["hidden"])))
        elif kind == "paste":
            await field(ev["field"])
            session.dispatch(PasteEvent(t=t, field_id=ev["field"], text=ev["text"]))
        elif kind == "input":
            el = await field(ev["field"])
            el.value = ev.get("value", el.value)
            session.dispatch(InputEvent(t=t, field_id=ev["field"]))
        else:
            log.warning("replay.unknown_event", type=kind, t=t)

    results = {h.field_id: h.get_last_analysis() for h in session.handles}
    if store is not None:
        for h in session.handles:
            save_state(store, state_key(user_id, h.field_id), h.get_state())
    session.stop()
    return results


def main(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(prog="scd", description="Copy-paste / AI-signature confidence scoring")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_replay = sub.add_parser("replay", help="Replay a JSONL event log and print per-field analysis")
    p_replay.add_argument("events", help="JSONL file, '-' for stdin")
    p_replay.add_argument("--user", default="anonymous")
    p_replay.add_argument("--config", help="JSON object merged over the default config")
    p_replay.add_argument("--db", help="SQLite state store to load from and save to")
    p_replay.add_argument("--secret", help="master secret for sealing stored state")

    p_tok = sub.add_parser("tokenize", help="Show normalized tokens")
    p_tok.add_argument("text")

    p_ai = sub.add_parser("ai-score", help="Show AI-signature markers for a text")
    p_ai.add_argument("text")
    p_ai.add_argument("--threshold", type=float, default=1.0)

    p_state = sub.add_parser("show-state", help="Print a stored field state and its analysis")
    p_state.add_argument("--db", required=True)
    p_state.add_argument("--user", required=True)
    p_state.add_argument("--field", required=True)
    p_state.add_argument("--secret")
    p_state.add_argument("--config", help="JSON object merged over the default config")

    args = ap.parse_args(argv)
    configure_logging(debug=args.verbose)

    if args.cmd == "tokenize":
        print(json.dumps(tokenize(args.text), ensure_ascii=False))
        return

    if args.cmd == "ai-score":
        rec = ai_signature_breakdown(args.text).to_record()
        rec["score"] = ai_signature_score(args.text, args.threshold)
        print(json.dumps(rec))
        return

    config = json.loads(args.config) if args.config else None

    if args.cmd == "replay":
        if args.events == "-":
            events = read_events(sys.stdin)
        else:
            with open(args.events, "r", encoding="utf-8") as f:
                events = read_events(f)
        store = _open_store(args.db, args.secret, args.user)
        results = asyncio.run(replay(events, args.user, config=config, store=store))
        print(json.dumps({fid: a.to_record() for fid, a in results.items()}, indent=2))
        return

    if args.cmd == "show-state":
        store = _open_store(args.db, args.secret, args.user)
        state = load_state(store, state_key(args.user, args.field))
        analysis = Analysis.from_state(state, WatchdogConfig().merged(config))
        print(json.dumps({"state": state.to_record(), "analysis": analysis.to_record()}, indent=2))
        return

if __name__ == "__main__":
    main()
