from __future__ import annotations
import json
import os
import sqlite3
import threading
import time
from typing import Any, Dict, Optional
import structlog

from scd_core.crypto.aead import StateSealer

log = structlog.get_logger()

DB_FILE = os.path.join(os.path.abspath("."), "scd_state.sqlite3")


def utc_ts_ms() -> int:
    return int(time.time() * 1000)


class StateStore:
    """
    Key-value store of JSON documents in SQLite.
    With a sealer, values are AEAD-encrypted and bound to their key as AAD.
    """
    def __init__(self, db_path: str = DB_FILE, sealer: Optional[StateSealer] = None):
        self.db_path = db_path
        self.sealer = sealer
        self._lock = threading.RLock()
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_db(self):
        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv(
                  key TEXT PRIMARY KEY,
                  value BLOB NOT NULL,
                  sealed INTEGER NOT NULL DEFAULT 0,
                  updated_utc INTEGER NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def set_item(self, key: str, value: Dict[str, Any]) -> None:
        raw = json.dumps(value, separators=(",", ":")).encode("utf-8")
        sealed = 0
        if self.sealer is not None:
            raw = self.sealer.seal(raw, key.encode("utf-8"))
            sealed = 1
        with self._lock:
            conn = self._connect()
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO kv(key, value, sealed, updated_utc) VALUES (?,?,?,?)",
                    (key, raw, sealed, utc_ts_ms()),
                )
                conn.commit()
            finally:
                conn.close()
        log.debug("store.set", key=key, size=len(raw), sealed=bool(sealed))

    def get_item(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            conn = self._connect()
            try:
                row = conn.execute("SELECT value, sealed FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        if row is None:
            return None
        raw, sealed = row
        if sealed:
            if self.sealer is None:
                raise RuntimeError(f"value for {key!r} is sealed but no sealer was configured")
            raw = self.sealer.open(raw, key.encode("utf-8"))
        return json.loads(bytes(raw).decode("utf-8"))

    def delete_item(self, key: str) -> None:
        with self._lock:
            conn = self._connect()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()

    def clear(self) -> None:
        with self._lock:
            conn = self._connect()
            try:
                conn.execute("DELETE FROM kv")
                conn.commit()
            finally:
                conn.close()
