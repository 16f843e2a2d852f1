"""SQLite-backed storage for the session credential."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional


class CredentialRepository:
    """Stores one JSON document per session key."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS session_credentials (
                    session_key TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def save(self, session_key: str, record: Dict[str, Any], *, updated_at: str) -> None:
        if not session_key:
            raise ValueError("A session key is required")
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO session_credentials (session_key, data, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(session_key) DO UPDATE SET
                    data = excluded.data,
                    updated_at = excluded.updated_at
                """,
                (session_key, json.dumps(record), updated_at),
            )

    def load(self, session_key: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM session_credentials WHERE session_key = ?",
                (session_key,),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])


__all__ = ["CredentialRepository"]
