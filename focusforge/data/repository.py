"""
Repository — the single place where SQL lives.

Every other module talks to Repository, never to raw SQL. The store is a
plain key-value table: the persisted snapshot is one JSON text per key.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

logger = logging.getLogger(__name__)


class Repository:
    """Data-access layer wrapping a sqlite3 connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ── Snapshots ───────────────────────────────────────────────────────────

    def load_snapshot(self, key: str) -> Optional[str]:
        """Raw JSON stored under ``key``, or None if nothing was saved yet."""
        row = self.conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def save_snapshot(self, key: str, payload: str) -> None:
        self.conn.execute(
            """INSERT INTO kv_store (key, value, updated_at)
               VALUES (?, ?, datetime('now'))
               ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value,
                   updated_at = excluded.updated_at""",
            (key, payload),
        )
        self.conn.commit()

    def delete_snapshot(self, key: str) -> bool:
        cur = self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self.conn.commit()
        deleted = cur.rowcount > 0
        if deleted:
            logger.info("Snapshot %r deleted.", key)
        return deleted

    def list_keys(self) -> List[str]:
        rows = self.conn.execute(
            "SELECT key FROM kv_store ORDER BY key"
        ).fetchall()
        return [r["key"] for r in rows]
