"""
State manager for persisting booking flow drafts.
"""

import asyncio
import json
import sqlite3
import time
from typing import Any, Callable, Dict, Optional

from ...config import DatabaseConfig
from ...utils.logging import get_logger

logger = get_logger("love4detailing.memory")


class FlowStateManager:
    """Persist flow snapshots in SQLite with a sliding expiry."""

    def __init__(
        self,
        config: Optional[DatabaseConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or DatabaseConfig.from_settings()
        self.state_db = self.config.state_db_path
        self.expiry_seconds = self.config.session_expiry_seconds
        self._clock = clock
        self._lock = asyncio.Lock()

    async def _ensure_table(self) -> None:
        """Ensure the state table exists."""
        def _create_table():
            conn = sqlite3.connect(self.state_db)
            try:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS flow_state (
                        session_id TEXT PRIMARY KEY,
                        snapshot TEXT NOT NULL,
                        updated_at REAL NOT NULL
                    )
                    """
                )
                conn.commit()
            finally:
                conn.close()

        await asyncio.to_thread(_create_table)

    async def get_snapshot(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored snapshot, or None if missing or expired."""
        await self._ensure_table()

        async with self._lock:
            def _fetch():
                conn = sqlite3.connect(self.state_db)
                try:
                    cur = conn.execute(
                        "SELECT snapshot, updated_at FROM flow_state WHERE session_id = ?",
                        (session_id,),
                    )
                    return cur.fetchone()
                finally:
                    conn.close()

            row = await asyncio.to_thread(_fetch)

        if row is None:
            return None

        snapshot_json, updated_at = row
        if self._clock() - updated_at > self.expiry_seconds:
            logger.info(f"[{session_id}] stored draft expired")
            await self.clear_state(session_id)
            return None

        return json.loads(snapshot_json)

    async def save_snapshot(self, session_id: str, snapshot: Dict[str, Any]) -> None:
        """Persist a snapshot for session_id."""
        await self._ensure_table()
        snapshot_json = json.dumps(snapshot, ensure_ascii=False)
        updated_at = self._clock()

        async with self._lock:
            def _write() -> None:
                conn = sqlite3.connect(self.state_db)
                try:
                    conn.execute(
                        "INSERT OR REPLACE INTO flow_state (session_id, snapshot, updated_at) "
                        "VALUES (?, ?, ?)",
                        (session_id, snapshot_json, updated_at),
                    )
                    conn.commit()
                finally:
                    conn.close()

            await asyncio.to_thread(_write)

    async def clear_state(self, session_id: str) -> None:
        """Remove stored state for session_id."""
        await self._ensure_table()

        async with self._lock:
            def _delete() -> None:
                conn = sqlite3.connect(self.state_db)
                try:
                    conn.execute("DELETE FROM flow_state WHERE session_id = ?", (session_id,))
                    conn.commit()
                finally:
                    conn.close()

            await asyncio.to_thread(_delete)
