"""
State Store

Get/set persistence for the full PersonalizationState blob, keyed by user.
The core never reaches into storage on its own; callers load a state, run
the pure transitions and save the result.
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Protocol

from attune.config import get_config
from attune.contracts.state import PersonalizationState

logger = logging.getLogger(__name__)

# Bump when PersonalizationState changes incompatibly
SCHEMA_VERSION = 1


class StateStore(Protocol):
    """Persistence provider for PersonalizationState."""

    def get(self, user_id: str) -> PersonalizationState | None: ...

    def set(self, user_id: str, state: PersonalizationState) -> None: ...

    def delete(self, user_id: str) -> None: ...


class InMemoryStateStore:
    """Dictionary-backed store for tests and single-process use."""

    def __init__(self) -> None:
        self._states: dict[str, PersonalizationState] = {}

    def get(self, user_id: str) -> PersonalizationState | None:
        return self._states.get(user_id)

    def set(self, user_id: str, state: PersonalizationState) -> None:
        self._states[user_id] = state

    def delete(self, user_id: str) -> None:
        self._states.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._states)


class SqliteStateStore:
    """One row per user holding the state as JSON."""

    def __init__(self, data_dir: Path | None = None):
        """Initialize the store.

        Args:
            data_dir: Directory for the database file (defaults to DATA_DIR)
        """
        self.data_dir = Path(data_dir) if data_dir is not None else Path(get_config().DATA_DIR)
        self.db_path = self.data_dir / "personalization.db"
        self._init_db()

    def _init_db(self) -> None:
        """Initialize SQLite schema."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        try:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS personalization_state (
                    user_id TEXT PRIMARY KEY,
                    state_json TEXT NOT NULL,
                    schema_version INTEGER NOT NULL,
                    updated_at TEXT NOT NULL
                );
            """
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, user_id: str) -> PersonalizationState | None:
        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT state_json FROM personalization_state WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None
        return PersonalizationState.model_validate_json(row[0])

    def set(self, user_id: str, state: PersonalizationState) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO personalization_state
                (user_id, state_json, schema_version, updated_at)
                VALUES (?, ?, ?, ?)
            """,
                (
                    user_id,
                    state.model_dump_json(),
                    SCHEMA_VERSION,
                    datetime.now().isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug(f"Saved personalization state for {user_id}")

    def delete(self, user_id: str) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("DELETE FROM personalization_state WHERE user_id = ?", (user_id,))
            conn.commit()
        finally:
            conn.close()

    def list_users(self) -> list[str]:
        conn = sqlite3.connect(self.db_path)
        try:
            rows = conn.execute(
                "SELECT user_id FROM personalization_state ORDER BY user_id"
            ).fetchall()
        finally:
            conn.close()
        return [row[0] for row in rows]
