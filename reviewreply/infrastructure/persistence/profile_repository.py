"""
SQLite Profile Repository - Connected Business Persistence
==========================================================

Remembers the connected BusinessProfile (and the OAuth client id typed in
the connect form) across restarts, in a small key/value settings table.
"""

import json
import sqlite3
import logging
from pathlib import Path
from typing import Optional, Union
from contextlib import contextmanager

from ...domain import BusinessProfile
from ..config import get_settings

logger = logging.getLogger(__name__)

PROFILE_KEY = "business_profile"
CLIENT_ID_KEY = "google_client_id"


class ProfileRepository:
    """
    SQLite storage for the connected business profile.

    Usage:
        repo = ProfileRepository()
        repo.init()

        repo.save_profile(profile)
        profile = repo.load_profile()   # None if nothing saved
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        self.db_path = str(db_path or get_settings().profile_db)

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            logger.info(f"Database initialized: {self.db_path}")

    # ── Key/value ──────────────────────────────────────────────────

    def _get(self, key: str) -> Optional[str]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

    def _set(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """INSERT INTO settings (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                  updated_at = CURRENT_TIMESTAMP""",
                (key, value)
            )

    def _delete(self, key: str) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM settings WHERE key = ?", (key,))

    # ── Profile ────────────────────────────────────────────────────

    def save_profile(self, profile: BusinessProfile) -> None:
        self._set(PROFILE_KEY, json.dumps(profile.to_dict()))
        logger.info(f"Saved business profile: {profile.name}")

    def load_profile(self) -> Optional[BusinessProfile]:
        """Return the saved profile, or None (also when the row is corrupt)."""
        raw = self._get(PROFILE_KEY)
        if not raw:
            return None
        try:
            return BusinessProfile.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to parse saved profile: {e}")
            return None

    def delete_profile(self) -> None:
        self._delete(PROFILE_KEY)
        logger.info("Saved business profile removed")

    # ── OAuth client id ────────────────────────────────────────────

    def save_client_id(self, client_id: str) -> None:
        self._set(CLIENT_ID_KEY, client_id.strip())

    def load_client_id(self) -> Optional[str]:
        return self._get(CLIENT_ID_KEY)
