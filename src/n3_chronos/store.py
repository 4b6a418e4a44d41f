"""Persistent key/value store for JSON documents."""
import json
import logging
import sqlite3
from datetime import datetime

from n3_chronos.db import DEFAULT_DB_PATH, get_connection, init_db

logger = logging.getLogger(__name__)

ITEM_PROGRESS_KEY = "n3-chronos-item-progress"
USER_PROGRESS_KEY = "n3-chronos-user-progress"
USER_STATS_KEY = "n3-chronos-user-stats"


class SqliteStore:
    """JSON documents stored one per key in the kv_store table.

    Reads never raise: a missing row, a corrupt document or a database error
    all fall back to the caller's default. Writes are best-effort; failures
    are logged and reported through the return value only.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        init_db(db_path)

    def load(self, key: str, default):
        try:
            conn = get_connection(self.db_path)
            try:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error:
            logger.warning("Failed to load %s, using default", key, exc_info=True)
            return default
        if row is None or row["value"] is None:
            return default
        try:
            return json.loads(row["value"])
        except ValueError:
            logger.warning("Corrupt document under %s, using default", key)
            return default

    def save(self, key: str, value) -> bool:
        try:
            payload = json.dumps(value)
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at""",
                    (key, payload, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError, TypeError, ValueError):
            logger.error("Failed to save %s", key, exc_info=True)
            return False
        return True


class MemoryStore:
    """In-memory store with the same contract as SqliteStore."""

    def __init__(self, documents: dict | None = None):
        self.documents = {}
        for key, value in (documents or {}).items():
            self.documents[key] = json.dumps(value)

    def load(self, key: str, default):
        raw = self.documents.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Corrupt document under %s, using default", key)
            return default

    def save(self, key: str, value) -> bool:
        try:
            self.documents[key] = json.dumps(value)
        except (TypeError, ValueError):
            logger.error("Failed to save %s", key, exc_info=True)
            return False
        return True
