"""Key-value storage backends for persisted variables and groups.

Every backend stores opaque strings under string keys. The variable and
group layers JSON-encode (or newline-join) their data before writing, so a
backend never needs to understand the values it holds.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Protocol defining the interface for all storage backends.

    Methods:
        get_item: Read the value stored under a key.
        set_item: Write a value under a key, replacing any previous value.
        remove_item: Delete a key, doing nothing if it is absent.
    """

    def get_item(self, key: str) -> str | None:
        """Read the value stored under a key.

        Args:
            key: Storage key.

        Returns:
            Stored string, None if the key is absent.
        """
        ...

    def set_item(self, key: str, value: str) -> None:
        """Write a value under a key.

        Args:
            key: Storage key.
            value: String to store.
        """
        ...

    def remove_item(self, key: str) -> None:
        """Delete a key.

        Args:
            key: Storage key.
        """
        ...


class MemoryStorage:
    """Dictionary backed storage for tests and short-lived bots."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class SQLiteStorage:
    """SQLite-based persistent storage.

    Keeps every key in a single ``storage`` table. Each operation opens its
    own connection, so the object can be shared freely.

    Attributes:
        db_path: Path to SQLite database file.
    """

    def __init__(self, db_path: str | Path):
        """Initialize storage and create the table if needed.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = str(db_path)

        # Create data directory if it doesn't exist
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_database()
        logger.info(f"SQLite storage initialized with database: {self.db_path}")

    def _init_database(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

    def get_item(self, key: str) -> str | None:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM storage WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO storage (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()

    def remove_item(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM storage WHERE key = ?", (key,))
            conn.commit()

    def keys(self) -> list[str]:
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute("SELECT key FROM storage ORDER BY key").fetchall()
        return [row[0] for row in rows]
