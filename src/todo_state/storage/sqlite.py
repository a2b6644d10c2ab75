"""SQLite-backed key/value storage with schema versioning."""

import sqlite3
import time
from pathlib import Path
from types import TracebackType
from typing import Any

from loguru import logger

from todo_state.errors import StorageError
from todo_state.storage import codec

SCHEMA_VERSION = 1

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the key/value and metadata tables and stamp SCHEMA_VERSION."""
    conn.executescript(_SCHEMA_SQL)
    conn.execute(
        "INSERT OR REPLACE INTO metadata (key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )
    conn.commit()


def read_schema_version(conn: sqlite3.Connection) -> int | None:
    """Return the version stamped in metadata.

    None means the file has never held a todo store, so there is no
    metadata table or no version row yet.
    """
    try:
        row = conn.execute("SELECT value FROM metadata WHERE key = 'schema_version'").fetchone()
    except sqlite3.OperationalError:
        return None
    if row is None:
        return None
    return int(row[0])


def migrate_schema(conn: sqlite3.Connection) -> None:
    """Bring a fresh or older database up to SCHEMA_VERSION.

    Version 1 is the first kv_store layout, so a database without a version
    is simply created. A newer version belongs to a later release and is
    refused rather than rewritten.
    """
    version = read_schema_version(conn)
    if version is None:
        logger.debug("Creating todo store schema v{}", SCHEMA_VERSION)
        create_schema(conn)
        return
    if version > SCHEMA_VERSION:
        msg = f"Database schema version {version} is newer than supported {SCHEMA_VERSION}"
        raise RuntimeError(msg)


class SqliteStorage:
    """Store encoded values in a single SQLite table.

    Accepts a file path or ``":memory:"``. The schema is created on open.
    Use as a context manager, or call ``close()`` when done.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        self.conn = sqlite3.connect(self.path)
        migrate_schema(self.conn)
        logger.debug("SQLite storage ready at {}", self.path)

    def get(self, key: str) -> Any | None:
        try:
            row = self.conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error:
            logger.opt(exception=True).warning("Cannot read key {!r} from {}", key, self.path)
            return None
        if row is None:
            return None
        try:
            return codec.decode(row[0])
        except ValueError:
            logger.warning("Corrupt data for key {!r} in {}, ignoring it", key, self.path)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            raw = codec.encode(value)
        except (TypeError, ValueError) as e:
            raise StorageError(key, f"cannot encode value: {e}") from e

        now_ms = int(time.time() * 1000)
        try:
            self.conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                (key, raw, now_ms),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self._rollback()
            raise StorageError(key, str(e)) from e
        logger.debug("Stored {!r} in {}", key, self.path)

    def remove(self, key: str) -> None:
        try:
            self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self.conn.commit()
        except sqlite3.Error as e:
            self._rollback()
            raise StorageError(key, str(e)) from e

    def clear(self) -> None:
        try:
            self.conn.execute("DELETE FROM kv_store")
            self.conn.commit()
        except sqlite3.Error as e:
            self._rollback()
            raise StorageError("*", str(e)) from e

    def keys(self) -> list[str]:
        try:
            rows = self.conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        except sqlite3.Error as e:
            raise StorageError("*", str(e)) from e
        return [row[0] for row in rows]

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "SqliteStorage":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _rollback(self) -> None:
        try:
            self.conn.rollback()
        except sqlite3.Error:
            logger.debug("Rollback failed on {}", self.path)
