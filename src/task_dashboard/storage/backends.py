# src/task_dashboard/storage/backends.py

from __future__ import annotations

"""
Durable key-value media used behind KeyValueStore.

Backends are deliberately dumb: they store strings under string keys and raise
typed StorageError subclasses when the medium refuses. Translating those errors
into status values is the adapter's job (see kv_store.py), not theirs.
"""

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for backend failures."""


class StorageUnavailableError(StorageError):
    """The medium cannot be opened or read at all."""


class QuotaExceededError(StorageError):
    """The write would exceed the configured size quota (or the disk is full)."""


class StorageDeniedError(StorageError):
    """The medium is read-only or access is not permitted."""


def _payload_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class MemoryBackend:
    """
    Session-only medium.

    Used in tests and when durable storage is explicitly disabled
    (TASKDASH_STORAGE_BACKEND=memory). Supports an optional byte quota so
    quota handling can be exercised without touching disk.
    """

    def __init__(self, *, quota_bytes: int = 0) -> None:
        self._data: dict[str, str] = {}
        self._quota_bytes = max(0, int(quota_bytes))

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes:
            used = sum(_payload_size(k, v) for k, v in self._data.items() if k != key)
            if used + _payload_size(key, value) > self._quota_bytes:
                raise QuotaExceededError(
                    f"quota of {self._quota_bytes} bytes exceeded writing key={key!r}"
                )
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SqliteBackend:
    """
    SQLite key-value medium.

    One row per key in a `kv` table. The schema is created lazily on the first
    connection so a missing or unwritable file surfaces as a StorageError from
    the operation that hit it, not from the constructor.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path, *, quota_bytes: int = 0) -> None:
        self._db_path = Path(db_path)
        self._quota_bytes = max(0, int(quota_bytes))
        self._schema_ready = False

    @property
    def path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self._db_path), timeout=5.0)
        except PermissionError as e:
            raise StorageDeniedError(str(e)) from e
        except (OSError, sqlite3.Error) as e:
            raise StorageUnavailableError(str(e)) from e

        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        if not self._schema_ready:
            try:
                self._ensure_schema(conn)
            except sqlite3.Error as e:
                conn.close()
                raise self._translate(e) from e
            self._schema_ready = True
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    @staticmethod
    def _ensure_schema(conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at REAL NOT NULL DEFAULT 0
            )
            """
        )
        conn.commit()

    @staticmethod
    def _translate(exc: sqlite3.Error) -> StorageError:
        msg = str(exc).lower()
        if "readonly" in msg or "read-only" in msg or "permission" in msg:
            return StorageDeniedError(str(exc))
        if "full" in msg:
            return QuotaExceededError(str(exc))
        return StorageUnavailableError(str(exc))

    def _used_bytes(self, conn: sqlite3.Connection, *, excluding: str) -> int:
        cur = conn.execute(
            "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0) "
            "FROM kv WHERE key != ?",
            (excluding,),
        )
        (n,) = cur.fetchone()
        return int(n)

    # ---- public API ----

    def get_item(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
            return str(row["value"]) if row else None
        except sqlite3.Error as e:
            raise self._translate(e) from e
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            if self._quota_bytes:
                used = self._used_bytes(conn, excluding=key)
                if used + _payload_size(key, value) > self._quota_bytes:
                    raise QuotaExceededError(
                        f"quota of {self._quota_bytes} bytes exceeded writing key={key!r}"
                    )
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise self._translate(e) from e
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as e:
            raise self._translate(e) from e
        finally:
            conn.close()

    def keys(self) -> list[str]:
        conn = self._get_conn()
        try:
            return [str(r["key"]) for r in conn.execute("SELECT key FROM kv ORDER BY key")]
        except sqlite3.Error as e:
            raise self._translate(e) from e
        finally:
            conn.close()
