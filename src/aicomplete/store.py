"""SQLite store for serialized settings blobs.

Blobs are opaque strings keyed by a settings identifier (``chatgpt`` by
default). Nothing here parses them; decoding belongs to the completer.
"""

from __future__ import annotations

import contextlib
import datetime
import logging
import pathlib
import sqlite3
from typing import TYPE_CHECKING

import aicomplete.config

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

logger = logging.getLogger("aicomplete.store")

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS settings_blobs (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def _init_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(_SCHEMA_SQL)


def db_file(root: pathlib.Path, configured: str = "") -> pathlib.Path:
    """Resolve the database file for the project at *root*.

    A configured relative path is taken from the project root.
    """
    if configured:
        path = pathlib.Path(configured).expanduser()
        return path if path.is_absolute() else root / path
    return root / ".aicomplete" / "aicomplete.db"


@contextlib.contextmanager
def open_store(
    path: pathlib.Path,
) -> Generator[sqlite3.Connection]:
    """Yield a connection to the store at *path*, creating it if needed.

    The connection is closed when the context manager exits.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        _init_schema(conn)
        yield conn
    finally:
        conn.close()


@contextlib.contextmanager
def open_project_store(
    cwd: pathlib.Path | None = None,
) -> Generator[tuple[sqlite3.Connection, aicomplete.config.StoreConfig]]:
    """Open the store configured for the project around *cwd*."""
    root = aicomplete.config.find_project_root(cwd)
    cfg = aicomplete.config.load(root)
    with open_store(db_file(root, cfg.db_path)) as conn:
        yield conn, cfg


def get_blob(conn: sqlite3.Connection, key: str) -> str | None:
    """Return the stored blob for *key*, or ``None`` if nothing is stored."""
    row = conn.execute(
        "SELECT value FROM settings_blobs WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return row["value"]


def put_blob(conn: sqlite3.Connection, key: str, raw: str) -> None:
    """Upsert the blob for *key*."""
    now = datetime.datetime.now(tz=datetime.UTC).isoformat()
    conn.execute(
        "INSERT INTO settings_blobs (key, value, updated_at) VALUES (?, ?, ?) "
        "ON CONFLICT(key) DO UPDATE SET "
        "value = excluded.value, updated_at = excluded.updated_at",
        (key, raw, now),
    )
    conn.commit()
    logger.debug("Stored %d bytes under %r", len(raw), key)


def delete_blob(conn: sqlite3.Connection, key: str) -> bool:
    """Delete the blob for *key*. Returns whether anything was removed."""
    cur = conn.execute("DELETE FROM settings_blobs WHERE key = ?", (key,))
    conn.commit()
    return cur.rowcount > 0


def list_keys(conn: sqlite3.Connection) -> list[dict]:
    """Return ``{"key", "updated_at", "size"}`` for every stored blob."""
    rows = conn.execute(
        "SELECT key, updated_at, length(value) AS size "
        "FROM settings_blobs ORDER BY key"
    ).fetchall()
    return [dict(row) for row in rows]


def store_callbacks(
    conn: sqlite3.Connection, key: str
) -> tuple[Callable[[], str | None], Callable[[str], None]]:
    """Adapt the store to the editor's ``(load, save)`` callback pair."""

    def load() -> str | None:
        return get_blob(conn, key)

    def save(raw: str) -> None:
        put_blob(conn, key, raw)

    return load, save
