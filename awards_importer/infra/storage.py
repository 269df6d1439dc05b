"""SQLite connection management and the catalog schema."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from threading import Lock
from typing import Dict

CATALOG_TABLES = ("nomination", "category", "event", "work", "person")

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS person (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        wikipedia_slug TEXT,
        image_url TEXT,
        external_id TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS person_wikipedia_slug_key ON person(wikipedia_slug)",
    """
    CREATE TABLE IF NOT EXISTS work (
        id TEXT PRIMARY KEY,
        type TEXT NOT NULL CHECK (type IN ('FILM', 'TV_SHOW', 'ALBUM', 'SONG', 'PLAY', 'BOOK')),
        title TEXT NOT NULL,
        year INTEGER,
        poster_url TEXT,
        external_id TEXT,
        wikipedia_slug TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS work_wikipedia_slug_key ON work(wikipedia_slug)",
    """
    CREATE TABLE IF NOT EXISTS event (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        description TEXT,
        event_date TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS category (
        id TEXT PRIMARY KEY,
        event_id TEXT NOT NULL REFERENCES event(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        "order" INTEGER NOT NULL,
        points INTEGER NOT NULL DEFAULT 10,
        is_revealed INTEGER NOT NULL DEFAULT 0,
        winner_nomination_id TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS category_event_id_idx ON category(event_id)",
    """
    CREATE TABLE IF NOT EXISTS nomination (
        id TEXT PRIMARY KEY,
        category_id TEXT NOT NULL REFERENCES category(id) ON DELETE CASCADE,
        work_id TEXT REFERENCES work(id) ON DELETE CASCADE,
        person_id TEXT REFERENCES person(id) ON DELETE CASCADE,
        nomination_text TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS nomination_category_id_idx ON nomination(category_id)",
)


class SQLiteManager:
    """Manage SQLite connections with basic schema guarantees."""

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()

    def connect(self, path: Path) -> sqlite3.Connection:
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            if path not in self._connections:
                # Transactions are opened explicitly by the catalog
                conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys = ON")
                self._connections[path] = conn
                self._ensure_schema(conn)
            return self._connections[path]

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        for statement in _SCHEMA:
            conn.execute(statement)

    def disconnect(self, path: Path) -> None:
        with self._lock:
            conn = self._connections.pop(path, None)
        if conn is not None:
            conn.close()

    def close_all(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()


__all__ = ["CATALOG_TABLES", "SQLiteManager"]
