"""Transactional access to the awards catalog stored in SQLite."""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Iterator

from ..models import (
    CategoryRecord,
    EventInput,
    EventRecord,
    NominationRecord,
    PersonInput,
    PersonRecord,
    WorkInput,
    WorkRecord,
    WorkType,
)
from .storage import CATALOG_TABLES, SQLiteManager


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _person(row: sqlite3.Row) -> PersonRecord:
    return PersonRecord(
        id=row["id"],
        name=row["name"],
        wikipedia_slug=row["wikipedia_slug"],
        image_url=row["image_url"],
    )


def _work(row: sqlite3.Row) -> WorkRecord:
    return WorkRecord(
        id=row["id"],
        title=row["title"],
        type=WorkType(row["type"]),
        wikipedia_slug=row["wikipedia_slug"],
        year=row["year"],
        poster_url=row["poster_url"],
    )


class CatalogSession:
    """Catalog operations bound to one open transaction."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def find_or_create_person(self, data: PersonInput) -> PersonRecord:
        """Return the person with ``data.slug``; an existing row is left unchanged."""

        row = self._conn.execute(
            "SELECT * FROM person WHERE wikipedia_slug = ?", (data.slug,)
        ).fetchone()
        if row is not None:
            return _person(row)
        record = PersonRecord(
            id=_new_id(), name=data.name, wikipedia_slug=data.slug, image_url=data.image_url
        )
        self._conn.execute(
            "INSERT INTO person(id, name, wikipedia_slug, image_url, created_at) VALUES (?, ?, ?, ?, ?)",
            (record.id, record.name, record.wikipedia_slug, record.image_url, _now()),
        )
        return record

    def find_or_create_work(self, data: WorkInput) -> WorkRecord:
        """Return the work with ``data.slug``; an existing row is left unchanged."""

        row = self._conn.execute(
            "SELECT * FROM work WHERE wikipedia_slug = ?", (data.slug,)
        ).fetchone()
        if row is not None:
            return _work(row)
        record = WorkRecord(
            id=_new_id(),
            title=data.title,
            type=data.type,
            wikipedia_slug=data.slug,
            year=data.year,
            poster_url=data.image_url,
        )
        self._conn.execute(
            """
            INSERT INTO work(id, type, title, year, poster_url, wikipedia_slug, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.type.value,
                record.title,
                record.year,
                record.poster_url,
                record.wikipedia_slug,
                _now(),
            ),
        )
        return record

    def create_event(self, data: EventInput) -> str:
        """Insert the event with its categories and nominations; return the event id."""

        event_id = _new_id()
        self._conn.execute(
            "INSERT INTO event(id, name, slug, description, event_date, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (event_id, data.name, data.slug, data.description, data.event_date.isoformat(), _now()),
        )
        for category in data.categories:
            category_id = _new_id()
            self._conn.execute(
                """
                INSERT INTO category(id, event_id, name, "order", points, is_revealed)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (category_id, event_id, category.name, category.order, category.points, int(category.is_revealed)),
            )
            self._conn.executemany(
                """
                INSERT INTO nomination(id, category_id, work_id, person_id, nomination_text)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (_new_id(), category_id, nomination.work_id, nomination.person_id, nomination.nomination_text)
                    for nomination in category.nominations
                ],
            )
        return event_id

    def load_event(self, event_id: str) -> EventRecord | None:
        """Read an event back with categories in order and nominations with their person and work."""

        row = self._conn.execute("SELECT * FROM event WHERE id = ?", (event_id,)).fetchone()
        if row is None:
            return None
        event = EventRecord(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            event_date=datetime.fromisoformat(row["event_date"]),
            description=row["description"],
        )
        categories = self._conn.execute(
            'SELECT * FROM category WHERE event_id = ? ORDER BY "order", rowid', (event_id,)
        ).fetchall()
        for category in categories:
            record = CategoryRecord(
                id=category["id"],
                event_id=event_id,
                name=category["name"],
                order=category["order"],
                points=category["points"],
                is_revealed=bool(category["is_revealed"]),
            )
            nominations = self._conn.execute(
                "SELECT * FROM nomination WHERE category_id = ? ORDER BY rowid", (record.id,)
            ).fetchall()
            for nomination in nominations:
                record.nominations.append(
                    NominationRecord(
                        id=nomination["id"],
                        category_id=record.id,
                        nomination_text=nomination["nomination_text"],
                        person_id=nomination["person_id"],
                        work_id=nomination["work_id"],
                        person=self._get_person(nomination["person_id"]),
                        work=self._get_work(nomination["work_id"]),
                    )
                )
            event.categories.append(record)
        return event

    def _get_person(self, person_id: str | None) -> PersonRecord | None:
        if person_id is None:
            return None
        row = self._conn.execute("SELECT * FROM person WHERE id = ?", (person_id,)).fetchone()
        return _person(row) if row is not None else None

    def _get_work(self, work_id: str | None) -> WorkRecord | None:
        if work_id is None:
            return None
        row = self._conn.execute("SELECT * FROM work WHERE id = ?", (work_id,)).fetchone()
        return _work(row) if row is not None else None


class CatalogStore:
    """Own the catalog connection and hand out transactional sessions."""

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self._lock = Lock()
        self._conn = self.manager.connect(db_path)

    @contextmanager
    def transaction(self) -> Iterator[CatalogSession]:
        """Run the block in one transaction; any exception rolls every write back."""

        with self._lock:
            self._conn.execute("BEGIN IMMEDIATE")
            try:
                yield CatalogSession(self._conn)
                self._conn.execute("COMMIT")
            except BaseException:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                raise

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {
                table: self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for table in CATALOG_TABLES
            }

    def find_event(self, slug: str) -> EventRecord | None:
        with self._lock:
            row = self._conn.execute("SELECT id FROM event WHERE slug = ?", (slug,)).fetchone()
            if row is None:
                return None
            return CatalogSession(self._conn).load_event(row["id"])

    def close(self) -> None:
        self.manager.disconnect(self.db_path)


__all__ = ["CatalogSession", "CatalogStore"]
