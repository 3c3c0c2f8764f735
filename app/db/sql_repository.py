"""
SQL repository - the persistence interface over SQLAlchemy Core.

Each call runs in its own session (commit on success, rollback on error).
The compare-and-swap write is a single statement:

    UPDATE <table> SET ... WHERE id = :id AND <expected fields>

so the database, not the application, decides which concurrent writer wins.
`write_atomically` runs several such guarded statements (plus inserts) in one
session and rolls all of them back if any row no longer matches.
"""

from contextlib import contextmanager
from typing import Any, Mapping, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.core.errors import Conflict
from app.db.postgres import get_db_session
from app.db.repository import Gte, In, Repository, plain_value
from app.db.tables import TABLES


class _StaleWrite(Exception):
    """Raised inside a batch to roll it back when an expectation fails."""


class SqlRepository(Repository):

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self):
        try:
            with get_db_session(self._session_factory) as db:
                yield db
        except IntegrityError as e:
            raise Conflict(f"Write rejected by a uniqueness constraint: {e.orig}")

    @staticmethod
    def _table(model):
        return TABLES[model.COLLECTION]

    @staticmethod
    def _where(table, predicate: Optional[Mapping[str, Any]]) -> list:
        clauses = []
        for name, expected in (predicate or {}).items():
            column = table.c[name]
            if isinstance(expected, In):
                clauses.append(column.in_(expected.values))
            elif isinstance(expected, Gte):
                clauses.append(column >= expected.value)
            elif expected is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == plain_value(expected))
        return clauses

    def fetch_by_id(self, model, record_id):
        table = self._table(model)
        with self._session() as db:
            row = db.execute(select(table).where(table.c.id == record_id)).mappings().first()
        return model.from_record(row) if row is not None else None

    def fetch_by_predicate(self, model, predicate=None, order_by=None, limit=None):
        table = self._table(model)
        stmt = select(table).where(*self._where(table, predicate))
        for order in order_by or ():
            column = table.c[order.field]
            clause = column.desc() if order.descending else column.asc()
            stmt = stmt.order_by(clause.nulls_last() if order.nulls_last else clause.nulls_first())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session() as db:
            rows = db.execute(stmt).mappings().all()
        return [model.from_record(row) for row in rows]

    def insert(self, record):
        table = self._table(type(record))
        with self._session() as db:
            db.execute(table.insert().values(**record.to_record()))
        return record

    def update_conditional(self, model, record_id, expected, changes):
        table = self._table(model)
        stmt = (
            update(table)
            .where(table.c.id == record_id, *self._where(table, expected))
            .values(**{name: plain_value(value) for name, value in changes.items()})
        )
        with self._session() as db:
            result = db.execute(stmt)
            if result.rowcount == 0:
                return None
            row = db.execute(select(table).where(table.c.id == record_id)).mappings().one()
        return model.from_record(row)

    def write_atomically(self, writes, inserts=()):
        try:
            with self._session() as db:
                # Fixed lock order so two batches over the same rows cannot deadlock
                for write in sorted(writes, key=lambda w: (w.model.COLLECTION, w.record_id)):
                    table = self._table(write.model)
                    where = (table.c.id == write.record_id, *self._where(table, write.expected))
                    if write.changes:
                        values = {name: plain_value(value) for name, value in write.changes.items()}
                        matched = db.execute(update(table).where(*where).values(**values)).rowcount
                    else:
                        matched = db.execute(select(table.c.id).where(*where).with_for_update()).first() is not None
                    if not matched:
                        raise _StaleWrite(write.record_id)

                for record in inserts:
                    db.execute(self._table(type(record)).insert().values(**record.to_record()))

                written = []
                for write in writes:
                    table = self._table(write.model)
                    row = db.execute(select(table).where(table.c.id == write.record_id)).mappings().one()
                    written.append(write.model.from_record(row))
        except _StaleWrite:
            return None
        return written

    def count_by_predicate(self, model, predicate=None):
        table = self._table(model)
        stmt = select(func.count()).select_from(table).where(*self._where(table, predicate))
        with self._session() as db:
            return db.execute(stmt).scalar_one()
