"""
Persistence interface consumed by the lifecycle core.

The core never issues raw queries. It names a record type (the collection)
and a predicate: a mapping of field -> value, where a value may also be an
`In(...)` or `Gte(...)` wrapper. Ordering is a list of `OrderBy`.

Implementations:
- SqlRepository (app.db.sql_repository) - PostgreSQL through SQLAlchemy Core
- InMemoryRepository (below) - lock-guarded dict store for tests and demos
"""

import copy
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from app.core.errors import Conflict
from app.models.entities import Record

R = TypeVar("R", bound=Record)


# ============================================================
# PREDICATE / ORDERING VOCABULARY
# ============================================================

class In:
    """Field value must be one of `values`."""

    def __init__(self, values):
        self.values = tuple(plain_value(v) for v in values)

    def __repr__(self):
        return f"In({list(self.values)!r})"


class Gte:
    """Field value must be >= `value` (NULL never matches)."""

    def __init__(self, value):
        self.value = plain_value(value)

    def __repr__(self):
        return f"Gte({self.value!r})"


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False
    nulls_last: bool = True


@dataclass(frozen=True)
class GuardedWrite:
    """
    One row of an atomic batch: `expected` must still hold for `record_id`.

    Empty `changes` only guards the row (it must not change under us).
    """

    model: Type[Record]
    record_id: str
    expected: Mapping[str, Any]
    changes: Mapping[str, Any] = field(default_factory=dict)


def plain_value(value: Any) -> Any:
    """Enums are persisted as their string value."""
    if isinstance(value, Enum):
        return value.value
    return value


# ============================================================
# INTERFACE
# ============================================================

class Repository(ABC):

    @abstractmethod
    def fetch_by_id(self, model: Type[R], record_id: str) -> Optional[R]:
        ...

    @abstractmethod
    def fetch_by_predicate(
        self,
        model: Type[R],
        predicate: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Sequence[OrderBy]] = None,
        limit: Optional[int] = None,
    ) -> List[R]:
        ...

    @abstractmethod
    def insert(self, record: R) -> R:
        """Insert a new record. Raises Conflict on a duplicate key."""

    @abstractmethod
    def update_conditional(
        self,
        model: Type[R],
        record_id: str,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> Optional[R]:
        """
        Compare-and-swap write.

        Applies `changes` only if every field in `expected` still holds its
        expected value. Returns the updated record, or None when the record is
        missing or the expectation no longer holds.
        """

    @abstractmethod
    def write_atomically(
        self, writes: Sequence[GuardedWrite], inserts: Sequence[Record] = ()
    ) -> Optional[List[Record]]:
        """
        Apply every guarded write and insert in one transaction.

        Returns the written records (in `writes` order), or None when any
        expectation no longer holds; nothing is applied in that case. A
        duplicate insert raises Conflict and likewise applies nothing.
        """

    @abstractmethod
    def count_by_predicate(self, model: Type[R], predicate: Optional[Mapping[str, Any]] = None) -> int:
        ...


# ============================================================
# IN-MEMORY IMPLEMENTATION
# ============================================================

def _matches(row: Mapping[str, Any], predicate: Optional[Mapping[str, Any]]) -> bool:
    for name, expected in (predicate or {}).items():
        value = row.get(name)
        if isinstance(expected, In):
            if value not in expected.values:
                return False
        elif isinstance(expected, Gte):
            if value is None or value < expected.value:
                return False
        elif value != plain_value(expected):
            return False
    return True


def _sort_rows(rows: List[Dict[str, Any]], order_by: Sequence[OrderBy]) -> List[Dict[str, Any]]:
    # Stable sorts applied from the last key to the first
    for order in reversed(list(order_by)):
        present = [row for row in rows if row.get(order.field) is not None]
        missing = [row for row in rows if row.get(order.field) is None]
        present.sort(key=lambda row: row[order.field], reverse=order.descending)
        rows = present + missing if order.nulls_last else missing + present
    return rows


class InMemoryRepository(Repository):
    """
    Thread-safe dict-backed repository.

    Every operation holds one lock, so `update_conditional` is atomic in the
    same way a single conditional UPDATE statement is.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, model: Type[Record]) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(model.COLLECTION, {})

    def fetch_by_id(self, model, record_id):
        with self._lock:
            row = self._collection(model).get(record_id)
            return model.from_record(copy.deepcopy(row)) if row is not None else None

    def fetch_by_predicate(self, model, predicate=None, order_by=None, limit=None):
        with self._lock:
            rows = [copy.deepcopy(row) for row in self._collection(model).values() if _matches(row, predicate)]
        if order_by:
            rows = _sort_rows(rows, order_by)
        if limit is not None:
            rows = rows[:limit]
        return [model.from_record(row) for row in rows]

    def _check_insertable(self, model: Type[Record], row: Mapping[str, Any]) -> None:
        collection = self._collection(model)
        if row["id"] in collection:
            raise Conflict(f"{model.COLLECTION} record {row['id']} already exists")
        for unique in model.UNIQUE_FIELDS:
            key = tuple(row[name] for name in unique)
            if any(tuple(other[name] for name in unique) == key for other in collection.values()):
                raise Conflict(f"Duplicate {model.COLLECTION} record for {', '.join(unique)}")

    def insert(self, record):
        model = type(record)
        row = record.to_record()
        with self._lock:
            self._check_insertable(model, row)
            self._collection(model)[row["id"]] = copy.deepcopy(row)
        return model.from_record(row)

    def write_atomically(self, writes, inserts=()):
        with self._lock:
            for write in writes:
                row = self._collection(write.model).get(write.record_id)
                if row is None or not _matches(row, write.expected):
                    return None

            # Stage inserts first so a duplicate leaves the store untouched
            staged = []
            try:
                for record in inserts:
                    model = type(record)
                    row = record.to_record()
                    self._check_insertable(model, row)
                    self._collection(model)[row["id"]] = copy.deepcopy(row)
                    staged.append((model, row["id"]))
            except Conflict:
                for model, record_id in staged:
                    del self._collection(model)[record_id]
                raise

            written = []
            for write in writes:
                row = self._collection(write.model)[write.record_id]
                row.update({name: plain_value(value) for name, value in write.changes.items()})
                written.append(write.model.from_record(copy.deepcopy(row)))
            return written

    def update_conditional(self, model, record_id, expected, changes):
        with self._lock:
            row = self._collection(model).get(record_id)
            if row is None:
                return None
            if not _matches(row, expected):
                return None
            row.update({name: plain_value(value) for name, value in changes.items()})
            return model.from_record(copy.deepcopy(row))

    def count_by_predicate(self, model, predicate=None):
        with self._lock:
            return sum(1 for row in self._collection(model).values() if _matches(row, predicate))
