"""
Shared read/write helpers for the lifecycle services.
"""

import logging
from typing import Any, List, Mapping, NoReturn, Sequence, Type, TypeVar

from app.core.context import RequestContext
from app.core.errors import Conflict, NotFound
from app.db.repository import GuardedWrite
from app.models.entities import Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


def get_or_raise(ctx: RequestContext, model: Type[R], record_id: str, label: str) -> R:
    record = ctx.repository.fetch_by_id(model, record_id)
    if record is None:
        raise NotFound(f"{label} not found")
    return record


def conditional_write(
    ctx: RequestContext,
    model: Type[R],
    record_id: str,
    expected: Mapping[str, Any],
    changes: Mapping[str, Any],
    label: str,
) -> R:
    """
    Write `changes` only if `expected` still holds.

    NotFound if the record disappeared, Conflict if another writer got there
    first. No retry: the caller decides whether to reload and try again.
    """
    updated = ctx.repository.update_conditional(model, record_id, expected, changes)
    if updated is not None:
        return updated
    _raise_lost_write(ctx, model, record_id, label)


def atomic_write(
    ctx: RequestContext,
    writes: Sequence[GuardedWrite],
    label: str,
    inserts: Sequence[Record] = (),
) -> List[Record]:
    """
    All-or-nothing variant of `conditional_write`.

    The first write is the record the caller is changing; the rest guard the
    rows its validation depended on. Errors are reported against the first.
    """
    written = ctx.repository.write_atomically(writes, inserts)
    if written is not None:
        return written
    primary = writes[0]
    _raise_lost_write(ctx, primary.model, primary.record_id, label)


def _raise_lost_write(ctx: RequestContext, model: Type[Record], record_id: str, label: str) -> NoReturn:
    if ctx.repository.fetch_by_id(model, record_id) is None:
        raise NotFound(f"{label} not found")
    logger.warning("Conflict writing %s %s for actor %s", model.COLLECTION, record_id, ctx.actor.id)
    raise Conflict(f"{label} was changed by another request; reload and retry")
