"""
Per-request context: who is calling, which store, which clock.

Built once per request by the API layer (see app.api.deps) and passed into
every lifecycle and dashboard call. There is no process-wide client.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from app.core.identity import Actor
from app.db.repository import Repository


class Clock:
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RequestContext:
    actor: Actor
    repository: Repository
    clock: Clock

    def now(self) -> datetime:
        return self.clock.now()
