"""
Request-scoped dependencies.

Every route receives a RequestContext (actor + store + clock) built here.
Tests swap the store and clock with `app.dependency_overrides`:
    app.dependency_overrides[get_repository] = lambda: repository
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials

from app.core.auth import bearer_scheme, session_from_credentials
from app.core.context import Clock, RequestContext, SystemClock
from app.core.identity import Actor, resolve_actor
from app.db.postgres import get_session_factory
from app.db.repository import Repository
from app.db.sql_repository import SqlRepository


@lru_cache()
def get_repository() -> Repository:
    return SqlRepository(get_session_factory())


def get_clock() -> Clock:
    return SystemClock()


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    repository: Repository = Depends(get_repository),
) -> Actor:
    """
    FastAPI dependency - Get the calling actor.

    Usage:
        @router.get("/protected")
        async def route(actor: Actor = Depends(get_current_actor)):
            return actor
    """
    return resolve_actor(session_from_credentials(credentials), repository)


async def get_context(
    actor: Actor = Depends(get_current_actor),
    repository: Repository = Depends(get_repository),
    clock: Clock = Depends(get_clock),
) -> RequestContext:
    return RequestContext(actor=actor, repository=repository, clock=clock)
