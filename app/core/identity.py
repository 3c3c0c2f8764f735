"""
Identity & Role Context.

Turns the identity fact handed over by the auth provider (a session user id)
into an Actor carrying exactly one of the three roles.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.errors import NotAuthenticated, ValidationError
from app.db.repository import Repository
from app.models.entities import Profile, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


@dataclass(frozen=True)
class IdentitySession:
    """What the identity provider yields: the session user id, if any."""

    session_user_id: Optional[str]


def resolve_actor(session: Optional[IdentitySession], repository: Repository) -> Actor:
    if session is None or not session.session_user_id:
        raise NotAuthenticated("No authenticated session")

    try:
        profile = repository.fetch_by_id(Profile, session.session_user_id)
    except ValidationError as e:
        # Stored role outside the enumerated set
        logger.warning("Rejecting session %s: %s", session.session_user_id, e)
        raise NotAuthenticated("Profile has no recognised role")

    if profile is None:
        raise NotAuthenticated("No profile for session user")

    return Actor(id=profile.id, role=Role(profile.role))
