"""
Profile Service - read and edit profiles. Roles never change after registration.
"""

import logging
from typing import Any, Dict

from app.core.context import RequestContext
from app.core.errors import ValidationError
from app.core.permissions import Action, Resource, require
from app.models.entities import Profile
from app.services.lookups import conditional_write, get_or_raise

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "full_name", "email", "company_name", "college_name", "skills", "bio", "phone", "location",
    "website", "linkedin_url",
})


def get_own_profile(ctx: RequestContext) -> Profile:
    return get_or_raise(ctx, Profile, ctx.actor.id, "Profile")


def update_profile(ctx: RequestContext, profile_id: str, changes: Dict[str, Any]) -> Profile:
    profile = get_or_raise(ctx, Profile, profile_id, "Profile")
    require(ctx.actor, Action.update_profile, Resource.for_profile(profile))

    if "role" in changes or "id" in changes:
        raise ValidationError("Profile id and role cannot be changed")
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")
    if not changes:
        raise ValidationError("No fields to update")
    if "full_name" in changes and not (changes["full_name"] or "").strip():
        raise ValidationError("full_name is required")

    changes = dict(changes)
    if "skills" in changes:
        changes["skills"] = sorted({skill.strip() for skill in changes["skills"] or [] if skill.strip()})
    changes["updated_at"] = ctx.now()

    updated = conditional_write(ctx, Profile, profile_id, {"role": profile.role}, changes, "Profile")
    logger.info("Profile %s updated by %s", profile_id, ctx.actor.id)
    return updated
