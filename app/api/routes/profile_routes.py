"""
Profile Routes

PUT /profiles/{profile_id} - Update a profile (owner or admin)
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_context
from app.core.context import RequestContext
from app.schemas.schemas import ProfileResponse, ProfileUpdate
from app.services import profile_service

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.put("/{profile_id}", response_model=ProfileResponse)
async def update_profile(profile_id: str, data: ProfileUpdate, ctx: RequestContext = Depends(get_context)):
    """Update profile fields. Role cannot be changed."""
    changes = data.model_dump(exclude_unset=True)
    profile = profile_service.update_profile(ctx, profile_id, changes)
    return ProfileResponse.model_validate(profile)
