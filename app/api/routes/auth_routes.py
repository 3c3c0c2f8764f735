"""
Authentication Routes

GET /auth/me - Get the calling actor and profile

Tokens are issued by the identity provider; this service only reads them.
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_context
from app.core.context import RequestContext
from app.schemas.schemas import ProfileResponse
from app.services.profile_service import get_own_profile

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", response_model=ProfileResponse)
async def get_me(ctx: RequestContext = Depends(get_context)):
    """Get current authenticated user's profile."""
    return ProfileResponse.model_validate(get_own_profile(ctx))
