"""
Internship Routes

POST /internships - Post internship as draft (employer or admin)
GET /internships - List open internships with search / skill filters
GET /internships/mine - List the calling employer's internships
GET /internships/{internship_id} - Get internship details
PUT /internships/{internship_id} - Update internship (owner or admin)
POST /internships/{internship_id}/publish - Publish a draft
POST /internships/{internship_id}/close - Close internship
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.api.deps import get_context
from app.core.context import RequestContext
from app.models.entities import InternshipStatus
from app.schemas.schemas import InternshipCreate, InternshipResponse, InternshipUpdate
from app.services import internship_service

router = APIRouter(prefix="/internships", tags=["Internships"])


@router.post("", response_model=InternshipResponse, status_code=201)
async def create_internship(data: InternshipCreate, ctx: RequestContext = Depends(get_context)):
    """Create a new internship. It stays in draft until published."""
    internship = internship_service.create_internship(ctx, **data.model_dump())
    return InternshipResponse.model_validate(internship)


@router.get("", response_model=List[InternshipResponse])
async def list_open_internships(
    search: Optional[str] = Query(None, description="Search title, description, company and skills"),
    skill: Optional[List[str]] = Query(None, description="Keep internships requiring any of these skills"),
    ctx: RequestContext = Depends(get_context),
):
    """List published internships whose application deadline has not passed."""
    internships = internship_service.list_open_internships(ctx, search=search, skills=skill)
    return [InternshipResponse.model_validate(i) for i in internships]


@router.get("/mine", response_model=List[InternshipResponse])
async def list_my_internships(
    status: Optional[InternshipStatus] = Query(None),
    ctx: RequestContext = Depends(get_context),
):
    """All internships posted by the calling employer, newest first."""
    internships = internship_service.list_employer_internships(ctx, status=status)
    return [InternshipResponse.model_validate(i) for i in internships]


@router.get("/{internship_id}", response_model=InternshipResponse)
async def get_internship(internship_id: str, ctx: RequestContext = Depends(get_context)):
    """Get details of a specific internship."""
    return InternshipResponse.model_validate(internship_service.get_internship(ctx, internship_id))


@router.put("/{internship_id}", response_model=InternshipResponse)
async def update_internship(
    internship_id: str, update: InternshipUpdate, ctx: RequestContext = Depends(get_context)
):
    """Update an internship. Only the owning employer (or an admin) can update."""
    changes = update.model_dump(exclude_unset=True)
    internship = internship_service.update_internship(ctx, internship_id, changes)
    return InternshipResponse.model_validate(internship)


@router.post("/{internship_id}/publish", response_model=InternshipResponse)
async def publish_internship(internship_id: str, ctx: RequestContext = Depends(get_context)):
    """Publish a draft so students can apply."""
    return InternshipResponse.model_validate(internship_service.publish_internship(ctx, internship_id))


@router.post("/{internship_id}/close", response_model=InternshipResponse)
async def close_internship(internship_id: str, ctx: RequestContext = Depends(get_context)):
    """Close an internship. Closed internships take no applications and no edits."""
    return InternshipResponse.model_validate(internship_service.close_internship(ctx, internship_id))
