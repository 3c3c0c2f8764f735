"""
Application Routes

POST /internships/{internship_id}/applications - Apply (student only)
GET /internships/{internship_id}/applications - Applications received (owner or admin)
GET /applications/mine - My applications (student)
PUT /applications/{application_id}/review - Shortlist / accept / reject
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.api.deps import get_context
from app.core.context import RequestContext
from app.models.entities import ApplicationStatus
from app.schemas.schemas import ApplicationCreate, ApplicationResponse, ApplicationReview
from app.services import application_service

router = APIRouter(tags=["Applications"])


@router.post("/internships/{internship_id}/applications", response_model=ApplicationResponse, status_code=201)
async def apply_to_internship(
    internship_id: str, application: ApplicationCreate, ctx: RequestContext = Depends(get_context)
):
    """Apply to an internship. Students only. Cannot apply twice to the same internship."""
    created = application_service.submit_application(
        ctx, internship_id, cover_letter=application.cover_letter, resume_url=application.resume_url
    )
    return ApplicationResponse.model_validate(created)


@router.get("/internships/{internship_id}/applications", response_model=List[ApplicationResponse])
async def get_internship_applications(
    internship_id: str,
    status: Optional[ApplicationStatus] = Query(None),
    ctx: RequestContext = Depends(get_context),
):
    """Get all applications for one of the caller's internships."""
    applications = application_service.list_internship_applications(ctx, internship_id, status=status)
    return [ApplicationResponse.model_validate(a) for a in applications]


@router.get("/applications/mine", response_model=List[ApplicationResponse])
async def get_my_applications(ctx: RequestContext = Depends(get_context)):
    """Get the calling student's applications, newest first."""
    return [ApplicationResponse.model_validate(a) for a in application_service.list_my_applications(ctx)]


@router.put("/applications/{application_id}/review", response_model=ApplicationResponse)
async def review_application(
    application_id: str, review: ApplicationReview, ctx: RequestContext = Depends(get_context)
):
    """Move an application to its next status."""
    updated = application_service.review_application(ctx, application_id, review.status, notes=review.notes)
    return ApplicationResponse.model_validate(updated)
