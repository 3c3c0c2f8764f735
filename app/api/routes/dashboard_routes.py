"""
Dashboard Routes

GET /dashboard/employer - Employer summary (counts + recent internships)
GET /dashboard/student - Student summary (counts + upcoming tasks)

Admins may pass the id of the employer / student whose dashboard they want.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.api.deps import get_context
from app.core.context import RequestContext
from app.schemas.schemas import EmployerDashboardResponse, StudentDashboardResponse
from app.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/employer", response_model=EmployerDashboardResponse)
async def employer_dashboard(
    employer_id: Optional[str] = Query(None),
    ctx: RequestContext = Depends(get_context),
):
    dashboard = dashboard_service.get_employer_dashboard(ctx, employer_id=employer_id)
    return EmployerDashboardResponse.model_validate(dashboard)


@router.get("/student", response_model=StudentDashboardResponse)
async def student_dashboard(
    student_id: Optional[str] = Query(None),
    ctx: RequestContext = Depends(get_context),
):
    dashboard = dashboard_service.get_student_dashboard(ctx, student_id=student_id)
    return StudentDashboardResponse.model_validate(dashboard)
