"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Responses are built from domain records with `Schema.model_validate(record)`.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List, Dict
from datetime import date, datetime

from app.models.entities import (
    ApplicationStatus, InternshipStatus, Role, TaskPriority, TaskStatus,
)


class RecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============================================================
# AUTH / PROFILE SCHEMAS
# ============================================================

class ActorResponse(RecordResponse):
    id: str
    role: Role

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=200)
    email: Optional[EmailStr] = None
    company_name: Optional[str] = Field(None, max_length=200)
    college_name: Optional[str] = Field(None, max_length=200)
    skills: Optional[List[str]] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    linkedin_url: Optional[str] = None

class ProfileResponse(RecordResponse):
    id: str
    role: Role
    full_name: str
    email: Optional[str] = None
    company_name: Optional[str] = None
    college_name: Optional[str] = None
    skills: List[str] = []
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    linkedin_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = ""
    requirements: Optional[str] = None
    skills_required: List[str] = []
    duration_weeks: Optional[int] = Field(None, ge=1)
    stipend: Optional[float] = Field(None, ge=0)
    vacancies: int = Field(1, ge=1)
    location: str = "Remote"
    start_date: date
    end_date: date
    application_deadline: date
    employer_id: Optional[str] = None  # admins posting on behalf of an employer

class InternshipUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    skills_required: Optional[List[str]] = None
    duration_weeks: Optional[int] = Field(None, ge=1)
    stipend: Optional[float] = Field(None, ge=0)
    vacancies: Optional[int] = Field(None, ge=1)
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    application_deadline: Optional[date] = None

class InternshipResponse(RecordResponse):
    id: str
    employer_id: str
    title: str
    status: InternshipStatus
    description: str
    requirements: Optional[str] = None
    skills_required: List[str] = []
    duration_weeks: Optional[int] = None
    stipend: Optional[float] = None
    vacancies: int
    location: str
    start_date: date
    end_date: date
    application_deadline: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None

class ApplicationReview(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None

class ApplicationResponse(RecordResponse):
    id: str
    internship_id: str
    student_id: str
    status: ApplicationStatus
    applied_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    notes: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None


# ============================================================
# TASK SCHEMAS
# ============================================================

class TaskCreate(BaseModel):
    assigned_to: str
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.medium
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    parent_task_id: Optional[str] = None

class TaskStatusUpdate(BaseModel):
    status: TaskStatus

class TaskProgressUpdate(BaseModel):
    # 0..100 is enforced by the task service
    progress_percentage: int

class TaskParentUpdate(BaseModel):
    parent_task_id: Optional[str] = None

class TaskResponse(RecordResponse):
    id: str
    internship_id: str
    created_by: str
    assigned_to: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    progress_percentage: int
    parent_task_id: Optional[str] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = None
    actual_hours: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# DASHBOARD SCHEMAS
# ============================================================

class RecentInternshipResponse(RecordResponse):
    id: str
    title: str
    status: InternshipStatus
    applications_count: int
    created_at: Optional[datetime] = None

class EmployerStatsResponse(RecordResponse):
    total_internships: int
    internships_by_status: Dict[str, int]
    active_interns: int
    pending_applications: int
    completed_tasks: int

class EmployerDashboardResponse(RecordResponse):
    stats: EmployerStatsResponse
    recent_internships: List[RecentInternshipResponse]
    degraded: List[str] = []

class UpcomingTaskResponse(RecordResponse):
    id: str
    title: str
    internship_id: str
    internship_title: str
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date] = None

class StudentStatsResponse(RecordResponse):
    total_applications: int
    active_internships: int
    pending_tasks: int
    completed_tasks: int

class StudentDashboardResponse(RecordResponse):
    stats: StudentStatsResponse
    upcoming_tasks: List[UpcomingTaskResponse]
    degraded: List[str] = []


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
    error: str
