"""
Domain records - the five persisted collections.

Records are plain dataclasses. The persistence layer talks to them only
through `to_record()` / `from_record()`, so the same classes work for the
SQL and in-memory repositories. Enum fields are stored as their string value.
"""

import uuid
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple, Type

from app.core.errors import ValidationError


# ============================================================
# ENUMS
# ============================================================

class Role(str, Enum):
    student = "student"
    employer = "employer"
    admin = "admin"


class InternshipStatus(str, Enum):
    draft = "draft"
    published = "published"
    closed = "closed"


class ApplicationStatus(str, Enum):
    pending = "pending"
    shortlisted = "shortlisted"
    rejected = "rejected"
    accepted = "accepted"


class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    review = "review"
    done = "done"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class MembershipStatus(str, Enum):
    active = "active"
    completed = "completed"
    terminated = "terminated"


def new_id() -> str:
    return str(uuid.uuid4())


# ============================================================
# BASE RECORD
# ============================================================

@dataclass
class Record:
    COLLECTION: ClassVar[str] = ""
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {}
    UNIQUE_FIELDS: ClassVar[Tuple[Tuple[str, ...], ...]] = ()

    def to_record(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, (set, frozenset)):
                value = sorted(value)
            data[f.name] = value
        return data

    @classmethod
    def from_record(cls, row) -> "Record":
        names = {f.name for f in fields(cls)}
        data = {key: value for key, value in dict(row).items() if key in names}
        for name, enum_type in cls.ENUM_FIELDS.items():
            value = data.get(name)
            if value is None or isinstance(value, enum_type):
                continue
            try:
                data[name] = enum_type(value)
            except ValueError:
                raise ValidationError(f"Unknown {name} {value!r} on {cls.COLLECTION} record")
        return cls(**data)


# ============================================================
# COLLECTIONS
# ============================================================

@dataclass
class Profile(Record):
    COLLECTION: ClassVar[str] = "profiles"
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {"role": Role}

    id: str
    role: Role
    full_name: str
    email: Optional[str] = None
    company_name: Optional[str] = None
    college_name: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    linkedin_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Internship(Record):
    COLLECTION: ClassVar[str] = "internships"
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {"status": InternshipStatus}

    id: str
    employer_id: str
    title: str
    status: InternshipStatus
    vacancies: int
    application_deadline: date
    start_date: date
    end_date: date
    skills_required: List[str] = field(default_factory=list)
    description: str = ""
    requirements: Optional[str] = None
    duration_weeks: Optional[int] = None
    stipend: Optional[float] = None
    location: str = "Remote"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def accepts_applications(self, today: date) -> bool:
        """Published and the deadline day has not passed yet."""
        return self.status == InternshipStatus.published and today <= self.application_deadline


@dataclass
class Application(Record):
    COLLECTION: ClassVar[str] = "applications"
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {"status": ApplicationStatus}
    UNIQUE_FIELDS: ClassVar[Tuple[Tuple[str, ...], ...]] = (("internship_id", "student_id"),)

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


@dataclass
class Task(Record):
    COLLECTION: ClassVar[str] = "tasks"
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {
        "status": TaskStatus,
        "priority": TaskPriority,
    }

    id: str
    internship_id: str
    created_by: str
    assigned_to: str
    title: str
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    progress_percentage: int = 0
    parent_task_id: Optional[str] = None
    due_date: Optional[date] = None
    start_date: Optional[date] = None
    description: Optional[str] = None
    estimated_hours: Optional[float] = None
    actual_hours: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class InternshipMembership(Record):
    COLLECTION: ClassVar[str] = "internship_memberships"
    ENUM_FIELDS: ClassVar[Dict[str, Type[Enum]]] = {"status": MembershipStatus}
    UNIQUE_FIELDS: ClassVar[Tuple[Tuple[str, ...], ...]] = (("internship_id", "student_id"),)

    id: str
    internship_id: str
    student_id: str
    status: MembershipStatus
    joined_at: datetime
