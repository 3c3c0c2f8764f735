"""Shared fixtures: an in-memory store, a fixed clock and seeded profiles."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from app.core.context import Clock, RequestContext
from app.core.identity import Actor
from app.db.repository import InMemoryRepository
from app.models.entities import (
    Application, ApplicationStatus, Internship, InternshipMembership, InternshipStatus, MembershipStatus,
    Profile, Role, Task, TaskPriority, TaskStatus, new_id,
)

NOW = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


class FixedClock(Clock):
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


def _profile(repo: InMemoryRepository, role: Role, name: str, **extra) -> Profile:
    profile = Profile(id=new_id(), role=role, full_name=name, created_at=NOW, updated_at=NOW, **extra)
    repo.insert(profile)
    return profile


@pytest.fixture
def employer(repo) -> Profile:
    return _profile(repo, Role.employer, "Erin Employer", company_name="Acme Labs")


@pytest.fixture
def other_employer(repo) -> Profile:
    return _profile(repo, Role.employer, "Oscar Other", company_name="Globex")


@pytest.fixture
def student(repo) -> Profile:
    return _profile(repo, Role.student, "Sam Student", college_name="State College", skills=["Python"])


@pytest.fixture
def other_student(repo) -> Profile:
    return _profile(repo, Role.student, "Ola Other", college_name="Tech Institute")


@pytest.fixture
def admin(repo) -> Profile:
    return _profile(repo, Role.admin, "Ada Admin")


@pytest.fixture
def make_context(repo, clock):
    """Build a RequestContext for a profile."""
    def _make(profile: Profile) -> RequestContext:
        return RequestContext(actor=Actor(id=profile.id, role=profile.role), repository=repo, clock=clock)
    return _make


@pytest.fixture
def make_internship(repo):
    def _make(
        employer_id: str,
        status: InternshipStatus = InternshipStatus.published,
        deadline: Optional[date] = None,
        created_at: datetime = NOW,
        title: str = "Backend Intern",
        skills=("Python", "SQL"),
        description: str = "Build APIs",
    ) -> Internship:
        internship = Internship(
            id=new_id(),
            employer_id=employer_id,
            title=title,
            status=status,
            vacancies=2,
            application_deadline=deadline or TODAY + timedelta(days=14),
            start_date=TODAY + timedelta(days=30),
            end_date=TODAY + timedelta(days=120),
            skills_required=list(skills),
            description=description,
            created_at=created_at,
            updated_at=created_at,
        )
        repo.insert(internship)
        return internship
    return _make


@pytest.fixture
def make_application(repo):
    def _make(
        internship_id: str,
        student_id: str,
        status: ApplicationStatus = ApplicationStatus.pending,
        reviewer_id: Optional[str] = None,
    ) -> Application:
        reviewed = status != ApplicationStatus.pending
        application = Application(
            id=new_id(),
            internship_id=internship_id,
            student_id=student_id,
            status=status,
            applied_at=NOW,
            reviewed_by=reviewer_id if reviewed else None,
            reviewed_at=NOW if reviewed else None,
        )
        repo.insert(application)
        return application
    return _make


@pytest.fixture
def enrol(repo):
    def _enrol(internship_id: str, student_id: str, status: MembershipStatus = MembershipStatus.active):
        membership = InternshipMembership(
            id=new_id(), internship_id=internship_id, student_id=student_id, status=status, joined_at=NOW,
        )
        repo.insert(membership)
        return membership
    return _enrol


@pytest.fixture
def make_task(repo):
    def _make(
        internship_id: str,
        created_by: str,
        assigned_to: str,
        status: TaskStatus = TaskStatus.todo,
        due_date: Optional[date] = None,
        created_at: datetime = NOW,
        progress: int = 0,
        parent_task_id: Optional[str] = None,
        title: str = "Write tests",
    ) -> Task:
        task = Task(
            id=new_id(),
            internship_id=internship_id,
            created_by=created_by,
            assigned_to=assigned_to,
            title=title,
            status=status,
            priority=TaskPriority.medium,
            progress_percentage=100 if status == TaskStatus.done else progress,
            parent_task_id=parent_task_id,
            due_date=due_date,
            created_at=created_at,
            updated_at=created_at,
        )
        repo.insert(task)
        return task
    return _make
