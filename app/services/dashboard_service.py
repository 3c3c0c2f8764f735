"""
Dashboard Service

Read-only summaries for the employer and student home pages.

Every figure is an independent read issued in parallel against the current
persisted state (no caching). A branch that fails is logged and reported as
zero / empty, and its name is listed in `degraded`; the rest of the dashboard
is still returned. A failed per-internship application count in the recent
list is reported as 0 for that entry only, and the list is marked degraded.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.core.config import get_settings
from app.core.context import RequestContext
from app.core.errors import PermissionDenied
from app.db.repository import In, OrderBy
from app.models.entities import (
    Application, ApplicationStatus, Internship, InternshipMembership, InternshipStatus, MembershipStatus,
    Role, Task, TaskPriority, TaskStatus,
)
from app.services.task_service import OPEN_TASK_STATUSES

logger = logging.getLogger(__name__)

settings = get_settings()


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass
class RecentInternship:
    id: str
    title: str
    status: InternshipStatus
    applications_count: int
    created_at: Optional[datetime]


@dataclass
class EmployerStats:
    total_internships: int = 0
    internships_by_status: Dict[str, int] = field(default_factory=dict)
    active_interns: int = 0
    pending_applications: int = 0
    completed_tasks: int = 0


@dataclass
class EmployerDashboard:
    stats: EmployerStats
    recent_internships: List[RecentInternship]
    degraded: List[str] = field(default_factory=list)


@dataclass
class UpcomingTask:
    id: str
    title: str
    internship_id: str
    internship_title: str
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date]


@dataclass
class StudentStats:
    total_applications: int = 0
    active_internships: int = 0
    pending_tasks: int = 0
    completed_tasks: int = 0


@dataclass
class StudentDashboard:
    stats: StudentStats
    upcoming_tasks: List[UpcomingTask]
    degraded: List[str] = field(default_factory=list)


# ============================================================
# PARALLEL BRANCHES
# ============================================================

Branch = Tuple[Callable[[], Any], Any]


def _gather(branches: Dict[str, Branch]) -> Tuple[Dict[str, Any], List[str]]:
    """Run every branch concurrently; a failed branch yields its default."""
    results: Dict[str, Any] = {}
    degraded: List[str] = []
    with ThreadPoolExecutor(max_workers=settings.dashboard_max_workers) as pool:
        futures = {name: pool.submit(fn) for name, (fn, _) in branches.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except Exception:
                logger.exception("Dashboard figure '%s' failed; reporting default", name)
                results[name] = branches[name][1]
                degraded.append(name)
    return results, degraded


def _subject_id(ctx: RequestContext, role: Role, requested: Optional[str]) -> str:
    """The caller's own id, or any id when an admin asks for someone else's dashboard."""
    actor = ctx.actor
    if actor.role == role and requested in (None, actor.id):
        return actor.id
    if actor.is_admin and requested:
        return requested
    raise PermissionDenied(f"Only {role.value}s have this dashboard")


# ============================================================
# EMPLOYER
# ============================================================

def get_employer_dashboard(ctx: RequestContext, employer_id: Optional[str] = None) -> EmployerDashboard:
    employer_id = _subject_id(ctx, Role.employer, employer_id)
    repo = ctx.repository

    def owned_ids() -> List[str]:
        return [i.id for i in repo.fetch_by_predicate(Internship, {"employer_id": employer_id})]

    def internships_by_status() -> Dict[str, int]:
        return {
            status.value: repo.count_by_predicate(Internship, {"employer_id": employer_id, "status": status})
            for status in InternshipStatus
        }

    def active_interns() -> int:
        ids = owned_ids()
        if not ids:
            return 0
        return repo.count_by_predicate(
            InternshipMembership, {"internship_id": In(ids), "status": MembershipStatus.active}
        )

    def pending_applications() -> int:
        ids = owned_ids()
        if not ids:
            return 0
        return repo.count_by_predicate(
            Application, {"internship_id": In(ids), "status": ApplicationStatus.pending}
        )

    def completed_tasks() -> int:
        return repo.count_by_predicate(Task, {"created_by": employer_id, "status": TaskStatus.done})

    # Names of branches that returned a partial result
    partial: List[str] = []

    def applications_count(internship_id: str) -> int:
        try:
            return repo.count_by_predicate(Application, {"internship_id": internship_id})
        except Exception:
            logger.exception("Application count for internship %s failed; reporting 0", internship_id)
            partial.append("recent_internships")
            return 0

    def recent_internships() -> List[RecentInternship]:
        internships = repo.fetch_by_predicate(
            Internship,
            {"employer_id": employer_id},
            order_by=[OrderBy("created_at", descending=True)],
            limit=settings.dashboard_recent_limit,
        )
        return [
            RecentInternship(
                id=i.id,
                title=i.title,
                status=i.status,
                applications_count=applications_count(i.id),
                created_at=i.created_at,
            )
            for i in internships
        ]

    results, degraded = _gather({
        "internships_by_status": (internships_by_status, {}),
        "active_interns": (active_interns, 0),
        "pending_applications": (pending_applications, 0),
        "completed_tasks": (completed_tasks, 0),
        "recent_internships": (recent_internships, []),
    })
    for name in partial:
        if name not in degraded:
            degraded.append(name)

    by_status = results["internships_by_status"]
    stats = EmployerStats(
        total_internships=sum(by_status.values()),
        internships_by_status=by_status,
        active_interns=results["active_interns"],
        pending_applications=results["pending_applications"],
        completed_tasks=results["completed_tasks"],
    )
    return EmployerDashboard(stats=stats, recent_internships=results["recent_internships"], degraded=degraded)


# ============================================================
# STUDENT
# ============================================================

def get_student_dashboard(ctx: RequestContext, student_id: Optional[str] = None) -> StudentDashboard:
    student_id = _subject_id(ctx, Role.student, student_id)
    repo = ctx.repository

    def total_applications() -> int:
        return repo.count_by_predicate(Application, {"student_id": student_id})

    def active_internships() -> int:
        return repo.count_by_predicate(
            InternshipMembership, {"student_id": student_id, "status": MembershipStatus.active}
        )

    def pending_tasks() -> int:
        return repo.count_by_predicate(Task, {"assigned_to": student_id, "status": In(OPEN_TASK_STATUSES)})

    def completed_tasks() -> int:
        return repo.count_by_predicate(Task, {"assigned_to": student_id, "status": TaskStatus.done})

    def upcoming_tasks() -> List[UpcomingTask]:
        # Soonest due first, undated last, then oldest first
        tasks = repo.fetch_by_predicate(
            Task,
            {"assigned_to": student_id, "status": In(OPEN_TASK_STATUSES)},
            order_by=[OrderBy("due_date", nulls_last=True), OrderBy("created_at")],
            limit=settings.dashboard_upcoming_limit,
        )
        titles = {}
        if tasks:
            internships = repo.fetch_by_predicate(
                Internship, {"id": In({t.internship_id for t in tasks})}
            )
            titles = {i.id: i.title for i in internships}
        return [
            UpcomingTask(
                id=t.id,
                title=t.title,
                internship_id=t.internship_id,
                internship_title=titles.get(t.internship_id, "Unknown"),
                status=t.status,
                priority=t.priority,
                due_date=t.due_date,
            )
            for t in tasks
        ]

    results, degraded = _gather({
        "total_applications": (total_applications, 0),
        "active_internships": (active_internships, 0),
        "pending_tasks": (pending_tasks, 0),
        "completed_tasks": (completed_tasks, 0),
        "upcoming_tasks": (upcoming_tasks, []),
    })

    stats = StudentStats(
        total_applications=results["total_applications"],
        active_internships=results["active_internships"],
        pending_tasks=results["pending_tasks"],
        completed_tasks=results["completed_tasks"],
    )
    return StudentDashboard(stats=stats, upcoming_tasks=results["upcoming_tasks"], degraded=degraded)
