"""
Application Service

Students apply to published internships; the owning employer (or an admin)
reviews them.

    pending -> shortlisted -> accepted
       |            |
       +-> rejected <+

accepted and rejected are terminal. reviewed_by / reviewed_at are null while
an application is pending and set by every review after that; they are never
cleared. Accepting an application enrols the student (active membership) in
the same atomic write: either both happen or neither does.
"""

import logging
from typing import List, Optional

from app.core.context import RequestContext
from app.core.errors import ValidationError
from app.core.permissions import Action, Resource, ResourceKind, require
from app.db.repository import GuardedWrite, OrderBy
from app.models.entities import (
    Application, ApplicationStatus, Internship, InternshipMembership, MembershipStatus, new_id,
)
from app.services.lookups import atomic_write, get_or_raise
from app.services.state_machines import APPLICATION_TRANSITIONS, check_transition

logger = logging.getLogger(__name__)


def submit_application(
    ctx: RequestContext,
    internship_id: str,
    cover_letter: Optional[str] = None,
    resume_url: Optional[str] = None,
) -> Application:
    """
    File a pending application for the calling student.

    The internship is checked before the caller's role, so a closed or
    expired internship reports ValidationError to everyone.
    """
    internship = get_or_raise(ctx, Internship, internship_id, "Internship")
    if not internship.accepts_applications(ctx.now().date()):
        raise ValidationError("Internship is not accepting applications")

    require(ctx.actor, Action.create_application, Resource.for_internship(internship))

    existing = ctx.repository.count_by_predicate(
        Application, {"internship_id": internship_id, "student_id": ctx.actor.id}
    )
    if existing:
        raise ValidationError("Already applied to this internship")

    application = Application(
        id=new_id(),
        internship_id=internship_id,
        student_id=ctx.actor.id,
        status=ApplicationStatus.pending,
        applied_at=ctx.now(),
        cover_letter=cover_letter,
        resume_url=resume_url,
    )
    ctx.repository.insert(application)
    logger.info("Application %s submitted by %s to internship %s", application.id, ctx.actor.id, internship_id)
    return application


def review_application(
    ctx: RequestContext,
    application_id: str,
    target_status: ApplicationStatus,
    notes: Optional[str] = None,
) -> Application:
    """Move an application one step along its lifecycle. Omitted notes keep the stored ones."""
    application = get_or_raise(ctx, Application, application_id, "Application")
    internship = get_or_raise(ctx, Internship, application.internship_id, "Internship")
    require(ctx.actor, Action.review_application, Resource.for_application(application, internship))
    check_transition(APPLICATION_TRANSITIONS, application.status, target_status, "Application")

    changes = {
        "status": target_status,
        "reviewed_by": ctx.actor.id,
        "reviewed_at": ctx.now(),
    }
    if notes is not None:
        changes["notes"] = notes

    inserts = []
    if target_status == ApplicationStatus.accepted:
        inserts = _new_membership(ctx, internship.id, application.student_id)

    write = GuardedWrite(Application, application_id, {"status": application.status}, changes)
    updated = atomic_write(ctx, [write], "Application", inserts=inserts)[0]
    logger.info(
        "Application %s: %s -> %s by %s",
        application_id, application.status.value, target_status.value, ctx.actor.id,
    )
    if inserts:
        logger.info("Student %s joined internship %s", application.student_id, internship.id)
    return updated


def _new_membership(ctx: RequestContext, internship_id: str, student_id: str) -> List[InternshipMembership]:
    """The active membership an acceptance creates, unless one already exists."""
    predicate = {"internship_id": internship_id, "student_id": student_id}
    if ctx.repository.count_by_predicate(InternshipMembership, predicate):
        return []
    return [InternshipMembership(
        id=new_id(),
        internship_id=internship_id,
        student_id=student_id,
        status=MembershipStatus.active,
        joined_at=ctx.now(),
    )]


def list_my_applications(ctx: RequestContext) -> List[Application]:
    require(ctx.actor, Action.read_application, Resource(ResourceKind.application, subject_id=ctx.actor.id))
    return ctx.repository.fetch_by_predicate(
        Application, {"student_id": ctx.actor.id}, order_by=[OrderBy("applied_at", descending=True)]
    )


def list_internship_applications(
    ctx: RequestContext, internship_id: str, status: Optional[ApplicationStatus] = None
) -> List[Application]:
    internship = get_or_raise(ctx, Internship, internship_id, "Internship")
    require(
        ctx.actor, Action.read_application,
        Resource(ResourceKind.application, owner_id=internship.employer_id),
    )
    predicate = {"internship_id": internship_id}
    if status is not None:
        predicate["status"] = status
    return ctx.repository.fetch_by_predicate(
        Application, predicate, order_by=[OrderBy("applied_at", descending=True)]
    )
