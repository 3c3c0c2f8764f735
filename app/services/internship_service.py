"""
Internship Service

Posting, editing, publishing and closing internships, plus the public list
of internships that are open for applications.

Lifecycle: draft -> published -> closed (draft may also close directly).
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from app.core.context import RequestContext
from app.core.errors import InvalidTransition, NotFound, ValidationError
from app.core.permissions import Action, Resource, ResourceKind, can_perform, require
from app.db.repository import Gte, In, OrderBy
from app.models.entities import Internship, InternshipStatus, Profile, Role, new_id
from app.services.lookups import conditional_write, get_or_raise
from app.services.state_machines import INTERNSHIP_TRANSITIONS, check_transition

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "title", "description", "requirements", "skills_required", "duration_weeks", "stipend",
    "vacancies", "location", "start_date", "end_date", "application_deadline",
})


def _normalize_skills(skills: Optional[Iterable[str]]) -> List[str]:
    seen = []
    for skill in skills or []:
        skill = skill.strip()
        if skill and skill not in seen:
            seen.append(skill)
    return seen


def _validate_schedule(vacancies: int, application_deadline: date, start_date: date, end_date: date) -> None:
    if vacancies < 1:
        raise ValidationError("An internship needs at least one vacancy")
    if end_date < start_date:
        raise ValidationError("end_date must not be before start_date")
    if application_deadline > start_date:
        raise ValidationError("application_deadline must not be after start_date")


def create_internship(
    ctx: RequestContext,
    title: str,
    application_deadline: date,
    start_date: date,
    end_date: date,
    vacancies: int = 1,
    skills_required: Optional[Iterable[str]] = None,
    description: str = "",
    requirements: Optional[str] = None,
    duration_weeks: Optional[int] = None,
    stipend: Optional[float] = None,
    location: str = "Remote",
    employer_id: Optional[str] = None,
) -> Internship:
    """
    Post a new internship in `draft`.

    Employers always post for themselves; an admin must name the employer.
    """
    actor = ctx.actor
    if actor.role == Role.employer:
        employer_id = actor.id
    require(actor, Action.create_internship, Resource(ResourceKind.internship, owner_id=employer_id))

    if not employer_id:
        raise ValidationError("employer_id is required")
    employer = ctx.repository.fetch_by_id(Profile, employer_id)
    if employer is None or employer.role != Role.employer:
        raise ValidationError("Internships can only belong to an employer profile")

    if not title or not title.strip():
        raise ValidationError("title is required")
    _validate_schedule(vacancies, application_deadline, start_date, end_date)
    if stipend is not None and stipend < 0:
        raise ValidationError("stipend must not be negative")

    now = ctx.now()
    internship = Internship(
        id=new_id(),
        employer_id=employer_id,
        title=title.strip(),
        status=InternshipStatus.draft,
        vacancies=vacancies,
        application_deadline=application_deadline,
        start_date=start_date,
        end_date=end_date,
        skills_required=_normalize_skills(skills_required),
        description=description or "",
        requirements=requirements,
        duration_weeks=duration_weeks,
        stipend=stipend,
        location=location,
        created_at=now,
        updated_at=now,
    )
    ctx.repository.insert(internship)
    logger.info("Internship %s created by %s for employer %s", internship.id, actor.id, employer_id)
    return internship


def get_internship(ctx: RequestContext, internship_id: str) -> Internship:
    """Drafts are only visible to their owner and admins."""
    internship = get_or_raise(ctx, Internship, internship_id, "Internship")
    resource = Resource.for_internship(internship)
    require(ctx.actor, Action.read_internship, resource)
    if internship.status == InternshipStatus.draft and not can_perform(
        ctx.actor, Action.update_internship, resource
    ):
        raise NotFound("Internship not found")
    return internship


def update_internship(ctx: RequestContext, internship_id: str, changes: Dict[str, Any]) -> Internship:
    internship = get_or_raise(ctx, Internship, internship_id, "Internship")
    require(ctx.actor, Action.update_internship, Resource.for_internship(internship))

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")
    if internship.status == InternshipStatus.closed:
        raise InvalidTransition("A closed internship cannot be edited")
    if not changes:
        raise ValidationError("No fields to update")

    changes = dict(changes)
    if "skills_required" in changes:
        changes["skills_required"] = _normalize_skills(changes["skills_required"])
    if "title" in changes and not (changes["title"] or "").strip():
        raise ValidationError("title is required")

    merged = {**internship.to_record(), **changes}
    _validate_schedule(
        merged["vacancies"], merged["application_deadline"], merged["start_date"], merged["end_date"]
    )

    changes["updated_at"] = ctx.now()
    updated = conditional_write(
        ctx, Internship, internship_id, {"status": internship.status}, changes, "Internship"
    )
    logger.info("Internship %s updated by %s (%s)", internship_id, ctx.actor.id, ", ".join(sorted(changes)))
    return updated


def transition_internship(ctx: RequestContext, internship_id: str, target: InternshipStatus) -> Internship:
    internship = get_or_raise(ctx, Internship, internship_id, "Internship")
    require(ctx.actor, Action.transition_internship, Resource.for_internship(internship))
    check_transition(INTERNSHIP_TRANSITIONS, internship.status, target, "Internship")

    updated = conditional_write(
        ctx,
        Internship,
        internship_id,
        {"status": internship.status},
        {"status": target, "updated_at": ctx.now()},
        "Internship",
    )
    logger.info(
        "Internship %s: %s -> %s by %s", internship_id, internship.status.value, target.value, ctx.actor.id
    )
    return updated


def publish_internship(ctx: RequestContext, internship_id: str) -> Internship:
    return transition_internship(ctx, internship_id, InternshipStatus.published)


def close_internship(ctx: RequestContext, internship_id: str) -> Internship:
    return transition_internship(ctx, internship_id, InternshipStatus.closed)


def list_employer_internships(
    ctx: RequestContext, employer_id: Optional[str] = None, status: Optional[InternshipStatus] = None
) -> List[Internship]:
    """All internships of one employer (the caller, unless an admin names another)."""
    employer_id = employer_id or ctx.actor.id
    require(ctx.actor, Action.list_owned_internships, Resource(ResourceKind.internship, owner_id=employer_id))
    predicate: Dict[str, Any] = {"employer_id": employer_id}
    if status is not None:
        predicate["status"] = status
    return ctx.repository.fetch_by_predicate(
        Internship, predicate, order_by=[OrderBy("created_at", descending=True)]
    )


def list_open_internships(
    ctx: RequestContext, search: Optional[str] = None, skills: Optional[Iterable[str]] = None
) -> List[Internship]:
    """
    Published internships still accepting applications, newest first.

    `search` matches (case-insensitively) title, description, the employer's
    company name, or any required skill. `skills` keeps internships requiring
    at least one of the given skills.
    """
    require(ctx.actor, Action.read_internship, Resource(ResourceKind.internship))
    today = ctx.now().date()
    internships = ctx.repository.fetch_by_predicate(
        Internship,
        {"status": InternshipStatus.published, "application_deadline": Gte(today)},
        order_by=[OrderBy("created_at", descending=True)],
    )

    term = (search or "").strip().lower()
    if term:
        employer_ids = list({internship.employer_id for internship in internships})
        companies = {
            profile.id: (profile.company_name or "").lower()
            for profile in ctx.repository.fetch_by_predicate(Profile, {"id": In(employer_ids)})
        }
        internships = [
            internship for internship in internships
            if term in internship.title.lower()
            or term in (internship.description or "").lower()
            or term in companies.get(internship.employer_id, "")
            or any(term in skill.lower() for skill in internship.skills_required)
        ]

    wanted = set(_normalize_skills(skills))
    if wanted:
        internships = [
            internship for internship in internships
            if wanted.intersection(internship.skills_required)
        ]
    return internships
