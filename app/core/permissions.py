"""
Authorization Guard.

A declarative capability table: for each role, which actions it may take and
which ownership rule the resource must satisfy for that action. The guard is
a pure predicate over (actor, action, resource); it never touches storage.

Creation calls are checked against the parent resource: applications and
tasks against their Internship, a new internship against a Resource whose
owner is the employer it will belong to.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from app.core.errors import PermissionDenied
from app.core.identity import Actor
from app.models.entities import Application, Internship, Profile, Role, Task

logger = logging.getLogger(__name__)


class Action(str, Enum):
    read_internship = "read_internship"
    list_owned_internships = "list_owned_internships"
    create_internship = "create_internship"
    update_internship = "update_internship"
    transition_internship = "transition_internship"
    create_application = "create_application"
    read_application = "read_application"
    review_application = "review_application"
    create_task = "create_task"
    read_task = "read_task"
    transition_task = "transition_task"
    update_task_progress = "update_task_progress"
    move_task = "move_task"
    update_profile = "update_profile"


class ResourceKind(str, Enum):
    profile = "profile"
    internship = "internship"
    application = "application"
    task = "task"


@dataclass(frozen=True)
class Resource:
    """
    Ownership facts about the target of an action.

    owner_id   - employer that owns the internship the resource belongs to
    subject_id - the student the resource is about (applicant, assignee,
                 or the profile itself)
    creator_id - who created it (tasks only)
    """

    kind: ResourceKind
    owner_id: Optional[str] = None
    subject_id: Optional[str] = None
    creator_id: Optional[str] = None

    @classmethod
    def for_internship(cls, internship: Internship) -> "Resource":
        return cls(ResourceKind.internship, owner_id=internship.employer_id)

    @classmethod
    def for_application(cls, application: Application, internship: Internship) -> "Resource":
        return cls(ResourceKind.application, owner_id=internship.employer_id, subject_id=application.student_id)

    @classmethod
    def for_task(cls, task: Task, internship: Internship) -> "Resource":
        return cls(
            ResourceKind.task,
            owner_id=internship.employer_id,
            subject_id=task.assigned_to,
            creator_id=task.created_by,
        )

    @classmethod
    def for_profile(cls, profile: Profile) -> "Resource":
        return cls(ResourceKind.profile, subject_id=profile.id)


class Ownership(str, Enum):
    anyone = "anyone"
    owner = "owner"
    subject = "subject"
    owner_or_creator = "owner_or_creator"
    party = "party"

    def holds(self, actor: Actor, resource: Resource) -> bool:
        if self is Ownership.anyone:
            return True
        if self is Ownership.owner:
            return actor.id == resource.owner_id
        if self is Ownership.subject:
            return actor.id == resource.subject_id
        if self is Ownership.owner_or_creator:
            return actor.id in (resource.owner_id, resource.creator_id)
        return actor.id in (resource.owner_id, resource.subject_id, resource.creator_id)


# Role -> action -> ownership rule. Missing action = never allowed.
CAPABILITIES: Dict[Role, Dict[Action, Ownership]] = {
    Role.student: {
        Action.read_internship: Ownership.anyone,
        Action.create_application: Ownership.anyone,
        Action.read_application: Ownership.subject,
        Action.read_task: Ownership.subject,
        Action.transition_task: Ownership.subject,
        Action.update_task_progress: Ownership.subject,
        Action.update_profile: Ownership.subject,
    },
    Role.employer: {
        Action.read_internship: Ownership.anyone,
        Action.list_owned_internships: Ownership.owner,
        Action.create_internship: Ownership.owner,
        Action.update_internship: Ownership.owner,
        Action.transition_internship: Ownership.owner,
        Action.read_application: Ownership.owner,
        Action.review_application: Ownership.owner,
        Action.create_task: Ownership.owner,
        Action.read_task: Ownership.party,
        Action.transition_task: Ownership.owner_or_creator,
        Action.update_task_progress: Ownership.owner_or_creator,
        Action.move_task: Ownership.owner_or_creator,
        Action.update_profile: Ownership.subject,
    },
    # Unrestricted, except that applications are only ever filed by students
    Role.admin: {action: Ownership.anyone for action in Action if action is not Action.create_application},
}


def can_perform(actor: Actor, action: Action, resource: Resource) -> bool:
    rule = CAPABILITIES.get(actor.role, {}).get(action)
    if rule is None:
        return False
    return rule.holds(actor, resource)


def require(actor: Actor, action: Action, resource: Resource) -> None:
    """Raise PermissionDenied unless `can_perform` allows the action."""
    if not can_perform(actor, action, resource):
        logger.warning(
            "Denied %s on %s for %s %s", action.value, resource.kind.value, actor.role.value, actor.id
        )
        raise PermissionDenied(f"{actor.role.value} may not {action.value.replace('_', ' ')}")
