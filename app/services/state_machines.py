"""
Transition tables for the three lifecycles.

A state with an empty set is terminal.
"""

from typing import Dict, FrozenSet, TypeVar

from app.core.errors import InvalidTransition
from app.models.entities import ApplicationStatus, InternshipStatus, TaskStatus

S = TypeVar("S")

APPLICATION_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.pending: frozenset({ApplicationStatus.shortlisted, ApplicationStatus.rejected}),
    ApplicationStatus.shortlisted: frozenset({ApplicationStatus.accepted, ApplicationStatus.rejected}),
    ApplicationStatus.accepted: frozenset(),
    ApplicationStatus.rejected: frozenset(),
}

# Forward chain plus review -> in_progress (revision requested)
TASK_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.todo: frozenset({TaskStatus.in_progress}),
    TaskStatus.in_progress: frozenset({TaskStatus.review}),
    TaskStatus.review: frozenset({TaskStatus.done, TaskStatus.in_progress}),
    TaskStatus.done: frozenset(),
}

INTERNSHIP_TRANSITIONS: Dict[InternshipStatus, FrozenSet[InternshipStatus]] = {
    InternshipStatus.draft: frozenset({InternshipStatus.published, InternshipStatus.closed}),
    InternshipStatus.published: frozenset({InternshipStatus.closed}),
    InternshipStatus.closed: frozenset(),
}


def allowed_transitions(table: Dict[S, FrozenSet[S]], current: S) -> FrozenSet[S]:
    return table.get(current, frozenset())


def is_terminal(table: Dict[S, FrozenSet[S]], state: S) -> bool:
    return not allowed_transitions(table, state)


def check_transition(table: Dict[S, FrozenSet[S]], current: S, target: S, entity: str) -> None:
    """Raise InvalidTransition unless `target` is reachable from `current` in one step."""
    if target not in allowed_transitions(table, current):
        raise InvalidTransition(
            f"{entity} cannot move from '{_label(current)}' to '{_label(target)}'"
        )


def _label(state) -> str:
    return getattr(state, "value", state)
