"""
Task Service

Tasks are units of work inside one internship, created by its employer (or
an admin) for an enrolled student.

    todo -> in_progress -> review -> done
                 ^           |
                 +-----------+   (revision requested)

done is terminal and always carries progress_percentage = 100.

Progress updates reject values outside 0..100 with ValidationError rather
than clamping them.

Subtasks reference their parent by id. The tree of one internship is checked
as an arena of id -> parent_id links (see TaskTree), never by walking live
objects.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from app.core.context import RequestContext
from app.core.errors import ValidationError
from app.core.permissions import Action, Resource, ResourceKind, require
from app.db.repository import GuardedWrite, In, OrderBy
from app.models.entities import (
    Internship, InternshipMembership, MembershipStatus, Profile, Role, Task, TaskPriority, TaskStatus,
    new_id,
)
from app.services.lookups import atomic_write, conditional_write, get_or_raise
from app.services.state_machines import TASK_TRANSITIONS, check_transition

logger = logging.getLogger(__name__)

OPEN_TASK_STATUSES = (TaskStatus.todo, TaskStatus.in_progress, TaskStatus.review)


# ============================================================
# TASK TREE
# ============================================================

class TaskTree:
    """Parent links of one internship's tasks, keyed by task id."""

    def __init__(self, internship_id: str, parents: Dict[str, Optional[str]]):
        self.internship_id = internship_id
        self.parents = dict(parents)

    @classmethod
    def from_tasks(cls, internship_id: str, tasks: Iterable[Task]) -> "TaskTree":
        return cls(internship_id, {task.id: task.parent_task_id for task in tasks})

    def ancestors(self, task_id: str) -> List[str]:
        chain = []
        seen = {task_id}
        current = self.parents.get(task_id)
        while current is not None:
            if current in seen:
                raise ValidationError(f"Task tree already contains a cycle at {current}")
            chain.append(current)
            seen.add(current)
            current = self.parents.get(current)
        return chain

    def children(self, task_id: str) -> List[str]:
        return [child for child, parent in self.parents.items() if parent == task_id]

    def check_parent(self, task_id: str, parent_id: Optional[str]) -> None:
        """Raise ValidationError if `parent_id` is foreign to this tree or would close a loop."""
        if parent_id is None:
            return
        if parent_id not in self.parents:
            raise ValidationError("Parent task must belong to the same internship")
        if parent_id == task_id or task_id in self.ancestors(parent_id):
            raise ValidationError("A task cannot be nested under itself or its own subtasks")


def _load_tree(ctx: RequestContext, internship_id: str) -> TaskTree:
    tasks = ctx.repository.fetch_by_predicate(Task, {"internship_id": internship_id})
    return TaskTree.from_tasks(internship_id, tasks)


# ============================================================
# OPERATIONS
# ============================================================

def create_task(
    ctx: RequestContext,
    internship_id: str,
    assigned_to: str,
    title: str,
    description: Optional[str] = None,
    priority: TaskPriority = TaskPriority.medium,
    due_date: Optional[date] = None,
    start_date: Optional[date] = None,
    estimated_hours: Optional[float] = None,
    parent_task_id: Optional[str] = None,
) -> Task:
    internship = get_or_raise(ctx, Internship, internship_id, "Internship")
    require(ctx.actor, Action.create_task, Resource.for_internship(internship))

    if not title or not title.strip():
        raise ValidationError("title is required")
    if start_date and due_date and due_date < start_date:
        raise ValidationError("due_date must not be before start_date")
    if estimated_hours is not None and estimated_hours < 0:
        raise ValidationError("estimated_hours must not be negative")

    assignee = get_or_raise(ctx, Profile, assigned_to, "Assignee profile")
    if assignee.role != Role.student:
        raise ValidationError("Tasks can only be assigned to students")
    membership = ctx.repository.count_by_predicate(
        InternshipMembership,
        {"internship_id": internship_id, "student_id": assigned_to, "status": MembershipStatus.active},
    )
    if not membership:
        raise ValidationError("Assignee is not an active member of this internship")

    if parent_task_id is not None:
        parent = get_or_raise(ctx, Task, parent_task_id, "Parent task")
        if parent.internship_id != internship_id:
            raise ValidationError("Parent task must belong to the same internship")

    now = ctx.now()
    task = Task(
        id=new_id(),
        internship_id=internship_id,
        created_by=ctx.actor.id,
        assigned_to=assigned_to,
        title=title.strip(),
        description=description,
        status=TaskStatus.todo,
        priority=priority,
        progress_percentage=0,
        parent_task_id=parent_task_id,
        due_date=due_date,
        start_date=start_date,
        estimated_hours=estimated_hours,
        created_at=now,
        updated_at=now,
    )
    ctx.repository.insert(task)
    logger.info("Task %s created in internship %s by %s for %s", task.id, internship_id, ctx.actor.id, assigned_to)
    return task


def _load_for(ctx: RequestContext, task_id: str, action: Action):
    task = get_or_raise(ctx, Task, task_id, "Task")
    internship = get_or_raise(ctx, Internship, task.internship_id, "Internship")
    require(ctx.actor, action, Resource.for_task(task, internship))
    return task, internship


def transition_task(ctx: RequestContext, task_id: str, target_status: TaskStatus) -> Task:
    task, _ = _load_for(ctx, task_id, Action.transition_task)
    check_transition(TASK_TRANSITIONS, task.status, target_status, "Task")

    changes = {"status": target_status, "updated_at": ctx.now()}
    if target_status == TaskStatus.done:
        changes["progress_percentage"] = 100

    updated = conditional_write(ctx, Task, task_id, {"status": task.status}, changes, "Task")
    logger.info("Task %s: %s -> %s by %s", task_id, task.status.value, target_status.value, ctx.actor.id)
    return updated


def update_progress(ctx: RequestContext, task_id: str, percentage: int) -> Task:
    if isinstance(percentage, bool) or not isinstance(percentage, int):
        raise ValidationError("progress must be a whole number")
    if not 0 <= percentage <= 100:
        raise ValidationError("progress must be between 0 and 100")

    task, _ = _load_for(ctx, task_id, Action.update_task_progress)
    if task.status == TaskStatus.done and percentage != 100:
        raise ValidationError("A completed task stays at 100% progress")

    updated = conditional_write(
        ctx,
        Task,
        task_id,
        {"status": task.status},
        {"progress_percentage": percentage, "updated_at": ctx.now()},
        "Task",
    )
    logger.info("Task %s progress %s%% -> %s%% by %s", task_id, task.progress_percentage, percentage, ctx.actor.id)
    return updated


def move_task(ctx: RequestContext, task_id: str, parent_task_id: Optional[str]) -> Task:
    """Re-parent a task inside its internship (None makes it top-level)."""
    task, internship = _load_for(ctx, task_id, Action.move_task)
    if parent_task_id is not None:
        parent = get_or_raise(ctx, Task, parent_task_id, "Parent task")
        if parent.internship_id != internship.id:
            raise ValidationError("Parent task must belong to the same internship")
    tree = _load_tree(ctx, internship.id)
    tree.check_parent(task_id, parent_task_id)

    # The cycle check holds only while the new parent's chain up to the root
    # is unchanged, so every link on it is part of the same write.
    writes = [GuardedWrite(
        Task,
        task_id,
        {"parent_task_id": task.parent_task_id},
        {"parent_task_id": parent_task_id, "updated_at": ctx.now()},
    )]
    if parent_task_id is not None:
        for link in [parent_task_id] + tree.ancestors(parent_task_id):
            writes.append(GuardedWrite(Task, link, {"parent_task_id": tree.parents.get(link)}))

    updated = atomic_write(ctx, writes, "Task")[0]
    logger.info("Task %s moved under %s by %s", task_id, parent_task_id or "<root>", ctx.actor.id)
    return updated


def list_tasks(ctx: RequestContext, internship_id: str, status: Optional[TaskStatus] = None) -> List[Task]:
    """Every task of an internship, for its employer or an admin."""
    internship = get_or_raise(ctx, Internship, internship_id, "Internship")
    require(ctx.actor, Action.read_task, Resource(ResourceKind.task, owner_id=internship.employer_id))
    predicate = {"internship_id": internship_id}
    if status is not None:
        predicate["status"] = status
    return ctx.repository.fetch_by_predicate(Task, predicate, order_by=[OrderBy("created_at")])


def list_my_tasks(ctx: RequestContext, open_only: bool = False) -> List[Task]:
    require(ctx.actor, Action.read_task, Resource(ResourceKind.task, subject_id=ctx.actor.id))
    predicate = {"assigned_to": ctx.actor.id}
    if open_only:
        predicate["status"] = In(OPEN_TASK_STATUSES)
    return ctx.repository.fetch_by_predicate(
        Task, predicate, order_by=[OrderBy("due_date"), OrderBy("created_at")]
    )
