"""
Task Routes

POST /internships/{internship_id}/tasks - Create task (owner or admin)
GET /internships/{internship_id}/tasks - List tasks of an internship
GET /tasks/mine - Tasks assigned to me
PUT /tasks/{task_id}/status - Move task along todo -> in_progress -> review -> done
PUT /tasks/{task_id}/progress - Set progress percentage
PUT /tasks/{task_id}/parent - Re-parent a task
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.api.deps import get_context
from app.core.context import RequestContext
from app.models.entities import TaskStatus
from app.schemas.schemas import (
    TaskCreate, TaskParentUpdate, TaskProgressUpdate, TaskResponse, TaskStatusUpdate,
)
from app.services import task_service

router = APIRouter(tags=["Tasks"])


@router.post("/internships/{internship_id}/tasks", response_model=TaskResponse, status_code=201)
async def create_task(internship_id: str, data: TaskCreate, ctx: RequestContext = Depends(get_context)):
    """Create a task for an enrolled student."""
    task = task_service.create_task(ctx, internship_id, **data.model_dump())
    return TaskResponse.model_validate(task)


@router.get("/internships/{internship_id}/tasks", response_model=List[TaskResponse])
async def list_tasks(
    internship_id: str,
    status: Optional[TaskStatus] = Query(None),
    ctx: RequestContext = Depends(get_context),
):
    """All tasks of an internship, oldest first."""
    return [TaskResponse.model_validate(t) for t in task_service.list_tasks(ctx, internship_id, status=status)]


@router.get("/tasks/mine", response_model=List[TaskResponse])
async def list_my_tasks(
    open_only: bool = Query(False, description="Hide completed tasks"),
    ctx: RequestContext = Depends(get_context),
):
    """Tasks assigned to the caller, soonest due first."""
    return [TaskResponse.model_validate(t) for t in task_service.list_my_tasks(ctx, open_only=open_only)]


@router.put("/tasks/{task_id}/status", response_model=TaskResponse)
async def update_task_status(task_id: str, update: TaskStatusUpdate, ctx: RequestContext = Depends(get_context)):
    """Move a task to its next status."""
    return TaskResponse.model_validate(task_service.transition_task(ctx, task_id, update.status))


@router.put("/tasks/{task_id}/progress", response_model=TaskResponse)
async def update_task_progress(
    task_id: str, update: TaskProgressUpdate, ctx: RequestContext = Depends(get_context)
):
    """Set progress (0-100)."""
    return TaskResponse.model_validate(task_service.update_progress(ctx, task_id, update.progress_percentage))


@router.put("/tasks/{task_id}/parent", response_model=TaskResponse)
async def update_task_parent(task_id: str, update: TaskParentUpdate, ctx: RequestContext = Depends(get_context)):
    """Nest a task under another task of the same internship, or make it top-level."""
    return TaskResponse.model_validate(task_service.move_task(ctx, task_id, update.parent_task_id))
