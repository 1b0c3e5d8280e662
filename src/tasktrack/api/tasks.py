"""Task API routes.

Learn: These routes are the HTTP interface to TaskService. The whole
router is mounted behind get_current_user (see api/__init__.py), and the
service is built per request FOR the authenticated identity — there is
no code path that can query tasks without an owner.

Key patterns:
- Query params for filtering/sorting, validated against enumerations
- PUT for partial updates (only fields present in the body change)
- 404 for missing AND foreign tasks — ownership is never revealed
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.dependencies import CurrentIdentity, get_current_user
from tasktrack.db.engine import get_db
from tasktrack.errors import NotFound
from tasktrack.schemas.task import (
    MessageResponse,
    SortBy,
    SortOrder,
    TaskCreate,
    TaskPriority,
    TaskRead,
    TaskStats,
    TaskStatus,
    TaskUpdate,
)
from tasktrack.services.task_service import TaskService

router = APIRouter(prefix="/tasks")

TASK_NOT_FOUND = "Task not found"


def _task_svc(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TaskService:
    return TaskService(db, owner_id=identity.user_id)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    priority: Optional[TaskPriority] = Query(None, description="Filter by priority"),
    sort_by: SortBy = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks with optional filters."""
    return await svc.list_tasks(
        status=status,
        priority=priority,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/stats/summary", response_model=TaskStats)
async def task_stats(svc: TaskService = Depends(_task_svc)):
    """Totals, completion rate and status/priority breakdowns."""
    return await svc.get_stats()


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task_id: uuid.UUID, svc: TaskService = Depends(_task_svc)):
    """Get a single task by ID."""
    task = await svc.get_task(task_id)
    if not task:
        raise NotFound(TASK_NOT_FOUND)
    return task


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(body: TaskCreate, svc: TaskService = Depends(_task_svc)):
    """Create a new task (pending / medium unless given)."""
    return await svc.create_task(
        title=body.title,
        description=body.description,
        status=body.status,
        priority=body.priority,
        due_date=body.due_date,
    )


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task. `dueDate: null` clears the due date."""
    task = await svc.update_task(task_id, body.model_dump(exclude_unset=True))
    if not task:
        raise NotFound(TASK_NOT_FOUND)
    return task


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(task_id: uuid.UUID, svc: TaskService = Depends(_task_svc)):
    """Delete a task."""
    if not await svc.delete_task(task_id):
        raise NotFound(TASK_NOT_FOUND)
    return MessageResponse(message="Task deleted successfully")
