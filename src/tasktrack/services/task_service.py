"""Task service — identity-scoped CRUD and statistics over tasks.

Learn: Ownership enforcement is not a separate check, it's how every
query is BUILT. A TaskService is constructed for one owner, and every
statement starts from a predicate on Task.user_id == owner_id. Another
user's task therefore looks exactly like a task that doesn't exist —
get/update/delete return None/False and the route answers 404, never 403.

Updates and deletes are single statements (UPDATE/DELETE ... WHERE id
AND user_id ... RETURNING), so there's no read-then-write window.
"""

import math
import uuid
from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.db.models import TASK_PRIORITIES, TASK_STATUSES, Task, utcnow

logger = structlog.get_logger()


SORT_FIELDS = ("createdAt", "dueDate", "priority", "title")
SORT_ORDERS = ("asc", "desc")
DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "desc"

UPDATABLE_FIELDS = {"title", "description", "status", "priority", "due_date"}
# Only these may be explicitly cleared with null; null elsewhere means "leave it"
CLEARABLE_FIELDS = {"description", "due_date"}

PRIORITY_RANK = case(
    {"low": 1, "medium": 2, "high": 3},
    value=Task.priority,
    else_=0,
)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class TaskService:
    """Business logic for one owner's tasks."""

    def __init__(self, db: AsyncSession, owner_id: uuid.UUID):
        self.db = db
        self.owner_id = owner_id

    def _owned(self):
        """The predicate every statement in this service is built on."""
        return Task.user_id == self.owner_id

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> Task:
        """Create a task. Status defaults to pending, priority to medium."""
        task = Task(
            user_id=self.owner_id,
            title=title,
            description=description,
            status=status or "pending",
            priority=priority or "medium",
            due_date=due_date,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)

        logger.info("task.created", task_id=str(task.id))
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, task_id: uuid.UUID) -> Optional[Task]:
        result = await self.db.execute(
            select(Task).where(self._owned(), Task.id == task_id)
        )
        return result.scalars().first()

    async def list_tasks(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        sort_by: str = DEFAULT_SORT_BY,
        sort_order: str = DEFAULT_SORT_ORDER,
    ) -> list[Task]:
        """List the owner's tasks with optional filters and sorting.

        Learn: Filters are applied only when their value is one of the known
        options; anything else is ignored rather than rejected here. Request
        validation already turned bad query params into a 400 upstream.
        """
        query = select(Task).where(self._owned())
        if status in TASK_STATUSES:
            query = query.where(Task.status == status)
        if priority in TASK_PRIORITIES:
            query = query.where(Task.priority == priority)

        if sort_by not in SORT_FIELDS:
            sort_by = DEFAULT_SORT_BY
        if sort_order not in SORT_ORDERS:
            sort_order = DEFAULT_SORT_ORDER

        column = {
            "createdAt": Task.created_at,
            "dueDate": Task.due_date,
            "priority": PRIORITY_RANK,
            "title": Task.title,
        }[sort_by]
        primary = column.asc() if sort_order == "asc" else column.desc()
        if sort_by == "dueDate":
            # Undated tasks go last in either direction
            primary = primary.nulls_last()

        query = query.order_by(primary, Task.created_at.desc(), Task.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self, task_id: uuid.UUID, changes: dict[str, Any]
    ) -> Optional[Task]:
        """Apply a partial update. Returns None if the owner has no such task.

        Only keys present in `changes` are touched. A None value clears
        description/due_date and is ignored for the other fields.
        """
        values = {}
        for field, value in changes.items():
            if field not in UPDATABLE_FIELDS:
                continue
            if value is None and field not in CLEARABLE_FIELDS:
                continue
            values[field] = value

        if not values:
            return await self.get_task(task_id)

        values["updated_at"] = utcnow()
        stmt = (
            update(Task)
            .where(self._owned(), Task.id == task_id)
            .values(**values)
            .returning(Task)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        task = result.scalars().first()
        await self.db.commit()

        if task:
            logger.info("task.updated", task_id=str(task_id), fields=sorted(values))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, task_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            delete(Task)
            .where(self._owned(), Task.id == task_id)
            .returning(Task.id)
        )
        deleted_id = result.scalar_one_or_none()
        await self.db.commit()

        if deleted_id is None:
            return False
        logger.info("task.deleted", task_id=str(task_id))
        return True

    # ─── Stats ───────────────────────────────────────────

    async def _grouped_counts(self, column) -> list[dict[str, Any]]:
        result = await self.db.execute(
            select(column, func.count())
            .where(self._owned())
            .group_by(column)
            .order_by(column)
        )
        return [{"_id": value, "count": count} for value, count in result.all()]

    async def get_stats(self) -> dict[str, Any]:
        """Grouped counts by status and priority plus a completion rate."""
        status_breakdown = await self._grouped_counts(Task.status)
        priority_breakdown = await self._grouped_counts(Task.priority)

        total = sum(row["count"] for row in status_breakdown)
        completed = next(
            (row["count"] for row in status_breakdown if row["_id"] == "completed"), 0
        )
        completion_rate = _round_half_up(completed / total * 100) if total > 0 else 0

        return {
            "totalTasks": total,
            "completionRate": completion_rate,
            "statusBreakdown": status_breakdown,
            "priorityBreakdown": priority_breakdown,
        }
