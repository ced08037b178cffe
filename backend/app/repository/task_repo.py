# app/repository/task_repo.py

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import case, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from app.models.orm.task import Priority, Task


# Columns the task list may be ordered by
SORTABLE_COLUMNS: dict[str, ColumnElement] = {
    "created_at": Task.created_at,
    "updated_at": Task.updated_at,
    "due_date": Task.due_date,
    "title": Task.title,
    "status": Task.status,
    "story_points": Task.story_points,
    "completed": Task.completed,
    "priority": case(
        (Task.priority == Priority.LOW, 1),
        (Task.priority == Priority.MEDIUM, 2),
        (Task.priority == Priority.HIGH, 3),
        (Task.priority == Priority.URGENT, 4),
        else_=0,
    ),
}


@dataclass
class TaskFilters:
    search: str | None = None
    status: str | None = None
    priority: Priority | None = None
    completed: bool | None = None
    category_id: int | None = None


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_filters(stmt, filters: TaskFilters):
    if filters.search:
        pattern = f"%{_escape_like(filters.search.strip())}%"
        stmt = stmt.where(
            or_(
                Task.title.ilike(pattern, escape="\\"),
                Task.description.ilike(pattern, escape="\\"),
            )
        )
    if filters.status:
        stmt = stmt.where(Task.status == filters.status)
    if filters.priority is not None:
        stmt = stmt.where(Task.priority == filters.priority)
    if filters.completed is not None:
        stmt = stmt.where(Task.completed.is_(filters.completed))
    if filters.category_id is not None:
        stmt = stmt.where(Task.category_id == filters.category_id)
    return stmt


async def get_task_by_id(db: AsyncSession, task_id: int) -> Task | None:
    result = await db.execute(
        select(Task)
        .where(Task.id == task_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_tasks_by_ids(db: AsyncSession, task_ids: Sequence[int]) -> list[Task]:
    if not task_ids:
        return []
    result = await db.execute(
        select(Task)
        .where(Task.id.in_(list(task_ids)))
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def find_tasks_by_owner(
    db: AsyncSession,
    user_id: int,
    sort: str = "created_at",
    descending: bool = True,
    limit: int = 10,
    offset: int = 0,
    filters: TaskFilters | None = None,
) -> tuple[list[Task], int]:
    """One page of the user's tasks plus the total count of matching rows."""
    filters = filters or TaskFilters()

    base = _apply_filters(select(Task).where(Task.user_id == user_id), filters)

    total = await db.scalar(
        select(func.count()).select_from(base.order_by(None).subquery())
    )

    order_column = SORTABLE_COLUMNS[sort]
    order = order_column.desc() if descending else order_column.asc()
    result = await db.execute(
        base.order_by(order, Task.id.desc() if descending else Task.id.asc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), int(total or 0)


async def save_task(db: AsyncSession, task: Task) -> Task:
    """Insert or update a task and return it with its references loaded."""
    db.add(task)
    await db.commit()

    return await get_task_by_id(db, task.id)


async def save_tasks(db: AsyncSession, tasks: Sequence[Task]) -> list[Task]:
    """Persist several tasks in a single transaction."""
    db.add_all(list(tasks))
    await db.commit()

    saved = await get_tasks_by_ids(db, [task.id for task in tasks])
    by_id = {task.id: task for task in saved}
    return [by_id[task.id] for task in tasks]


async def delete_task(db: AsyncSession, task: Task) -> None:
    await db.delete(task)
    await db.commit()


async def delete_tasks(db: AsyncSession, tasks: Sequence[Task]) -> None:
    for task in tasks:
        await db.delete(task)
    await db.commit()
