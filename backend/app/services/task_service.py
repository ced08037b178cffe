import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Generic, List, Optional, Sequence, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import configs
from app.core.exceptions import (
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from app.models.orm.category import Category
from app.models.orm.task import Task
from app.models.orm.user import User
from app.repository import task_repo
from app.repository.auth_repo import get_user_by_id
from app.repository.category_repo import get_category_by_id
from app.repository.task_repo import SORTABLE_COLUMNS, TaskFilters
from app.schemas.task_schema import BulkTaskUpdate, TaskRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass
class PageRequest:
    page: int = configs.PAGE
    size: int = configs.PAGE_SIZE
    sort: Optional[str] = None
    direction: str = "desc"
    filters: TaskFilters = field(default_factory=TaskFilters)


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0


@dataclass
class _ResolvedRefs:
    category: Optional[Category]
    assignee: Optional[User]


def _require_user(current_user: Optional[User]) -> User:
    if current_user is None:
        raise UnauthenticatedError("User not authenticated")
    return current_user


def _sort_key(sort: Optional[str]) -> str:
    if not sort:
        return "created_at"
    key = _CAMEL_BOUNDARY.sub("_", sort.strip()).lower()
    if key not in SORTABLE_COLUMNS:
        raise ValidationError(
            f"Cannot sort by '{sort}'. Allowed fields: {', '.join(sorted(SORTABLE_COLUMNS))}"
        )
    return key


def _start_of_day(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return datetime.combine(value.date(), time.min)
    return datetime.combine(value, time.min)


def _unique_labels(labels: Sequence[str]) -> list[str]:
    seen = []
    for label in labels:
        label = label.strip()
        if label and label not in seen:
            seen.append(label)
    return seen


class TaskService:
    """Task CRUD scoped to the task owner."""

    async def list_tasks(self, db: AsyncSession, current_user: Optional[User], page_request: PageRequest) -> Page[Task]:
        user = _require_user(current_user)

        direction = (page_request.direction or "desc").lower()
        if direction not in ("asc", "desc"):
            raise ValidationError("Sort direction must be 'asc' or 'desc'")
        if page_request.page < 0:
            raise ValidationError("Page index must not be negative")
        if not 1 <= page_request.size <= configs.MAX_PAGE_SIZE:
            raise ValidationError(f"Page size must be between 1 and {configs.MAX_PAGE_SIZE}")

        sort = _sort_key(page_request.sort)
        # Without an explicit sort field the newest tasks come first
        descending = direction == "desc" if page_request.sort else True

        items, total = await task_repo.find_tasks_by_owner(
            db,
            user.id,
            sort=sort,
            descending=descending,
            limit=page_request.size,
            offset=page_request.page * page_request.size,
            filters=page_request.filters,
        )
        return Page(items=items, page=page_request.page, size=page_request.size, total=total)

    async def _get_owned_task(self, db: AsyncSession, user: User, task_id: int) -> Task:
        task = await task_repo.get_task_by_id(db, task_id)
        if task is None:
            raise NotFoundError(f"Task not found with id: {task_id}")
        if task.user_id != user.id:
            logger.warning("[TASK] user_id=%s denied access to task_id=%s", user.id, task_id)
            raise ForbiddenError("You do not have access to this task")
        return task

    async def get_task(self, db: AsyncSession, current_user: Optional[User], task_id: int) -> Task:
        user = _require_user(current_user)
        return await self._get_owned_task(db, user, task_id)

    async def _resolve_refs(self, db: AsyncSession, payload: TaskRequest) -> _ResolvedRefs:
        category = None
        if payload.category_id is not None:
            category = await get_category_by_id(db, payload.category_id)
            if category is None:
                raise NotFoundError(f"Category not found with id: {payload.category_id}")

        assignee = None
        if payload.assignee_id is not None:
            assignee = await get_user_by_id(db, payload.assignee_id)
            if assignee is None:
                raise NotFoundError(f"User not found with id: {payload.assignee_id}")

        return _ResolvedRefs(category=category, assignee=assignee)

    def _build_task(self, owner: User, payload: TaskRequest, refs: _ResolvedRefs) -> Task:
        if not payload.title:
            raise ValidationError("Task title is required")
        return Task(
            title=payload.title,
            description=payload.description,
            status=payload.status or "TODO",
            priority=payload.priority,
            type=payload.type,
            story_points=payload.story_points,
            labels=_unique_labels(payload.labels or []),
            dependencies=list(payload.dependencies or []),
            due_date=_start_of_day(payload.due_date),
            completed=bool(payload.completed),
            user_id=owner.id,
            category=refs.category,
            assignee=refs.assignee,
        )

    def _apply_update(self, task: Task, payload: TaskRequest, refs: _ResolvedRefs) -> None:
        if payload.title is not None:
            task.title = payload.title
        if payload.description is not None:
            task.description = payload.description
        if payload.status is not None:
            task.status = payload.status
        if payload.priority is not None:
            task.priority = payload.priority
        if payload.type is not None:
            task.type = payload.type
        if payload.story_points is not None:
            task.story_points = payload.story_points
        if payload.labels is not None:
            task.labels = _unique_labels(payload.labels)
        if payload.dependencies is not None:
            task.dependencies = list(payload.dependencies)
        if payload.due_date is not None:
            task.due_date = _start_of_day(payload.due_date)
        if payload.completed is not None:
            task.completed = payload.completed
        if refs.assignee is not None:
            task.assignee = refs.assignee
        # No category in the payload means "no category"
        task.category = refs.category

    async def _persist(self, db: AsyncSession, action: str, operation):
        try:
            return await operation
        except SQLAlchemyError as e:
            logger.error("[TASK] Storage error during %s: %s", action, e)
            await db.rollback()
            raise InternalError(f"Could not {action}. Please try again later.")

    async def create_task(self, db: AsyncSession, current_user: Optional[User], payload: TaskRequest) -> Task:
        user = _require_user(current_user)
        refs = await self._resolve_refs(db, payload)
        task = self._build_task(user, payload, refs)

        task = await self._persist(db, "create task", task_repo.save_task(db, task))
        logger.info("[TASK] user_id=%s created task_id=%s", user.id, task.id)
        return task

    async def update_task(
        self, db: AsyncSession, current_user: Optional[User], task_id: int, payload: TaskRequest
    ) -> Task:
        user = _require_user(current_user)
        task = await self._get_owned_task(db, user, task_id)
        refs = await self._resolve_refs(db, payload)
        self._apply_update(task, payload, refs)

        return await self._persist(db, "update task", task_repo.save_task(db, task))

    async def delete_task(self, db: AsyncSession, current_user: Optional[User], task_id: int) -> None:
        user = _require_user(current_user)
        task = await self._get_owned_task(db, user, task_id)

        await self._persist(db, "delete task", task_repo.delete_task(db, task))
        logger.info("[TASK] user_id=%s deleted task_id=%s", user.id, task_id)

    async def _get_owned_tasks(self, db: AsyncSession, user: User, task_ids: Sequence[int]) -> dict[int, Task]:
        tasks = {task.id: task for task in await task_repo.get_tasks_by_ids(db, task_ids)}
        missing = [task_id for task_id in task_ids if task_id not in tasks]
        if missing:
            raise NotFoundError(f"Task not found with id: {', '.join(str(i) for i in missing)}")
        foreign = [task.id for task in tasks.values() if task.user_id != user.id]
        if foreign:
            logger.warning("[TASK] user_id=%s denied bulk access to task_ids=%s", user.id, foreign)
            raise ForbiddenError("You do not have access to one or more of these tasks")
        return tasks

    async def create_tasks_bulk(
        self, db: AsyncSession, current_user: Optional[User], payloads: Sequence[TaskRequest]
    ) -> list[Task]:
        user = _require_user(current_user)
        if not payloads:
            return []

        # Validate everything before anything is written
        resolved = [await self._resolve_refs(db, payload) for payload in payloads]
        tasks = [self._build_task(user, payload, refs) for payload, refs in zip(payloads, resolved)]

        tasks = await self._persist(db, "create tasks", task_repo.save_tasks(db, tasks))
        logger.info("[TASK] user_id=%s created %d tasks", user.id, len(tasks))
        return tasks

    async def update_tasks_bulk(
        self, db: AsyncSession, current_user: Optional[User], updates: Sequence[BulkTaskUpdate]
    ) -> list[Task]:
        user = _require_user(current_user)
        if not updates:
            return []

        tasks = await self._get_owned_tasks(db, user, [update.id for update in updates])
        resolved = [await self._resolve_refs(db, update) for update in updates]
        for update, refs in zip(updates, resolved):
            self._apply_update(tasks[update.id], update, refs)

        ordered = list(dict.fromkeys(update.id for update in updates))
        return await self._persist(db, "update tasks", task_repo.save_tasks(db, [tasks[i] for i in ordered]))

    async def delete_tasks_bulk(self, db: AsyncSession, current_user: Optional[User], task_ids: Sequence[int]) -> None:
        user = _require_user(current_user)
        task_ids = list(dict.fromkeys(task_ids))
        if not task_ids:
            return

        tasks = await self._get_owned_tasks(db, user, task_ids)

        await self._persist(db, "delete tasks", task_repo.delete_tasks(db, list(tasks.values())))
        logger.info("[TASK] user_id=%s deleted %d tasks", user.id, len(tasks))
