from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, constr, field_validator

from app.models.orm.task import Priority
from app.schemas.base_schema import CamelModel


class TaskRequest(CamelModel):
    """
    Task create/update payload.

    On update only the fields that are not None are applied, except
    ``category_id``: leaving it out clears the task's category.
    """
    title: Optional[constr(strip_whitespace=True, min_length=1, max_length=255)] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    category_id: Optional[int] = None
    status: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None
    type: Optional[constr(max_length=50)] = None
    story_points: Optional[int] = Field(default=None, ge=0)
    labels: Optional[List[str]] = None
    dependencies: Optional[List[int]] = None
    assignee_id: Optional[int] = None

    @field_validator("priority", mode="before")
    @classmethod
    def upper_priority(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class BulkTaskUpdate(TaskRequest):
    id: int


class TaskResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[Priority] = None
    type: Optional[str] = None
    story_points: Optional[int] = None
    labels: List[str] = []
    dependencies: List[int] = []
    assignee_id: Optional[int] = None
    assignee_name: Optional[str] = None
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_id: int
    completed: bool = False
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    category_color: Optional[str] = None

    @classmethod
    def from_task(cls, task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            type=task.type,
            story_points=task.story_points,
            labels=list(task.labels or []),
            dependencies=list(task.dependencies or []),
            assignee_id=task.assignee.id if task.assignee else None,
            assignee_name=task.assignee.name if task.assignee else None,
            due_date=task.due_date,
            created_at=task.created_at,
            updated_at=task.updated_at,
            user_id=task.user_id,
            completed=task.completed,
            category_id=task.category.id if task.category else None,
            category_name=task.category.name if task.category else None,
            category_color=task.category.color if task.category else None,
        )
