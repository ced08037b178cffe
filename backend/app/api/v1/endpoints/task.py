from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.config import configs
from app.core.container import Container
from app.core.db import get_db
from app.core.dependencies import get_current_user
from app.models.orm.task import Priority
from app.models.orm.user import User
from app.repository.task_repo import TaskFilters
from app.schemas.base_schema import ApiResponse, PageResponse, ResponseMetadata
from app.schemas.task_schema import BulkTaskUpdate, TaskRequest, TaskResponse
from app.services.task_service import PageRequest, TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=ApiResponse[PageResponse[TaskResponse]])
@inject
async def get_tasks(
    page: int = Query(configs.PAGE),
    size: int = Query(configs.PAGE_SIZE),
    sort: Optional[str] = Query(None),
    direction: str = Query("desc"),
    search: Optional[str] = Query(None),
    task_status: Optional[str] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    completed: Optional[bool] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(Provide[Container.task_service]),
):
    """
    The caller's tasks, one page at a time
    """
    filters = TaskFilters(
        search=search,
        status=task_status,
        priority=priority,
        completed=completed,
        category_id=category_id,
    )
    result = await task_service.list_tasks(
        db,
        current_user,
        PageRequest(page=page, size=size, sort=sort, direction=direction, filters=filters),
    )

    return ApiResponse.success(
        PageResponse(
            content=[TaskResponse.from_task(task) for task in result.items],
            page=result.page,
            size=result.size,
            total_elements=result.total,
            total_pages=result.total_pages,
        ),
        metadata=ResponseMetadata(
            page=result.page,
            size=result.size,
            total=result.total,
            sort=f"{sort or 'createdAt'},{direction if sort else 'desc'}",
            filter=search,
        ),
    )


@router.post("/bulk", response_model=ApiResponse[List[TaskResponse]])
@inject
async def create_tasks_bulk(
    payloads: List[TaskRequest],
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(Provide[Container.task_service]),
):
    tasks = await task_service.create_tasks_bulk(db, current_user, payloads)
    return ApiResponse.success([TaskResponse.from_task(task) for task in tasks], "Tasks created successfully")


@router.put("/bulk", response_model=ApiResponse[List[TaskResponse]])
@inject
async def update_tasks_bulk(
    payloads: List[BulkTaskUpdate],
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(Provide[Container.task_service]),
):
    tasks = await task_service.update_tasks_bulk(db, current_user, payloads)
    return ApiResponse.success([TaskResponse.from_task(task) for task in tasks], "Tasks updated successfully")


@router.delete("/bulk", response_model=ApiResponse)
@inject
async def delete_tasks_bulk(
    task_ids: List[int] = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(Provide[Container.task_service]),
):
    await task_service.delete_tasks_bulk(db, current_user, task_ids)
    return ApiResponse.success(None, "Tasks deleted successfully")


@router.get("/{task_id}", response_model=ApiResponse[TaskResponse])
@inject
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(Provide[Container.task_service]),
):
    task = await task_service.get_task(db, current_user, task_id)
    return ApiResponse.success(TaskResponse.from_task(task))


@router.post("", response_model=ApiResponse[TaskResponse])
@inject
async def create_task(
    payload: TaskRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(Provide[Container.task_service]),
):
    task = await task_service.create_task(db, current_user, payload)
    return ApiResponse.success(TaskResponse.from_task(task), "Task created successfully")


@router.put("/{task_id}", response_model=ApiResponse[TaskResponse])
@inject
async def update_task(
    task_id: int,
    payload: TaskRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(Provide[Container.task_service]),
):
    task = await task_service.update_task(db, current_user, task_id, payload)
    return ApiResponse.success(TaskResponse.from_task(task), "Task updated successfully")


@router.delete("/{task_id}", response_model=ApiResponse)
@inject
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(Provide[Container.task_service]),
):
    await task_service.delete_task(db, current_user, task_id)
    return ApiResponse.success(None, "Task deleted successfully")
