from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.container import Container
from app.core.db import get_db
from app.core.dependencies import get_current_user
from app.models.orm.user import User
from app.schemas.base_schema import ApiResponse
from app.schemas.category_schema import CategoryRequest, CategoryResponse
from app.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=ApiResponse[List[CategoryResponse]])
@inject
async def get_categories(
    db: AsyncSession = Depends(get_db),
    category_service: CategoryService = Depends(Provide[Container.category_service]),
):
    """
    All categories - public
    """
    categories = await category_service.list_categories(db)
    return ApiResponse.success([CategoryResponse.model_validate(c) for c in categories])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[CategoryResponse])
@inject
async def create_category(
    payload: CategoryRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    category_service: CategoryService = Depends(Provide[Container.category_service]),
):
    """
    Create a category - admin only
    """
    category = await category_service.create_category(db, current_user, payload.name, payload.color)
    return ApiResponse.success(CategoryResponse.model_validate(category), "Category created successfully")
