from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, List
import logging

from app.core.container import Container
from app.core.db import get_db
from app.core.dependencies import get_current_user
from app.models.orm.user import User
from app.schemas.base_schema import ApiResponse
from app.schemas.user_schema import ChangePasswordRequest, UpdateProfileRequest, UserResponse, UserSummary
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=ApiResponse[UserResponse])
@inject
async def get_profile(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(Provide[Container.user_service]),
):
    user = user_service.get_profile(current_user)
    return ApiResponse.success(UserResponse.model_validate(user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
@inject
async def update_profile(
    payload: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(Provide[Container.user_service]),
):
    user = await user_service.update_profile(db, current_user, payload)
    return ApiResponse.success(UserResponse.model_validate(user), "Profile updated successfully")


@router.get("/preferences", response_model=ApiResponse)
@inject
async def get_preferences(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(Provide[Container.user_service]),
):
    return ApiResponse.success(user_service.get_preferences(current_user))


@router.put("/preferences", response_model=ApiResponse)
@inject
async def update_preferences(
    preferences: Any = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(Provide[Container.user_service]),
):
    """
    Replace the caller's preferences. The body must be a JSON object.
    """
    settings = await user_service.update_preferences(db, current_user, preferences)
    return ApiResponse.success(settings, "Preferences updated successfully")


@router.put("/change-password", response_model=ApiResponse)
@inject
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(Provide[Container.user_service]),
):
    logger.info("[CHANGE_PASSWORD] user_id=%s", current_user.id)
    await user_service.change_password(db, current_user, payload.current_password, payload.new_password)
    return ApiResponse.success(None, "Password changed successfully")


@router.post("/reset-password", response_model=ApiResponse)
@inject
async def request_password_reset(
    email: str = Query(...),
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(Provide[Container.user_service]),
):
    await user_service.request_password_reset(db, email)
    return ApiResponse.success(None, "Password reset instructions sent to your email")


@router.post("/reset-password/{token}", response_model=ApiResponse)
@inject
async def reset_password(
    token: str,
    new_password: str = Query(..., alias="newPassword"),
    user_service: UserService = Depends(Provide[Container.user_service]),
):
    await user_service.reset_password(token, new_password)
    return ApiResponse.success(None, "Password reset successfully")


@router.get("/assignable", response_model=ApiResponse[List[UserSummary]])
@inject
async def get_assignable_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(Provide[Container.user_service]),
):
    users = await user_service.get_assignable_users(db)
    return ApiResponse.success([UserSummary.model_validate(u) for u in users])
