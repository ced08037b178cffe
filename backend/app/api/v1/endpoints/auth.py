from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.core.container import Container
from app.core.db import get_db
from app.core.dependencies import get_current_user
from app.models.orm.user import User
from app.schemas.auth_schema import JwtResponse, LoginRequest, RegisterRequest
from app.schemas.base_schema import ApiResponse
from app.schemas.user_schema import UserResponse
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=ApiResponse[JwtResponse])
@inject
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
):
    """
    Login endpoint - authenticate user and return access & refresh tokens
    """
    logger.info("[LOGIN] attempt for email=%s", payload.email)

    result = await auth_service.login(db, payload.email, payload.password)

    return ApiResponse.success(
        JwtResponse(
            token=result.access_token,
            refresh_token=result.refresh_token,
            user=UserResponse.model_validate(result.user),
        ),
        "Login successful",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[UserResponse])
@inject
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
):
    logger.info("[REGISTER] email=%s", payload.email)

    user = await auth_service.register(
        db,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
    )

    return ApiResponse.success(UserResponse.model_validate(user), "User registered successfully")


@router.get("/verify-email/{token}", response_model=ApiResponse)
@inject
async def verify_email(
    token: str,
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
):
    await auth_service.verify_email(token)
    return ApiResponse.success(None, "Email verified successfully")


@router.post("/resend-verification", response_model=ApiResponse)
@inject
async def resend_verification(
    email: str = Query(...),
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
):
    await auth_service.resend_verification_email(db, email)
    return ApiResponse.success(None, "Verification email sent successfully")


@router.post("/refresh-token", response_model=ApiResponse[JwtResponse])
@inject
async def refresh(
    refresh_token: str = Query(..., alias="refreshToken"),
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
):
    """
    Exchange a refresh token for a new token pair. The presented token is revoked.
    """
    result = await auth_service.refresh_token(db, refresh_token)

    return ApiResponse.success(
        JwtResponse(token=result.access_token, refresh_token=result.refresh_token),
        "Token refreshed successfully",
    )


@router.post("/logout", response_model=ApiResponse)
@inject
async def logout(
    refresh_token: str = Query(..., alias="refreshToken"),
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
):
    """
    Logout endpoint - revokes the refresh token; the client should clear both tokens
    """
    await auth_service.logout(db, refresh_token)
    return ApiResponse.success(None, "Logged out successfully")


@router.get("/user", response_model=ApiResponse[UserResponse])
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Get current user information from JWT token
    """
    return ApiResponse.success(UserResponse.model_validate(current_user), "User details retrieved successfully")
