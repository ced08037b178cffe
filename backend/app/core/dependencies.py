from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.core.container import Container
from app.core.db import get_db
from app.core.exceptions import UnauthenticatedError, UnauthorizedError
from app.core.security import TOKEN_TYPE_ACCESS, TokenService
from app.models.orm.user import User
from app.repository.auth_repo import get_user_by_email

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@inject
async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(Provide[Container.token_service]),
) -> Optional[User]:
    """
    Resolve the bearer token to a user, or None when no token was sent.
    A token that is present but invalid is always an error.
    """
    if not credentials:
        return None

    token = credentials.credentials
    if not token_service.validate(token, token_type=TOKEN_TYPE_ACCESS):
        raise UnauthorizedError(
            "Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    email = token_service.subject_of(token)
    user = await get_user_by_email(db, email)

    if user is None or not user.is_active:
        logger.warning("Token subject not found or inactive: %s", email)
        raise UnauthorizedError(
            "User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def get_current_user(
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    if current_user is None:
        raise UnauthenticatedError("Not authenticated")
    return current_user

