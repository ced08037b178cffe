import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    InternalError,
    NotFoundError,
    NotImplementedFeatureError,
    UnauthenticatedError,
    UnauthorizedError,
    ValidationError,
)
from app.models.orm.user import User, apply_user_names
from app.repository.auth_repo import get_active_users, get_user_by_email, save_user
from app.schemas.user_schema import UpdateProfileRequest
from app.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)

_JSON_SCALARS = (str, int, float, bool, type(None))


def _is_json_value(value: Any) -> bool:
    if isinstance(value, _JSON_SCALARS):
        return True
    if isinstance(value, list):
        return all(_is_json_value(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(key, str) and _is_json_value(item) for key, item in value.items())
    return False


def validate_preferences(preferences: Any) -> Dict[str, Any]:
    """
    Preferences are a JSON object: string keys mapping to strings, numbers,
    booleans, null, or nested lists/objects of those.
    """
    if not isinstance(preferences, dict):
        raise ValidationError("Preferences must be a valid map.")
    if not _is_json_value(preferences):
        raise ValidationError("Preferences may only contain JSON values with string keys.")
    return dict(preferences)


class UserService:
    """Profile, preferences and password management for the signed-in user."""

    def _require_user(self, current_user: Optional[User]) -> User:
        if current_user is None:
            raise UnauthenticatedError("User not authenticated")
        return current_user

    async def _save(self, db: AsyncSession, user: User, action: str) -> User:
        try:
            return await save_user(db, user)
        except SQLAlchemyError as e:
            logger.error("[USER] Storage error during %s for user_id=%s: %s", action, user.id, e)
            await db.rollback()
            raise InternalError(f"Could not {action}. Please try again later.")

    def get_profile(self, current_user: Optional[User]) -> User:
        return self._require_user(current_user)

    async def update_profile(
        self, db: AsyncSession, current_user: Optional[User], payload: UpdateProfileRequest
    ) -> User:
        user = self._require_user(current_user)
        settings = validate_preferences(payload.settings) if payload.settings is not None else None

        # Email, password, role and provider are not editable here
        apply_user_names(
            user,
            first_name=payload.first_name,
            last_name=payload.last_name,
            name=payload.name,
        )
        if settings is not None:
            user.settings = settings

        return await self._save(db, user, "update profile")

    def get_preferences(self, current_user: Optional[User]) -> Dict[str, Any]:
        user = self._require_user(current_user)
        return dict(user.settings or {})

    async def update_preferences(self, db: AsyncSession, current_user: Optional[User], preferences: Any) -> Dict[str, Any]:
        user = self._require_user(current_user)
        user.settings = validate_preferences(preferences)
        user = await self._save(db, user, "update preferences")
        return dict(user.settings or {})

    async def change_password(
        self, db: AsyncSession, current_user: Optional[User], current_password: str, new_password: str
    ) -> None:
        user = self._require_user(current_user)
        if not verify_password(current_password, user.hashed_password):
            raise UnauthorizedError("Current password is incorrect")

        user.hashed_password = hash_password(new_password)
        await self._save(db, user, "change password")
        logger.info("[CHANGE_PASSWORD] user_id=%s", user.id)

    async def request_password_reset(self, db: AsyncSession, email: str) -> None:
        user = await get_user_by_email(db, email.strip().lower())
        if user is None:
            raise NotFoundError(f"User not found with email: {email}")
        raise NotImplementedFeatureError("Password reset e-mails are not available")

    async def reset_password(self, token: str, new_password: str) -> None:
        raise NotImplementedFeatureError("Password reset is not available")

    async def get_assignable_users(self, db: AsyncSession) -> list[User]:
        return await get_active_users(db)
