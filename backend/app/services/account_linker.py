import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InternalError, MissingRequiredClaimError
from app.models.orm.user import ROLE_USER, User, apply_user_names
from app.repository.auth_repo import get_user_by_email, save_user
from app.utils.password import generate_random_password_hash

logger = logging.getLogger(__name__)


@dataclass
class ExternalIdentity:
    """Verified claims handed over by an identity provider."""
    email: Optional[str]
    name: Optional[str]
    external_id: Optional[str]


class AccountLinker:
    """Maps an external identity onto a local user record."""

    async def resolve_external_identity(
        self,
        db: AsyncSession,
        provider: str,
        external_id: Optional[str],
        email: Optional[str],
        display_name: Optional[str] = None,
    ) -> User:
        email = (email or "").strip().lower()
        external_id = str(external_id).strip() if external_id is not None else ""

        if not email:
            logger.warning("[OAUTH] %s did not return an email", provider)
            raise MissingRequiredClaimError(f"Email not provided by {provider}")
        if not external_id:
            logger.error("[OAUTH] %s did not return a subject id for %s", provider, email)
            raise MissingRequiredClaimError(f"{provider} id missing")

        try:
            user = await get_user_by_email(db, email)
            if user is None:
                user = self._create_user(provider, external_id, email, display_name)
            else:
                self._link_user(user, provider, external_id, display_name)
            return await save_user(db, user)
        except SQLAlchemyError as e:
            logger.error("[OAUTH] Storage error while linking %s account for %s: %s", provider, email, e)
            await db.rollback()
            raise InternalError("Could not complete sign in. Please try again later.")

    def _create_user(self, provider: str, external_id: str, email: str, display_name: Optional[str]) -> User:
        logger.info("[OAUTH] Creating new user for %s login: %s, %s id: %s", provider, email, provider, external_id)
        user = User(
            email=email,
            auth_provider=provider,
            provider_id=external_id,
            role=ROLE_USER,
            is_active=True,
            # No local password path for this account
            hashed_password=generate_random_password_hash(),
            name="",
        )
        apply_user_names(user, name=display_name or email.split("@", 1)[0])
        return user

    def _link_user(self, user: User, provider: str, external_id: str, display_name: Optional[str]) -> None:
        logger.info("[OAUTH] %s login for existing user: %s", provider, user.email)

        if user.auth_provider is None:
            logger.info("[OAUTH] Linking %s account (id: %s) to local user: %s", provider, external_id, user.email)
            user.auth_provider = provider
            user.provider_id = external_id
        elif user.auth_provider != provider:
            # Permissive merge: keep the original provider, record the new id
            logger.warning(
                "[OAUTH] User %s already exists with provider %s, accepting %s login",
                user.email, user.auth_provider, provider,
            )
            user.provider_id = external_id
        elif user.provider_id != external_id:
            logger.warning(
                "[OAUTH] %s id mismatch for user %s. Existing: %s, New: %s. Updating.",
                provider, user.email, user.provider_id, external_id,
            )
            user.provider_id = external_id

        if display_name and display_name.strip() != user.name:
            logger.info("[OAUTH] Updating name for user %s from '%s' to '%s'", user.email, user.name, display_name)
            apply_user_names(user, name=display_name)
