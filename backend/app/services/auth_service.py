import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode, urlparse, urlunparse, parse_qsl

from jose import JWTError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ConflictError,
    InternalError,
    MissingRequiredClaimError,
    NotFoundError,
    NotImplementedFeatureError,
    TokenSigningError,
    UnauthorizedError,
)
from app.core.security import TOKEN_TYPE_REFRESH, TokenService
from app.models.orm.user import ROLE_USER, User, apply_user_names
from app.repository.auth_repo import (
    exists_user_by_email,
    get_user_by_email,
    is_token_revoked,
    purge_expired_tokens,
    revoke_token,
    save_user,
)
from app.services.account_linker import AccountLinker, ExternalIdentity
from app.utils.password import dummy_verify, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class AuthResult:
    access_token: str
    refresh_token: Optional[str] = None
    user: Optional[User] = None


class CredentialVerifier:
    """Checks an email/password pair against the stored bcrypt hash."""

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        user = await get_user_by_email(db, normalize_email(email))
        if user is None:
            dummy_verify()
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not verify_password(password, user.hashed_password) or not user.is_active:
            raise UnauthorizedError(INVALID_CREDENTIALS)

        return user


class AuthService:
    """Login, registration, token refresh/logout and OAuth2 sign in."""

    def __init__(
        self,
        token_service: TokenService,
        credential_verifier: CredentialVerifier,
        account_linker: AccountLinker,
        frontend_redirect_uri: str,
    ):
        self.token_service = token_service
        self.credential_verifier = credential_verifier
        self.account_linker = account_linker
        self.frontend_redirect_uri = frontend_redirect_uri

    def _issue_pair(self, user: User) -> tuple[str, str]:
        try:
            return (
                self.token_service.issue_access_token(user),
                self.token_service.issue_refresh_token(user),
            )
        except TokenSigningError:
            logger.exception("[TOKEN] Error generating JWT tokens for user %s", user.email)
            raise InternalError("Error generating authentication tokens. Please try again later.")

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthResult:
        try:
            user = await self.credential_verifier.authenticate(db, email, password)
        except UnauthorizedError:
            logger.warning("[LOGIN] Authentication failed for user %s", email)
            raise

        access_token, refresh_token = self._issue_pair(user)

        try:
            user.last_login = datetime.now(timezone.utc)
            user = await save_user(db, user)
        except SQLAlchemyError as e:
            logger.error("[LOGIN] Data access error during login for user %s: %s", user.email, e)
            await db.rollback()
            raise InternalError("A data access error occurred while finalizing login. Please try again later.")

        logger.info("[LOGIN] Login successful for user_id=%s", user.id)
        return AuthResult(access_token=access_token, refresh_token=refresh_token, user=user)

    async def register(
        self,
        db: AsyncSession,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
    ) -> User:
        email = normalize_email(email)
        if await exists_user_by_email(db, email):
            raise ConflictError("Email is already registered")

        user = User(
            email=email,
            hashed_password=hash_password(password),
            role=ROLE_USER,
            is_active=True,
            name="",
        )
        apply_user_names(user, first_name=first_name, last_name=last_name)

        try:
            user = await save_user(db, user)
        except IntegrityError:
            # Lost a race with a concurrent registration
            await db.rollback()
            raise ConflictError("Email is already registered")
        except SQLAlchemyError as e:
            logger.error("[REGISTER] Storage error for %s: %s", email, e)
            await db.rollback()
            raise InternalError("Could not register user. Please try again later.")

        # TODO: store a verification token and send it once a mail transport exists
        logger.info("[REGISTER] user_id=%s registered, email verification not sent", user.id)
        return user

    async def refresh_token(self, db: AsyncSession, refresh_token: str) -> AuthResult:
        if not self.token_service.validate(refresh_token, token_type=TOKEN_TYPE_REFRESH):
            raise UnauthorizedError("Invalid refresh token")

        claims = self.token_service.decode(refresh_token)
        jti = claims.get("jti")
        if not jti or await is_token_revoked(db, jti):
            logger.warning("[REFRESH] Revoked refresh token presented for %s", claims.get("sub"))
            raise UnauthorizedError("Invalid refresh token")

        user = await get_user_by_email(db, claims["sub"])
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found")

        access_token, new_refresh_token = self._issue_pair(user)

        # Rotate: the presented token cannot be used again
        try:
            await revoke_token(db, jti, datetime.fromtimestamp(claims["exp"], tz=timezone.utc))
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise UnauthorizedError("Invalid refresh token")
        except SQLAlchemyError as e:
            logger.error("[REFRESH] Storage error while rotating token for %s: %s", user.email, e)
            await db.rollback()
            raise InternalError("Could not refresh token. Please try again later.")

        return AuthResult(access_token=access_token, refresh_token=new_refresh_token)

    async def logout(self, db: AsyncSession, refresh_token: str) -> None:
        if not self.token_service.validate(refresh_token, token_type=TOKEN_TYPE_REFRESH):
            logger.info("[LOGOUT] Ignoring invalid or expired refresh token")
            return

        try:
            claims = self.token_service.decode(refresh_token)
        except JWTError:
            return

        try:
            await revoke_token(db, claims["jti"], datetime.fromtimestamp(claims["exp"], tz=timezone.utc))
            await purge_expired_tokens(db)
            await db.commit()
        except IntegrityError:
            # Already revoked by a concurrent request
            await db.rollback()
        except SQLAlchemyError as e:
            logger.error("[LOGOUT] Storage error while revoking token: %s", e)
            await db.rollback()
            raise InternalError("Could not log out. Please try again later.")
        logger.info("[LOGOUT] Refresh token revoked for %s", claims.get("sub"))

    async def oauth2_success(self, db: AsyncSession, provider: str, identity: ExternalIdentity) -> str:
        """Link the external identity and return the frontend redirect URL."""
        try:
            user = await self.account_linker.resolve_external_identity(
                db,
                provider=provider,
                external_id=identity.external_id,
                email=identity.email,
                display_name=identity.name,
            )
        except MissingRequiredClaimError as e:
            return self.redirect_url(error=e.detail)

        try:
            user.last_login = datetime.now(timezone.utc)
            user = await save_user(db, user)
        except SQLAlchemyError as e:
            logger.error("[OAUTH] Could not update last login for %s: %s", user.email, e)
            await db.rollback()
            return self.redirect_url(error="authentication_failed")

        try:
            token = self.token_service.issue_access_token(user)
        except TokenSigningError:
            logger.exception("[OAUTH] Error generating JWT token for user %s", user.email)
            return self.redirect_url(error="authentication_failed")

        logger.info("[OAUTH] Redirecting %s user %s to frontend with token", provider, user.email)
        return self.redirect_url(token=token)

    def redirect_url(self, **params: str) -> str:
        parsed = urlparse(self.frontend_redirect_uri)
        query = parse_qsl(parsed.query)
        query.extend(params.items())
        return urlunparse(parsed._replace(query=urlencode(query)))

    async def verify_email(self, token: str) -> None:
        raise NotImplementedFeatureError("Email verification is not available")

    async def resend_verification_email(self, db: AsyncSession, email: str) -> None:
        user = await get_user_by_email(db, normalize_email(email))
        if user is None:
            raise NotFoundError("User not found")
        raise NotImplementedFeatureError("Email verification is not available")
