import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from app.core.exceptions import TokenSigningError
from app.models.orm.user import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"
TOKEN_TYPE_OAUTH_STATE = "oauth_state"


class TokenService:
    """
    Issues and validates the signed, self-contained bearer tokens.

    Tokens carry ``sub`` (the user's email), ``role``, ``iat``, ``exp``,
    ``type`` and ``jti``. Nothing is stored server side; revocation of
    refresh tokens is handled by the denylist in the auth service.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = ALGORITHM,
        access_token_expire_minutes: int = 60,
        refresh_token_expire_minutes: int = 60 * 24 * 7,
        state_expire_minutes: int = 10,
    ):
        if not secret_key:
            raise ValueError("SECRET_KEY must be configured")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expires = timedelta(minutes=access_token_expire_minutes)
        self.refresh_token_expires = timedelta(minutes=refresh_token_expire_minutes)
        self.state_expires = timedelta(minutes=state_expire_minutes)

    def _encode(self, claims: dict[str, Any], expires: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": int(now.timestamp()),
            "exp": int((now + expires).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        try:
            return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except (JWTError, ValueError, TypeError) as e:
            logger.error("Token signing failed: %s", e)
            raise TokenSigningError(str(e)) from e

    def issue_access_token(self, user: User) -> str:
        return self._encode(
            {"sub": user.email, "role": user.role, "type": TOKEN_TYPE_ACCESS},
            self.access_token_expires,
        )

    def issue_refresh_token(self, user: User) -> str:
        return self._encode(
            {"sub": user.email, "role": user.role, "type": TOKEN_TYPE_REFRESH},
            self.refresh_token_expires,
        )

    def issue_state_token(self) -> str:
        return self._encode({"type": TOKEN_TYPE_OAUTH_STATE}, self.state_expires)

    def decode(self, token: str) -> dict[str, Any]:
        """Verify signature and expiry and return the claims. Raises JWTError."""
        return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])

    def validate(self, token: Optional[str], token_type: Optional[str] = None) -> bool:
        if not token or not isinstance(token, str):
            return False
        try:
            claims = self.decode(token)
        except (JWTError, ValueError, TypeError) as e:
            logger.debug("Token rejected: %s", e)
            return False
        if token_type is not None and claims.get("type") != token_type:
            logger.debug("Token rejected: expected type %s, got %s", token_type, claims.get("type"))
            return False
        if token_type != TOKEN_TYPE_OAUTH_STATE and not claims.get("sub"):
            return False
        return True

    def subject_of(self, token: str) -> str:
        """Email carried by a token that already passed validate()."""
        return self.decode(token)["sub"]
