# app/models/orm/revoked_token.py
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from app.models.orm.base import Base, IntegerMixin, TimestampMixin


class RevokedToken(Base, IntegerMixin, TimestampMixin):
    """Denylisted refresh token ids, kept until the token would have expired."""
    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
