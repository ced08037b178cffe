# app/models/orm/user.py
from datetime import datetime
from typing import Any, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.orm.base import Base, IntegerMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.orm.task import Task


ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"


class User(Base, IntegerMixin, TimestampMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)

    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Legacy single-field display name, kept in sync by apply_user_names
    name: Mapped[str] = mapped_column(String(511), nullable=False, default="")

    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # "github" etc., None for local password accounts
    auth_provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    provider_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    settings: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    tasks: Mapped[list["Task"]] = relationship(
        back_populates="owner",
        foreign_keys="Task.user_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )


def apply_user_names(
    user: User,
    first_name: str | None = None,
    last_name: str | None = None,
    name: str | None = None,
) -> User:
    """
    Normalize first/last/display name on a user.

    Explicit first/last names win; a single display name is split on the
    first space into first/last. Whenever both parts are set the stored
    name is "first last".
    """
    if first_name is not None:
        user.first_name = first_name.strip()
    if last_name is not None:
        user.last_name = last_name.strip()

    if name is not None and (first_name is None or last_name is None):
        cleaned = name.strip()
        if " " in cleaned:
            first, last = cleaned.split(" ", 1)
            user.first_name = first
            user.last_name = last.strip()
        else:
            user.first_name = cleaned or None
            user.last_name = None
        user.name = cleaned

    if user.first_name and user.last_name:
        user.name = f"{user.first_name} {user.last_name}"
    elif not user.name:
        user.name = user.first_name or user.last_name or ""
    return user
