# app/models/orm/task.py
import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.orm.base import Base, IntegerMixin, TimestampMixin
from app.models.orm.category import Category
from app.models.orm.user import User


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Task(Base, IntegerMixin, TimestampMixin):
    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="TODO")
    priority: Mapped[Priority | None] = mapped_column(
        Enum(Priority, name="task_priority"), nullable=True
    )
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    story_points: Mapped[int | None] = mapped_column(Integer, nullable=True)

    labels: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    dependencies: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    due_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Owner, fixed at creation
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assignee_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )

    owner: Mapped[User] = relationship(
        back_populates="tasks",
        foreign_keys=[user_id],
        lazy="selectin",
    )
    assignee: Mapped[User | None] = relationship(foreign_keys=[assignee_id], lazy="selectin")
    category: Mapped[Category | None] = relationship(lazy="selectin")
