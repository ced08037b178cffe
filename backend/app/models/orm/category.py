# app/models/orm/category.py
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from app.models.orm.base import Base, IntegerMixin


class Category(Base, IntegerMixin):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
