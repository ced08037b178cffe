import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, ForbiddenError, InternalError, UnauthenticatedError
from app.models.orm.category import Category
from app.models.orm.user import ROLE_ADMIN, User
from app.repository import category_repo

logger = logging.getLogger(__name__)


class CategoryService:
    """Categories are global lookup data: anyone reads, admins create."""

    async def list_categories(self, db: AsyncSession) -> list[Category]:
        return await category_repo.get_all_categories(db)

    async def create_category(
        self, db: AsyncSession, current_user: Optional[User], name: str, color: Optional[str] = None
    ) -> Category:
        if current_user is None:
            raise UnauthenticatedError("User not authenticated")
        if current_user.role != ROLE_ADMIN:
            raise ForbiddenError("Admin access required")
        if await category_repo.exists_category_by_name(db, name):
            raise ConflictError(f"Category '{name}' already exists")

        try:
            category = await category_repo.create_category(db, name=name, color=color)
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Category '{name}' already exists")
        except SQLAlchemyError as e:
            logger.error("[CATEGORY] Storage error creating '%s': %s", name, e)
            await db.rollback()
            raise InternalError("Could not create category. Please try again later.")

        logger.info("[CATEGORY] user_id=%s created category_id=%s", current_user.id, category.id)
        return category
