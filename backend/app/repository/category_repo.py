# app/repository/category_repo.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import exists, select

from app.models.orm.category import Category


async def get_all_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(
        select(Category).order_by(Category.name)
    )
    return list(result.scalars().all())


async def get_category_by_id(db: AsyncSession, category_id: int) -> Category | None:
    return await db.get(Category, category_id)


async def exists_category_by_name(db: AsyncSession, name: str) -> bool:
    result = await db.execute(
        select(exists().where(Category.name == name))
    )
    return bool(result.scalar())


async def create_category(db: AsyncSession, name: str, color: str | None = None) -> Category:
    category = Category(name=name, color=color)

    db.add(category)
    await db.commit()
    await db.refresh(category)

    return category
