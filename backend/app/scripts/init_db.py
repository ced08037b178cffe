import asyncio
import logging

from sqlalchemy import select

from app.core.db import AsyncSessionLocal, engine
from app.models.orm import Base, Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Work", "#3B82F6"),
    ("Personal", "#10B981"),
    ("Shopping", "#F59E0B"),
    ("Health", "#EF4444"),
    ("Learning", "#8B5CF6"),
]


async def seed_categories(session) -> int:
    existing = set((await session.execute(select(Category.name))).scalars().all())
    missing = [Category(name=name, color=color) for name, color in DEFAULT_CATEGORIES if name not in existing]
    session.add_all(missing)
    await session.commit()
    return len(missing)


async def init():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        created = await seed_categories(session)
    logger.info("Database initialised, %d categories seeded", created)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init())
