"""
Shared fixtures for the service and API tests: an in-memory SQLite
database with the full schema, plus a few factories for seeded rows.
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.models.orm import Base, Category, User
from app.models.orm.user import ROLE_USER, apply_user_names
from app.utils.password import hash_password

TEST_SECRET = "test-secret-key"
FRONTEND_REDIRECT = "http://localhost:5173/oauth/redirect"


async def create_test_database():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    return engine, session_factory


async def make_user(db, email, password="password123", name="Test User", role=ROLE_USER, is_active=True):
    user = User(
        email=email,
        hashed_password=hash_password(password),
        role=role,
        is_active=is_active,
        name="",
    )
    apply_user_names(user, name=name)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_category(db, name="Work", color="#3B82F6"):
    category = Category(name=name, color=color)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category
