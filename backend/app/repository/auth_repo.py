# app/repository/auth_repo.py

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, exists, select

from app.models.orm.revoked_token import RevokedToken
from app.models.orm.user import User


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(
        select(User).where(User.email == email)
    )
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    return result.scalar_one_or_none()


async def exists_user_by_email(db: AsyncSession, email: str) -> bool:
    result = await db.execute(
        select(exists().where(User.email == email))
    )
    return bool(result.scalar())


async def get_active_users(db: AsyncSession) -> list[User]:
    result = await db.execute(
        select(User).where(User.is_active.is_(True)).order_by(User.name)
    )
    return list(result.scalars().all())


async def save_user(db: AsyncSession, user: User) -> User:
    """Insert or update a user and return the refreshed row."""
    db.add(user)
    await db.commit()
    await db.refresh(user)

    return user


async def is_token_revoked(db: AsyncSession, jti: str) -> bool:
    result = await db.execute(
        select(exists().where(RevokedToken.jti == jti))
    )
    return bool(result.scalar())


async def revoke_token(db: AsyncSession, jti: str, expires_at: datetime) -> None:
    """Add a refresh token id to the denylist. Caller commits."""
    if await is_token_revoked(db, jti):
        return
    db.add(RevokedToken(jti=jti, expires_at=expires_at))


async def purge_expired_tokens(db: AsyncSession) -> int:
    """Drop denylist rows whose tokens have expired anyway. Caller commits."""
    result = await db.execute(
        delete(RevokedToken).where(RevokedToken.expires_at < datetime.now(timezone.utc))
    )
    return result.rowcount or 0
