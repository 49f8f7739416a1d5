"""
Identity store — user lookup and creation with e-mail uniqueness.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateEmailError, NotFoundError
from app.core.security import get_password_hash
from app.models.user import Role, User
from app.schemas.user import normalise_email

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalise_email(email)))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    role: Role = Role.GUEST,
) -> User:
    """Insert a user, failing with ``DuplicateEmailError`` when the address is taken."""
    email = normalise_email(email)
    if await find_user_by_email(db, email) is not None:
        raise DuplicateEmailError(email)

    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        role=role.value,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.info("Concurrent registration for %s rejected", email)
        raise DuplicateEmailError(email) from exc
    await db.refresh(user)
    logger.info("Created %s user %d (%s)", role.value, user.id, email)
    return user
