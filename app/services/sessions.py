"""
Session manager — register, login, logout and per-request session lookup.

Sessions live server-side in the ``sessions`` table. Each one has a fixed
lifetime from issuance; it is never extended, and an expired row is treated
as absent (and deleted) the first time it is presented.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete as sa_delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import InvalidCredentialsError
from app.core.security import (dummy_verify_password, generate_session_token,
                               hash_session_token, verify_password)
from app.models.session import UserSession
from app.models.user import Role, User
from app.services.identity import create_user, find_user_by_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveSession:
    token: str
    user_id: int
    role: Role
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


async def issue_session(db: AsyncSession, user: User) -> ActiveSession:
    token = generate_session_token()
    expires_at = _utcnow() + timedelta(minutes=settings.SESSION_TTL_MINUTES)
    db.add(
        UserSession(
            token_hash=hash_session_token(token),
            user_id=user.id,
            role=user.role,
            expires_at=expires_at,
        )
    )
    await db.commit()
    logger.info("Session issued for user %d (expires %s)", user.id, expires_at.isoformat())
    return ActiveSession(
        token=token,
        user_id=user.id,
        role=Role(user.role),
        expires_at=expires_at,
    )


async def register(
    db: AsyncSession, *, name: str, email: str, password: str
) -> tuple[User, ActiveSession]:
    """Create a guest account and sign it in."""
    user = await create_user(db, name=name, email=email, password=password)
    return user, await issue_session(db, user)


async def login(db: AsyncSession, email: str, password: str) -> tuple[User, ActiveSession]:
    user = await find_user_by_email(db, email)
    if user is None:
        dummy_verify_password()
        raise InvalidCredentialsError()
    if not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError()
    return user, await issue_session(db, user)


async def logout(db: AsyncSession, token: str | None) -> None:
    """Destroy the session behind *token*. Unknown or missing tokens are a no-op."""
    if not token:
        return
    await db.execute(
        sa_delete(UserSession).where(UserSession.token_hash == hash_session_token(token))
    )
    await db.commit()


async def resolve_session(db: AsyncSession, token: str | None) -> ActiveSession | None:
    """Return the live session for *token*, or ``None`` if it is unknown or expired."""
    if not token:
        return None
    record = await db.get(UserSession, hash_session_token(token))
    if record is None:
        return None

    expires_at = _ensure_utc(record.expires_at)
    if expires_at <= _utcnow():
        await db.delete(record)
        await db.commit()
        logger.info("Expired session for user %d purged", record.user_id)
        return None

    try:
        role = Role(record.role)
    except ValueError:
        logger.error("Session for user %d carries unknown role %r", record.user_id, record.role)
        return None
    return ActiveSession(
        token=token,
        user_id=record.user_id,
        role=role,
        expires_at=expires_at,
    )
