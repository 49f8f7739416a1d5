"""
FastAPI dependencies — session lookup, auth guards and database session.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import ForbiddenError, LoginRequiredError
from app.core.security import unsign_session_token
from app.db.session import async_session_factory
from app.models.user import Role, User
from app.services.identity import get_user
from app.services.sessions import ActiveSession, resolve_session

# auto_error=False so a missing header falls through to the cookie
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.LOGIN_URL, auto_error=False)

# Which roles each role may act as
_GRANTS: dict[Role, frozenset[Role]] = {
    Role.GUEST: frozenset({Role.GUEST}),
    Role.ADMIN: frozenset({Role.GUEST, Role.ADMIN}),
}


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Session lookup ──────────────────────────────────────────────────
async def get_session_token(
    token: Optional[str] = Depends(oauth2_scheme),
    sid: Optional[str] = Cookie(default=None, alias=settings.SESSION_COOKIE_NAME),
) -> str | None:
    """Raw session token from the signed header or cookie value. Header wins."""
    signed = token or sid
    if not signed:
        return None
    return unsign_session_token(signed)


async def get_current_session(
    token: str | None = Depends(get_session_token),
    db: AsyncSession = Depends(get_db),
) -> ActiveSession | None:
    return await resolve_session(db, token)


# ── Guards ──────────────────────────────────────────────────────────
def role_satisfies(actual: Role, required: Role) -> bool:
    return required in _GRANTS[actual]


async def require_authenticated(
    session: ActiveSession | None = Depends(get_current_session),
) -> ActiveSession:
    """Bounce anonymous callers to the login page."""
    if session is None:
        raise LoginRequiredError()
    return session


def require_role(required: Role) -> Callable[..., Awaitable[ActiveSession]]:
    async def _guard(
        session: ActiveSession = Depends(require_authenticated),
    ) -> ActiveSession:
        if not role_satisfies(session.role, required):
            raise ForbiddenError(f"{required.value.capitalize()} privileges required")
        return session

    return _guard


require_admin = require_role(Role.ADMIN)


async def get_current_user(
    session: ActiveSession = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await get_user(db, session.user_id)
