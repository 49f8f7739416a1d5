"""
Auth endpoints — registration, login (OAuth2 password form) & logout.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import OAuth2PasswordRequestForm
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_user, get_db, get_session_token
from app.core.config import settings
from app.core.errors import InvalidCredentialsError
from app.core.security import sign_session_token
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.user import RegisterRequest, SessionRead, UserRead
from app.services import sessions
from app.services.sessions import ActiveSession

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _start_session(response: Response, user: User, active: ActiveSession) -> SessionRead:
    signed = sign_session_token(active.token, active.expires_at)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=signed,
        httponly=True,
        secure=settings.COOKIE_SECURE,  # Set to True in HTTPS production
        samesite="lax",
        max_age=settings.SESSION_TTL_MINUTES * 60,
    )
    return SessionRead(
        user=UserRead.model_validate(user),
        expires_at=active.expires_at,
        token=signed,
    )


@router.post("/register", response_model=SessionRead, status_code=201)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionRead:
    """Create a guest account and sign it in."""
    user, active = await sessions.register(
        db, name=body.name, email=body.email, password=body.password
    )
    return _start_session(response, user, active)


@router.post("/login", response_model=SessionRead)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
) -> SessionRead:
    """Authenticate with email/password. Sets an HttpOnly session cookie."""
    try:
        user, active = await sessions.login(db, form_data.username, form_data.password)
    except InvalidCredentialsError:
        logger.info("Failed login attempt from %s", get_remote_address(request))
        raise
    return _start_session(response, user, active)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Destroy the server-side session and clear the cookie."""
    await sessions.logout(db, token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserRead)
async def read_current_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Return profile of the currently authenticated user."""
    return current_user
