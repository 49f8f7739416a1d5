"""
Password hashing (bcrypt) and session token helpers.

The session token itself is an opaque random string; the server keeps only
its SHA-256 digest. What travels in the cookie is the token wrapped in a
signed JWT so tampered values are rejected before touching the store.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def dummy_verify_password() -> None:
    """Burn one bcrypt verification so a missing user costs as much as a bad password."""
    pwd_context.dummy_verify()


# ── Session tokens ──────────────────────────────────────────────────
def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def sign_session_token(token: str, expires_at: datetime) -> str:
    return jwt.encode(
        {"exp": expires_at, "sid": token, "type": "session"},
        _SECRET,
        algorithm=_ALGORITHM,
    )


def unsign_session_token(value: str) -> str | None:
    """Return the raw session token if *value* carries a valid signature, else ``None``."""
    try:
        payload = jwt.decode(value, _SECRET, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "session":
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None
