"""Pydantic schemas for registration and user profiles."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

from app.models.user import Role

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalise_email(v: str) -> str:
    return v.strip().lower()


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name required")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = normalise_email(v)
        if not EMAIL_RE.match(v):
            raise ValueError("Valid email required")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Min 6 chars")
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must not exceed 72 bytes")
        return v


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    created_at: datetime | None

    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    user: UserRead
    expires_at: datetime
    token: str
