"""
Domain error kinds raised by the services and mapped to HTTP by
``app.core.exceptions``.
"""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any


class AppError(Exception):
    code: str = "app_error"
    status: HTTPStatus = HTTPStatus.BAD_REQUEST
    message: str = "Request failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.context = dict(context) if context else None
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": False,
            "error": self.code,
            "detail": self.message,
        }
        if self.context:
            payload["context"] = self.context
        return payload


# ── Validation-shaped ───────────────────────────────────────────────
class InvalidInputError(AppError):
    code = "invalid"
    status = HTTPStatus.UNPROCESSABLE_ENTITY
    message = "Invalid input"

    def __init__(
        self,
        errors: list[dict[str, str]],
        *,
        submitted: Mapping[str, Any] | None = None,
    ) -> None:
        context: dict[str, Any] = {"errors": errors}
        if submitted is not None:
            context["input"] = dict(submitted)
        super().__init__(context=context)
        self.errors = errors


class DuplicateKeyError(AppError):
    code = "duplicate_key"
    status = HTTPStatus.CONFLICT
    message = "A record with this key already exists"

    def __init__(self, field: str, value: Any, message: str | None = None) -> None:
        super().__init__(
            message or f"{field} '{value}' is already in use",
            context={"field": field, "value": value},
        )


class DuplicateEmailError(DuplicateKeyError):
    code = "duplicate_email"

    def __init__(self, email: str) -> None:
        super().__init__("email", email, "Email already in use")


class RoomUnavailableError(AppError):
    code = "room_unavailable"
    status = HTTPStatus.CONFLICT
    message = "Room not available for selected dates"


class RoomInUseError(AppError):
    code = "room_in_use"
    status = HTTPStatus.CONFLICT
    message = "Room still has bookings"


class InvalidCredentialsError(AppError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED
    message = "Invalid credentials"


# ── Authorization ───────────────────────────────────────────────────
class UnauthorizedError(AppError):
    """Acting on a resource owned by another user."""

    code = "unauthorized"
    status = HTTPStatus.FORBIDDEN
    message = "Unauthorized"


class ForbiddenError(AppError):
    """Authenticated, but the role is insufficient."""

    code = "forbidden"
    status = HTTPStatus.FORBIDDEN
    message = "Forbidden"


class LoginRequiredError(AppError):
    code = "login_required"
    status = HTTPStatus.SEE_OTHER
    message = "Login required"


# ── Lookup / infrastructure ─────────────────────────────────────────
class NotFoundError(AppError):
    code = "not_found"
    status = HTTPStatus.NOT_FOUND
    message = "Not found"

    def __init__(self, entity: str, key: Any) -> None:
        super().__init__(
            f"{entity} not found",
            context={"entity": entity.lower(), "id": key},
        )


class TransientError(AppError):
    """Store unavailable or timed out. Safe for the caller to retry."""

    code = "transient"
    status = HTTPStatus.SERVICE_UNAVAILABLE
    message = "Service temporarily unavailable, please retry"
