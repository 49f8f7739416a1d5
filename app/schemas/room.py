"""Pydantic schemas for Room CRUD."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.room import RoomCategory


def _unique_amenities(values: list[str]) -> list[str]:
    seen: list[str] = []
    for item in values:
        item = item.strip()
        if item and item not in seen:
            seen.append(item)
    return seen


class RoomCreate(BaseModel):
    name: str
    number: int = Field(gt=0)
    category: RoomCategory
    description: str | None = None
    price: float = Field(gt=0)
    capacity: int = Field(default=1, ge=1)
    amenities: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("amenities")
    @classmethod
    def _amenities(cls, v: list[str]) -> list[str]:
        return _unique_amenities(v)


class RoomUpdate(BaseModel):
    name: str | None = None
    number: int | None = Field(default=None, gt=0)
    category: RoomCategory | None = None
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    capacity: int | None = Field(default=None, ge=1)
    amenities: list[str] | None = None

    @field_validator("amenities")
    @classmethod
    def _amenities(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _unique_amenities(v)


class RoomRead(BaseModel):
    id: int
    name: str
    number: int
    category: str
    description: str | None
    price: float
    capacity: int
    amenities: list[str]
    is_available: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}
