"""Pydantic schemas for owner operations."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class OwnerCreate(BaseModel):
    """Payload to register a car owner."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")

    @field_validator("email")
    @classmethod
    def email_lower(cls, value: str) -> str:
        return value.strip().lower()


class OwnerRead(BaseModel):
    """Owner representation returned by APIs."""

    id: str
    name: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True
