"""
Typed records decoded from Record Store rows.

Rows arriving from the store are untrusted: timestamps may come back without a
timezone (SQLite) and numeric columns may be NULL. Everything past the store
works with these models only.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class _Record(BaseModel):
    class Config:
        from_attributes = True
        frozen = True


class ProfileRecord(_Record):
    id: UUID
    username: str
    full_name: str
    role: str = "teacher"
    created_at: datetime
    expire_at: Optional[datetime] = None

    @field_validator("created_at", "expire_at", mode="after")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class ClassRecord(_Record):
    id: UUID
    owner_id: UUID
    name: str
    created_at: datetime

    @field_validator("created_at", mode="after")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class StudentRecord(_Record):
    id: UUID
    owner_id: UUID
    class_id: UUID
    name: str
    points: int = 0
    group_id: Optional[UUID] = None

    @field_validator("points", mode="before")
    @classmethod
    def _default_points(cls, v):
        return 0 if v is None else v


class GroupRecord(_Record):
    id: UUID
    owner_id: UUID
    class_id: UUID
    name: str
    leader_id: Optional[UUID] = None


class ActivationCodeRecord(_Record):
    id: UUID
    code: str
    is_used: bool = False
    valid_days: int
    used_by: Optional[UUID] = None
    used_by_username: Optional[str] = None
    used_at: Optional[datetime] = None
    created_at: datetime

    @field_validator("used_at", "created_at", mode="after")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class AdminCredential(_Record):
    username: str
    password_hash: str
