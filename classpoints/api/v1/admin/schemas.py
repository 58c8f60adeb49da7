from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from classpoints.auth.access_gate import AccessStatus
from classpoints.core.config import settings


class ActivationCodeCreate(BaseModel):
    valid_days: int = Field(settings.default_code_valid_days, gt=0, le=3650)


class ActivationCodeResponse(BaseModel):
    id: UUID
    code: str
    is_used: bool
    valid_days: int
    used_by: Optional[UUID] = None
    used_by_username: Optional[str] = None
    used_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TeacherResponse(BaseModel):
    id: UUID
    username: str
    full_name: str
    created_at: datetime
    expire_at: Optional[datetime] = None
    status: AccessStatus


class RenewRequest(BaseModel):
    days: int = Field(settings.default_renew_days, gt=0, le=3650)


class AdminSettingsUpdate(BaseModel):
    username: str = Field(..., max_length=100)
    password: str


class AdminSettingsResponse(BaseModel):
    username: str
