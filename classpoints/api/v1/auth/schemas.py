from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from classpoints.auth.access_gate import AccessStatus


class VerifyCodeRequest(BaseModel):
    code: str = Field(..., max_length=32)


class VerifyCodeResponse(BaseModel):
    code: str
    valid: bool
    valid_days: int


class TeacherRegisterRequest(BaseModel):
    code: str = Field(..., max_length=32)
    username: str = Field(..., max_length=100)
    full_name: str = Field(..., max_length=255)


class ProfileResponse(BaseModel):
    id: UUID
    username: str
    full_name: str
    created_at: datetime
    expire_at: Optional[datetime] = None
    status: AccessStatus
    activation_code: Optional[str] = None


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class AdminLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    issued_at: datetime
