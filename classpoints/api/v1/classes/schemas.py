from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ClassCreate(BaseModel):
    name: str = Field(..., max_length=100)


class ClassUpdate(BaseModel):
    name: str = Field(..., max_length=100)


class ClassResponse(BaseModel):
    id: UUID
    owner_id: UUID
    name: str
    student_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True
