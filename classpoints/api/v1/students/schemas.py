from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

MAX_POINTS_DELTA = 1_000_000


class StudentCreate(BaseModel):
    name: str = Field(..., max_length=100)
    class_id: UUID


class StudentUpdate(BaseModel):
    name: str = Field(..., max_length=100)


class PointsAdjust(BaseModel):
    """Signed change applied to a student's total; totals have no floor."""

    delta: int = Field(..., ge=-MAX_POINTS_DELTA, le=MAX_POINTS_DELTA)


class StudentResponse(BaseModel):
    id: UUID
    class_id: UUID
    name: str
    points: int
    group_id: Optional[UUID] = None

    class Config:
        from_attributes = True
