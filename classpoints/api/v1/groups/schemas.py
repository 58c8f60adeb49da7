from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class MoveStudentOp(BaseModel):
    """Move a student into a group, or back to the unassigned pool when group_id is null."""

    op: Literal["move_student"]
    student_id: UUID
    group_id: Optional[UUID] = None


class SetLeaderOp(BaseModel):
    """Toggle the group's leader."""

    op: Literal["set_leader"]
    group_id: UUID
    student_id: UUID


class RenameGroupOp(BaseModel):
    op: Literal["rename_group"]
    group_id: UUID
    name: str = Field(..., max_length=100)


class CreateGroupOp(BaseModel):
    """group_id may be generated by the client so later operations in the batch can target it."""

    op: Literal["create_group"]
    name: str = Field(..., max_length=100)
    group_id: Optional[UUID] = None


AssignmentOperation = Annotated[
    Union[MoveStudentOp, SetLeaderOp, RenameGroupOp, CreateGroupOp],
    Field(discriminator="op"),
]


class AssignmentRequest(BaseModel):
    operations: List[AssignmentOperation] = Field(default_factory=list)
