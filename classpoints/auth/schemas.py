from typing import Optional
from uuid import UUID

from pydantic import BaseModel

TEACHER_ROLE = "teacher"
ADMIN_ROLE = "admin"


class CurrentIdentity(BaseModel):
    """Identity carried by the bearer token: a teacher id from the identity provider, or the admin session."""

    subject: str
    role: str

    @property
    def teacher_id(self) -> Optional[UUID]:
        if self.role != TEACHER_ROLE:
            return None
        try:
            return UUID(self.subject)
        except ValueError:
            return None
