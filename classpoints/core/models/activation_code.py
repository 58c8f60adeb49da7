"""
Single-use activation codes issued by the admin.
A code moves from unused to used exactly once, at teacher registration.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID

from classpoints.db.session import Base


class ActivationCode(Base):
    __tablename__ = "activation_codes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(32), nullable=False, unique=True, index=True)
    is_used = Column(Boolean, nullable=False, default=False)
    # Days of access granted to the teacher who consumes the code
    valid_days = Column(Integer, nullable=False)
    used_by = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
