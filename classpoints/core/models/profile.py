"""Teacher profiles. The id is the identity issued by the external identity provider."""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID

from classpoints.db.session import Base


class Profile(Base):
    """Teacher account. expire_at NULL means the account was never activated."""

    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    full_name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="teacher")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    expire_at = Column(DateTime(timezone=True), nullable=True)
