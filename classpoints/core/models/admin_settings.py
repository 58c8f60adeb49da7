from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from classpoints.db.session import Base

ADMIN_SETTINGS_ID = 1


class AdminSettings(Base):
    """Singleton row (id=1) holding the admin login handle and bcrypt password hash."""

    __tablename__ = "admin_settings"

    id = Column(Integer, primary_key=True, default=ADMIN_SETTINGS_ID)
    username = Column(String(100), nullable=False)
    password_hash = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
