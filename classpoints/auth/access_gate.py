"""
Access gate: pure predicates deciding whether a session may proceed.

Teachers are gated on their profile expiry; the admin is gated on the stored
credential pair. Nothing here reads or writes session state.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from classpoints.auth.security import verify_password
from classpoints.core.records import AdminCredential, ensure_utc


class AccessStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


def _now(now: Optional[datetime]) -> datetime:
    return ensure_utc(now) if now is not None else datetime.now(timezone.utc)


def check_expiration(expire_at: Optional[datetime], now: Optional[datetime] = None) -> AccessStatus:
    """
    Expired when the timestamp is absent (never activated) or strictly earlier than now.
    Naive timestamps are read as UTC.
    """
    if expire_at is None:
        return AccessStatus.EXPIRED
    if ensure_utc(expire_at) < _now(now):
        return AccessStatus.EXPIRED
    return AccessStatus.ACTIVE


def authorize_admin(handle: str, secret: str, credential: Optional[AdminCredential]) -> bool:
    """Exact handle match plus bcrypt verification of the secret."""
    if credential is None:
        return False
    if handle != credential.username:
        return False
    return verify_password(secret, credential.password_hash)


def renewed_expiration(
    current: Optional[datetime], days: int, now: Optional[datetime] = None
) -> datetime:
    """Extend from the current expiry while it is still in the future, otherwise from now."""
    base = _now(now)
    if current is not None and ensure_utc(current) > base:
        base = ensure_utc(current)
    return base + timedelta(days=days)


def registration_expiration(valid_days: int, now: Optional[datetime] = None) -> datetime:
    return _now(now) + timedelta(days=valid_days)
