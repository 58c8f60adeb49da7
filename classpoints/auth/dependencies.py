from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from classpoints.auth.access_gate import AccessStatus, check_expiration
from classpoints.auth.schemas import ADMIN_ROLE, CurrentIdentity
from classpoints.auth.security import decode_access_token
from classpoints.core.exceptions import AccountExpiredError
from classpoints.core.records import ProfileRecord
from classpoints.db.session import get_db
from classpoints.store.record_store import RecordStore


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/admin/login-oauth")


async def get_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


async def get_current_identity(token: str = Depends(oauth2_scheme)) -> CurrentIdentity:
    """Resolve the caller's identity from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or not role:
        raise credentials_exception
    return CurrentIdentity(subject=str(subject), role=role)


async def get_current_teacher_id(
    identity: CurrentIdentity = Depends(get_current_identity),
) -> UUID:
    teacher_id = identity.teacher_id
    if teacher_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher account required",
        )
    return teacher_id


async def require_active_teacher(
    teacher_id: UUID = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_store),
) -> ProfileRecord:
    """Dependency: block class data for teachers without a profile or with a lapsed expiry."""
    profile = await store.get_profile(teacher_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher profile not registered",
        )
    if check_expiration(profile.expire_at) is AccessStatus.EXPIRED:
        err = AccountExpiredError()
        raise HTTPException(status_code=err.status_code, detail=err.message)
    return profile


async def require_admin(
    identity: CurrentIdentity = Depends(get_current_identity),
) -> CurrentIdentity:
    if identity.role != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the administrator can perform this action",
        )
    return identity
