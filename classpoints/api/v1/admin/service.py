import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from classpoints.auth.access_gate import check_expiration, renewed_expiration
from classpoints.auth.activation_code import generate_activation_code
from classpoints.auth.security import hash_password
from classpoints.core.config import settings
from classpoints.core.exceptions import ConflictError, NotFoundError, ValidationError
from classpoints.core.records import ProfileRecord
from classpoints.store.record_store import RecordStore

from .schemas import (
    ActivationCodeCreate,
    ActivationCodeResponse,
    AdminSettingsResponse,
    AdminSettingsUpdate,
    RenewRequest,
    TeacherResponse,
)

logger = logging.getLogger(__name__)

CODE_GENERATION_ATTEMPTS = 5


def _teacher_to_response(p: ProfileRecord) -> TeacherResponse:
    return TeacherResponse(
        id=p.id,
        username=p.username,
        full_name=p.full_name,
        created_at=p.created_at,
        expire_at=p.expire_at,
        status=check_expiration(p.expire_at),
    )


async def generate_code(store: RecordStore, payload: ActivationCodeCreate) -> ActivationCodeResponse:
    """Create a new unused code. A random collision with an existing code is retried with a fresh value."""
    for _ in range(CODE_GENERATION_ATTEMPTS):
        code = generate_activation_code()
        try:
            record = await store.create_activation_code(code, payload.valid_days)
            await store.commit()
        except IntegrityError:
            await store.rollback()
            logger.warning("Activation code collision on %s, retrying", code)
            continue
        logger.info("Generated activation code %s (%d days)", record.code, record.valid_days)
        return ActivationCodeResponse(**record.model_dump())
    raise ConflictError("Could not generate a unique activation code")


async def list_codes(store: RecordStore) -> List[ActivationCodeResponse]:
    return [ActivationCodeResponse(**c.model_dump()) for c in await store.list_activation_codes()]


async def delete_code(store: RecordStore, code_id: UUID) -> bool:
    deleted = await store.delete_activation_code(code_id)
    if deleted:
        await store.commit()
    return deleted


async def list_teachers(store: RecordStore, search: Optional[str] = None) -> List[TeacherResponse]:
    search = search.strip() if search else None
    return [_teacher_to_response(p) for p in await store.list_profiles(search)]


async def renew_teacher(
    store: RecordStore,
    teacher_id: UUID,
    payload: RenewRequest,
) -> TeacherResponse:
    profile = await store.get_profile(teacher_id)
    if profile is None:
        raise NotFoundError("Teacher not found")
    new_expiry = renewed_expiration(profile.expire_at, payload.days)
    await store.update_profile_expiry(teacher_id, new_expiry)
    await store.commit()
    logger.info("Renewed teacher %s by %d days until %s", profile.username, payload.days, new_expiry.isoformat())
    updated = await store.get_profile(teacher_id)
    return _teacher_to_response(updated)


async def delete_teacher(store: RecordStore, teacher_id: UUID) -> bool:
    deleted = await store.delete_profile(teacher_id)
    if deleted:
        await store.commit()
        logger.info("Deleted teacher %s", teacher_id)
    return deleted


async def update_admin_settings(
    store: RecordStore,
    payload: AdminSettingsUpdate,
) -> AdminSettingsResponse:
    username = payload.username.strip()
    if not username:
        raise ValidationError("Admin username is required")
    if len(payload.password) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters"
        )
    credential = await store.save_admin_settings(username, hash_password(payload.password))
    await store.commit()
    logger.info("Admin credentials updated")
    return AdminSettingsResponse(username=credential.username)
