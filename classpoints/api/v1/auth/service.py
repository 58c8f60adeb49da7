import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from classpoints.auth.access_gate import authorize_admin, check_expiration, registration_expiration
from classpoints.auth.schemas import ADMIN_ROLE
from classpoints.auth.security import create_access_token, hash_password
from classpoints.core.config import settings
from classpoints.core.exceptions import (
    ActivationCodeUsedError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from classpoints.core.records import ActivationCodeRecord, AdminCredential, ProfileRecord
from classpoints.store.record_store import RecordStore

from .schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    ProfileResponse,
    TeacherRegisterRequest,
    VerifyCodeResponse,
)

logger = logging.getLogger(__name__)


def _profile_to_response(p: ProfileRecord, code: Optional[str] = None) -> ProfileResponse:
    return ProfileResponse(
        id=p.id,
        username=p.username,
        full_name=p.full_name,
        created_at=p.created_at,
        expire_at=p.expire_at,
        status=check_expiration(p.expire_at),
        activation_code=code,
    )


async def _unused_code(store: RecordStore, code: str) -> ActivationCodeRecord:
    code = (code or "").strip()
    if not code:
        raise ValidationError("Activation code is required")
    record = await store.get_activation_code(code)
    if record is None:
        raise NotFoundError("Activation code not found")
    if record.is_used:
        raise ActivationCodeUsedError(code)
    return record


async def verify_activation_code(store: RecordStore, code: str) -> VerifyCodeResponse:
    record = await _unused_code(store, code)
    return VerifyCodeResponse(code=record.code, valid=True, valid_days=record.valid_days)


async def register_teacher(
    store: RecordStore,
    teacher_id: UUID,
    payload: TeacherRegisterRequest,
) -> ProfileResponse:
    """
    Bind the caller's identity to a new teacher profile and consume the code.

    Both writes share one transaction: if the code was consumed by a
    concurrent registration the profile insert is rolled back as well.
    """
    username = payload.username.strip()
    full_name = payload.full_name.strip()
    if not username or not full_name:
        raise ValidationError("Username and full name are required")

    code = await _unused_code(store, payload.code)
    if await store.get_profile(teacher_id) is not None:
        raise ConflictError("Teacher profile already registered")

    try:
        profile = await store.create_profile(
            teacher_id,
            username=username,
            full_name=full_name,
            expire_at=registration_expiration(code.valid_days),
        )
    except IntegrityError:
        await store.rollback()
        raise ConflictError("Username already exists")

    if not await store.consume_activation_code(code.code, teacher_id):
        await store.rollback()
        logger.warning("Activation code %s was consumed concurrently; registration rejected", code.code)
        raise ActivationCodeUsedError(code.code)

    await store.commit()
    logger.info("Registered teacher %s with code %s (%d days)", username, code.code, code.valid_days)
    return _profile_to_response(profile, code.code)


async def get_profile_status(store: RecordStore, teacher_id: UUID) -> ProfileResponse:
    profile = await store.get_profile(teacher_id)
    if profile is None:
        raise NotFoundError("Teacher profile not registered")
    code = await store.get_code_used_by(teacher_id)
    return _profile_to_response(profile, code.code if code else None)


async def _admin_credential(store: RecordStore) -> AdminCredential:
    credential = await store.get_admin_settings()
    if credential is not None:
        return credential
    # Not seeded yet: fall back to the configured bootstrap credential
    return AdminCredential(
        username=settings.admin_username,
        password_hash=hash_password(settings.admin_password),
    )


async def admin_login(store: RecordStore, payload: AdminLoginRequest) -> AdminLoginResponse:
    credential = await _admin_credential(store)
    if not authorize_admin(payload.username, payload.password, credential):
        logger.warning("Rejected admin login for %r", payload.username)
        raise InvalidCredentialsError()
    token = create_access_token(subject={"sub": ADMIN_ROLE, "role": ADMIN_ROLE})
    return AdminLoginResponse(access_token=token, issued_at=datetime.now(timezone.utc))
