from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from fastapi.security import OAuth2PasswordRequestForm

from classpoints.auth.dependencies import get_current_teacher_id, get_store
from classpoints.core.exceptions import ServiceError
from classpoints.store.record_store import RecordStore

from .schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    ProfileResponse,
    TeacherRegisterRequest,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/activation-codes/verify", response_model=VerifyCodeResponse)
async def verify_activation_code(
    payload: VerifyCodeRequest,
    store: RecordStore = Depends(get_store),
) -> VerifyCodeResponse:
    """Check a code before registration: 404 when unknown, 409 when already used."""
    try:
        return await service.verify_activation_code(store, payload.code)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/register",
    response_model=ProfileResponse,
    status_code=http_status.HTTP_201_CREATED,
)
async def register(
    payload: TeacherRegisterRequest,
    teacher_id: UUID = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_store),
) -> ProfileResponse:
    try:
        return await service.register_teacher(store, teacher_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/me", response_model=ProfileResponse)
async def me(
    teacher_id: UUID = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_store),
) -> ProfileResponse:
    """Profile and access status; available while expired so the client can show the lock screen."""
    try:
        return await service.get_profile_status(store, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/admin/login", response_model=AdminLoginResponse)
async def admin_login(
    payload: AdminLoginRequest,
    store: RecordStore = Depends(get_store),
) -> AdminLoginResponse:
    try:
        return await service.admin_login(store, payload)
    except ServiceError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.post("/admin/login-oauth")
async def admin_login_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    store: RecordStore = Depends(get_store),
):
    payload = AdminLoginRequest(
        username=form_data.username.strip(),
        password=form_data.password,
    )
    try:
        result = await service.admin_login(store, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }
