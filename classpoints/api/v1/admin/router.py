from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status

from classpoints.auth.dependencies import get_store, require_admin
from classpoints.core.exceptions import ServiceError
from classpoints.store.record_store import RecordStore

from .schemas import (
    ActivationCodeCreate,
    ActivationCodeResponse,
    AdminSettingsResponse,
    AdminSettingsUpdate,
    RenewRequest,
    TeacherResponse,
)
from . import service

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.post(
    "/activation-codes",
    response_model=ActivationCodeResponse,
    status_code=http_status.HTTP_201_CREATED,
)
async def generate_code(
    payload: ActivationCodeCreate,
    store: RecordStore = Depends(get_store),
) -> ActivationCodeResponse:
    try:
        return await service.generate_code(store, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/activation-codes", response_model=List[ActivationCodeResponse])
async def list_codes(store: RecordStore = Depends(get_store)) -> List[ActivationCodeResponse]:
    """All codes, newest first, with the username of the teacher who consumed each."""
    return await service.list_codes(store)


@router.delete("/activation-codes/{code_id}", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_code(code_id: UUID, store: RecordStore = Depends(get_store)) -> None:
    if not await service.delete_code(store, code_id):
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Activation code not found")


@router.get("/teachers", response_model=List[TeacherResponse])
async def list_teachers(
    search: Optional[str] = Query(None, description="Username substring"),
    store: RecordStore = Depends(get_store),
) -> List[TeacherResponse]:
    return await service.list_teachers(store, search)


@router.post("/teachers/{teacher_id}/renew", response_model=TeacherResponse)
async def renew_teacher(
    teacher_id: UUID,
    payload: RenewRequest,
    store: RecordStore = Depends(get_store),
) -> TeacherResponse:
    try:
        return await service.renew_teacher(store, teacher_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/teachers/{teacher_id}", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_teacher(teacher_id: UUID, store: RecordStore = Depends(get_store)) -> None:
    if not await service.delete_teacher(store, teacher_id):
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Teacher not found")


@router.put("/settings", response_model=AdminSettingsResponse)
async def update_settings(
    payload: AdminSettingsUpdate,
    store: RecordStore = Depends(get_store),
) -> AdminSettingsResponse:
    try:
        return await service.update_admin_settings(store, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
