from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from classpoints.auth.dependencies import get_store, require_active_teacher
from classpoints.core.exceptions import ServiceError
from classpoints.core.records import ProfileRecord
from classpoints.store.record_store import RecordStore

from .schemas import ClassCreate, ClassResponse, ClassUpdate
from . import service

router = APIRouter(prefix="/api/v1/classes", tags=["classes"])


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_class(
    payload: ClassCreate,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> ClassResponse:
    try:
        return await service.create_class(store, teacher.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[ClassResponse])
async def list_classes(
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> List[ClassResponse]:
    return await service.list_classes(store, teacher.id)


@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(
    class_id: UUID,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> ClassResponse:
    obj = await service.get_class(store, teacher.id, class_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return obj


@router.put("/{class_id}", response_model=ClassResponse)
async def update_class(
    class_id: UUID,
    payload: ClassUpdate,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> ClassResponse:
    try:
        obj = await service.update_class(store, teacher.id, class_id, payload)
        if not obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
        return obj
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class(
    class_id: UUID,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> None:
    try:
        deleted = await service.delete_class(store, teacher.id, class_id)
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
