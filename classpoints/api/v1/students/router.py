from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from classpoints.auth.dependencies import get_store, require_active_teacher
from classpoints.core.exceptions import ServiceError
from classpoints.core.records import ProfileRecord
from classpoints.store.record_store import RecordStore

from .schemas import PointsAdjust, StudentCreate, StudentResponse, StudentUpdate
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.get("", response_model=List[StudentResponse])
async def list_students(
    class_id: Optional[UUID] = Query(None, description="Only students of this class"),
    search: Optional[str] = Query(None, description="Case-insensitive name substring"),
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> List[StudentResponse]:
    """Students ordered by points, highest first."""
    return await service.list_students(store, teacher.id, class_id=class_id, search=search)


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    payload: StudentCreate,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> StudentResponse:
    try:
        return await service.create_student(store, teacher.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{student_id}", response_model=StudentResponse)
async def rename_student(
    student_id: UUID,
    payload: StudentUpdate,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> StudentResponse:
    try:
        obj = await service.rename_student(store, teacher.id, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return obj


@router.post("/{student_id}/points", response_model=StudentResponse)
async def adjust_points(
    student_id: UUID,
    payload: PointsAdjust,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> StudentResponse:
    try:
        obj = await service.adjust_points(store, teacher.id, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return obj


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: UUID,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> None:
    if not await service.delete_student(store, teacher.id, student_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
