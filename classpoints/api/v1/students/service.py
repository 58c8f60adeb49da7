import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import DBAPIError

from classpoints.core.exceptions import NotFoundError, ValidationError
from classpoints.core.records import StudentRecord
from classpoints.store.record_store import RecordStore

from .schemas import PointsAdjust, StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


def _student_to_response(s: StudentRecord) -> StudentResponse:
    return StudentResponse(
        id=s.id,
        class_id=s.class_id,
        name=s.name,
        points=s.points,
        group_id=s.group_id,
    )


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Student name is required")
    return cleaned


async def list_students(
    store: RecordStore,
    owner_id: UUID,
    class_id: Optional[UUID] = None,
    search: Optional[str] = None,
) -> List[StudentResponse]:
    search = search.strip() if search else None
    rows = await store.list_students(owner_id, class_id=class_id, search=search)
    return [_student_to_response(s) for s in rows]


async def create_student(
    store: RecordStore,
    owner_id: UUID,
    payload: StudentCreate,
) -> StudentResponse:
    name = _clean_name(payload.name)
    if await store.get_class(owner_id, payload.class_id) is None:
        raise NotFoundError("Class not found")
    obj = await store.create_student(owner_id, payload.class_id, name)
    await store.commit()
    return _student_to_response(obj)


async def rename_student(
    store: RecordStore,
    owner_id: UUID,
    student_id: UUID,
    payload: StudentUpdate,
) -> Optional[StudentResponse]:
    name = _clean_name(payload.name)
    if not await store.update_student(owner_id, student_id, name=name):
        return None
    await store.commit()
    obj = await store.get_student(owner_id, student_id)
    return _student_to_response(obj) if obj else None


async def adjust_points(
    store: RecordStore,
    owner_id: UUID,
    student_id: UUID,
    payload: PointsAdjust,
) -> Optional[StudentResponse]:
    try:
        updated = await store.update_student(owner_id, student_id, points_delta=payload.delta)
    except DBAPIError:
        await store.rollback()
        logger.warning("Points adjustment of %d rejected for student %s", payload.delta, student_id)
        raise ValidationError("Points total out of range")
    if not updated:
        return None
    await store.commit()
    obj = await store.get_student(owner_id, student_id)
    return _student_to_response(obj) if obj else None


async def delete_student(store: RecordStore, owner_id: UUID, student_id: UUID) -> bool:
    deleted = await store.delete_student(owner_id, student_id)
    if deleted:
        await store.commit()
    return deleted
