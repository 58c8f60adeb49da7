import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from classpoints.core.exceptions import ConflictError, ValidationError
from classpoints.core.records import ClassRecord
from classpoints.store.record_store import RecordStore

from .schemas import ClassCreate, ClassResponse, ClassUpdate

logger = logging.getLogger(__name__)


def _class_to_response(c: ClassRecord, student_count: int = 0) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        owner_id=c.owner_id,
        name=c.name,
        student_count=student_count,
        created_at=c.created_at,
    )


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Class name is required")
    return cleaned


async def create_class(
    store: RecordStore,
    owner_id: UUID,
    payload: ClassCreate,
) -> ClassResponse:
    name = _clean_name(payload.name)
    try:
        obj = await store.create_class(owner_id, name)
        await store.commit()
        return _class_to_response(obj)
    except IntegrityError:
        await store.rollback()
        raise ConflictError("Class name already exists")


async def list_classes(store: RecordStore, owner_id: UUID) -> List[ClassResponse]:
    rows = await store.list_classes(owner_id)
    return [
        _class_to_response(c, await store.count_students(owner_id, c.id))
        for c in rows
    ]


async def get_class(
    store: RecordStore,
    owner_id: UUID,
    class_id: UUID,
) -> Optional[ClassResponse]:
    obj = await store.get_class(owner_id, class_id)
    if not obj:
        return None
    return _class_to_response(obj, await store.count_students(owner_id, class_id))


async def update_class(
    store: RecordStore,
    owner_id: UUID,
    class_id: UUID,
    payload: ClassUpdate,
) -> Optional[ClassResponse]:
    name = _clean_name(payload.name)
    try:
        updated = await store.update_class(owner_id, class_id, name)
        if not updated:
            return None
        await store.commit()
    except IntegrityError:
        await store.rollback()
        raise ConflictError("Class name already exists")
    return await get_class(store, owner_id, class_id)


async def delete_class(
    store: RecordStore,
    owner_id: UUID,
    class_id: UUID,
) -> bool:
    """Delete an empty class. Refused before any delete is issued while it still has students."""
    obj = await store.get_class(owner_id, class_id)
    if not obj:
        return False
    count = await store.count_students(owner_id, class_id)
    if count > 0:
        raise ValidationError(f"Cannot delete class: it still has {count} students")
    deleted = await store.delete_class(owner_id, class_id)
    await store.commit()
    logger.info("Deleted class %s for teacher %s", class_id, owner_id)
    return deleted
