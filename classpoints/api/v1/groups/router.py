from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from classpoints.auth.dependencies import get_store, require_active_teacher
from classpoints.core.exceptions import ServiceError
from classpoints.core.records import ProfileRecord
from classpoints.roster.aggregator import Roster
from classpoints.store.record_store import RecordStore

from .schemas import AssignmentRequest
from . import service

router = APIRouter(prefix="/api/v1/classes/{class_id}/groups", tags=["groups"])


@router.get("", response_model=Roster)
async def get_roster(
    class_id: UUID,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> Roster:
    """Groups with members and totals, ranked by total points, plus the unassigned pool."""
    try:
        return await service.get_roster(store, teacher.id, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/assignment", response_model=Roster)
async def save_assignment(
    class_id: UUID,
    payload: AssignmentRequest,
    store: RecordStore = Depends(get_store),
    teacher: ProfileRecord = Depends(require_active_teacher),
) -> Roster:
    """Apply an ordered batch of group edits and save the result in one transaction."""
    try:
        return await service.save_assignment(store, teacher.id, class_id, payload.operations)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
