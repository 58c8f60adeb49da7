from typing import Sequence
from uuid import UUID

from classpoints.core.exceptions import NotFoundError
from classpoints.roster.aggregator import Roster
from classpoints.roster.assignment import GroupAssignmentEngine, load_roster
from classpoints.store.record_store import RecordStore

from .schemas import (
    AssignmentOperation,
    CreateGroupOp,
    MoveStudentOp,
    RenameGroupOp,
    SetLeaderOp,
)


async def _ensure_class(store: RecordStore, owner_id: UUID, class_id: UUID) -> None:
    if await store.get_class(owner_id, class_id) is None:
        raise NotFoundError("Class not found")


async def get_roster(store: RecordStore, owner_id: UUID, class_id: UUID) -> Roster:
    await _ensure_class(store, owner_id, class_id)
    return await load_roster(store, owner_id, class_id)


def apply_operation(engine: GroupAssignmentEngine, operation: AssignmentOperation) -> None:
    if isinstance(operation, MoveStudentOp):
        engine.move_student(operation.student_id, operation.group_id)
    elif isinstance(operation, SetLeaderOp):
        engine.set_leader(operation.group_id, operation.student_id)
    elif isinstance(operation, RenameGroupOp):
        engine.rename_group(operation.group_id, operation.name)
    elif isinstance(operation, CreateGroupOp):
        engine.create_group(operation.name, group_id=operation.group_id)


async def save_assignment(
    store: RecordStore,
    owner_id: UUID,
    class_id: UUID,
    operations: Sequence[AssignmentOperation],
) -> Roster:
    """
    Replay the batch on a freshly loaded working set and commit it.

    Any rejected operation aborts the batch before a single write is issued.
    """
    await _ensure_class(store, owner_id, class_id)
    engine = await GroupAssignmentEngine.load(store, owner_id, class_id)
    for operation in operations:
        apply_operation(engine, operation)
    return await engine.commit(store)
