"""
Group assignment engine.

Holds an in-memory working set of groups and unassigned students for one
class, seeded from the store. Edits are local until commit(), which writes
the whole intended end state in a single transaction and then reloads.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from uuid import UUID

from classpoints.core.exceptions import (
    CommitError,
    CommitInProgressError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from classpoints.core.records import GroupRecord, StudentRecord
from classpoints.roster.aggregator import Roster, aggregate, build_group_roster, rank_groups

logger = logging.getLogger(__name__)


@dataclass
class WorkingGroup:
    id: UUID
    name: str
    leader_id: Optional[UUID] = None
    members: List[StudentRecord] = field(default_factory=list)

    def index_of(self, student_id: UUID) -> int:
        for i, m in enumerate(self.members):
            if m.id == student_id:
                return i
        return -1

    def has_member(self, student_id: UUID) -> bool:
        return self.index_of(student_id) >= 0


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Group name is required")
    return cleaned


class GroupAssignmentEngine:
    """
    Working set of one teacher's groups for one class.

    Not safe for concurrent use: commit() refuses to run while another
    commit() on the same engine is in flight.
    """

    def __init__(self, owner_id: UUID, class_id: UUID, roster: Roster) -> None:
        self.owner_id = owner_id
        self.class_id = class_id
        self._committing = False
        self._seed(roster)

    @classmethod
    async def load(cls, store, owner_id: UUID, class_id: UUID) -> "GroupAssignmentEngine":
        return cls(owner_id, class_id, await load_roster(store, owner_id, class_id))

    def _seed(self, roster: Roster) -> None:
        self._groups: Dict[UUID, WorkingGroup] = {
            g.id: WorkingGroup(id=g.id, name=g.name, leader_id=g.leader_id, members=list(g.members))
            for g in roster.groups
        }
        self._unassigned: List[StudentRecord] = list(roster.unassigned)

    @property
    def groups(self) -> List[WorkingGroup]:
        return list(self._groups.values())

    @property
    def unassigned(self) -> List[StudentRecord]:
        return list(self._unassigned)

    def _group(self, group_id: UUID) -> WorkingGroup:
        group = self._groups.get(group_id)
        if group is None:
            raise NotFoundError(f"Group {group_id} not found")
        return group

    def _take_student(self, student_id: UUID) -> StudentRecord:
        """Remove the student from wherever it currently sits and return it."""
        for i, s in enumerate(self._unassigned):
            if s.id == student_id:
                return self._unassigned.pop(i)
        for group in self._groups.values():
            i = group.index_of(student_id)
            if i >= 0:
                if group.leader_id == student_id:
                    group.leader_id = None
                return group.members.pop(i)
        raise NotFoundError(f"Student {student_id} not found in this class")

    def move_student(self, student_id: UUID, target_group_id: Optional[UUID]) -> None:
        """
        Move a student into ``target_group_id``, or back to the unassigned pool
        when it is None. The student may come from the pool or from any group.
        """
        target = self._group(target_group_id) if target_group_id is not None else None
        if target is not None and target.has_member(student_id):
            return
        if target is None and any(s.id == student_id for s in self._unassigned):
            return
        student = self._take_student(student_id)
        if target is None:
            self._unassigned.append(student)
        else:
            target.members.append(student)

    def set_leader(self, group_id: UUID, student_id: UUID) -> Optional[UUID]:
        """Toggle the group's leader. Returns the leader after the toggle."""
        group = self._group(group_id)
        if group.leader_id == student_id:
            group.leader_id = None
            return None
        if not group.has_member(student_id):
            raise ValidationError("Group leader must be a member of the group")
        group.leader_id = student_id
        return student_id

    def rename_group(self, group_id: UUID, name: str) -> None:
        self._group(group_id).name = _clean_name(name)

    def create_group(self, name: str, group_id: Optional[UUID] = None) -> UUID:
        if group_id is None:
            group_id = uuid.uuid4()
        elif group_id in self._groups:
            raise ValidationError(f"Group {group_id} already exists")
        self._groups[group_id] = WorkingGroup(id=group_id, name=_clean_name(name))
        return group_id

    def snapshot(self) -> Roster:
        rosters = [
            build_group_roster(g.id, g.name, g.leader_id, g.members)
            for g in self._groups.values()
        ]
        return Roster(groups=rank_groups(rosters), unassigned=list(self._unassigned))

    def group_records(self) -> List[GroupRecord]:
        return [
            GroupRecord(
                id=g.id,
                owner_id=self.owner_id,
                class_id=self.class_id,
                name=g.name,
                leader_id=g.leader_id,
            )
            for g in self._groups.values()
        ]

    async def commit(self, store) -> Roster:
        """
        Persist the working set and reload it.

        Writes group rows, member references per group, and cleared references
        for unassigned students in one transaction. On failure the transaction
        is rolled back and the working set is left as it was, so calling
        commit() again re-sends the full intended state.
        """
        if self._committing:
            raise CommitInProgressError()
        self._committing = True
        try:
            try:
                await store.upsert_groups(self.group_records())
                for g in self._groups.values():
                    if g.members:
                        await store.update_students_group_ref(
                            self.owner_id, [m.id for m in g.members], g.id
                        )
                if self._unassigned:
                    await store.update_students_group_ref(
                        self.owner_id, [s.id for s in self._unassigned], None
                    )
                await store.commit()
            except ServiceError:
                await store.rollback()
                raise
            except Exception as e:
                await store.rollback()
                logger.exception("Group assignment commit failed for class %s", self.class_id)
                raise CommitError() from e

            logger.info(
                "Committed %d groups and %d unassigned students for class %s",
                len(self._groups),
                len(self._unassigned),
                self.class_id,
            )
            roster = await load_roster(store, self.owner_id, self.class_id)
            self._seed(roster)
            return roster
        finally:
            self._committing = False


async def load_roster(store, owner_id: UUID, class_id: UUID) -> Roster:
    students = await store.list_students(owner_id, class_id=class_id)
    groups = await store.list_groups(owner_id, class_id)
    return aggregate(students, groups)
