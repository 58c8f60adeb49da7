"""
Roster aggregation: derive group rosters, totals and ranking from normalized
student and group rows of one class.
"""

from typing import Dict, List, Optional, Sequence
from uuid import UUID

from pydantic import BaseModel

from classpoints.core.records import GroupRecord, StudentRecord


class GroupRoster(BaseModel):
    id: UUID
    name: str
    # Only reported when the leader is a current member
    leader_id: Optional[UUID] = None
    members: List[StudentRecord]
    member_count: int
    total_points: int


class Roster(BaseModel):
    groups: List[GroupRoster]
    unassigned: List[StudentRecord]

    def find_group(self, group_id: UUID) -> Optional[GroupRoster]:
        for g in self.groups:
            if g.id == group_id:
                return g
        return None


def build_group_roster(
    group_id: UUID,
    name: str,
    leader_id: Optional[UUID],
    members: Sequence[StudentRecord],
) -> GroupRoster:
    member_ids = {m.id for m in members}
    return GroupRoster(
        id=group_id,
        name=name,
        leader_id=leader_id if leader_id in member_ids else None,
        members=list(members),
        member_count=len(members),
        total_points=sum(m.points for m in members),
    )


def rank_groups(groups: Sequence[GroupRoster]) -> List[GroupRoster]:
    """Highest total first; ties keep their input order (sorted() is stable)."""
    return sorted(groups, key=lambda g: g.total_points, reverse=True)


def aggregate(students: Sequence[StudentRecord], groups: Sequence[GroupRecord]) -> Roster:
    """
    Build the class roster.

    A student belongs to the group whose id equals its group reference. A null
    reference, or one that matches no group in ``groups``, leaves the student
    unassigned. Member order follows the order of ``students``. Inputs are not
    mutated.
    """
    members_by_group: Dict[UUID, List[StudentRecord]] = {g.id: [] for g in groups}
    unassigned: List[StudentRecord] = []
    for s in students:
        bucket = members_by_group.get(s.group_id) if s.group_id is not None else None
        if bucket is None:
            unassigned.append(s)
        else:
            bucket.append(s)

    rosters = [
        build_group_roster(g.id, g.name, g.leader_id, members_by_group[g.id])
        for g in groups
    ]
    return Roster(groups=rank_groups(rosters), unassigned=unassigned)
