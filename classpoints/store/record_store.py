"""
Record Store client.

Narrow, owner-scoped access to the profiles, classes, students, groups,
activation_codes and admin_settings tables. Reads return typed records from
classpoints.core.records; mutating methods only flush, so the caller owns the
transaction and decides when to commit() or rollback().
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from classpoints.core.exceptions import ConflictError
from classpoints.core.models import (
    ADMIN_SETTINGS_ID,
    ActivationCode,
    AdminSettings,
    Profile,
    SchoolClass,
    Student,
    StudentGroup,
)
from classpoints.core.records import (
    ActivationCodeRecord,
    AdminCredential,
    ClassRecord,
    GroupRecord,
    ProfileRecord,
    StudentRecord,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


def _decode(model: Type[R], row) -> Optional[R]:
    if row is None:
        return None
    return model.model_validate(row)


def _decode_many(model: Type[R], rows: Iterable) -> List[R]:
    """Decode rows, skipping any that fail validation."""
    out: List[R] = []
    for row in rows:
        try:
            out.append(model.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(
                "Skipping malformed %s row id=%s: %s",
                model.__name__,
                getattr(row, "id", None),
                e.errors()[0]["msg"] if e.errors() else e,
            )
    return out


def _code_to_record(c: ActivationCode, used_by_username: Optional[str] = None) -> ActivationCodeRecord:
    return ActivationCodeRecord(
        id=c.id,
        code=c.code,
        is_used=bool(c.is_used),
        valid_days=c.valid_days,
        used_by=c.used_by,
        used_by_username=used_by_username,
        used_at=c.used_at,
        created_at=c.created_at,
    )


class RecordStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    # Profiles

    async def get_profile(self, profile_id: UUID) -> Optional[ProfileRecord]:
        result = await self.db.execute(
            select(Profile).where(Profile.id == profile_id).execution_options(populate_existing=True)
        )
        return _decode(ProfileRecord, result.scalar_one_or_none())

    async def get_profile_by_username(self, username: str) -> Optional[ProfileRecord]:
        result = await self.db.execute(select(Profile).where(Profile.username == username))
        return _decode(ProfileRecord, result.scalar_one_or_none())

    async def list_profiles(self, search: Optional[str] = None) -> List[ProfileRecord]:
        stmt = select(Profile).where(Profile.role == "teacher")
        if search:
            stmt = stmt.where(Profile.username.icontains(search, autoescape=True))
        stmt = stmt.order_by(Profile.created_at.desc(), Profile.username)
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return _decode_many(ProfileRecord, result.scalars().all())

    async def create_profile(
        self,
        profile_id: UUID,
        username: str,
        full_name: str,
        expire_at: Optional[datetime],
    ) -> ProfileRecord:
        obj = Profile(
            id=profile_id,
            username=username,
            full_name=full_name,
            role="teacher",
            expire_at=expire_at,
        )
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return _decode(ProfileRecord, obj)

    async def update_profile_expiry(self, profile_id: UUID, expire_at: datetime) -> bool:
        result = await self.db.execute(
            update(Profile).where(Profile.id == profile_id).values(expire_at=expire_at)
        )
        return result.rowcount > 0

    async def delete_profile(self, profile_id: UUID) -> bool:
        # Release any code bound to this teacher; SQLite does not enforce ON DELETE SET NULL
        await self.db.execute(
            update(ActivationCode).where(ActivationCode.used_by == profile_id).values(used_by=None)
        )
        result = await self.db.execute(delete(Profile).where(Profile.id == profile_id))
        return result.rowcount > 0

    # Classes

    async def list_classes(self, owner_id: UUID) -> List[ClassRecord]:
        result = await self.db.execute(
            select(SchoolClass)
            .where(SchoolClass.owner_id == owner_id)
            .order_by(SchoolClass.created_at, SchoolClass.name)
            .execution_options(populate_existing=True)
        )
        return _decode_many(ClassRecord, result.scalars().all())

    async def get_class(self, owner_id: UUID, class_id: UUID) -> Optional[ClassRecord]:
        result = await self.db.execute(
            select(SchoolClass)
            .where(SchoolClass.id == class_id, SchoolClass.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        return _decode(ClassRecord, result.scalar_one_or_none())

    async def create_class(self, owner_id: UUID, name: str) -> ClassRecord:
        obj = SchoolClass(owner_id=owner_id, name=name)
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return _decode(ClassRecord, obj)

    async def update_class(self, owner_id: UUID, class_id: UUID, name: str) -> bool:
        result = await self.db.execute(
            update(SchoolClass)
            .where(SchoolClass.id == class_id, SchoolClass.owner_id == owner_id)
            .values(name=name)
        )
        await self.db.flush()
        return result.rowcount > 0

    async def delete_class(self, owner_id: UUID, class_id: UUID) -> bool:
        # Groups belong to the class; students are guarded by count_students before this runs
        await self.db.execute(
            delete(StudentGroup).where(
                StudentGroup.class_id == class_id, StudentGroup.owner_id == owner_id
            )
        )
        result = await self.db.execute(
            delete(SchoolClass).where(SchoolClass.id == class_id, SchoolClass.owner_id == owner_id)
        )
        return result.rowcount > 0

    async def count_students(self, owner_id: UUID, class_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Student.id)).where(
                Student.owner_id == owner_id, Student.class_id == class_id
            )
        )
        return int(result.scalar_one())

    # Students

    async def list_students(
        self,
        owner_id: UUID,
        class_id: Optional[UUID] = None,
        search: Optional[str] = None,
    ) -> List[StudentRecord]:
        stmt = select(Student).where(Student.owner_id == owner_id)
        if class_id is not None:
            stmt = stmt.where(Student.class_id == class_id)
        if search:
            stmt = stmt.where(Student.name.icontains(search, autoescape=True))
        stmt = stmt.order_by(Student.points.desc(), Student.name)
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return _decode_many(StudentRecord, result.scalars().all())

    async def get_student(self, owner_id: UUID, student_id: UUID) -> Optional[StudentRecord]:
        result = await self.db.execute(
            select(Student)
            .where(Student.id == student_id, Student.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        return _decode(StudentRecord, result.scalar_one_or_none())

    async def create_student(self, owner_id: UUID, class_id: UUID, name: str) -> StudentRecord:
        obj = Student(owner_id=owner_id, class_id=class_id, name=name, points=0, group_id=None)
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return _decode(StudentRecord, obj)

    async def update_student(
        self,
        owner_id: UUID,
        student_id: UUID,
        name: Optional[str] = None,
        points_delta: Optional[int] = None,
    ) -> bool:
        values = {}
        if name is not None:
            values["name"] = name
        if points_delta is not None:
            # Increment in SQL so concurrent adjustments do not overwrite each other
            values["points"] = Student.points + points_delta
        if not values:
            return await self.get_student(owner_id, student_id) is not None
        result = await self.db.execute(
            update(Student)
            .where(Student.id == student_id, Student.owner_id == owner_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def delete_student(self, owner_id: UUID, student_id: UUID) -> bool:
        await self.db.execute(
            update(StudentGroup)
            .where(StudentGroup.owner_id == owner_id, StudentGroup.leader_id == student_id)
            .values(leader_id=None)
        )
        result = await self.db.execute(
            delete(Student).where(Student.id == student_id, Student.owner_id == owner_id)
        )
        return result.rowcount > 0

    # Groups

    async def list_groups(self, owner_id: UUID, class_id: UUID) -> List[GroupRecord]:
        result = await self.db.execute(
            select(StudentGroup)
            .where(StudentGroup.owner_id == owner_id, StudentGroup.class_id == class_id)
            .order_by(StudentGroup.created_at, StudentGroup.name)
            .execution_options(populate_existing=True)
        )
        return _decode_many(GroupRecord, result.scalars().all())

    async def upsert_groups(self, groups: Sequence[GroupRecord]) -> None:
        """Insert or overwrite id/name/leader for each group. Ids owned by another teacher or class are refused."""
        if not groups:
            return
        ids = [g.id for g in groups]
        result = await self.db.execute(select(StudentGroup).where(StudentGroup.id.in_(ids)))
        existing = {row.id: row for row in result.scalars().all()}
        for g in groups:
            row = existing.get(g.id)
            if row is None:
                self.db.add(
                    StudentGroup(
                        id=g.id,
                        owner_id=g.owner_id,
                        class_id=g.class_id,
                        name=g.name,
                        leader_id=g.leader_id,
                    )
                )
                continue
            if row.owner_id != g.owner_id or row.class_id != g.class_id:
                raise ConflictError(f"Group {g.id} belongs to another class")
            row.name = g.name
            row.leader_id = g.leader_id
        await self.db.flush()

    async def update_students_group_ref(
        self,
        owner_id: UUID,
        student_ids: Sequence[UUID],
        group_id: Optional[UUID],
    ) -> int:
        if not student_ids:
            return 0
        result = await self.db.execute(
            update(Student)
            .where(Student.id.in_(list(student_ids)), Student.owner_id == owner_id)
            .values(group_id=group_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # Activation codes

    def _codes_query(self):
        return select(ActivationCode, Profile.username).outerjoin(
            Profile, Profile.id == ActivationCode.used_by
        )

    async def list_activation_codes(self) -> List[ActivationCodeRecord]:
        result = await self.db.execute(
            self._codes_query()
            .order_by(ActivationCode.created_at.desc(), ActivationCode.code)
            .execution_options(populate_existing=True)
        )
        return [_code_to_record(c, username) for c, username in result.all()]

    async def get_activation_code(self, code: str) -> Optional[ActivationCodeRecord]:
        result = await self.db.execute(
            self._codes_query()
            .where(ActivationCode.code == code)
            .execution_options(populate_existing=True)
        )
        row = result.first()
        return _code_to_record(row[0], row[1]) if row else None

    async def get_code_used_by(self, profile_id: UUID) -> Optional[ActivationCodeRecord]:
        result = await self.db.execute(
            self._codes_query().where(ActivationCode.used_by == profile_id).limit(1)
        )
        row = result.first()
        return _code_to_record(row[0], row[1]) if row else None

    async def create_activation_code(self, code: str, valid_days: int) -> ActivationCodeRecord:
        obj = ActivationCode(code=code, is_used=False, valid_days=valid_days)
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return _code_to_record(obj)

    async def delete_activation_code(self, code_id: UUID) -> bool:
        result = await self.db.execute(delete(ActivationCode).where(ActivationCode.id == code_id))
        return result.rowcount > 0

    async def consume_activation_code(self, code: str, consumer_id: UUID) -> bool:
        """
        Conditionally mark a code used. Returns False when the code does not
        exist or was already consumed, so two registrations racing on the same
        code cannot both win.
        """
        result = await self.db.execute(
            update(ActivationCode)
            .where(ActivationCode.code == code, ActivationCode.is_used.is_(False))
            .values(is_used=True, used_by=consumer_id, used_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # Admin settings

    async def get_admin_settings(self) -> Optional[AdminCredential]:
        result = await self.db.execute(
            select(AdminSettings)
            .where(AdminSettings.id == ADMIN_SETTINGS_ID)
            .execution_options(populate_existing=True)
        )
        return _decode(AdminCredential, result.scalar_one_or_none())

    async def save_admin_settings(self, username: str, password_hash: str) -> AdminCredential:
        obj = await self.db.get(AdminSettings, ADMIN_SETTINGS_ID)
        if obj is None:
            obj = AdminSettings(id=ADMIN_SETTINGS_ID, username=username, password_hash=password_hash)
            self.db.add(obj)
        else:
            obj.username = username
            obj.password_hash = password_hash
        await self.db.flush()
        return AdminCredential(username=username, password_hash=password_hash)
