"""Tests for the Record Store client against an in-memory database."""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from classpoints.core.exceptions import ConflictError
from classpoints.core.records import GroupRecord, StudentRecord
from classpoints.store.record_store import RecordStore, _decode_many


async def _teacher(store: RecordStore, username: str):
    profile = await store.create_profile(
        uuid.uuid4(), username=username, full_name=username.title(), expire_at=None
    )
    await store.commit()
    return profile


@pytest.mark.asyncio
async def test_timestamps_come_back_in_utc(store: RecordStore) -> None:
    expire_at = datetime.now(timezone.utc) + timedelta(days=3)
    created = await store.create_profile(uuid.uuid4(), "ms_tan", "Tan Mei", expire_at)
    await store.commit()

    profile = await store.get_profile(created.id)
    assert profile.created_at.tzinfo is not None
    assert profile.expire_at.utcoffset() == timedelta(0)
    assert abs(profile.expire_at - expire_at) < timedelta(seconds=1)


def test_malformed_rows_are_skipped() -> None:
    good = SimpleNamespace(
        id=uuid.uuid4(), owner_id=uuid.uuid4(), class_id=uuid.uuid4(), name="Ana", points=None, group_id=None
    )
    bad = SimpleNamespace(
        id="not-a-uuid", owner_id=uuid.uuid4(), class_id=uuid.uuid4(), name="Bo", points=3, group_id=None
    )
    records = _decode_many(StudentRecord, [good, bad])
    assert [r.name for r in records] == ["Ana"]
    assert records[0].points == 0


@pytest.mark.asyncio
async def test_consume_activation_code_only_once(store: RecordStore) -> None:
    first = await _teacher(store, "first")
    second = await _teacher(store, "second")
    await store.create_activation_code("APPLE-AAAAAA", 7)
    await store.commit()

    assert await store.consume_activation_code("APPLE-AAAAAA", first.id) is True
    assert await store.consume_activation_code("APPLE-AAAAAA", second.id) is False
    assert await store.consume_activation_code("APPLE-MISSING", second.id) is False
    await store.commit()

    code = await store.get_activation_code("APPLE-AAAAAA")
    assert code.is_used
    assert code.used_by == first.id
    assert code.used_by_username == "first"
    assert code.used_at is not None


@pytest.mark.asyncio
async def test_students_scoped_to_owner(store: RecordStore) -> None:
    mine = await _teacher(store, "mine")
    other = await _teacher(store, "other")
    my_class = await store.create_class(mine.id, "5A")
    other_class = await store.create_class(other.id, "5A")
    ana = await store.create_student(mine.id, my_class.id, "Ana")
    bo = await store.create_student(other.id, other_class.id, "Bo")
    await store.commit()

    assert [s.id for s in await store.list_students(mine.id)] == [ana.id]
    assert await store.get_student(mine.id, bo.id) is None
    assert await store.update_student(mine.id, bo.id, points_delta=5) is False
    assert await store.delete_student(mine.id, bo.id) is False

    group = GroupRecord(id=uuid.uuid4(), owner_id=mine.id, class_id=my_class.id, name="G")
    await store.upsert_groups([group])
    updated = await store.update_students_group_ref(mine.id, [ana.id, bo.id], group.id)
    await store.commit()

    assert updated == 1
    assert (await store.get_student(mine.id, ana.id)).group_id == group.id
    assert (await store.get_student(other.id, bo.id)).group_id is None


@pytest.mark.asyncio
async def test_points_delta_accumulates(store: RecordStore) -> None:
    owner = await _teacher(store, "owner")
    klass = await store.create_class(owner.id, "6B")
    student = await store.create_student(owner.id, klass.id, "Ana")
    await store.update_student(owner.id, student.id, points_delta=4)
    await store.update_student(owner.id, student.id, points_delta=-6)
    await store.commit()

    assert (await store.get_student(owner.id, student.id)).points == -2


@pytest.mark.asyncio
async def test_upsert_groups_overwrites_and_refuses_foreign_ids(store: RecordStore) -> None:
    owner = await _teacher(store, "owner")
    intruder = await _teacher(store, "intruder")
    klass = await store.create_class(owner.id, "6B")
    intruder_class = await store.create_class(intruder.id, "6B")
    await store.commit()

    group = GroupRecord(id=uuid.uuid4(), owner_id=owner.id, class_id=klass.id, name="Alpha")
    await store.upsert_groups([group])
    await store.upsert_groups([group.model_copy(update={"name": "Owls"})])
    await store.commit()
    assert [g.name for g in await store.list_groups(owner.id, klass.id)] == ["Owls"]

    hijack = GroupRecord(id=group.id, owner_id=intruder.id, class_id=intruder_class.id, name="Mine now")
    with pytest.raises(ConflictError):
        await store.upsert_groups([hijack])
    await store.rollback()
    assert [g.name for g in await store.list_groups(owner.id, klass.id)] == ["Owls"]


@pytest.mark.asyncio
async def test_delete_profile_releases_code(store: RecordStore) -> None:
    teacher = await _teacher(store, "leaving")
    await store.create_activation_code("APPLE-BBBBBB", 7)
    await store.consume_activation_code("APPLE-BBBBBB", teacher.id)
    await store.commit()

    assert await store.delete_profile(teacher.id) is True
    await store.commit()

    code = await store.get_activation_code("APPLE-BBBBBB")
    assert code.is_used
    assert code.used_by is None
    assert await store.get_profile(teacher.id) is None
