import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import DBAPIError

from classpoints.store.record_store import RecordStore


async def _make_class(client: AsyncClient, headers, name: str = "Class 1") -> str:
    response = await client.post("/api/v1/classes", json={"name": name}, headers=headers)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_create_student_starts_at_zero(client: AsyncClient, teacher_headers) -> None:
    class_id = await _make_class(client, teacher_headers)
    response = await client.post(
        "/api/v1/students", json={"name": "  Ana ", "class_id": class_id}, headers=teacher_headers
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Ana"
    assert data["points"] == 0
    assert data["group_id"] is None
    assert data["class_id"] == class_id


@pytest.mark.asyncio
async def test_create_student_validation(client: AsyncClient, teacher_headers) -> None:
    class_id = await _make_class(client, teacher_headers)
    blank = await client.post("/api/v1/students", json={"name": "", "class_id": class_id}, headers=teacher_headers)
    assert blank.status_code == 400
    unknown = await client.post(
        "/api/v1/students", json={"name": "Bo", "class_id": str(uuid.uuid4())}, headers=teacher_headers
    )
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_points_adjust_allows_negative_totals(client: AsyncClient, teacher_headers) -> None:
    class_id = await _make_class(client, teacher_headers)
    sid = (
        await client.post("/api/v1/students", json={"name": "Ana", "class_id": class_id}, headers=teacher_headers)
    ).json()["id"]

    up = await client.post(f"/api/v1/students/{sid}/points", json={"delta": 3}, headers=teacher_headers)
    assert up.json()["points"] == 3
    down = await client.post(f"/api/v1/students/{sid}/points", json={"delta": -5}, headers=teacher_headers)
    assert down.status_code == 200
    assert down.json()["points"] == -2

    missing = await client.post(
        f"/api/v1/students/{uuid.uuid4()}/points", json={"delta": 1}, headers=teacher_headers
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_list_students_filters_and_orders(client: AsyncClient, teacher_headers) -> None:
    first = await _make_class(client, teacher_headers, "First")
    second = await _make_class(client, teacher_headers, "Second")
    ids = {}
    for name, class_id, points in [
        ("Anna", first, 2),
        ("Hannah", first, 9),
        ("Bo", first, 5),
        ("Annie", second, 1),
    ]:
        sid = (
            await client.post("/api/v1/students", json={"name": name, "class_id": class_id}, headers=teacher_headers)
        ).json()["id"]
        await client.post(f"/api/v1/students/{sid}/points", json={"delta": points}, headers=teacher_headers)
        ids[name] = sid

    in_first = await client.get("/api/v1/students", params={"class_id": first}, headers=teacher_headers)
    assert [s["name"] for s in in_first.json()] == ["Hannah", "Bo", "Anna"]

    search = await client.get("/api/v1/students", params={"search": "ann"}, headers=teacher_headers)
    assert {s["name"] for s in search.json()} == {"Anna", "Hannah", "Annie"}

    both = await client.get(
        "/api/v1/students", params={"class_id": first, "search": "ann"}, headers=teacher_headers
    )
    assert [s["name"] for s in both.json()] == ["Hannah", "Anna"]


@pytest.mark.asyncio
async def test_rename_and_delete_student(client: AsyncClient, teacher_headers) -> None:
    class_id = await _make_class(client, teacher_headers)
    sid = (
        await client.post("/api/v1/students", json={"name": "Ana", "class_id": class_id}, headers=teacher_headers)
    ).json()["id"]

    renamed = await client.put(f"/api/v1/students/{sid}", json={"name": "Anastasia"}, headers=teacher_headers)
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Anastasia"

    assert (await client.delete(f"/api/v1/students/{sid}", headers=teacher_headers)).status_code == 204
    assert (await client.delete(f"/api/v1/students/{sid}", headers=teacher_headers)).status_code == 404
    listing = await client.get("/api/v1/students", headers=teacher_headers)
    assert listing.json() == []


@pytest.mark.asyncio
async def test_points_delta_out_of_range_rejected(client: AsyncClient, teacher_headers) -> None:
    class_id = await _make_class(client, teacher_headers)
    sid = (
        await client.post("/api/v1/students", json={"name": "Ana", "class_id": class_id}, headers=teacher_headers)
    ).json()["id"]

    huge = await client.post(f"/api/v1/students/{sid}/points", json={"delta": 10**20}, headers=teacher_headers)
    assert huge.status_code == 422
    too_low = await client.post(
        f"/api/v1/students/{sid}/points", json={"delta": -1_000_001}, headers=teacher_headers
    )
    assert too_low.status_code == 422

    students = (await client.get("/api/v1/students", headers=teacher_headers)).json()
    assert students[0]["points"] == 0


@pytest.mark.asyncio
async def test_points_total_overflow_reported_as_bad_request(
    client: AsyncClient, teacher_headers, monkeypatch
) -> None:
    class_id = await _make_class(client, teacher_headers)
    sid = (
        await client.post("/api/v1/students", json={"name": "Ana", "class_id": class_id}, headers=teacher_headers)
    ).json()["id"]

    async def overflow(self, owner_id, student_id, name=None, points_delta=None):
        raise DBAPIError("UPDATE students SET points=...", {}, Exception("integer out of range"))

    monkeypatch.setattr(RecordStore, "update_student", overflow)

    response = await client.post(f"/api/v1/students/{sid}/points", json={"delta": 5}, headers=teacher_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Points total out of range"


@pytest.mark.asyncio
async def test_search_matches_wildcard_characters_literally(client: AsyncClient, teacher_headers) -> None:
    class_id = await _make_class(client, teacher_headers)
    for name in ("Ana", "Bo", "100% Cy", "Di_Ed"):
        await client.post("/api/v1/students", json={"name": name, "class_id": class_id}, headers=teacher_headers)

    percent = await client.get("/api/v1/students", params={"search": "%"}, headers=teacher_headers)
    assert [s["name"] for s in percent.json()] == ["100% Cy"]
    underscore = await client.get("/api/v1/students", params={"search": "_"}, headers=teacher_headers)
    assert [s["name"] for s in underscore.json()] == ["Di_Ed"]
