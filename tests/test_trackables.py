"""Tests for symptom, habit and medication endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_symptoms_includes_system_and_own(
    client: AsyncClient,
    auth_headers: dict,
    other_headers: dict,
    system_symptom: dict,
) -> None:
    """Test listing symptoms."""
    await client.post("/api/symptoms", json={"name": "Tinnitus", "category": "Ears"}, headers=auth_headers)
    await client.post("/api/symptoms", json={"name": "Cramps"}, headers=other_headers)

    response = await client.get("/api/symptoms", headers=auth_headers)

    assert response.status_code == 200
    names = [item["name"] for item in response.json()]
    assert names == ["Headache", "Tinnitus"]


@pytest.mark.asyncio
async def test_create_symptom(client: AsyncClient, auth: dict, auth_headers: dict) -> None:
    """Test creating a symptom."""
    response = await client.post(
        "/api/symptoms",
        json={"name": "  Tinnitus ", "category": "Ears"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Tinnitus"
    assert data["userId"] == auth["user"]["id"]
    assert data["isActive"] is True


@pytest.mark.asyncio
async def test_create_symptom_requires_name(client: AsyncClient, auth_headers: dict) -> None:
    """Test creating a symptom without a name."""
    response = await client.post("/api/symptoms", json={"name": "   "}, headers=auth_headers)

    assert response.status_code == 422
    assert response.json() == {"error": "name must be a non-empty string"}


@pytest.mark.asyncio
async def test_update_own_symptom(client: AsyncClient, auth_headers: dict) -> None:
    """Test updating a symptom."""
    created = (await client.post("/api/symptoms", json={"name": "Tinnitus"}, headers=auth_headers)).json()

    response = await client.patch(
        f"/api/symptoms/{created['id']}",
        json={"category": "Ears"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["category"] == "Ears"
    assert response.json()["name"] == "Tinnitus"


@pytest.mark.asyncio
async def test_system_symptom_is_read_only(
    client: AsyncClient,
    auth_headers: dict,
    system_symptom: dict,
) -> None:
    """Test modifying a system symptom."""
    patched = await client.patch(
        f"/api/symptoms/{system_symptom['id']}",
        json={"name": "Migraine"},
        headers=auth_headers,
    )
    assert patched.status_code == 403
    assert patched.json() == {"error": "System symptoms cannot be modified"}

    deleted = await client.delete(f"/api/symptoms/{system_symptom['id']}", headers=auth_headers)
    assert deleted.status_code == 403


@pytest.mark.asyncio
async def test_other_users_symptom_is_forbidden(
    client: AsyncClient,
    auth_headers: dict,
    other_headers: dict,
) -> None:
    """Test modifying another user's symptom."""
    created = (await client.post("/api/symptoms", json={"name": "Cramps"}, headers=other_headers)).json()

    response = await client.delete(f"/api/symptoms/{created['id']}", headers=auth_headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}


@pytest.mark.asyncio
@pytest.mark.parametrize("symptom_id", [str(uuid4()), "not-a-uuid"])
async def test_missing_symptom(client: AsyncClient, auth_headers: dict, symptom_id: str) -> None:
    """Test getting a symptom that does not exist."""
    response = await client.patch(f"/api/symptoms/{symptom_id}", json={"name": "X"}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Symptom not found"}


@pytest.mark.asyncio
async def test_delete_own_symptom(client: AsyncClient, auth_headers: dict) -> None:
    """Test deleting a symptom."""
    created = (await client.post("/api/symptoms", json={"name": "Tinnitus"}, headers=auth_headers)).json()

    response = await client.delete(f"/api/symptoms/{created['id']}", headers=auth_headers)
    assert response.status_code == 204

    listed = await client.get("/api/symptoms", headers=auth_headers)
    assert listed.json() == []


@pytest.mark.asyncio
async def test_create_habit(client: AsyncClient, auth_headers: dict) -> None:
    """Test creating a habit."""
    response = await client.post(
        "/api/habits",
        json={"name": "Meditation", "trackingType": "duration", "unit": "minutes"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.json()["trackingType"] == "duration"


@pytest.mark.asyncio
async def test_create_habit_rejects_unknown_tracking_type(client: AsyncClient, auth_headers: dict) -> None:
    """Test creating a habit with an invalid tracking type."""
    response = await client.post(
        "/api/habits",
        json={"name": "Meditation", "trackingType": "hourly"},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert response.json() == {"error": "trackingType must be one of: boolean, numeric, duration"}


@pytest.mark.asyncio
async def test_system_habit_is_read_only(
    client: AsyncClient,
    auth_headers: dict,
    system_habits: dict,
) -> None:
    """Test modifying a system habit."""
    habit_id = system_habits["boolean"]["id"]

    response = await client.patch(f"/api/habits/{habit_id}", json={"unit": "sessions"}, headers=auth_headers)

    assert response.status_code == 403
    assert response.json() == {"error": "System habits cannot be modified"}


@pytest.mark.asyncio
async def test_medications_are_private_and_active_only(
    client: AsyncClient,
    auth_headers: dict,
    other_headers: dict,
) -> None:
    """Test listing medications."""
    mine = (
        await client.post(
            "/api/medications",
            json={"name": "Ibuprofen", "dosage": "200mg", "frequency": "as needed"},
            headers=auth_headers,
        )
    ).json()
    paused = (await client.post("/api/medications", json={"name": "Vitamin D"}, headers=auth_headers)).json()
    await client.post("/api/medications", json={"name": "Aspirin"}, headers=other_headers)

    deactivated = await client.patch(
        f"/api/medications/{paused['id']}",
        json={"isActive": False},
        headers=auth_headers,
    )
    assert deactivated.status_code == 200

    response = await client.get("/api/medications", headers=auth_headers)

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [mine["id"]]

    foreign = await client.patch(f"/api/medications/{mine['id']}", json={"dosage": "1g"}, headers=other_headers)
    assert foreign.status_code == 403
