"""
HRMS - Lookup Tests
"""

import pytest
from httpx import AsyncClient

from app.models.lookup import Lookup
from app.services.lookup_service import DEFAULT_LOOKUPS, LookupService


API = "/api/v1"


@pytest.fixture
async def seeded_lookups(db_session):
    db_session.add_all([
        Lookup(type="gender", value="M"),
        Lookup(type="gender", value="F"),
        Lookup(type="organization", value="SMRU"),
        Lookup(type="organization", value="BHF"),
    ])
    await db_session.commit()


class TestLookups:

    @pytest.mark.asyncio
    async def test_grouped_by_type(self, client: AsyncClient, auth_headers, seeded_lookups):
        response = await client.get(f"{API}/lookups", headers=auth_headers)
        assert response.status_code == 200

        data = response.json()["data"]
        assert set(data) == {"gender", "organization"}
        assert [item["value"] for item in data["organization"]] == ["BHF", "SMRU"]

    @pytest.mark.asyncio
    async def test_types(self, client: AsyncClient, auth_headers, seeded_lookups):
        response = await client.get(f"{API}/lookups/types", headers=auth_headers)
        assert response.json()["data"] == ["gender", "organization"]

    @pytest.mark.asyncio
    async def test_by_type(self, client: AsyncClient, auth_headers, seeded_lookups):
        response = await client.get(f"{API}/lookups/type/gender", headers=auth_headers)
        assert [item["value"] for item in response.json()["data"]] == ["F", "M"]

        response = await client.get(f"{API}/lookups/type/blood_group", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient, auth_headers, seeded_lookups):
        response = await client.get(f"{API}/lookups/search", params={"q": "smr"}, headers=auth_headers)
        assert [item["value"] for item in response.json()["data"]] == ["SMRU"]

    @pytest.mark.asyncio
    async def test_paginated_list_with_type_filter(self, client: AsyncClient, auth_headers, seeded_lookups):
        response = await client.get(f"{API}/lookups/lists", params={"type": "gender"}, headers=auth_headers)
        body = response.json()
        assert body["pagination"]["total"] == 2
        assert body["filters"]["applied_filters"] == {"type": "gender"}

    @pytest.mark.asyncio
    async def test_create_and_duplicate(self, client: AsyncClient, auth_headers):
        payload = {"type": "religion", "value": "Buddhist"}
        response = await client.post(f"{API}/lookups", json=payload, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["data"]["created_by"] == "HR Admin"

        response = await client.post(f"{API}/lookups", json=payload, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["errors"]["value"] == ["Lookup value 'Buddhist' already exists for type 'religion'"]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client: AsyncClient, auth_headers, db_session):
        lookup = Lookup(type="bank_name", value="Bangkok Bnak")
        db_session.add(lookup)
        await db_session.commit()

        response = await client.put(f"{API}/lookups/{lookup.id}", json={"value": "Bangkok Bank"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["value"] == "Bangkok Bank"

        response = await client.delete(f"{API}/lookups/{lookup.id}", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get(f"{API}/lookups/{lookup.id}", headers=auth_headers)
        assert response.status_code == 404


class TestSeedDefaults:

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session, seeded_lookups):
        service = LookupService(db_session)
        expected = sum(len(values) for values in DEFAULT_LOOKUPS.values())

        # The four fixture rows are all defaults already
        assert await service.seed_defaults() == expected - 4
        assert await service.seed_defaults() == 0

        assert await service.get_values("organization") == ["BHF", "SMRU"]
