"""
HRMS - Recycle Bin Tests

Safe delete, restore with original IDs, bulk restore, permanent delete
and purge of expired entries.
"""

from datetime import date, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.models.employee import Employee, EmployeeLanguage
from app.models.recycle_bin import DeletedModel, DeletionManifest
from app.services.safe_delete_service import SafeDeleteService, deserialize_row, serialize_row


API = "/api/v1"


@pytest.fixture
async def deleted_employee(db_session, context, test_employee):
    """test_employee with one language row, moved to the recycle bin."""
    db_session.add(EmployeeLanguage(employee_id=test_employee.id, language="Karen", proficiency_level="Native"))
    await db_session.commit()

    manifest = await SafeDeleteService(db_session, context).delete(test_employee, reason="Left organization")
    return manifest


class TestRecycleBinListing:

    @pytest.mark.asyncio
    async def test_list_entries(self, client: AsyncClient, auth_headers, deleted_employee):
        response = await client.get(f"{API}/recycle-bin", headers=auth_headers)
        assert response.status_code == 200

        entry = response.json()["data"][0]
        assert entry["deletion_key"] == deleted_employee.deletion_key
        assert entry["root_model"] == "employees"
        assert entry["snapshot_count"] == 2
        assert entry["table_order"] == ["employee_languages"]
        assert entry["reason"] == "Left organization"

    @pytest.mark.asyncio
    async def test_filter_by_model(self, client: AsyncClient, auth_headers, deleted_employee):
        response = await client.get(f"{API}/recycle-bin", params={"model": "departments"}, headers=auth_headers)
        assert response.json()["pagination"]["total"] == 0

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, auth_headers, deleted_employee):
        response = await client.get(f"{API}/recycle-bin/stats", headers=auth_headers)
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["by_model"] == {"employees": 1}
        assert data["oldest"] is not None


class TestRestore:

    @pytest.mark.asyncio
    async def test_restore_brings_back_children(
        self, client: AsyncClient, auth_headers, db_session, deleted_employee,
    ):
        employee_id = deleted_employee.root_id
        response = await client.post(
            f"{API}/recycle-bin/restore",
            json={"deletion_key": deleted_employee.deletion_key},
            headers=auth_headers,
        )
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["root_id"] == employee_id
        assert data["restored_count"] == 2

        response = await client.get(f"{API}/employees/{employee_id}", headers=auth_headers)
        assert response.status_code == 200
        assert [lang["language"] for lang in response.json()["data"]["languages"]] == ["Karen"]

        snapshots = (await db_session.execute(select(func.count(DeletedModel.id)))).scalar()
        assert snapshots == 0

    @pytest.mark.asyncio
    async def test_restore_unknown_key(self, client: AsyncClient, auth_headers):
        response = await client.post(f"{API}/recycle-bin/restore", json={"deletion_key": "missing"}, headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_restore_conflicts_with_live_row(
        self, client: AsyncClient, auth_headers, db_session, deleted_employee,
    ):
        db_session.add(Employee(
            id=deleted_employee.root_id,
            organization="BHF",
            staff_id="EMP777",
            first_name_en="Reused",
            gender="F",
            date_of_birth=date(1995, 1, 1),
            status="Local ID Staff",
        ))
        await db_session.commit()

        response = await client.post(
            f"{API}/recycle-bin/restore",
            json={"deletion_key": deleted_employee.deletion_key},
            headers=auth_headers,
        )
        assert response.status_code == 409

        # Nothing restored, entry kept
        manifests = (await db_session.execute(select(func.count(DeletionManifest.id)))).scalar()
        assert manifests == 1

    @pytest.mark.asyncio
    async def test_bulk_restore_partial(self, client: AsyncClient, auth_headers, deleted_employee):
        response = await client.post(
            f"{API}/recycle-bin/bulk-restore",
            json={"deletion_keys": [deleted_employee.deletion_key, "missing"]},
            headers=auth_headers,
        )
        assert response.status_code == 207

        body = response.json()
        assert body["success"] is False
        assert body["message"] == "1 restored, 1 failed"
        assert body["data"]["failed"][0]["deletion_key"] == "missing"


class TestPermanentDelete:

    @pytest.mark.asyncio
    async def test_permanently_delete(self, client: AsyncClient, auth_headers, db_session, deleted_employee):
        response = await client.delete(f"{API}/recycle-bin/{deleted_employee.deletion_key}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Recycle bin entry permanently deleted (2 records)"

        snapshots = (await db_session.execute(select(func.count(DeletedModel.id)))).scalar()
        assert snapshots == 0

    @pytest.mark.asyncio
    async def test_purge_expired(self, db_session, context):
        now = datetime.utcnow()
        db_session.add_all([
            DeletionManifest(
                deletion_key="old", root_model="employees", root_id=1,
                snapshot_keys=[], table_order=[], created_at=now - timedelta(days=45),
            ),
            DeletionManifest(
                deletion_key="recent", root_model="employees", root_id=2,
                snapshot_keys=[], table_order=[], created_at=now - timedelta(days=5),
            ),
        ])
        await db_session.commit()

        assert await SafeDeleteService(db_session, context).purge_expired(days=30) == 1

        remaining = (await db_session.execute(select(DeletionManifest.deletion_key))).scalars().all()
        assert remaining == ["recent"]


class TestRowSerialization:

    def test_dates_survive_snapshot(self):
        employee = Employee(
            id=5,
            organization="SMRU",
            staff_id="EMP005",
            gender="M",
            date_of_birth=date(1988, 2, 29),
            status="Local ID Staff",
        )
        data = serialize_row(employee)
        assert data["date_of_birth"] == "1988-02-29"

        values = deserialize_row(Employee, data)
        assert values["date_of_birth"] == date(1988, 2, 29)
        assert values["id"] == 5
