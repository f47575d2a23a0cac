"""
HRMS - Employee API Tests

Tests for the employee endpoints: listing, create/update validation,
section updates, statistics and recycle-bin deletion.
"""

from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.employee import Employee
from app.models.employment import Payroll
from app.models.notification import Notification
from app.models.recycle_bin import DeletionManifest


API = "/api/v1"


def employee_payload(**overrides) -> dict:
    payload = {
        "organization": "SMRU",
        "staff_id": "EMP100",
        "first_name_en": "Jane",
        "last_name_en": "Smith",
        "gender": "F",
        "date_of_birth": "1992-03-10",
        "status": "Local ID Staff",
    }
    payload.update(overrides)
    return payload


class TestEmployeeList:
    """Listing, filtering and pagination."""

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get(f"{API}/employees")
        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_list_employees(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.get(f"{API}/employees", headers=auth_headers)
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert body["pagination"]["total"] == 1
        assert body["pagination"]["current_page"] == 1
        assert body["data"][0]["staff_id"] == "EMP001"

    @pytest.mark.asyncio
    async def test_total_is_stable_across_page_sizes(self, client: AsyncClient, auth_headers, db_session):
        db_session.add_all([
            Employee(
                organization="SMRU", staff_id=f"PAGE{n}", first_name_en=f"Page{n}", gender="F",
                date_of_birth=date(1990, 1, n), status="Local ID Staff",
            )
            for n in (1, 2, 3)
        ])
        await db_session.commit()

        response = await client.get(f"{API}/employees", params={"per_page": 10}, headers=auth_headers)
        assert response.json()["pagination"]["total"] == 3

        seen = []
        for page in (1, 2, 3):
            response = await client.get(
                f"{API}/employees",
                params={"per_page": 1, "page": page, "sort_by": "staff_id", "sort_order": "asc"},
                headers=auth_headers,
            )
            body = response.json()
            assert body["pagination"]["total"] == 3
            assert body["pagination"]["last_page"] == 3
            assert body["pagination"]["has_more_pages"] is (page < 3)
            seen.extend(e["staff_id"] for e in body["data"])
        assert seen == ["PAGE1", "PAGE2", "PAGE3"]

    @pytest.mark.asyncio
    async def test_filters_are_echoed(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.get(
            f"{API}/employees",
            params={"organization": "BHF", "search": "John"},
            headers=auth_headers,
        )
        body = response.json()
        assert body["pagination"]["total"] == 0
        assert body["filters"]["applied_filters"]["organization"] == ["BHF"]
        assert body["filters"]["applied_filters"]["search"] == "John"

    @pytest.mark.asyncio
    async def test_search_by_name(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.get(f"{API}/employees", params={"search": "john"}, headers=auth_headers)
        assert response.json()["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_rejects_unknown_sort_column(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{API}/employees", params={"sort_by": "salary"}, headers=auth_headers)
        assert response.status_code == 422


class TestEmployeeCreate:
    """Create validation."""

    @pytest.mark.asyncio
    async def test_create_employee(self, client: AsyncClient, auth_headers, db_session):
        response = await client.post(f"{API}/employees", json=employee_payload(), headers=auth_headers)
        assert response.status_code == 201

        data = response.json()["data"]
        assert data["staff_id"] == "EMP100"
        assert data["created_by"] == "HR Admin"

        result = await db_session.execute(select(Employee).where(Employee.staff_id == "EMP100"))
        assert result.scalar_one().first_name_en == "Jane"

    @pytest.mark.asyncio
    async def test_duplicate_staff_id_in_same_organization(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.post(
            f"{API}/employees",
            json=employee_payload(staff_id="EMP001"),
            headers=auth_headers,
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "DUPLICATE_ENTRY"
        assert "staff_id" in body["errors"]

    @pytest.mark.asyncio
    async def test_same_staff_id_in_other_organization(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.post(
            f"{API}/employees",
            json=employee_payload(staff_id="EMP001", organization="BHF"),
            headers=auth_headers,
        )
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_married_requires_spouse_name(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/employees",
            json=employee_payload(marital_status="Married"),
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "spouse_name" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_underage_employee_rejected(self, client: AsyncClient, auth_headers):
        dob = date(date.today().year - 16, 1, 1).isoformat()
        response = await client.post(
            f"{API}/employees",
            json=employee_payload(date_of_birth=dob),
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "date_of_birth" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_identification_number_requires_type(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/employees",
            json=employee_payload(identification_number="1234567890"),
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "identification_type" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_invalid_organization(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/employees",
            json=employee_payload(organization="ACME"),
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "organization" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_create_notifies_active_users(self, client: AsyncClient, auth_headers, test_user, db_session):
        await client.post(f"{API}/employees", json=employee_payload(), headers=auth_headers)

        result = await db_session.execute(select(Notification).where(Notification.user_id == test_user.id))
        notifications = result.scalars().all()
        assert len(notifications) == 1
        assert notifications[0].notification_type == "employee"
        assert notifications[0].action == "created"


class TestEmployeeUpdate:
    """Full and section updates."""

    @pytest.mark.asyncio
    async def test_update_checks_merged_record(self, client: AsyncClient, auth_headers, test_employee):
        # Stored record has no spouse, so Married alone must fail
        response = await client.put(
            f"{API}/employees/{test_employee.id}/family-information",
            json={"marital_status": "Married"},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "spouse_name" in response.json()["errors"]

        response = await client.put(
            f"{API}/employees/{test_employee.id}/family-information",
            json={"marital_status": "Married", "spouse_name": "Mary Doe"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["spouse_name"] == "Mary Doe"

    @pytest.mark.asyncio
    async def test_bank_information_requires_account(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.put(
            f"{API}/employees/{test_employee.id}/bank-information",
            json={"bank_name": "Bangkok Bank"},
            headers=auth_headers,
        )
        assert response.status_code == 422
        errors = response.json()["errors"]
        assert "bank_account_name" in errors
        assert "bank_account_number" in errors

    @pytest.mark.asyncio
    async def test_personal_information_replaces_languages(self, client: AsyncClient, auth_headers, test_employee):
        payload = {
            "current_address": "1 Main Road, Mae Sot",
            "permanent_address": "1 Main Road, Mae Sot",
            "languages": [
                {"language": "English", "proficiency_level": "Fluent"},
                {"language": "Thai"},
            ],
        }
        response = await client.put(
            f"{API}/employees/{test_employee.id}/personal-information",
            json=payload,
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert {lang["language"] for lang in response.json()["data"]["languages"]} == {"English", "Thai"}

        payload["languages"] = [{"language": "Burmese"}]
        response = await client.put(
            f"{API}/employees/{test_employee.id}/personal-information",
            json=payload,
            headers=auth_headers,
        )
        assert [lang["language"] for lang in response.json()["data"]["languages"]] == ["Burmese"]

    @pytest.mark.asyncio
    async def test_update_missing_employee(self, client: AsyncClient, auth_headers):
        response = await client.put(f"{API}/employees/999", json={"remark": "x"}, headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "EMPLOYEE_NOT_FOUND"


class TestEmployeeLookups:

    @pytest.mark.asyncio
    async def test_get_by_staff_id(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.get(f"{API}/employees/staff-id/EMP001", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"][0]["id"] == test_employee.id

    @pytest.mark.asyncio
    async def test_get_by_unknown_staff_id(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{API}/employees/staff-id/NOPE", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_statistics(self, client: AsyncClient, auth_headers, test_employee, mock_cache):
        response = await client.get(f"{API}/employees/statistics", headers=auth_headers)
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["total"] == 1
        assert data["by_organization"] == {"SMRU": 1}
        mock_cache.set_statistics.assert_awaited()

    @pytest.mark.asyncio
    async def test_statistics_served_from_cache(self, client: AsyncClient, auth_headers, mock_cache):
        mock_cache.get_statistics.return_value = {
            "total": 42, "by_organization": {}, "by_status": {}, "by_gender": {},
        }
        response = await client.get(f"{API}/employees/statistics", headers=auth_headers)
        assert response.json()["data"]["total"] == 42


class TestEmployeeDelete:
    """Recycle-bin deletion."""

    @pytest.mark.asyncio
    async def test_delete_moves_to_recycle_bin(self, client: AsyncClient, auth_headers, test_employee, db_session):
        employee_id = test_employee.id
        response = await client.delete(f"{API}/employees/{employee_id}", headers=auth_headers)
        assert response.status_code == 200

        body = response.json()
        assert body["deletion_key"]
        assert body["deleted_records_count"] == 1

        response = await client.get(f"{API}/employees/{employee_id}", headers=auth_headers)
        assert response.status_code == 404

        manifest = (await db_session.execute(select(DeletionManifest))).scalar_one()
        assert manifest.root_model == "employees"
        assert manifest.deleted_by_name == "HR Admin"

    @pytest.mark.asyncio
    async def test_delete_blocked_by_payroll(self, client: AsyncClient, auth_headers, test_employee, db_session):
        db_session.add(Payroll(
            employee_id=test_employee.id,
            pay_period_date=date(2026, 1, 31),
            gross_salary=30000,
            net_salary=28000,
        ))
        await db_session.commit()

        response = await client.delete(f"{API}/employees/{test_employee.id}", headers=auth_headers)
        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "DELETION_BLOCKED"
        assert body["blockers"] == ["Employee has 1 payroll record(s)"]

    @pytest.mark.asyncio
    async def test_delete_selected_partial_success(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.request(
            "DELETE",
            f"{API}/employees/delete-selected",
            json={"ids": [test_employee.id, 999]},
            headers=auth_headers,
        )
        assert response.status_code == 207

        body = response.json()
        assert body["success"] is False
        assert [item["id"] for item in body["data"]["succeeded"]] == [test_employee.id]
        assert body["data"]["failed"][0]["id"] == 999
