"""
HRMS - Employment and Employee Record Tests

Employment records, the small records owned by an employee (children,
languages, funding allocations) and the activity log.
"""

from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.models.employment import Employment, Payroll


API = "/api/v1"


def employment_payload(employee_id, **overrides) -> dict:
    payload = {
        "employee_id": employee_id,
        "employment_type": "Full-time",
        "pay_method": "Monthly",
        "start_date": "2024-01-01",
        "position_salary": "25000.00",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def test_employment(db_session, test_employee, test_position) -> Employment:
    employment = Employment(
        employee_id=test_employee.id,
        department_id=test_position.department_id,
        position_id=test_position.id,
        employment_type="Full-time",
        start_date=date(2024, 1, 1),
        position_salary=Decimal("25000"),
        active=True,
    )
    db_session.add(employment)
    await db_session.commit()
    await db_session.refresh(employment)
    return employment


class TestEmployments:

    @pytest.mark.asyncio
    async def test_create_employment(self, client: AsyncClient, auth_headers, test_employee, test_position):
        response = await client.post(
            f"{API}/employments",
            json=employment_payload(
                test_employee.id,
                department_id=test_position.department_id,
                position_id=test_position.id,
            ),
            headers=auth_headers,
        )
        assert response.status_code == 201

        data = response.json()["data"]
        assert data["employment_type"] == "Full-time"
        assert data["active"] is True
        assert data["created_by"] == "HR Admin"

    @pytest.mark.asyncio
    async def test_position_must_match_department(
        self, client: AsyncClient, auth_headers, test_employee, test_position,
    ):
        response = await client.post(f"{API}/departments", json={"name": "Finance"}, headers=auth_headers)
        finance_id = response.json()["data"]["id"]

        response = await client.post(
            f"{API}/employments",
            json=employment_payload(test_employee.id, department_id=finance_id, position_id=test_position.id),
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["errors"]["position_id"] == ["The position must belong to the selected department"]

    @pytest.mark.asyncio
    async def test_single_active_employment(self, client: AsyncClient, auth_headers, test_employee, test_employment):
        response = await client.post(f"{API}/employments", json=employment_payload(test_employee.id), headers=auth_headers)
        assert response.status_code == 422
        assert "active" in response.json()["errors"]

        # An inactive historical record is fine
        response = await client.post(
            f"{API}/employments",
            json=employment_payload(test_employee.id, active=False, start_date="2020-01-01", end_date="2023-12-31"),
            headers=auth_headers,
        )
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_end_date_before_start_date(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.post(
            f"{API}/employments",
            json=employment_payload(test_employee.id, end_date="2023-01-01"),
            headers=auth_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_end_date_checked_against_stored_start(
        self, client: AsyncClient, auth_headers, test_employment,
    ):
        response = await client.put(
            f"{API}/employments/{test_employment.id}",
            json={"end_date": "2023-06-30"},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "end_date" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_delete_blocked_by_payroll(
        self, client: AsyncClient, auth_headers, db_session, test_employment,
    ):
        db_session.add(Payroll(
            employee_id=test_employment.employee_id,
            employment_id=test_employment.id,
            pay_period_date=date(2026, 1, 31),
            gross_salary=25000,
            net_salary=24000,
        ))
        await db_session.commit()

        response = await client.delete(f"{API}/employments/{test_employment.id}", headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["blockers"] == ["Employment has 1 payroll record(s)"]

    @pytest.mark.asyncio
    async def test_list_filtered_by_employee(self, client: AsyncClient, auth_headers, test_employment):
        response = await client.get(
            f"{API}/employments",
            params={"employee_id": test_employment.employee_id},
            headers=auth_headers,
        )
        assert response.json()["pagination"]["total"] == 1


class TestEmployeeRecords:

    @pytest.mark.asyncio
    async def test_child_crud(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.post(
            f"{API}/employee-children",
            json={"employee_id": test_employee.id, "name": "Ko Ko", "date_of_birth": "2015-04-01"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        child_id = response.json()["data"]["id"]

        response = await client.put(f"{API}/employee-children/{child_id}", json={"name": "Ko Ko Aung"}, headers=auth_headers)
        assert response.json()["data"]["name"] == "Ko Ko Aung"

        response = await client.delete(f"{API}/employee-children/{child_id}", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get(f"{API}/employee-children/{child_id}", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_record_for_unknown_employee(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/employee-language",
            json={"employee_id": 999, "language": "Thai"},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["errors"]["employee_id"] == ["The selected employee id is invalid"]

    @pytest.mark.asyncio
    async def test_funding_allocation_employment_must_match_employee(
        self, client: AsyncClient, auth_headers, db_session, test_employment,
    ):
        response = await client.post(
            f"{API}/employees",
            json={
                "organization": "BHF",
                "staff_id": "BHF001",
                "first_name_en": "Naw",
                "gender": "F",
                "date_of_birth": "1991-07-07",
                "status": "Local ID Staff",
            },
            headers=auth_headers,
        )
        other_employee_id = response.json()["data"]["id"]

        response = await client.post(
            f"{API}/employee-funding-allocations",
            json={
                "employee_id": other_employee_id,
                "employment_id": test_employment.id,
                "allocation_type": "grant",
                "fte": "0.5",
                "start_date": "2024-01-01",
            },
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "employment_id" in response.json()["errors"]

        response = await client.post(
            f"{API}/employee-funding-allocations",
            json={
                "employee_id": test_employment.employee_id,
                "employment_id": test_employment.id,
                "allocation_type": "grant",
                "fte": "0.5",
                "start_date": "2024-01-01",
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert Decimal(response.json()["data"]["fte"]) == Decimal("0.5")


class TestActivityLog:

    @pytest.mark.asyncio
    async def test_safe_delete_is_logged(self, client: AsyncClient, auth_headers, test_employee):
        await client.delete(f"{API}/employees/{test_employee.id}", headers=auth_headers)

        response = await client.get(f"{API}/activity-logs", params={"action": "deleted"}, headers=auth_headers)
        logs = response.json()["data"]
        assert len(logs) == 1
        assert logs[0]["subject_type"] == "employees"
        assert logs[0]["subject_id"] == test_employee.id
        assert logs[0]["causer_name"] == "HR Admin"
