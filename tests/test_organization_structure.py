"""
HRMS - Department and Position Tests

Department CRUD and safe delete, and the position hierarchy rules.
"""

from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.models.employment import Employment
from app.models.organization_structure import Position


API = "/api/v1"


async def add_chain(db_session, top: Position, titles) -> list:
    """Positions each reporting to the previous one, starting under top."""
    chain = []
    parent = top
    for title in titles:
        position = Position(
            department_id=top.department_id,
            title=title,
            reports_to_id=parent.id,
            level=parent.level + 1,
            is_manager=False,
            is_active=True,
        )
        db_session.add(position)
        await db_session.commit()
        chain.append(position)
        parent = position
    return chain


class TestDepartments:

    @pytest.mark.asyncio
    async def test_create_and_list(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/departments",
            json={"name": "Human Resources", "description": "People team"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["created_by"] == "HR Admin"

        response = await client.get(f"{API}/departments", headers=auth_headers)
        body = response.json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["name"] == "Human Resources"
        assert body["data"][0]["positions_count"] == 0

    @pytest.mark.asyncio
    async def test_duplicate_name(self, client: AsyncClient, auth_headers, test_department):
        response = await client.post(f"{API}/departments", json={"name": "Laboratory"}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DUPLICATE_ENTRY"

    @pytest.mark.asyncio
    async def test_detail_includes_positions(self, client: AsyncClient, auth_headers, test_position):
        response = await client.get(f"{API}/departments/{test_position.department_id}", headers=auth_headers)
        assert response.status_code == 200
        positions = response.json()["data"]["positions"]
        assert [p["title"] for p in positions] == ["Lab Manager"]

    @pytest.mark.asyncio
    async def test_options(self, client: AsyncClient, auth_headers, test_department):
        response = await client.get(f"{API}/departments/options", headers=auth_headers)
        assert response.json()["data"] == [{"id": test_department.id, "name": "Laboratory"}]

    @pytest.mark.asyncio
    async def test_delete_cascades_positions(self, client: AsyncClient, auth_headers, test_position):
        department_id = test_position.department_id
        response = await client.delete(f"{API}/departments/{department_id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["deleted_records_count"] == 2

        response = await client.get(f"{API}/positions/{test_position.id}", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_blocked_by_employment(
        self, client: AsyncClient, auth_headers, db_session, test_employee, test_position,
    ):
        db_session.add(Employment(
            employee_id=test_employee.id,
            department_id=test_position.department_id,
            position_id=test_position.id,
            employment_type="Full-time",
            start_date=date(2024, 1, 1),
            position_salary=Decimal("25000"),
            active=True,
        ))
        await db_session.commit()

        response = await client.delete(f"{API}/departments/{test_position.department_id}", headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DELETION_BLOCKED"
        assert len(response.json()["blockers"]) == 2


class TestPositions:

    @pytest.mark.asyncio
    async def test_level_derived_from_supervisor(self, client: AsyncClient, auth_headers, test_position):
        response = await client.post(
            f"{API}/positions",
            json={
                "department_id": test_position.department_id,
                "title": "Lab Technician",
                "reports_to_id": test_position.id,
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["level"] == 2
        assert data["reports_to_id"] == test_position.id

    @pytest.mark.asyncio
    async def test_level_one_must_be_manager(self, client: AsyncClient, auth_headers, test_department):
        response = await client.post(
            f"{API}/positions",
            json={"department_id": test_department.id, "title": "Clerk", "level": 1, "is_manager": False},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "is_manager" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_supervisor_in_other_department(
        self, client: AsyncClient, auth_headers, db_session, test_position,
    ):
        response = await client.post(f"{API}/departments", json={"name": "Finance"}, headers=auth_headers)
        finance_id = response.json()["data"]["id"]

        response = await client.post(
            f"{API}/positions",
            json={"department_id": finance_id, "title": "Accountant", "reports_to_id": test_position.id},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["errors"]["reports_to_id"] == [
            "Position cannot report to someone from a different department"
        ]

    @pytest.mark.asyncio
    async def test_circular_reporting_rejected(
        self, client: AsyncClient, auth_headers, db_session, test_position,
    ):
        child = Position(
            department_id=test_position.department_id,
            title="Senior Technician",
            reports_to_id=test_position.id,
            level=2,
            is_manager=True,
            is_active=True,
        )
        db_session.add(child)
        await db_session.commit()

        response = await client.put(
            f"{API}/positions/{test_position.id}",
            json={"reports_to_id": child.id},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert "This would create a circular reporting relationship" in response.json()["errors"]["reports_to_id"]

    @pytest.mark.asyncio
    async def test_move_relevels_subordinates(
        self, client: AsyncClient, auth_headers, db_session, test_position,
    ):
        _, b, c = await add_chain(db_session, test_position, ["Supervisor", "Senior Technician", "Technician"])
        other_manager = Position(
            department_id=test_position.department_id, title="Deputy Manager", level=1, is_manager=True, is_active=True,
        )
        db_session.add(other_manager)
        await db_session.commit()

        response = await client.put(
            f"{API}/positions/{b.id}",
            json={"reports_to_id": other_manager.id},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["level"] == 2

        response = await client.get(f"{API}/positions/{c.id}", headers=auth_headers)
        assert response.json()["data"]["level"] == 3

    @pytest.mark.asyncio
    async def test_move_refused_when_subordinates_exceed_max_level(
        self, client: AsyncClient, auth_headers, db_session, test_position,
    ):
        deep = await add_chain(db_session, test_position, [f"Grade {level}" for level in range(2, 11)])
        assert deep[-1].level == 10
        team_lead, assistant = await add_chain(db_session, test_position, ["Team Lead", "Assistant"])

        response = await client.put(
            f"{API}/positions/{team_lead.id}",
            json={"reports_to_id": deep[-2].id},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["errors"]["level"] == ["Subordinate positions would exceed level 10"]

        await db_session.refresh(assistant)
        assert assistant.level == 3

    @pytest.mark.asyncio
    async def test_cannot_report_to_itself(self, client: AsyncClient, auth_headers, test_position):
        response = await client.put(
            f"{API}/positions/{test_position.id}",
            json={"reports_to_id": test_position.id},
            headers=auth_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_blocked_by_direct_reports(
        self, client: AsyncClient, auth_headers, db_session, test_position,
    ):
        db_session.add(Position(
            department_id=test_position.department_id,
            title="Technician",
            reports_to_id=test_position.id,
            level=2,
            is_manager=False,
            is_active=True,
        ))
        await db_session.commit()

        response = await client.delete(f"{API}/positions/{test_position.id}", headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["blockers"] == ["Position has 1 active direct report(s)"]

    @pytest.mark.asyncio
    async def test_delete_position(self, client: AsyncClient, auth_headers, test_position):
        response = await client.delete(f"{API}/positions/{test_position.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True
