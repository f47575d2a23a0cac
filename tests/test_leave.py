"""
HRMS - Leave Tests

Leave types fan out balances to every employee; balances track
total, used and remaining days per (employee, leave type, year).
"""

from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.leave import LeaveBalance, LeaveType
from app.services.leave_service import LeaveBalanceService, LeaveTypeService
from app.utils.error_handling import (
    DeletionBlockedException,
    DuplicateEntryException,
    ValidationException,
)


API = "/api/v1"


class TestLeaveTypes:

    @pytest.mark.asyncio
    async def test_create_grants_balance_to_every_employee(
        self, client: AsyncClient, auth_headers, db_session, test_employee,
    ):
        response = await client.post(
            f"{API}/leave-types",
            json={"name": "Sick Leave", "default_duration": 30},
            headers=auth_headers,
        )
        assert response.status_code == 201

        body = response.json()
        assert body["data"]["balances_created"] == 1
        assert body["data"]["default_duration"] == 30
        assert body["message"] == "Leave type created successfully and applied to 1 employee(s)"

        result = await db_session.execute(
            select(LeaveBalance).where(LeaveBalance.leave_type_id == body["data"]["id"])
        )
        balance = result.scalar_one()
        assert balance.employee_id == test_employee.id
        assert balance.year == date.today().year
        assert balance.total_days == Decimal("30")
        assert balance.used_days == Decimal("0")
        assert balance.remaining_days == Decimal("30")

    @pytest.mark.asyncio
    async def test_duplicate_name(self, client: AsyncClient, auth_headers, test_leave_type):
        response = await client.post(f"{API}/leave-types", json={"name": "Annual Leave"}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DUPLICATE_ENTRY"

    @pytest.mark.asyncio
    async def test_options(self, client: AsyncClient, auth_headers, test_leave_type):
        response = await client.get(f"{API}/leave-types/options", headers=auth_headers)
        assert response.json()["data"] == [{"id": test_leave_type.id, "name": "Annual Leave"}]

    @pytest.mark.asyncio
    async def test_rename_to_existing_name(self, db_session, context, test_leave_type):
        service = LeaveTypeService(db_session, context)
        other, _ = await service.create_leave_type({"name": "Maternity Leave", "default_duration": Decimal("98")})

        with pytest.raises(DuplicateEntryException):
            await service.update_leave_type(other.id, {"name": "Annual Leave"})

    @pytest.mark.asyncio
    async def test_delete_blocked_by_balances(self, db_session, context, test_employee):
        service = LeaveTypeService(db_session, context)
        leave_type, created = await service.create_leave_type({"name": "Compassionate Leave", "default_duration": Decimal("3")})
        assert created == 1

        with pytest.raises(DeletionBlockedException) as exc_info:
            await service.delete_leave_type(leave_type.id)
        assert exc_info.value.blockers == ["1 leave balance(s) reference this leave type"]

    @pytest.mark.asyncio
    async def test_delete_unused_type(self, client: AsyncClient, auth_headers, test_leave_type):
        response = await client.delete(f"{API}/leave-types/{test_leave_type.id}", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get(f"{API}/leave-types/{test_leave_type.id}", headers=auth_headers)
        assert response.status_code == 404


class TestLeaveBalances:

    @pytest.mark.asyncio
    async def test_create_balance(self, client: AsyncClient, auth_headers, test_employee, test_leave_type):
        response = await client.post(
            f"{API}/leave-balances",
            json={"employee_id": test_employee.id, "leave_type_id": test_leave_type.id, "total_days": 15, "year": 2026},
            headers=auth_headers,
        )
        assert response.status_code == 201

        data = response.json()["data"]
        assert data["staff_id"] == "EMP001"
        assert data["leave_type_name"] == "Annual Leave"
        assert data["total_days"] == 15
        assert data["used_days"] == 0
        assert data["remaining_days"] == 15

    @pytest.mark.asyncio
    async def test_duplicate_balance(self, db_session, context, test_employee, test_leave_type):
        service = LeaveBalanceService(db_session, context)
        data = {"employee_id": test_employee.id, "leave_type_id": test_leave_type.id, "total_days": Decimal("10"), "year": 2026}
        await service.create_balance(data)

        with pytest.raises(DuplicateEntryException) as exc_info:
            await service.create_balance(data)
        assert exc_info.value.message == "Leave balance already exists for this employee, leave type, and year"

    @pytest.mark.asyncio
    async def test_unknown_employee(self, db_session, context, test_leave_type):
        service = LeaveBalanceService(db_session, context)
        with pytest.raises(ValidationException) as exc_info:
            await service.create_balance({"employee_id": 999, "leave_type_id": test_leave_type.id, "total_days": Decimal("5")})
        assert exc_info.value.errors == {"employee_id": ["The selected employee id is invalid"]}

    @pytest.mark.asyncio
    async def test_update_recalculates_remaining(self, client: AsyncClient, auth_headers, db_session, context, test_employee, test_leave_type):
        item = await LeaveBalanceService(db_session, context).create_balance(
            {"employee_id": test_employee.id, "leave_type_id": test_leave_type.id, "total_days": Decimal("12")}
        )

        response = await client.put(
            f"{API}/leave-balances/{item['id']}",
            json={"used_days": 4.5},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["remaining_days"] == 7.5

        # Overdrawn balances are kept, not clamped
        response = await client.put(
            f"{API}/leave-balances/{item['id']}",
            json={"total_days": 2},
            headers=auth_headers,
        )
        assert response.json()["data"]["remaining_days"] == -2.5

    @pytest.mark.asyncio
    async def test_get_by_employee_and_type(self, client: AsyncClient, auth_headers, db_session, context, test_employee, test_leave_type):
        await LeaveBalanceService(db_session, context).create_balance(
            {"employee_id": test_employee.id, "leave_type_id": test_leave_type.id, "total_days": Decimal("12"), "year": 2025}
        )

        response = await client.get(
            f"{API}/leave-balances/{test_employee.id}/{test_leave_type.id}",
            params={"year": 2025},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["year"] == 2025

        response = await client.get(
            f"{API}/leave-balances/{test_employee.id}/{test_leave_type.id}",
            params={"year": 2024},
            headers=auth_headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_defaults_to_current_year(self, client: AsyncClient, auth_headers, db_session, context, test_employee, test_leave_type):
        service = LeaveBalanceService(db_session, context)
        await service.create_balance({"employee_id": test_employee.id, "leave_type_id": test_leave_type.id, "total_days": Decimal("12")})
        await service.create_balance(
            {"employee_id": test_employee.id, "leave_type_id": test_leave_type.id, "total_days": Decimal("12"), "year": 2020}
        )

        response = await client.get(f"{API}/leave-balances", headers=auth_headers)
        body = response.json()
        assert body["pagination"]["total"] == 1
        assert body["filters"]["applied_filters"]["year"] == date.today().year

    @pytest.mark.asyncio
    async def test_paging_joined_list_keeps_total(self, client: AsyncClient, auth_headers, db_session, context, test_employee):
        service = LeaveBalanceService(db_session, context)
        for name in ("Annual Leave", "Sick Leave", "Study Leave"):
            leave_type = LeaveType(name=name, default_duration=Decimal("5"), requires_attachment=False)
            db_session.add(leave_type)
            await db_session.commit()
            await service.create_balance({"employee_id": test_employee.id, "leave_type_id": leave_type.id, "total_days": Decimal("5")})

        names = []
        for page in (1, 2, 3):
            response = await client.get(
                f"{API}/leave-balances",
                params={"per_page": 1, "page": page, "sort_by": "leave_type", "sort_order": "asc"},
                headers=auth_headers,
            )
            body = response.json()
            assert body["pagination"]["total"] == 3
            assert body["pagination"]["last_page"] == 3
            names.extend(item["leave_type_name"] for item in body["data"])
        assert names == ["Annual Leave", "Sick Leave", "Study Leave"]
