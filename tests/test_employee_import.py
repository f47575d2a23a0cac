"""
HRMS - Employee Import / Export Tests

Row parsing and normalization, file reading, and the upload, status,
template and export endpoints.
"""

import csv
import io
from datetime import date
from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.models.employee import Employee, EmployeeBeneficiary
from app.models.import_status import ImportStatus
from app.services.employee_spreadsheet import (
    COLUMN_COUNT,
    COLUMNS,
    ORGANIZATIONS,
    SAMPLE_ROWS,
    closest_match,
    parse_date,
    parse_military_status,
    parse_row,
    read_rows,
)
from app.utils.error_handling import InvalidFileException


API = "/api/v1"
TODAY = date(2026, 6, 1)
FIELD_INDEX = {column.field: index for index, column in enumerate(COLUMNS) if column.field}


def make_row(**fields) -> list:
    """A template row with only the given fields filled."""
    row = [None] * COLUMN_COUNT
    for name, value in fields.items():
        row[FIELD_INDEX[name]] = value
    return row


def minimal_row(staff_id: str = "IMP001", **overrides) -> list:
    values = {
        "organization": "SMRU",
        "staff_id": staff_id,
        "first_name_en": "Aye",
        "last_name_en": "Win",
        "gender": "F",
        "date_of_birth": "1995-07-01",
        "status": "Local ID Staff",
    }
    values.update(overrides)
    return make_row(**values)


def csv_upload(rows) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow([column.header for column in COLUMNS])
    writer.writerow([column.hint for column in COLUMNS])
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return buffer.getvalue().encode("utf-8")


class TestValueParsing:
    """Cell value normalization helpers."""

    def test_parse_iso_date(self):
        assert parse_date("2025-01-15") == date(2025, 1, 15)

    def test_parse_day_month_year(self):
        assert parse_date("15/01/2025") == date(2025, 1, 15)

    def test_parse_excel_serial(self):
        assert parse_date(45000) == date(2023, 3, 15)
        assert parse_date("45000") == date(2023, 3, 15)

    def test_parse_invalid_date(self):
        with pytest.raises(ValueError):
            parse_date("next tuesday")

    def test_out_of_range_serial(self):
        for value in ("19900115", 19900115, 0, float("inf")):
            with pytest.raises(ValueError):
                parse_date(value)

    def test_blank_date(self):
        assert parse_date(None) is None
        assert parse_date("") is None

    def test_military_status_words(self):
        assert parse_military_status("Yes") is True
        assert parse_military_status("exempt") is True
        assert parse_military_status("No") is False
        assert parse_military_status(None) is None
        with pytest.raises(ValueError):
            parse_military_status("maybe")

    def test_closest_match(self):
        assert closest_match("BFH", ORGANIZATIONS, 2) == "BHF"
        assert closest_match("XYZABC", ORGANIZATIONS, 2) is None


class TestParseRow:
    """Row validation rules."""

    def test_sample_row_is_valid(self):
        parsed = parse_row(3, SAMPLE_ROWS[0], today=TODAY)
        assert parsed.is_valid, parsed.errors
        assert parsed.data["organization"] == "SMRU"
        assert parsed.data["identification_type"] == "10YearsID"
        assert parsed.data["military_status"] is True
        assert parsed.beneficiaries == [{
            "beneficiary_name": "Jane Doe",
            "beneficiary_relationship": "Sister",
            "phone_number": "0823456789",
        }]

    def test_organization_is_case_insensitive(self):
        parsed = parse_row(3, minimal_row(organization="smru"), today=TODAY)
        assert parsed.is_valid
        assert parsed.data["organization"] == "SMRU"

    def test_status_typo_gets_suggestion(self):
        parsed = parse_row(3, minimal_row(status="Local ID Stff"), today=TODAY)
        assert parsed.errors["status"] == ["Invalid status 'Local ID Stff'. Did you mean 'Local ID Staff'?"]

    def test_required_fields(self):
        parsed = parse_row(7, make_row(organization="SMRU", staff_id="IMP001"), today=TODAY)
        assert not parsed.is_valid
        for field in ("status", "gender", "first_name_en", "date_of_birth"):
            assert field in parsed.errors
        assert parsed.error_message().startswith("Row 7: ")

    def test_invalid_date_reported_once(self):
        parsed = parse_row(3, minimal_row(date_of_birth="31/31/1990"), today=TODAY)
        assert parsed.errors["date_of_birth"] == ["Invalid date '31/31/1990'"]

    def test_digit_string_date(self):
        parsed = parse_row(3, minimal_row(date_of_birth="19900115"), today=TODAY)
        assert parsed.errors["date_of_birth"] == ["Invalid date '19900115'"]

    def test_kin_name_requires_relationship(self):
        parsed = parse_row(3, minimal_row(kin1_name="Daw Mya"), today=TODAY)
        assert "kin1_relationship" in parsed.errors
        assert parsed.beneficiaries == []

    def test_married_without_spouse(self):
        parsed = parse_row(3, minimal_row(marital_status="married"), today=TODAY)
        assert "spouse_name" in parsed.errors

    def test_senior_employee_warning(self):
        parsed = parse_row(3, minimal_row(date_of_birth="1955-01-01"), today=TODAY)
        assert parsed.is_valid
        assert any(w.startswith("date_of_birth") for w in parsed.warnings)

    def test_numeric_staff_id_cell(self):
        parsed = parse_row(3, minimal_row(staff_id=12345.0), today=TODAY)
        assert parsed.is_valid
        assert parsed.data["staff_id"] == "12345"


class TestReadRows:

    def test_csv_skips_header_hint_and_blank_rows(self):
        content = csv_upload([minimal_row(), [None] * COLUMN_COUNT, minimal_row("IMP002")])
        rows = read_rows(content, "csv")
        assert [row_number for row_number, _ in rows] == [3, 5]
        assert all(len(values) == COLUMN_COUNT for _, values in rows)

    def test_unreadable_workbook(self):
        with pytest.raises(InvalidFileException):
            read_rows(b"definitely not a spreadsheet", "xlsx")

    def test_non_utf8_csv(self):
        with pytest.raises(InvalidFileException):
            read_rows("Org,Staff ID\n\xff\xfe".encode("latin-1") + b"\xff", "csv")


class TestUploadEndpoint:
    """POST /uploads/employee."""

    @pytest.mark.asyncio
    async def test_partial_import_returns_207(self, client: AsyncClient, auth_headers, db_session):
        content = csv_upload([
            minimal_row("IMP001"),
            minimal_row("IMP002", gender="X"),
            minimal_row("IMP003", kin1_name="U Tin", kin1_relationship="Father"),
        ])
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("employees.csv", content, "text/csv")},
            headers=auth_headers,
        )
        assert response.status_code == 207

        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Imported 2 of 3 rows; 1 rows had errors"
        assert body["data"]["processed"] == 2
        assert body["data"]["skipped"] == 1
        assert body["data"]["errors"] == ["Row 4: gender: Gender must be M or F"]

        count = (await db_session.execute(select(func.count(Employee.id)))).scalar()
        assert count == 2
        kin = (await db_session.execute(select(EmployeeBeneficiary))).scalar_one()
        assert kin.beneficiary_relationship == "Father"

    @pytest.mark.asyncio
    async def test_bad_date_cell_skips_only_that_row(self, client: AsyncClient, auth_headers, db_session):
        content = csv_upload([minimal_row("OK001"), minimal_row("BAD01", date_of_birth="19900115")])
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("employees.csv", content, "text/csv")},
            headers=auth_headers,
        )
        assert response.status_code == 207
        assert response.json()["data"]["errors"] == ["Row 4: date_of_birth: Invalid date '19900115'"]

        staff_ids = (await db_session.execute(select(Employee.staff_id))).scalars().all()
        assert staff_ids == ["OK001"]

    @pytest.mark.asyncio
    async def test_duplicates_are_skipped(self, client: AsyncClient, auth_headers, test_employee):
        content = csv_upload([
            minimal_row("EMP001"),
            minimal_row("IMP010"),
            minimal_row("IMP010"),
        ])
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("employees.csv", content, "text/csv")},
            headers=auth_headers,
        )
        errors = response.json()["data"]["errors"]
        assert errors == [
            "Row 3: staff_id: Staff ID 'EMP001' already exists in SMRU",
            "Row 5: staff_id: Staff ID 'IMP010' is duplicated in this file (first seen on row 4)",
        ]

    @pytest.mark.asyncio
    async def test_full_success(self, client: AsyncClient, auth_headers, mock_cache):
        content = csv_upload([minimal_row("IMP001"), minimal_row("IMP002")])
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("employees.csv", content, "text/csv")},
            headers=auth_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Imported 2 employees successfully"
        mock_cache.invalidate_statistics.assert_awaited_with("employees")

    @pytest.mark.asyncio
    async def test_status_can_be_polled(self, client: AsyncClient, auth_headers):
        content = csv_upload([minimal_row("IMP001")])
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("employees.csv", content, "text/csv")},
            headers=auth_headers,
        )
        import_id = response.json()["data"]["import_id"]

        response = await client.get(f"{API}/uploads/employee/status/{import_id}", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "completed"
        assert data["file_name"] == "employees.csv"
        assert data["created_by"] == "HR Admin"

    @pytest.mark.asyncio
    async def test_unknown_import_id(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{API}/uploads/employee/status/missing", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_rejects_unsupported_extension(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("employees.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "INVALID_FILE"
        assert "file" in body["errors"]

    @pytest.mark.asyncio
    async def test_rejects_empty_file(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("employees.csv", b"", "text/csv")},
            headers=auth_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_large_file_is_queued(self, client: AsyncClient, auth_headers, monkeypatch, tmp_path):
        from app.tasks import celery_tasks

        delay = MagicMock()
        monkeypatch.setattr(celery_tasks.import_employees_task, "delay", delay)
        monkeypatch.setattr(settings, "import_async_row_threshold", 1)
        monkeypatch.setattr(settings, "storage_local_path", str(tmp_path))

        content = csv_upload([minimal_row("IMP001"), minimal_row("IMP002")])
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("employees.csv", content, "text/csv")},
            headers=auth_headers,
        )
        assert response.status_code == 202

        data = response.json()["data"]
        assert data["status"] == "queued"
        assert data["total_rows"] == 2

        delay.assert_called_once()
        import_id, stored_path = delay.call_args.args[:2]
        assert import_id == data["import_id"]
        assert stored_path.startswith(str(tmp_path))


class TestDownloads:

    @pytest.mark.asyncio
    async def test_template_download(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{API}/downloads/employee-template", headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert "employee_import_template_" in response.headers["content-disposition"]

        wb = load_workbook(io.BytesIO(response.content))
        assert wb.sheetnames == ["Employee Data", "Instructions"]
        ws = wb["Employee Data"]
        assert ws["A1"].value == "Org"
        assert ws["AV1"].value == "Remark"
        assert ws["B3"].value == "EMP001"
        assert ws["K3"].value.startswith("=DATEDIF(J3")
        assert ws["J3"].is_date
        assert ws["J3"].value.date() == date(1990, 1, 15)

    @pytest.mark.asyncio
    async def test_template_imports_cleanly(self, client: AsyncClient, auth_headers):
        template = await client.get(f"{API}/downloads/employee-template", headers=auth_headers)
        response = await client.post(
            f"{API}/uploads/employee",
            files={"file": ("template.xlsx", template.content, "application/octet-stream")},
            headers=auth_headers,
        )
        assert response.status_code == 200, response.json()
        assert response.json()["data"]["processed"] == len(SAMPLE_ROWS)

    @pytest.mark.asyncio
    async def test_export_uses_import_layout(self, client: AsyncClient, auth_headers, test_employee):
        response = await client.get(
            f"{API}/downloads/employees",
            params={"organization": "SMRU"},
            headers=auth_headers,
        )
        assert response.status_code == 200

        ws = load_workbook(io.BytesIO(response.content)).active
        assert ws["B3"].value == "EMP001"
        assert ws["D3"].value == "John"
        assert ws["J3"].value.date() == date(1990, 5, 15)
        assert ws["J3"].number_format == "yyyy-mm-dd"
        assert ws["B4"].value is None


class TestImportFailures:
    """Unexpected errors mid-import leave a failed status, never a stuck one."""

    @staticmethod
    def _explode(row_number, values, today=None):
        raise RuntimeError("disk quota exceeded")

    @pytest.mark.asyncio
    async def test_inline_import_marks_failed(self, db_session, context, monkeypatch):
        from app.services import employee_import_service

        monkeypatch.setattr(employee_import_service, "parse_row", self._explode)
        service = employee_import_service.EmployeeImportService(db_session, context)

        with pytest.raises(RuntimeError):
            await service.import_rows("employees.csv", [(3, minimal_row())])

        import_status = (await db_session.execute(select(ImportStatus))).scalar_one()
        assert import_status.status == "failed"
        assert import_status.errors == ["Import failed: RuntimeError: disk quota exceeded"]
        assert import_status.finished_at is not None

    @pytest.mark.asyncio
    async def test_queued_import_marks_failed_and_removes_upload(
        self, db_engine, db_session, context, monkeypatch, tmp_path,
    ):
        from app.services import employee_import_service
        from app.services.file_storage_service import FileStorageService
        from app.tasks import celery_tasks

        monkeypatch.setattr(settings, "storage_local_path", str(tmp_path))
        monkeypatch.setattr(
            celery_tasks,
            "async_session_factory",
            async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False),
        )
        monkeypatch.setattr(employee_import_service, "parse_row", self._explode)

        stored_path = await FileStorageService().save(csv_upload([minimal_row()]), "employees.csv")
        service = employee_import_service.EmployeeImportService(db_session, context)
        import_id = (await service.create_status("employees.csv", 1)).import_id
        await db_session.commit()

        with pytest.raises(RuntimeError):
            await celery_tasks._import_employees(import_id, str(stored_path), "HR Admin", None)

        assert not stored_path.exists()
        state = (await db_session.execute(
            select(ImportStatus.status).where(ImportStatus.import_id == import_id)
        )).scalar_one()
        assert state == "failed"
