"""
HRMS - Employee Spreadsheet Layout

Fixed 48-column (A-AV) layout shared by the import template, the import
reader and the export, so that an exported file can be re-imported as is.

Row 1 holds headers, row 2 holds validation hints, data starts at row 3.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils.exceptions import InvalidFileException as WorkbookReadError
from openpyxl.worksheet.datavalidation import DataValidation
from pydantic import ValidationError

from app.models.employee import (
    IDENTIFICATION_TYPE_LABELS,
    Employee,
    EmployeeStatus,
    Gender,
    MaritalStatus,
    Organization,
)
from app.schemas.employee import EmployeeCreateRequest
from app.services.employee_rules import (
    Errors,
    add_error,
    check_bank_rules,
    check_cross_field_rules,
    check_date_of_birth,
    collect_warnings,
)
from app.utils.error_handling import InvalidFileException

logger = logging.getLogger(__name__)


HEADER_ROW = 1
HINT_ROW = 2
FIRST_DATA_ROW = 3
VALIDATION_LAST_ROW = 1000

EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_MAX_SERIAL = 2958465  # 9999-12-31
DATE_NUMBER_FORMAT = "yyyy-mm-dd"

ORGANIZATIONS = [o.value for o in Organization]
GENDERS = [g.value for g in Gender]
STATUSES = [s.value for s in EmployeeStatus]
MARITAL_STATUSES = [m.value for m in MaritalStatus]
ID_TYPE_BY_LABEL = {label: id_type.value for id_type, label in IDENTIFICATION_TYPE_LABELS.items()}
ID_LABEL_BY_TYPE = {value: label for label, value in ID_TYPE_BY_LABEL.items()}

MILITARY_TRUE = {"completed", "exempt", "yes", "true", "1"}
MILITARY_FALSE = {"no", "false", "0", "n/a"}

KIN_SLOTS = (1, 2)


@dataclass(frozen=True)
class Column:
    letter: str
    header: str
    field: Optional[str]
    hint: str
    width: int = 18


# ===========================================
# COLUMN LAYOUT
# ===========================================

COLUMNS: List[Column] = [
    Column("A", "Org", "organization", "REQUIRED - SMRU or BHF - Case insensitive", 12),
    Column("B", "Staff ID", "staff_id", "REQUIRED - 3-50 chars - Letters, numbers and dash - Unique per organization"),
    Column("C", "Initial", "initial_en", "OPTIONAL - Max 10 chars", 10),
    Column("D", "First Name", "first_name_en", "REQUIRED - Min 2 chars - Max 255 chars", 20),
    Column("E", "Last Name", "last_name_en", "OPTIONAL - Max 255 chars", 20),
    Column("F", "Initial (TH)", "initial_th", "OPTIONAL - Max 20 chars", 10),
    Column("G", "First Name (TH)", "first_name_th", "OPTIONAL - Max 255 chars", 20),
    Column("H", "Last Name (TH)", "last_name_th", "OPTIONAL - Max 255 chars", 20),
    Column("I", "Gender", "gender", "REQUIRED - M or F", 10),
    Column("J", "Date of Birth", "date_of_birth", "REQUIRED - YYYY-MM-DD - Age 18-84"),
    Column("K", "Age", None, "AUTO-CALCULATED - Formula", 10),
    Column("L", "Status", "status", "REQUIRED - Expats (Local), Local ID Staff or Local non ID Staff", 22),
    Column("M", "Nationality", "nationality", "OPTIONAL - Max 100 chars", 15),
    Column("N", "Religion", "religion", "OPTIONAL - Max 100 chars", 15),
    Column("O", "ID Type", "identification_type", "OPTIONAL - Select from dropdown"),
    Column("P", "ID Number", "identification_number", "OPTIONAL - Required if ID type provided", 22),
    Column("Q", "ID Issue Date", "identification_issue_date", "OPTIONAL - YYYY-MM-DD - Not in the future"),
    Column("R", "ID Expiry Date", "identification_expiry_date", "OPTIONAL - YYYY-MM-DD - After issue date"),
    Column("S", "Social Security No", "social_security_number", "OPTIONAL - Max 50 chars", 20),
    Column("T", "Tax No", "tax_number", "OPTIONAL - Max 50 chars", 20),
    Column("U", "Driver License", "driver_license_number", "OPTIONAL - Max 100 chars", 20),
    Column("V", "Bank Name", "bank_name", "OPTIONAL - Max 100 chars", 20),
    Column("W", "Bank Branch", "bank_branch", "OPTIONAL - Max 100 chars", 20),
    Column("X", "Bank Account Name", "bank_account_name", "OPTIONAL - Required if bank details provided", 20),
    Column("Y", "Bank Account No", "bank_account_number", "OPTIONAL - Digits, dashes and spaces", 20),
    Column("Z", "Mobile No", "mobile_phone", "OPTIONAL - 7-20 digits"),
    Column("AA", "Current Address", "current_address", "OPTIONAL - Text", 30),
    Column("AB", "Permanent Address", "permanent_address", "OPTIONAL - Text", 30),
    Column("AC", "Marital Status", "marital_status", "OPTIONAL - Single, Married, Divorced or Widowed"),
    Column("AD", "Spouse Name", "spouse_name", "OPTIONAL - Required if marital status is Married", 20),
    Column("AE", "Spouse Mobile No", "spouse_phone_number", "OPTIONAL - Recommended if spouse name provided"),
    Column("AF", "Emergency Contact Name", "emergency_contact_person_name", "OPTIONAL - Max 255 chars", 20),
    Column("AG", "Relationship", "emergency_contact_person_relationship", "OPTIONAL - Max 100 chars", 15),
    Column("AH", "Emergency Mobile No", "emergency_contact_person_phone", "OPTIONAL - Max 50 chars"),
    Column("AI", "Father Name", "father_name", "OPTIONAL - Max 255 chars", 20),
    Column("AJ", "Father Occupation", "father_occupation", "OPTIONAL - Max 255 chars", 20),
    Column("AK", "Father Mobile No", "father_phone_number", "OPTIONAL - Max 50 chars"),
    Column("AL", "Mother Name", "mother_name", "OPTIONAL - Max 255 chars", 20),
    Column("AM", "Mother Occupation", "mother_occupation", "OPTIONAL - Max 255 chars", 20),
    Column("AN", "Mother Mobile No", "mother_phone_number", "OPTIONAL - Max 50 chars"),
    Column("AO", "Kin 1 Name", "kin1_name", "OPTIONAL - Beneficiary 1 name", 20),
    Column("AP", "Kin 1 Relationship", "kin1_relationship", "OPTIONAL - Required if Kin 1 name provided"),
    Column("AQ", "Kin 1 Mobile", "kin1_phone", "OPTIONAL - Max 50 chars"),
    Column("AR", "Kin 2 Name", "kin2_name", "OPTIONAL - Beneficiary 2 name", 20),
    Column("AS", "Kin 2 Relationship", "kin2_relationship", "OPTIONAL - Required if Kin 2 name provided"),
    Column("AT", "Kin 2 Mobile", "kin2_phone", "OPTIONAL - Max 50 chars"),
    Column("AU", "Military Status", "military_status", "OPTIONAL - Yes or No"),
    Column("AV", "Remark", "remark", "OPTIONAL - Text", 30),
]

COLUMN_COUNT = len(COLUMNS)
AGE_COLUMN = "K"

DATE_FIELDS = {"date_of_birth", "identification_issue_date", "identification_expiry_date"}

DROPDOWNS: List[Tuple[str, List[str], str, bool]] = [
    ("A", ORGANIZATIONS, "Organization", False),
    ("I", GENDERS, "Gender", False),
    ("L", STATUSES, "Status", False),
    ("O", list(ID_TYPE_BY_LABEL.keys()), "Identification Type", True),
    ("AC", MARITAL_STATUSES, "Marital Status", True),
    ("AU", ["Yes", "No"], "Military Status", True),
]

SAMPLE_ROWS: List[List[Any]] = [
    [
        "SMRU", "EMP001", "Mr.", "John", "Doe", "นาย", "จอห์น", "โด", "M", date(1990, 1, 15), None,
        "Local ID Staff", "Thai", "Buddhist", "10 years ID", "1234567890123", date(2020, 1, 15), None,
        "SS123456", "TAX123456", "DL123456", "Bangkok Bank", "Headquarters", "John Doe", "1234567890",
        "0812345678", "123 Main St, Bangkok", "456 Home St, Bangkok",
        "Single", None, None, "Jane Doe", "Sister", "0823456789",
        "Robert Doe", "Engineer", "0834567890", "Mary Doe", "Teacher", "0845678901",
        "Jane Doe", "Sister", "0823456789", None, None, None,
        "Yes", "New employee",
    ],
    [
        "BHF", "EMP002", "Ms.", "Sarah", "Smith", "นางสาว", "ซาร่าห์", "สมิธ", "F", date(1985, 5, 20), None,
        "Expats (Local)", "American", "Christian", "Passport", "P1234567", date(2022, 6, 1), date(2032, 6, 1),
        "SS234567", "TAX234567", None, "Kasikorn Bank", "Silom Branch", "Sarah Smith", "0987654321",
        "0898765432", "789 Office Rd, Bangkok", "321 Apartment, Bangkok",
        "Married", "Tom Smith", "0887654321", "Emergency Contact", "Friend", "0876543210",
        "David Smith", "Doctor", "0865432109", "Linda Smith", "Nurse", "0854321098",
        "Tom Smith", "Spouse", "0887654321", None, None, None,
        "No", "Senior staff",
    ],
]

INSTRUCTIONS = [
    "EMPLOYEE IMPORT TEMPLATE - INSTRUCTIONS",
    "",
    "FILE STRUCTURE:",
    "- Row 1: Column headers (do not modify)",
    "- Row 2: Validation hints (do not modify)",
    "- Row 3+: Employee data (replace the sample rows with your data)",
    "",
    "REQUIRED FIELDS:",
    "- Org: SMRU or BHF",
    "- Staff ID: unique within the organization",
    "- First Name, Gender (M or F), Date of Birth (age 18-84), Status",
    "",
    "CONDITIONAL REQUIREMENTS:",
    "- Married employees need a Spouse Name, other statuses must leave it empty",
    "- ID Number is required when ID Type is provided, and the reverse",
    "- Bank Account Name and Number are required once any bank column is filled",
    "- Kin 1 / Kin 2 Relationship is required when the matching Kin Name is provided",
    "",
    "DATE FORMAT:",
    "YYYY-MM-DD (e.g. 2025-01-15). Excel dates and DD/MM/YYYY are also accepted.",
    "",
    "Rows with errors are skipped and reported; all other rows are imported.",
]

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(bold=True, size=11, color="FFFFFF")
HINT_FILL = PatternFill(start_color="FFF9E6", end_color="FFF9E6", fill_type="solid")
HINT_FONT = Font(italic=True, size=9, color="666666")


@dataclass
class ParsedRow:
    """One data row after normalization and validation."""
    row_number: int
    data: Dict[str, Any] = field(default_factory=dict)
    beneficiaries: List[Dict[str, Any]] = field(default_factory=list)
    errors: Errors = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_message(self) -> str:
        """All of the row's errors as one "Row N: field: msg; ..." line."""
        parts = [f"{name}: {message}" for name, messages in self.errors.items() for message in messages]
        return f"Row {self.row_number}: " + "; ".join(parts)


# ===========================================
# VALUE NORMALIZATION
# ===========================================

def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def closest_match(value: str, candidates: Iterable[str], max_distance: int) -> Optional[str]:
    """Nearest candidate within max_distance (case-insensitive), if any."""
    best, best_distance = None, max_distance + 1
    for candidate in candidates:
        distance = levenshtein(value.lower(), candidate.lower())
        if distance < best_distance:
            best, best_distance = candidate, distance
    return best


def cell_text(value: Any) -> Optional[str]:
    """Cell value as stripped text; whole floats lose their ".0"."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, datetime):
        value = value.date()
    text = str(value).strip()
    return text or None


def _from_serial(raw: Any) -> date:
    """Excel serial day number to a date; out-of-range serials are invalid."""
    try:
        serial = int(raw)
    except (OverflowError, ValueError):
        raise ValueError(f"Invalid date '{raw}'")
    if not 1 <= serial <= EXCEL_MAX_SERIAL:
        raise ValueError(f"Invalid date '{raw}'")
    return EXCEL_EPOCH + timedelta(days=serial)


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a spreadsheet date.

    Accepts date/datetime cells, Excel serial numbers (as numbers or digit
    strings), ISO strings and d/m/Y strings.

    Raises:
        ValueError: the value is not a recognizable date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _from_serial(value)

    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return _from_serial(text)
    for fmt in ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date '{text}'")


def parse_military_status(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = cell_text(value)
    if text is None:
        return None
    lowered = text.lower()
    if lowered in MILITARY_TRUE:
        return True
    if lowered in MILITARY_FALSE:
        return False
    raise ValueError(f"Invalid military status '{text}'. Use Yes or No")


def _choice_error(label: str, value: str, choices: Sequence[str], max_distance: int) -> str:
    suggestion = closest_match(value, choices, max_distance)
    if suggestion:
        return f"Invalid {label} '{value}'. Did you mean '{suggestion}'?"
    return f"Invalid {label} '{value}'. Must be one of: {', '.join(choices)}"


def _normalize_choices(data: Dict[str, Any], errors: Errors) -> None:
    organization = data.get("organization")
    if organization:
        organization = organization.upper()
        if organization in ORGANIZATIONS:
            data["organization"] = organization
        else:
            add_error(errors, "organization", _choice_error("organization", organization, ORGANIZATIONS, 2))

    gender = data.get("gender")
    if gender:
        gender = gender.upper()
        if gender in GENDERS:
            data["gender"] = gender
        else:
            add_error(errors, "gender", "Gender must be M or F")

    status = data.get("status")
    if status and status not in STATUSES:
        add_error(errors, "status", _choice_error("status", status, STATUSES, 3))

    marital_status = data.get("marital_status")
    if marital_status:
        matches = [m for m in MARITAL_STATUSES if m.lower() == marital_status.lower()]
        if matches:
            data["marital_status"] = matches[0]
        else:
            add_error(
                errors, "marital_status",
                _choice_error("marital status", marital_status, MARITAL_STATUSES, 2),
            )

    id_type = data.get("identification_type")
    if id_type:
        if id_type in ID_TYPE_BY_LABEL:
            data["identification_type"] = ID_TYPE_BY_LABEL[id_type]
        elif id_type not in ID_LABEL_BY_TYPE:
            add_error(
                errors, "identification_type",
                _choice_error("identification type", id_type, list(ID_TYPE_BY_LABEL), 3),
            )


def pad_row(values: Sequence[Any]) -> List[Any]:
    row = list(values[:COLUMN_COUNT])
    return row + [None] * (COLUMN_COUNT - len(row))


def is_blank_row(values: Sequence[Any]) -> bool:
    return all(cell_text(v) is None for v in values)


# ===========================================
# ROW VALIDATION
# ===========================================

def parse_row(row_number: int, values: Sequence[Any], today: Optional[date] = None) -> ParsedRow:
    """
    Normalize and validate one data row.

    Runs the same schema and cross-field rules as employee create, plus
    the import-only required fields and kin checks. Database duplicates
    are checked by the caller.
    """
    result = ParsedRow(row_number=row_number)
    errors = result.errors
    raw = dict(zip((c.field for c in COLUMNS), pad_row(values)))
    raw.pop(None, None)

    data: Dict[str, Any] = {}
    for name, value in raw.items():
        if name.startswith("kin"):
            continue
        if name in DATE_FIELDS:
            try:
                data[name] = parse_date(value)
            except ValueError as e:
                add_error(errors, name, str(e))
        elif name == "military_status":
            try:
                data[name] = parse_military_status(value)
            except ValueError as e:
                add_error(errors, name, str(e))
        else:
            data[name] = cell_text(value)

    _normalize_choices(data, errors)

    if not data.get("status"):
        add_error(errors, "status", "Status is required")
    if not data.get("gender"):
        add_error(errors, "gender", "Gender is required")
    if not data.get("first_name_en"):
        add_error(errors, "first_name_en", "First name is required")

    dob_errors, dob_warnings = check_date_of_birth(data.get("date_of_birth"), required=True, today=today)
    _merge_new(errors, dob_errors)
    result.warnings.extend(dob_warnings)

    payload = {k: v for k, v in data.items() if k not in errors and v is not None}
    try:
        validated = EmployeeCreateRequest(**payload)
        data = validated.model_dump(exclude_none=True)
    except ValidationError as e:
        pydantic_errors: Errors = {}
        for err in e.errors():
            name = str(err["loc"][0]) if err["loc"] else "row"
            add_error(pydantic_errors, name, err["msg"])
        _merge_new(errors, pydantic_errors)

    _merge_new(errors, check_cross_field_rules(data, today=today))
    _merge_new(errors, check_bank_rules(data))

    for slot in KIN_SLOTS:
        name = cell_text(raw.get(f"kin{slot}_name"))
        relationship = cell_text(raw.get(f"kin{slot}_relationship"))
        phone = cell_text(raw.get(f"kin{slot}_phone"))
        if not name:
            continue
        if not relationship:
            add_error(errors, f"kin{slot}_relationship", f"Kin {slot} relationship is required when Kin {slot} name is provided")
            continue
        result.beneficiaries.append({
            "beneficiary_name": name,
            "beneficiary_relationship": relationship,
            "phone_number": phone,
        })

    result.warnings.extend(collect_warnings(data))
    result.data = data
    return result


def _merge_new(target: Errors, source: Errors) -> None:
    """Add messages for fields that have no error yet."""
    for name, messages in source.items():
        if name not in target:
            target[name] = list(messages)


# ===========================================
# FILE READING
# ===========================================

def read_rows(content: bytes, extension: str) -> List[Tuple[int, List[Any]]]:
    """
    Data rows (row 3 onward) as (sheet row number, 48 values).

    Blank rows are dropped.

    Raises:
        InvalidFileException: the file cannot be parsed
    """
    extension = extension.lower().lstrip(".")
    if extension == "csv":
        rows = _read_csv(content)
    else:
        rows = _read_workbook(content)

    return [
        (row_number, pad_row(values))
        for row_number, values in rows
        if not is_blank_row(values)
    ]


def _read_csv(content: bytes) -> List[Tuple[int, Sequence[Any]]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InvalidFileException("CSV file must be UTF-8 encoded")

    reader = csv.reader(io.StringIO(text))
    return [
        (row_number, values)
        for row_number, values in enumerate(reader, start=1)
        if row_number >= FIRST_DATA_ROW
    ]


def _read_workbook(content: bytes) -> List[Tuple[int, Sequence[Any]]]:
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (WorkbookReadError, BadZipFile, KeyError, OSError) as e:
        logger.warning(f"Unreadable spreadsheet upload: {e}")
        raise InvalidFileException("Could not read the spreadsheet. Save it as .xlsx and try again")

    try:
        ws = wb.worksheets[0]
        return [
            (row_number, values)
            for row_number, values in enumerate(
                ws.iter_rows(min_row=FIRST_DATA_ROW, values_only=True), start=FIRST_DATA_ROW
            )
        ]
    finally:
        wb.close()


# ===========================================
# WORKBOOK BUILDING
# ===========================================

def _write_header(ws) -> None:
    for column in COLUMNS:
        header = ws[f"{column.letter}{HEADER_ROW}"]
        header.value = column.header
        header.font = HEADER_FONT
        header.fill = HEADER_FILL
        header.alignment = Alignment(horizontal="center", vertical="center")

        hint = ws[f"{column.letter}{HINT_ROW}"]
        hint.value = column.hint
        hint.font = HINT_FONT
        hint.fill = HINT_FILL
        hint.alignment = Alignment(wrap_text=True, vertical="top")

        ws.column_dimensions[column.letter].width = column.width

    ws.row_dimensions[HEADER_ROW].height = 25
    ws.row_dimensions[HINT_ROW].height = 30
    ws.freeze_panes = f"A{FIRST_DATA_ROW}"


def _write_row(ws, row_number: int, values: Sequence[Any]) -> None:
    for column, value in zip(COLUMNS, values):
        if column.letter == AGE_COLUMN:
            ws[f"{column.letter}{row_number}"] = f'=DATEDIF(J{row_number},TODAY(),"Y")'
        elif value is not None:
            cell = ws[f"{column.letter}{row_number}"]
            cell.value = value
            if isinstance(value, date):
                cell.number_format = DATE_NUMBER_FORMAT


def _add_dropdowns(ws) -> None:
    for letter, values, title, allow_blank in DROPDOWNS:
        validation = DataValidation(
            type="list",
            formula1='"' + ",".join(values) + '"',
            allow_blank=allow_blank,
            showErrorMessage=True,
            showInputMessage=True,
            errorStyle="information" if allow_blank else "stop",
            errorTitle=f"Invalid {title}",
            error="Please select a valid value from the dropdown",
            promptTitle=title,
            prompt=f"Select {title.lower()}",
        )
        ws.add_data_validation(validation)
        validation.add(f"{letter}{FIRST_DATA_ROW}:{letter}{VALIDATION_LAST_ROW}")


def _save(wb: Workbook) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H%M%S")


def build_template() -> Tuple[bytes, str]:
    """Import template workbook and its download filename."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Employee Data"
    _write_header(ws)
    for offset, values in enumerate(SAMPLE_ROWS):
        _write_row(ws, FIRST_DATA_ROW + offset, values)
    _add_dropdowns(ws)

    instructions = wb.create_sheet("Instructions")
    instructions.column_dimensions["A"].width = 100
    for row_number, line in enumerate(INSTRUCTIONS, start=1):
        cell = instructions[f"A{row_number}"]
        cell.value = line
        cell.alignment = Alignment(wrap_text=True)
    instructions["A1"].font = Font(bold=True, size=14)

    return _save(wb), f"employee_import_template_{_timestamp()}.xlsx"


def employee_row(employee: Employee) -> List[Any]:
    """Spreadsheet values for one employee, in column order."""
    beneficiaries = list(employee.beneficiaries or [])[:len(KIN_SLOTS)]
    kin: Dict[str, Any] = {}
    for slot, beneficiary in enumerate(beneficiaries, start=1):
        kin[f"kin{slot}_name"] = beneficiary.beneficiary_name
        kin[f"kin{slot}_relationship"] = beneficiary.beneficiary_relationship
        kin[f"kin{slot}_phone"] = beneficiary.phone_number

    values: List[Any] = []
    for column in COLUMNS:
        name = column.field
        if name is None:
            values.append(None)
        elif name.startswith("kin"):
            values.append(kin.get(name))
        elif name == "identification_type":
            values.append(ID_LABEL_BY_TYPE.get(employee.identification_type, employee.identification_type))
        elif name == "military_status":
            values.append(None if employee.military_status is None else ("Yes" if employee.military_status else "No"))
        else:
            values.append(getattr(employee, name))
    return values


def build_export(employees: Iterable[Employee]) -> Tuple[bytes, str]:
    """Export workbook in the import layout, so it can be re-imported."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Employee Data"
    _write_header(ws)

    count = 0
    for offset, employee in enumerate(employees):
        _write_row(ws, FIRST_DATA_ROW + offset, employee_row(employee))
        count += 1

    logger.info(f"Built employee export with {count} rows")
    return _save(wb), f"employees_export_{_timestamp()}.xlsx"
