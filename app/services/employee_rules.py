"""
HRMS - Employee Validation Rules

Cross-field rules shared by the employee endpoints and the spreadsheet
import. Each check returns a structured result ({field: [messages]} for
errors, a list of strings for warnings) instead of raising, so the import
can collect them per row and the API can raise them in one
ValidationException.
"""

import re
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from app.models.employee import MaritalStatus


PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]{7,20}$")

PHONE_FIELDS = (
    "mobile_phone",
    "spouse_phone_number",
    "emergency_contact_person_phone",
    "father_phone_number",
    "mother_phone_number",
)

BANK_FIELDS = ("bank_name", "bank_branch", "bank_account_name", "bank_account_number")

MIN_BIRTH_YEAR = 1940
MIN_AGE = 18
MAX_AGE = 84
SENIOR_AGE_WARNING = 65

Errors = Dict[str, List[str]]


def add_error(errors: Errors, field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def merge_errors(target: Errors, source: Errors) -> Errors:
    for field, messages in source.items():
        target.setdefault(field, []).extend(messages)
    return target


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    today = today or date.today()
    return today.year - date_of_birth.year - (
        (today.month, today.day) < (date_of_birth.month, date_of_birth.day)
    )


def check_date_of_birth(
    date_of_birth: Optional[date],
    required: bool = False,
    today: Optional[date] = None,
) -> Tuple[Errors, List[str]]:
    """Birth year and working-age limits; 65+ is accepted with a warning."""
    errors: Errors = {}
    warnings: List[str] = []

    if date_of_birth is None:
        if required:
            add_error(errors, "date_of_birth", "Date of birth is required")
        return errors, warnings

    if date_of_birth.year < MIN_BIRTH_YEAR:
        add_error(errors, "date_of_birth", f"Date of birth must be in {MIN_BIRTH_YEAR} or later")
        return errors, warnings

    age = calculate_age(date_of_birth, today)
    if age < MIN_AGE:
        add_error(errors, "date_of_birth", f"Employee must be at least {MIN_AGE} years old (age {age})")
    elif age > MAX_AGE:
        add_error(errors, "date_of_birth", f"Employee age cannot exceed {MAX_AGE} years (age {age})")
    elif age >= SENIOR_AGE_WARNING:
        warnings.append(f"date_of_birth: employee is {age} years old, please verify")

    return errors, warnings


def check_cross_field_rules(values: Dict[str, Any], today: Optional[date] = None) -> Errors:
    """
    Rules spanning several employee fields.

    ``values`` is the complete resulting record state (stored values merged
    with the incoming change), not just the payload.
    """
    errors: Errors = {}
    today = today or date.today()

    marital_status = values.get("marital_status")
    spouse_name = values.get("spouse_name")
    if marital_status == MaritalStatus.MARRIED.value and not spouse_name:
        add_error(errors, "spouse_name", "Spouse name is required when marital status is Married")
    if spouse_name and marital_status != MaritalStatus.MARRIED.value:
        add_error(
            errors,
            "spouse_name",
            "Spouse name should only be provided when marital status is Married",
        )

    id_type = values.get("identification_type")
    id_number = values.get("identification_number")
    if id_type and not id_number:
        add_error(
            errors,
            "identification_number",
            "Identification number is required when identification type is provided",
        )
    if id_number and not id_type:
        add_error(
            errors,
            "identification_type",
            "Identification type is required when identification number is provided",
        )

    issue_date = values.get("identification_issue_date")
    expiry_date = values.get("identification_expiry_date")
    if issue_date and issue_date > today:
        add_error(errors, "identification_issue_date", "Identification issue date cannot be in the future")
    if issue_date and expiry_date and expiry_date <= issue_date:
        add_error(
            errors,
            "identification_expiry_date",
            "Identification expiry date must be after the issue date",
        )

    return errors


def check_bank_rules(values: Dict[str, Any]) -> Errors:
    """Account name and number become required once any bank field is set."""
    errors: Errors = {}
    if not any(values.get(field) for field in BANK_FIELDS):
        return errors
    if not values.get("bank_account_name"):
        add_error(errors, "bank_account_name", "Bank account name is required when bank information is provided")
    if not values.get("bank_account_number"):
        add_error(errors, "bank_account_number", "Bank account number is required when bank information is provided")
    return errors


def collect_warnings(values: Dict[str, Any]) -> List[str]:
    """Non-blocking data quality notes."""
    warnings: List[str] = []
    if values.get("spouse_name") and not values.get("spouse_phone_number"):
        warnings.append("spouse_phone_number: spouse name provided without a phone number")
    for field in PHONE_FIELDS:
        phone = values.get(field)
        if phone and not PHONE_PATTERN.match(str(phone)):
            warnings.append(f"{field}: '{phone}' does not look like a phone number")
    return warnings
