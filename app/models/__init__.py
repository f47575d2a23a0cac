"""
HRMS - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from app.models.base import BaseModel, TimestampMixin, AuditMixin
from app.models.user import User
from app.models.employee import (
    Employee,
    EmployeeChild,
    EmployeeEducation,
    EmployeeLanguage,
    EmployeeBeneficiary,
    Organization,
    Gender,
    EmployeeStatus,
    MaritalStatus,
    IdentificationType,
    IDENTIFICATION_TYPE_LABELS,
)
from app.models.organization_structure import Department, Position
from app.models.employment import Employment, EmploymentType, PayMethod, Payroll
from app.models.funding_allocation import EmployeeFundingAllocation, AllocationType
from app.models.leave import LeaveType, LeaveBalance
from app.models.lookup import Lookup
from app.models.recycle_bin import DeletedModel, DeletionManifest
from app.models.activity_log import ActivityLog
from app.models.notification import Notification, NotificationType
from app.models.import_status import ImportStatus, ImportState

__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "AuditMixin",
    # Users
    "User",
    # Employees
    "Employee",
    "EmployeeChild",
    "EmployeeEducation",
    "EmployeeLanguage",
    "EmployeeBeneficiary",
    "Organization",
    "Gender",
    "EmployeeStatus",
    "MaritalStatus",
    "IdentificationType",
    "IDENTIFICATION_TYPE_LABELS",
    # Organization structure
    "Department",
    "Position",
    # Employment
    "Employment",
    "EmploymentType",
    "PayMethod",
    "Payroll",
    "EmployeeFundingAllocation",
    "AllocationType",
    # Leave
    "LeaveType",
    "LeaveBalance",
    # Lookups
    "Lookup",
    # Recycle bin / audit
    "DeletedModel",
    "DeletionManifest",
    "ActivityLog",
    # Notifications
    "Notification",
    "NotificationType",
    # Imports
    "ImportStatus",
    "ImportState",
]
