"""
HRMS - Routers Package

FastAPI route handlers.

Routers:
- auth: Authentication (login, refresh, current user)
- employees: Employee master records
- employee_records: Children, education, languages, beneficiaries, funding allocations
- employments: Employment records
- employee_imports: Spreadsheet import, template and export
- departments / positions: Organization structure
- leave: Leave types and balances
- lookups: Dropdown reference data
- recycle_bin: Restore and purge safe-deleted records
- activity_logs: Audit trail of destructive operations
- notifications: In-app notification inbox
- health: Liveness check
"""
