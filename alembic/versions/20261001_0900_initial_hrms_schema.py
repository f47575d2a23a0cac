"""Initial HRMS schema

Revision ID: 20261001_0900_initial_hrms_schema
Revises:
Create Date: 2026-10-01 09:00:00.000000

Creates the tables for:
- users and notifications
- employees and their child records (children, education, languages, beneficiaries)
- departments, positions, employments, payrolls and funding allocations
- leave types and balances
- lookups
- recycle bin snapshots and manifests, activity logs and import statuses
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '20261001_0900_initial_hrms_schema'
down_revision = None
branch_labels = None
depends_on = None


JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _audit():
    return [
        sa.Column('created_by', sa.String(100), nullable=True),
        sa.Column('updated_by', sa.String(100), nullable=True),
    ]


def upgrade() -> None:
    """Create HRMS tables."""

    # ===========================================
    # USERS
    # ===========================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # ===========================================
    # EMPLOYEES
    # ===========================================
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('organization', sa.String(10), nullable=False),
        sa.Column('staff_id', sa.String(50), nullable=False),
        sa.Column('initial_en', sa.String(10), nullable=True),
        sa.Column('initial_th', sa.String(20), nullable=True),
        sa.Column('first_name_en', sa.String(255), nullable=True),
        sa.Column('last_name_en', sa.String(255), nullable=True),
        sa.Column('first_name_th', sa.String(255), nullable=True),
        sa.Column('last_name_th', sa.String(255), nullable=True),
        sa.Column('gender', sa.String(1), nullable=True),
        sa.Column('date_of_birth', sa.Date, nullable=True),
        sa.Column('status', sa.String(50), nullable=True),
        sa.Column('nationality', sa.String(100), nullable=True),
        sa.Column('religion', sa.String(100), nullable=True),

        # Identification
        sa.Column('identification_type', sa.String(50), nullable=True),
        sa.Column('identification_number', sa.String(100), nullable=True),
        sa.Column('identification_issue_date', sa.Date, nullable=True),
        sa.Column('identification_expiry_date', sa.Date, nullable=True),
        sa.Column('social_security_number', sa.String(50), nullable=True),
        sa.Column('tax_number', sa.String(50), nullable=True),
        sa.Column('driver_license_number', sa.String(100), nullable=True),

        # Bank
        sa.Column('bank_name', sa.String(100), nullable=True),
        sa.Column('bank_branch', sa.String(100), nullable=True),
        sa.Column('bank_account_name', sa.String(100), nullable=True),
        sa.Column('bank_account_number', sa.String(100), nullable=True),

        # Contact
        sa.Column('mobile_phone', sa.String(50), nullable=True),
        sa.Column('current_address', sa.Text, nullable=True),
        sa.Column('permanent_address', sa.Text, nullable=True),
        sa.Column('military_status', sa.Boolean, nullable=True),

        # Family
        sa.Column('marital_status', sa.String(20), nullable=True),
        sa.Column('spouse_name', sa.String(255), nullable=True),
        sa.Column('spouse_phone_number', sa.String(50), nullable=True),
        sa.Column('emergency_contact_person_name', sa.String(255), nullable=True),
        sa.Column('emergency_contact_person_relationship', sa.String(100), nullable=True),
        sa.Column('emergency_contact_person_phone', sa.String(50), nullable=True),
        sa.Column('father_name', sa.String(255), nullable=True),
        sa.Column('father_occupation', sa.String(255), nullable=True),
        sa.Column('father_phone_number', sa.String(50), nullable=True),
        sa.Column('mother_name', sa.String(255), nullable=True),
        sa.Column('mother_occupation', sa.String(255), nullable=True),
        sa.Column('mother_phone_number', sa.String(50), nullable=True),

        sa.Column('remark', sa.Text, nullable=True),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_employees'),
        sa.UniqueConstraint('organization', 'staff_id', name='uq_employees_organization_staff_id'),
    )
    op.create_index('ix_employees_organization', 'employees', ['organization'])
    op.create_index('ix_employees_staff_id', 'employees', ['staff_id'])
    op.create_index('ix_employees_status', 'employees', ['status'])

    op.create_table(
        'employee_children',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('date_of_birth', sa.Date, nullable=True),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_employee_children'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], name='fk_employee_children_employee_id_employees'),
    )
    op.create_index('ix_employee_children_employee_id', 'employee_children', ['employee_id'])

    op.create_table(
        'employee_education',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer, nullable=False),
        sa.Column('school_name', sa.String(255), nullable=False),
        sa.Column('degree', sa.String(255), nullable=False),
        sa.Column('start_date', sa.Date, nullable=True),
        sa.Column('end_date', sa.Date, nullable=True),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_employee_education'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], name='fk_employee_education_employee_id_employees'),
    )
    op.create_index('ix_employee_education_employee_id', 'employee_education', ['employee_id'])

    op.create_table(
        'employee_languages',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer, nullable=False),
        sa.Column('language', sa.String(100), nullable=False),
        sa.Column('proficiency_level', sa.String(50), nullable=True),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_employee_languages'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], name='fk_employee_languages_employee_id_employees'),
    )
    op.create_index('ix_employee_languages_employee_id', 'employee_languages', ['employee_id'])

    op.create_table(
        'employee_beneficiaries',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer, nullable=False),
        sa.Column('beneficiary_name', sa.String(255), nullable=False),
        sa.Column('beneficiary_relationship', sa.String(100), nullable=False),
        sa.Column('phone_number', sa.String(50), nullable=True),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_employee_beneficiaries'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], name='fk_employee_beneficiaries_employee_id_employees'),
    )
    op.create_index('ix_employee_beneficiaries_employee_id', 'employee_beneficiaries', ['employee_id'])

    # ===========================================
    # ORGANIZATION STRUCTURE
    # ===========================================
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_departments'),
        sa.UniqueConstraint('name', name='uq_departments_name'),
    )

    op.create_table(
        'positions',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('department_id', sa.Integer, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('reports_to_id', sa.Integer, nullable=True),
        sa.Column('level', sa.Integer, nullable=False),
        sa.Column('is_manager', sa.Boolean, nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_positions'),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], name='fk_positions_department_id_departments'),
        sa.ForeignKeyConstraint(['reports_to_id'], ['positions.id'], name='fk_positions_reports_to_id_positions'),
    )
    op.create_index('ix_positions_department_id', 'positions', ['department_id'])
    op.create_index('ix_positions_reports_to_id', 'positions', ['reports_to_id'])

    # ===========================================
    # EMPLOYMENT
    # ===========================================
    op.create_table(
        'employments',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer, nullable=False),
        sa.Column('department_id', sa.Integer, nullable=True),
        sa.Column('position_id', sa.Integer, nullable=True),
        sa.Column('employment_type', sa.String(50), nullable=False),
        sa.Column('pay_method', sa.String(50), nullable=True),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=True),
        sa.Column('probation_pass_date', sa.Date, nullable=True),
        sa.Column('position_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('active', sa.Boolean, nullable=False),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_employments'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], name='fk_employments_employee_id_employees'),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], name='fk_employments_department_id_departments'),
        sa.ForeignKeyConstraint(['position_id'], ['positions.id'], name='fk_employments_position_id_positions'),
    )
    op.create_index('ix_employments_employee_id', 'employments', ['employee_id'])
    op.create_index('ix_employments_department_id', 'employments', ['department_id'])
    op.create_index('ix_employments_position_id', 'employments', ['position_id'])

    op.create_table(
        'payrolls',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer, nullable=False),
        sa.Column('employment_id', sa.Integer, nullable=True),
        sa.Column('pay_period_date', sa.Date, nullable=False),
        sa.Column('gross_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('net_salary', sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_payrolls'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], name='fk_payrolls_employee_id_employees'),
        sa.ForeignKeyConstraint(['employment_id'], ['employments.id'], name='fk_payrolls_employment_id_employments'),
    )
    op.create_index('ix_payrolls_employee_id', 'payrolls', ['employee_id'])

    op.create_table(
        'employee_funding_allocations',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer, nullable=False),
        sa.Column('employment_id', sa.Integer, nullable=True),
        sa.Column('allocation_type', sa.String(20), nullable=False),
        sa.Column('fte', sa.Numeric(4, 2), nullable=False),
        sa.Column('allocated_amount', sa.Numeric(15, 2), nullable=True),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=True),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_employee_funding_allocations'),
        sa.ForeignKeyConstraint(
            ['employee_id'], ['employees.id'],
            name='fk_employee_funding_allocations_employee_id_employees',
        ),
        sa.ForeignKeyConstraint(
            ['employment_id'], ['employments.id'],
            name='fk_employee_funding_allocations_employment_id_employments',
        ),
    )
    op.create_index('ix_employee_funding_allocations_employee_id', 'employee_funding_allocations', ['employee_id'])
    op.create_index('ix_employee_funding_allocations_employment_id', 'employee_funding_allocations', ['employment_id'])

    # ===========================================
    # LEAVE
    # ===========================================
    op.create_table(
        'leave_types',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('default_duration', sa.Numeric(8, 2), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('requires_attachment', sa.Boolean, nullable=False),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_leave_types'),
        sa.UniqueConstraint('name', name='uq_leave_types_name'),
    )

    op.create_table(
        'leave_balances',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer, nullable=False),
        sa.Column('leave_type_id', sa.Integer, nullable=False),
        sa.Column('year', sa.Integer, nullable=False),
        sa.Column('total_days', sa.Numeric(8, 2), nullable=False),
        sa.Column('used_days', sa.Numeric(8, 2), nullable=False),
        sa.Column('remaining_days', sa.Numeric(8, 2), nullable=False),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_leave_balances'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], name='fk_leave_balances_employee_id_employees'),
        sa.ForeignKeyConstraint(['leave_type_id'], ['leave_types.id'], name='fk_leave_balances_leave_type_id_leave_types'),
        sa.UniqueConstraint('employee_id', 'leave_type_id', 'year', name='uq_leave_balances_employee_type_year'),
    )
    op.create_index('ix_leave_balances_employee_id', 'leave_balances', ['employee_id'])
    op.create_index('ix_leave_balances_leave_type_id', 'leave_balances', ['leave_type_id'])
    op.create_index('ix_leave_balances_year', 'leave_balances', ['year'])

    # ===========================================
    # LOOKUPS
    # ===========================================
    op.create_table(
        'lookups',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('type', sa.String(255), nullable=False),
        sa.Column('value', sa.String(255), nullable=False),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id', name='pk_lookups'),
        sa.UniqueConstraint('type', 'value', name='uq_lookups_type_value'),
    )
    op.create_index('ix_lookups_type', 'lookups', ['type'])

    # ===========================================
    # RECYCLE BIN & AUDIT
    # ===========================================
    op.create_table(
        'deleted_models',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('key', sa.String(40), nullable=False),
        sa.Column('model', sa.String(100), nullable=False),
        sa.Column('row_values', JSON_TYPE, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_deleted_models'),
    )
    op.create_index('ix_deleted_models_key', 'deleted_models', ['key'], unique=True)
    op.create_index('ix_deleted_models_model', 'deleted_models', ['model'])

    op.create_table(
        'deletion_manifests',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('deletion_key', sa.String(64), nullable=False),
        sa.Column('root_model', sa.String(100), nullable=False),
        sa.Column('root_id', sa.Integer, nullable=False),
        sa.Column('root_display_name', sa.String(255), nullable=True),
        sa.Column('snapshot_keys', JSON_TYPE, nullable=False),
        sa.Column('table_order', JSON_TYPE, nullable=False),
        sa.Column('deleted_by', sa.Integer, nullable=True),
        sa.Column('deleted_by_name', sa.String(255), nullable=True),
        sa.Column('reason', sa.Text, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_deletion_manifests'),
    )
    op.create_index('ix_deletion_manifests_deletion_key', 'deletion_manifests', ['deletion_key'], unique=True)
    op.create_index('ix_deletion_manifests_root_model', 'deletion_manifests', ['root_model'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('subject_type', sa.String(100), nullable=False),
        sa.Column('subject_id', sa.Integer, nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('causer_id', sa.Integer, nullable=True),
        sa.Column('causer_name', sa.String(255), nullable=True),
        sa.Column('properties', JSON_TYPE, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_activity_logs'),
    )
    op.create_index('ix_activity_logs_action', 'activity_logs', ['action'])
    op.create_index('ix_activity_logs_subject_type', 'activity_logs', ['subject_type'])

    # ===========================================
    # NOTIFICATIONS & IMPORTS
    # ===========================================
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('notification_type', sa.String(50), nullable=False),
        sa.Column('action', sa.String(50), nullable=True),
        sa.Column('entity_type', sa.String(100), nullable=True),
        sa.Column('entity_id', sa.Integer, nullable=True),
        sa.Column('payload', JSON_TYPE, nullable=True),
        sa.Column('is_read', sa.Boolean, nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_notifications'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_notifications_user_id_users', ondelete='CASCADE',
        ),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table(
        'import_statuses',
        sa.Column('id', sa.Integer, autoincrement=True, nullable=False),
        sa.Column('import_id', sa.String(64), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('file_name', sa.String(255), nullable=True),
        sa.Column('total_rows', sa.Integer, nullable=False),
        sa.Column('processed', sa.Integer, nullable=False),
        sa.Column('skipped', sa.Integer, nullable=False),
        sa.Column('errors', JSON_TYPE, nullable=False),
        sa.Column('warnings', JSON_TYPE, nullable=False),
        sa.Column('created_by', sa.String(100), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_import_statuses'),
    )
    op.create_index('ix_import_statuses_import_id', 'import_statuses', ['import_id'], unique=True)


def downgrade() -> None:
    """Drop HRMS tables."""
    op.drop_table('import_statuses')
    op.drop_table('notifications')
    op.drop_table('activity_logs')
    op.drop_table('deletion_manifests')
    op.drop_table('deleted_models')
    op.drop_table('lookups')
    op.drop_table('leave_balances')
    op.drop_table('leave_types')
    op.drop_table('employee_funding_allocations')
    op.drop_table('payrolls')
    op.drop_table('employments')
    op.drop_table('positions')
    op.drop_table('departments')
    op.drop_table('employee_beneficiaries')
    op.drop_table('employee_languages')
    op.drop_table('employee_education')
    op.drop_table('employee_children')
    op.drop_table('employees')
    op.drop_table('users')
