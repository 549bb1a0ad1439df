"""Initial schema - all tables

Revision ID: 001
Revises: 
Create Date: 2025-01-01 00:00:00.000000

This migration creates all initial tables for the portal:
- employees, user_sessions, audit_log
- schedules, shift_logs, time_off_requests
- payrolls, payroll_items, payroll_invoices
- tasks, task_subitems, task_comments
- cctv_cameras, cctv_logs and the six security logbooks
- trainings, training_quizzes, training_tracker
- agreements, agreement_tracker
- job_openings, applications
- announcements, messages
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from portal.config import get_settings

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Get schema from config
settings = get_settings()
SCHEMA = settings.db_schema  # Will be None for dbo / SQLite

SECURITY_LOG_TABLES = (
    'sold_out_logs',
    'door_logs',
    'employee_violations',
    'incident_reports',
    'safe_room_logs',
    'cash_removal_logs',
)


def ref(target: str) -> str:
    """Qualify a foreign key target with the configured schema."""
    return f'{SCHEMA}.{target}' if SCHEMA else target


def now_default():
    if op.get_bind().dialect.name == 'mssql':
        return sa.text('GETUTCDATE()')
    return sa.text('CURRENT_TIMESTAMP')


def audit_columns(table: str) -> list:
    """created_at/by and modified_at/by for admin-maintained tables."""
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('modified_at', sa.DateTime(), nullable=True),
        sa.Column('modified_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], [ref('employees.employee_id')], name=f'fk_{table}_created_by'),
        sa.ForeignKeyConstraint(['modified_by'], [ref('employees.employee_id')], name=f'fk_{table}_modified_by'),
    ]


def upgrade() -> None:
    # Create schema if specified and doesn't exist
    if SCHEMA:
        op.execute(f"IF NOT EXISTS (SELECT * FROM sys.schemas WHERE name = '{SCHEMA}') EXEC('CREATE SCHEMA {SCHEMA}')")

    employee_fk = ref('employees.employee_id')

    # Employees table
    op.create_table(
        'employees',
        sa.Column('employee_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='employee'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('full_name', sa.String(length=150), nullable=False),
        sa.Column('nickname', sa.String(length=100), nullable=True),
        sa.Column('acronym', sa.String(length=10), nullable=True),
        sa.Column('contact_number', sa.String(length=50), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('emergency_contact', sa.String(length=150), nullable=True),
        sa.Column('emergency_contact_phone', sa.String(length=50), nullable=True),
        sa.Column('ssn_last4', sa.String(length=4), nullable=True),
        sa.Column('driver_license_no', sa.String(length=50), nullable=True),
        sa.Column('employee_type', sa.String(length=10), nullable=False, server_default='VA'),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('pay_rate', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('shirt_size', sa.String(length=5), nullable=False, server_default='XXS'),
        sa.Column('hoodie_size', sa.String(length=5), nullable=False, server_default='XXS'),
        sa.Column('wise_tag', sa.String(length=100), nullable=True),
        sa.Column('wise_email', sa.String(length=255), nullable=True),
        sa.Column('bank_name', sa.String(length=150), nullable=True),
        sa.Column('account_number', sa.String(length=100), nullable=True),
        sa.Column('wecard_certified', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('wecard_certificate_url', sa.String(length=500), nullable=True),
        *audit_columns('employees'),
        sa.PrimaryKeyConstraint('employee_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_employees_email', 'employees', ['email'], unique=True, schema=SCHEMA)

    # User sessions table
    op.create_table(
        'user_sessions',
        sa.Column('session_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('session_token', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('last_activity_at', sa.DateTime(), nullable=True),
        sa.Column('logged_out_at', sa.DateTime(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name='fk_user_sessions_employee'),
        sa.PrimaryKeyConstraint('session_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_user_sessions_session_token', 'user_sessions', ['session_token'], unique=True, schema=SCHEMA)
    op.create_index('ix_user_sessions_employee_id', 'user_sessions', ['employee_id'], schema=SCHEMA)
    op.create_index('ix_user_sessions_employee_active', 'user_sessions', ['employee_id', 'is_active'], schema=SCHEMA)

    # Audit log table
    op.create_table(
        'audit_log',
        sa.Column('audit_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('table_name', sa.String(length=100), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('changed_fields', sa.String(length=1000), nullable=True),
        sa.Column('old_values', sa.Text(), nullable=True),
        sa.Column('new_values', sa.Text(), nullable=True),
        sa.Column('performed_by', sa.Integer(), nullable=True),
        sa.Column('performed_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('context', sa.String(length=200), nullable=True),
        sa.ForeignKeyConstraint(['performed_by'], [employee_fk], name='fk_audit_log_performed_by'),
        sa.PrimaryKeyConstraint('audit_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_audit_log_table_name', 'audit_log', ['table_name'], schema=SCHEMA)
    op.create_index('ix_audit_log_record_id', 'audit_log', ['record_id'], schema=SCHEMA)
    op.create_index('ix_audit_log_action', 'audit_log', ['action'], schema=SCHEMA)
    op.create_index('ix_audit_log_performed_by', 'audit_log', ['performed_by'], schema=SCHEMA)
    op.create_index('ix_audit_log_performed_at', 'audit_log', ['performed_at'], schema=SCHEMA)

    # Schedules table
    op.create_table(
        'schedules',
        sa.Column('schedule_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_in', sa.Time(), nullable=False),
        sa.Column('time_out', sa.Time(), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        *audit_columns('schedules'),
        sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name='fk_schedules_employee'),
        sa.PrimaryKeyConstraint('schedule_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_schedules_employee_id', 'schedules', ['employee_id'], schema=SCHEMA)
    op.create_index('ix_schedules_date', 'schedules', ['date'], schema=SCHEMA)
    op.create_index('ix_schedules_employee_date', 'schedules', ['employee_id', 'date'], schema=SCHEMA)

    # Shift logs table
    op.create_table(
        'shift_logs',
        sa.Column('shift_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('shift_start', sa.DateTime(), nullable=False),
        sa.Column('shift_end', sa.DateTime(), nullable=True),
        sa.Column('duration', sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('report', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('modified_at', sa.DateTime(), nullable=True),
        sa.Column('modified_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name='fk_shift_logs_employee'),
        sa.ForeignKeyConstraint(['modified_by'], [employee_fk], name='fk_shift_logs_modified_by'),
        sa.PrimaryKeyConstraint('shift_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_shift_logs_employee_id', 'shift_logs', ['employee_id'], schema=SCHEMA)
    op.create_index('ix_shift_logs_employee_start', 'shift_logs', ['employee_id', 'shift_start'], schema=SCHEMA)

    # Time off requests table
    op.create_table(
        'time_off_requests',
        sa.Column('request_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name='fk_time_off_employee'),
        sa.ForeignKeyConstraint(['reviewed_by'], [employee_fk], name='fk_time_off_reviewed_by'),
        sa.ForeignKeyConstraint(['created_by'], [employee_fk], name='fk_time_off_created_by'),
        sa.PrimaryKeyConstraint('request_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_time_off_requests_employee_id', 'time_off_requests', ['employee_id'], schema=SCHEMA)
    op.create_index('ix_time_off_requests_status', 'time_off_requests', ['status'], schema=SCHEMA)

    # Payroll tables
    op.create_table(
        'payrolls',
        sa.Column('payroll_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('date_started', sa.Date(), nullable=False),
        sa.Column('date_ended', sa.Date(), nullable=False),
        sa.Column('release_date', sa.Date(), nullable=True),
        *audit_columns('payrolls'),
        sa.PrimaryKeyConstraint('payroll_id'),
        schema=SCHEMA,
    )

    op.create_table(
        'payroll_items',
        sa.Column('item_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('payroll_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('hrs_worked', sa.Numeric(precision=8, scale=2), nullable=False, server_default='0'),
        sa.Column('rate', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['payroll_id'], [ref('payrolls.payroll_id')], name='fk_payroll_items_payroll', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name='fk_payroll_items_employee'),
        sa.PrimaryKeyConstraint('item_id'),
        sa.UniqueConstraint('payroll_id', 'employee_id', name='uq_payroll_items_period_employee'),
        schema=SCHEMA,
    )
    op.create_index('ix_payroll_items_payroll_id', 'payroll_items', ['payroll_id'], schema=SCHEMA)
    op.create_index('ix_payroll_items_employee_id', 'payroll_items', ['employee_id'], schema=SCHEMA)

    op.create_table(
        'payroll_invoices',
        sa.Column('invoice_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('payroll_item_id', sa.Integer(), nullable=False),
        sa.Column('confirmed', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('admin_verified', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('released', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('date_issued', sa.Date(), nullable=False),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('verified_by', sa.Integer(), nullable=True),
        sa.Column('released_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name='fk_payroll_invoices_employee'),
        sa.ForeignKeyConstraint(['payroll_item_id'], [ref('payroll_items.item_id')], name='fk_payroll_invoices_item', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['verified_by'], [employee_fk], name='fk_payroll_invoices_verified_by'),
        sa.PrimaryKeyConstraint('invoice_id'),
        sa.UniqueConstraint('payroll_item_id', name='uq_payroll_invoices_item'),
        schema=SCHEMA,
    )
    op.create_index('ix_payroll_invoices_employee_id', 'payroll_invoices', ['employee_id'], schema=SCHEMA)

    # Task tables
    op.create_table(
        'tasks',
        sa.Column('task_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('assigned_to', sa.Integer(), nullable=True),
        sa.Column('priority', sa.String(length=10), nullable=False, server_default='Medium'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('due_date', sa.Date(), nullable=True),
        *audit_columns('tasks'),
        sa.ForeignKeyConstraint(['assigned_to'], [employee_fk], name='fk_tasks_assigned_to'),
        sa.PrimaryKeyConstraint('task_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_tasks_assigned_to', 'tasks', ['assigned_to'], schema=SCHEMA)
    op.create_index('ix_tasks_status', 'tasks', ['status'], schema=SCHEMA)

    op.create_table(
        'task_subitems',
        sa.Column('subitem_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('task_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.ForeignKeyConstraint(['task_id'], [ref('tasks.task_id')], name='fk_task_subitems_task', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('subitem_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_task_subitems_task_id', 'task_subitems', ['task_id'], schema=SCHEMA)

    op.create_table(
        'task_comments',
        sa.Column('comment_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('task_id', sa.Integer(), nullable=False),
        sa.Column('commenter_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.ForeignKeyConstraint(['task_id'], [ref('tasks.task_id')], name='fk_task_comments_task', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['commenter_id'], [employee_fk], name='fk_task_comments_commenter'),
        sa.PrimaryKeyConstraint('comment_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_task_comments_task_id', 'task_comments', ['task_id'], schema=SCHEMA)

    # CCTV tables
    op.create_table(
        'cctv_cameras',
        sa.Column('camera_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('camera_name', sa.String(length=100), nullable=False),
        sa.Column('battery_type', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=10), nullable=False, server_default='active'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('battery_percentage', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('inputted_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['inputted_by'], [employee_fk], name='fk_cctv_cameras_inputted_by'),
        sa.ForeignKeyConstraint(['updated_by'], [employee_fk], name='fk_cctv_cameras_updated_by'),
        sa.PrimaryKeyConstraint('camera_id'),
        schema=SCHEMA,
    )

    op.create_table(
        'cctv_logs',
        sa.Column('log_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('camera_id', sa.Integer(), nullable=False),
        sa.Column('battery_percentage', sa.Integer(), nullable=False),
        sa.Column('note', sa.String(length=200), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.ForeignKeyConstraint(['camera_id'], [ref('cctv_cameras.camera_id')], name='fk_cctv_logs_camera', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['updated_by'], [employee_fk], name='fk_cctv_logs_updated_by'),
        sa.PrimaryKeyConstraint('log_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_cctv_logs_camera_id', 'cctv_logs', ['camera_id'], schema=SCHEMA)

    # Security logbooks: shared columns plus each book's own
    specific_columns = {
        'sold_out_logs': [
            sa.Column('employee_id', sa.Integer(), nullable=True),
            sa.Column('number_of_items', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('id_verified', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('verifier_id', sa.Integer(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.ForeignKeyConstraint(['verifier_id'], [employee_fk], name='fk_sold_out_logs_verifier'),
        ],
        'door_logs': [
            sa.Column('employee_id', sa.Integer(), nullable=True),
            sa.Column('door_location', sa.String(length=100), nullable=False),
            sa.Column('note', sa.Text(), nullable=True),
        ],
        'employee_violations': [
            sa.Column('employee_id', sa.Integer(), nullable=True),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
        ],
        'incident_reports': [
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('management_contacted', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('police_contacted', sa.Boolean(), nullable=False, server_default='0'),
        ],
        'safe_room_logs': [
            sa.Column('employee_id', sa.Integer(), nullable=True),
            sa.Column('reason_for_entry', sa.Text(), nullable=False),
        ],
        'cash_removal_logs': [
            sa.Column('employee_id', sa.Integer(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
        ],
    }
    for table_name in SECURITY_LOG_TABLES:
        columns = specific_columns[table_name]
        has_employee = any(getattr(c, 'name', None) == 'employee_id' for c in columns)
        employee_constraint = (
            [sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name=f'fk_{table_name}_employee')]
            if has_employee else []
        )
        op.create_table(
            table_name,
            sa.Column('log_id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('time', sa.Time(), nullable=False),
            sa.Column('footage_link', sa.String(length=500), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
            sa.Column('modified_at', sa.DateTime(), nullable=True),
            sa.Column('inputted_by', sa.Integer(), nullable=True),
            sa.Column('modified_by', sa.Integer(), nullable=True),
            *columns,
            *employee_constraint,
            sa.ForeignKeyConstraint(['inputted_by'], [employee_fk], name=f'fk_{table_name}_inputted_by'),
            sa.ForeignKeyConstraint(['modified_by'], [employee_fk], name=f'fk_{table_name}_modified_by'),
            sa.PrimaryKeyConstraint('log_id'),
            schema=SCHEMA,
        )
        op.create_index(f'ix_{table_name}_date', table_name, ['date'], schema=SCHEMA)
        if has_employee:
            op.create_index(f'ix_{table_name}_employee_id', table_name, ['employee_id'], schema=SCHEMA)

    # Training tables
    op.create_table(
        'trainings',
        sa.Column('training_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('media', sa.JSON(), nullable=False),
        *audit_columns('trainings'),
        sa.PrimaryKeyConstraint('training_id'),
        schema=SCHEMA,
    )

    op.create_table(
        'training_quizzes',
        sa.Column('quiz_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('training_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['training_id'], [ref('trainings.training_id')], name='fk_training_quizzes_training', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], [employee_fk], name='fk_training_quizzes_created_by'),
        sa.PrimaryKeyConstraint('quiz_id'),
        sa.UniqueConstraint('training_id', 'version', name='uq_training_quizzes_version'),
        schema=SCHEMA,
    )
    op.create_index('ix_training_quizzes_training_id', 'training_quizzes', ['training_id'], schema=SCHEMA)

    op.create_table(
        'training_tracker',
        sa.Column('tracker_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('training_id', sa.Integer(), nullable=False),
        sa.Column('quiz_score', sa.Integer(), nullable=False),
        sa.Column('quiz_version', sa.Integer(), nullable=False),
        sa.Column('quiz_answers', sa.JSON(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name='fk_training_tracker_employee'),
        sa.ForeignKeyConstraint(['training_id'], [ref('trainings.training_id')], name='fk_training_tracker_training', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tracker_id'),
        sa.UniqueConstraint('employee_id', 'training_id', name='uq_training_tracker_employee_training'),
        schema=SCHEMA,
    )
    op.create_index('ix_training_tracker_employee_id', 'training_tracker', ['employee_id'], schema=SCHEMA)
    op.create_index('ix_training_tracker_training_id', 'training_tracker', ['training_id'], schema=SCHEMA)

    # Agreement tables
    op.create_table(
        'agreements',
        sa.Column('agreement_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('doc_links', sa.JSON(), nullable=False),
        sa.Column('allowed_types', sa.JSON(), nullable=False),
        *audit_columns('agreements'),
        sa.PrimaryKeyConstraint('agreement_id'),
        schema=SCHEMA,
    )

    op.create_table(
        'agreement_tracker',
        sa.Column('tracker_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('agreement_id', sa.Integer(), nullable=False),
        sa.Column('signature_base64', sa.Text(), nullable=False),
        sa.Column('signed_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='signed'),
        sa.ForeignKeyConstraint(['employee_id'], [employee_fk], name='fk_agreement_tracker_employee'),
        sa.ForeignKeyConstraint(['agreement_id'], [ref('agreements.agreement_id')], name='fk_agreement_tracker_agreement', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tracker_id'),
        sa.UniqueConstraint('employee_id', 'agreement_id', name='uq_agreement_tracker_employee_agreement'),
        schema=SCHEMA,
    )
    op.create_index('ix_agreement_tracker_employee_id', 'agreement_tracker', ['employee_id'], schema=SCHEMA)
    op.create_index('ix_agreement_tracker_agreement_id', 'agreement_tracker', ['agreement_id'], schema=SCHEMA)

    # Hiring tables
    op.create_table(
        'job_openings',
        sa.Column('job_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('employment_type', sa.String(length=10), nullable=False, server_default='VA'),
        sa.Column('status', sa.String(length=10), nullable=False, server_default='Open'),
        *audit_columns('job_openings'),
        sa.PrimaryKeyConstraint('job_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_job_openings_status', 'job_openings', ['status'], schema=SCHEMA)

    op.create_table(
        'applications',
        sa.Column('application_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=True),
        sa.Column('full_name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('contact_number', sa.String(length=50), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('resume_url', sa.String(length=500), nullable=True),
        sa.Column('interview_schedules', sa.JSON(), nullable=False),
        sa.Column('preferred_interview_date', sa.Date(), nullable=True),
        sa.Column('preferred_interview_time', sa.String(length=50), nullable=True),
        sa.Column('interview_time', sa.DateTime(), nullable=True),
        sa.Column('quiz_answers', sa.JSON(), nullable=False),
        sa.Column('quiz_score', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('modified_at', sa.DateTime(), nullable=True),
        sa.Column('modified_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['job_id'], [ref('job_openings.job_id')], name='fk_applications_job', ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['modified_by'], [employee_fk], name='fk_applications_modified_by'),
        sa.PrimaryKeyConstraint('application_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_applications_job_id', 'applications', ['job_id'], schema=SCHEMA)
    op.create_index('ix_applications_status', 'applications', ['status'], schema=SCHEMA)

    # Announcements and messages
    op.create_table(
        'announcements',
        sa.Column('announcement_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], [employee_fk], name='fk_announcements_created_by'),
        sa.PrimaryKeyConstraint('announcement_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_announcements_created_at', 'announcements', ['created_at'], schema=SCHEMA)

    op.create_table(
        'messages',
        sa.Column('message_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('receiver_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=now_default()),
        sa.ForeignKeyConstraint(['sender_id'], [employee_fk], name='fk_messages_sender'),
        sa.ForeignKeyConstraint(['receiver_id'], [employee_fk], name='fk_messages_receiver'),
        sa.PrimaryKeyConstraint('message_id'),
        schema=SCHEMA,
    )
    op.create_index('ix_messages_receiver_read', 'messages', ['receiver_id', 'is_read'], schema=SCHEMA)
    op.create_index('ix_messages_pair_created', 'messages', ['sender_id', 'receiver_id', 'created_at'], schema=SCHEMA)


def downgrade() -> None:
    op.drop_table('messages', schema=SCHEMA)
    op.drop_table('announcements', schema=SCHEMA)
    op.drop_table('applications', schema=SCHEMA)
    op.drop_table('job_openings', schema=SCHEMA)
    op.drop_table('agreement_tracker', schema=SCHEMA)
    op.drop_table('agreements', schema=SCHEMA)
    op.drop_table('training_tracker', schema=SCHEMA)
    op.drop_table('training_quizzes', schema=SCHEMA)
    op.drop_table('trainings', schema=SCHEMA)
    for table_name in reversed(SECURITY_LOG_TABLES):
        op.drop_table(table_name, schema=SCHEMA)
    op.drop_table('cctv_logs', schema=SCHEMA)
    op.drop_table('cctv_cameras', schema=SCHEMA)
    op.drop_table('task_comments', schema=SCHEMA)
    op.drop_table('task_subitems', schema=SCHEMA)
    op.drop_table('tasks', schema=SCHEMA)
    op.drop_table('payroll_invoices', schema=SCHEMA)
    op.drop_table('payroll_items', schema=SCHEMA)
    op.drop_table('payrolls', schema=SCHEMA)
    op.drop_table('time_off_requests', schema=SCHEMA)
    op.drop_table('shift_logs', schema=SCHEMA)
    op.drop_table('schedules', schema=SCHEMA)
    op.drop_table('audit_log', schema=SCHEMA)
    op.drop_table('user_sessions', schema=SCHEMA)
    op.drop_table('employees', schema=SCHEMA)
