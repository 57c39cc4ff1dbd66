"""initial schema: employees, overrides, attendance, leave, adjustments, kasbon, outlet

Revision ID: 4f1a9c2e7b10
Revises:
Create Date: 2025-11-10 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1a9c2e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('username', sa.String(60), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('base_monthly_salary', sa.Numeric(14, 2), nullable=True),
        sa.Column('monthly_meal_allowance', sa.Numeric(14, 2), nullable=True),
        sa.Column('explicit_daily_deduction_rate', sa.Numeric(14, 2), nullable=True),
        sa.Column('payroll_method', sa.String(16), nullable=False, server_default='DAILY_30'),
        sa.Column('cash_advance_balance', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'pay_overrides',
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('flat_period_base', sa.Numeric(14, 2), nullable=True),
        sa.Column('within_quota_charge', sa.Numeric(14, 2), nullable=True),
        sa.Column('over_quota_charge', sa.Numeric(14, 2), nullable=True),
        sa.Column('free_leave_quota', sa.Integer(), nullable=True),
        sa.Column('label', sa.String(120), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'leave_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='PENDING'),
        sa.Column('evidence_photo_url', sa.String(500), nullable=True),
        sa.Column('decided_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_leave_requests_employee_id', 'leave_requests', ['employee_id'])
    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('clock_in_time', sa.Time(), nullable=True),
        sa.Column('clock_out_time', sa.Time(), nullable=True),
        sa.Column('is_late', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(16), nullable=False, server_default='PRESENT'),
        sa.Column('linked_leave_request_id', sa.Integer(),
                  sa.ForeignKey('leave_requests.id', ondelete='SET NULL'), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_attendance_records_employee_id', 'attendance_records', ['employee_id'])
    op.create_index('ix_attendance_records_linked_leave_request_id', 'attendance_records', ['linked_leave_request_id'])
    op.create_index('ix_attendance_emp_date', 'attendance_records', ['employee_id', 'date'])
    op.create_table(
        'payroll_adjustments',
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('bonus', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('manual_deduction', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'cash_advance_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('delta', sa.Numeric(14, 2), nullable=False),
        sa.Column('balance_after', sa.Numeric(14, 2), nullable=False),
        sa.Column('note', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_cash_advance_entries_employee_id', 'cash_advance_entries', ['employee_id'])
    op.create_table(
        'outlet_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('radius_m', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('clock_in_time', sa.Time(), nullable=False),
        sa.Column('clock_out_time', sa.Time(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    for table in ('outlet_config', 'cash_advance_entries', 'payroll_adjustments',
                  'attendance_records', 'leave_requests', 'pay_overrides', 'employees'):
        op.drop_table(table)
