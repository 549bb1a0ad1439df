"""Seed default data

Revision ID: 002
Revises: 001
Create Date: 2025-01-01 00:01:00.000000

This migration seeds:
- Bootstrap admin account (no password; set one with
  `python -m scripts.db_manage setpassword`)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.sql import table, column
from datetime import datetime

from portal.config import get_settings

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Get schema from config
settings = get_settings()
SCHEMA = settings.db_schema


employees = table(
    'employees',
    column('employee_id', sa.Integer),
    column('email', sa.String),
    column('full_name', sa.String),
    column('role', sa.String),
    column('is_active', sa.Boolean),
    column('employee_type', sa.String),
    column('shirt_size', sa.String),
    column('hoodie_size', sa.String),
    column('wecard_certified', sa.Boolean),
    column('created_at', sa.DateTime),
    schema=SCHEMA,
)


def upgrade() -> None:
    op.bulk_insert(
        employees,
        [
            {
                'email': settings.bootstrap_admin_email.lower(),
                'full_name': settings.bootstrap_admin_name,
                'role': 'admin',
                'is_active': True,
                'employee_type': 'VA',
                'shirt_size': 'XXS',
                'hoodie_size': 'XXS',
                'wecard_certified': False,
                'created_at': datetime.utcnow(),
            },
        ],
    )


def downgrade() -> None:
    prefix = f'{SCHEMA}.' if SCHEMA else ''
    op.execute(
        sa.text(f"DELETE FROM {prefix}employees WHERE email = :email").bindparams(
            email=settings.bootstrap_admin_email.lower()
        )
    )
