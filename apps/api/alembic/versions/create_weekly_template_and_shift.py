"""create shift_weekly_template and shift

Revision ID: create_roster_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_roster_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _staffing_columns():
    return [
        sa.Column('two_person_work_flg', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('judo_ido', sa.Text(), nullable=True),
        sa.Column('staff_01_user_id', sa.Text(), nullable=True),
        sa.Column('staff_02_user_id', sa.Text(), nullable=True),
        sa.Column('staff_03_user_id', sa.Text(), nullable=True),
        sa.Column('staff_02_attend_flg', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('staff_03_attend_flg', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('staff_01_role_code', sa.Text(), nullable=True),
        sa.Column('staff_02_role_code', sa.Text(), nullable=True),
        sa.Column('staff_03_role_code', sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'shift_weekly_template',
        sa.Column('template_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('client_id', sa.Text(), nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('required_staff_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('service_code', sa.Text(), nullable=False),
        *_staffing_columns(),
        sa.Column('nth_weeks', sa.JSON(), nullable=True),
        sa.Column('is_biweekly', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('effective_from', sa.Date(), nullable=True),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint('client_id', 'weekday', 'start_time', 'required_staff_count', name='uq_weekly_template_slot'),
    )
    op.create_index('ix_shift_weekly_template_client_id', 'shift_weekly_template', ['client_id'])

    op.create_table(
        'shift',
        sa.Column('shift_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('client_id', sa.Text(), nullable=False),
        sa.Column('shift_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('required_staff_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('service_code', sa.Text(), nullable=True),
        *_staffing_columns(),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_shift_client_id', 'shift', ['client_id'])
    op.create_index('ix_shift_shift_date', 'shift', ['shift_date'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_shift_shift_date', table_name='shift')
    op.drop_index('ix_shift_client_id', table_name='shift')
    op.drop_table('shift')
    op.drop_index('ix_shift_weekly_template_client_id', table_name='shift_weekly_template')
    op.drop_table('shift_weekly_template')
