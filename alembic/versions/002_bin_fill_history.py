"""Add bin fill history log

Revision ID: 002_bin_fill_history
Revises: 001_initial_schema
Create Date: 2026-01-20

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002_bin_fill_history'
down_revision: Union[str, None] = '001_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'bin_fill_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('bin_id', sa.Integer(), sa.ForeignKey('bins.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('fill_level', sa.Integer(), nullable=False),
        sa.Column('overflow', sa.Boolean(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    op.drop_table('bin_fill_history')
