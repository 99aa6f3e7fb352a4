"""Initial schema - Create bins, drivers, routes and route stops

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-01-12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create bins table
    op.create_table(
        'bins',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('fill_level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('overflow', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('fill_level BETWEEN 0 AND 100', name='ck_bins_fill_level_range'),
    )

    # Create drivers table
    op.create_table(
        'drivers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('vehicle_number', sa.String(50), nullable=True),
        sa.Column('available', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        sa.Column('last_latitude', sa.Float(), nullable=True),
        sa.Column('last_longitude', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # Create collection_routes table
    op.create_table(
        'collection_routes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('driver_id', sa.Integer(), sa.ForeignKey('drivers.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('route_date', sa.Date(), nullable=False, index=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending', index=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('pending', 'assigned', 'in_progress', 'completed')",
            name='ck_collection_routes_status',
        ),
    )

    # Create route_stops association table
    op.create_table(
        'route_stops',
        sa.Column('route_id', sa.Integer(), sa.ForeignKey('collection_routes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('bin_id', sa.Integer(), sa.ForeignKey('bins.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('stop_order', sa.Integer(), nullable=False, server_default='0'),
    )

    # Create indexes for common queries
    op.create_index('ix_route_stops_bin_id', 'route_stops', ['bin_id'])
    op.create_index('ix_collection_routes_date_status', 'collection_routes', ['route_date', 'status'])


def downgrade() -> None:
    # Drop indexes
    op.drop_index('ix_collection_routes_date_status', table_name='collection_routes')
    op.drop_index('ix_route_stops_bin_id', table_name='route_stops')

    # Drop tables in reverse order (respecting foreign keys)
    op.drop_table('route_stops')
    op.drop_table('collection_routes')
    op.drop_table('drivers')
    op.drop_table('bins')
