"""create_sync_service

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:12:41.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('sync_service'):
        op.create_table('sync_service',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('last_sync_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('batch_size', sa.Integer(), nullable=False, server_default='1000'),
        sa.Column('failed_items', sa.Text(), nullable=False, server_default=''),
        sa.Column('synced_items', sa.Text(), nullable=False, server_default=''),
        sa.PrimaryKeyConstraint('id')
        )


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table('sync_service'):
        op.drop_table('sync_service')
