"""create system_config table

Revision ID: a1f3c2d4e5b6
Revises:
Create Date: 2026-10-19 09:12:44.180532

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1f3c2d4e5b6'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the system_config table holding per-channel surcharge settings."""
    conn = op.get_bind()
    inspector = sa.inspect(conn)

    # Databases created through init_db() already have it
    if 'system_config' in inspector.get_table_names():
        return

    op.create_table('system_config',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('configuration_key', sa.String(), nullable=False),
        sa.Column('sales_channel_id', sa.String(), nullable=True),
        sa.Column('configuration_value', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('configuration_key', 'sales_channel_id', name='uix_system_config_key_channel')
    )
    op.create_index(op.f('ix_system_config_id'), 'system_config', ['id'], unique=False)
    op.create_index(op.f('ix_system_config_configuration_key'), 'system_config', ['configuration_key'], unique=False)
    op.create_index(op.f('ix_system_config_sales_channel_id'), 'system_config', ['sales_channel_id'], unique=False)


def downgrade() -> None:
    """Drop the system_config table."""
    op.drop_index(op.f('ix_system_config_sales_channel_id'), table_name='system_config')
    op.drop_index(op.f('ix_system_config_configuration_key'), table_name='system_config')
    op.drop_index(op.f('ix_system_config_id'), table_name='system_config')
    op.drop_table('system_config')
