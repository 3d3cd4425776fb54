"""create_redemptions_table

Revision ID: 3f1c9a7d2e54
Revises:
Create Date: 2026-10-18 10:12:31.448210

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2e54'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'redemptions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(32), nullable=False),
        sa.Column('status', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('quota', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('created_time', sa.BigInteger(), nullable=False),
        sa.Column('redeemed_time', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('used_user_id', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expired_time', sa.BigInteger(), nullable=False, server_default='0'),
    )
    op.create_index('ix_redemptions_user_id', 'redemptions', ['user_id'])
    op.create_index('ix_redemptions_key', 'redemptions', ['key'], unique=True)
    op.create_index('ix_redemptions_name', 'redemptions', ['name'])
    op.create_index('ix_redemptions_status_expired', 'redemptions', ['status', 'expired_time'])


def downgrade() -> None:
    op.drop_index('ix_redemptions_status_expired', table_name='redemptions')
    op.drop_index('ix_redemptions_name', table_name='redemptions')
    op.drop_index('ix_redemptions_key', table_name='redemptions')
    op.drop_index('ix_redemptions_user_id', table_name='redemptions')
    op.drop_table('redemptions')
