"""initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create poker_sessions table (one row per session, partitioned by sync key)
    op.create_table('poker_sessions',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_key', sa.String(length=255), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_poker_sessions_user_key'), 'poker_sessions', ['user_key'], unique=False)
    op.create_index(op.f('ix_poker_sessions_created_at'), 'poker_sessions', ['created_at'], unique=False)

    # Create player_avatars table
    op.create_table('player_avatars',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_key', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('avatar', sa.String(length=16), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_key', 'name', name='uq_player_avatar_user_key_name')
    )
    op.create_index(op.f('ix_player_avatars_user_key'), 'player_avatars', ['user_key'], unique=False)


def downgrade() -> None:
    op.drop_table('player_avatars')
    op.drop_table('poker_sessions')
