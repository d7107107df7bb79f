"""create user, session and timer tables

Revision ID: 5c2a9e71d0b4
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9e71d0b4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'session',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('created_at', sa.Float(), nullable=False),
    )
    op.create_index('ix_session_token', 'session', ['token'], unique=True)
    op.create_index('ix_session_user_id', 'session', ['user_id'])

    op.create_table(
        'timer',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_username', sa.String(length=64), nullable=False),
        sa.Column('start', sa.BigInteger(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('progress', sa.BigInteger(), nullable=False),
        sa.Column('end', sa.BigInteger(), nullable=True),
        sa.Column('duration', sa.BigInteger(), nullable=True),
    )
    op.create_index('ix_timer_owner_username', 'timer', ['owner_username'])
    op.create_index('ix_timer_is_active', 'timer', ['is_active'])


def downgrade():
    op.drop_index('ix_timer_is_active', table_name='timer')
    op.drop_index('ix_timer_owner_username', table_name='timer')
    op.drop_table('timer')
    op.drop_index('ix_session_user_id', table_name='session')
    op.drop_index('ix_session_token', table_name='session')
    op.drop_table('session')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
