"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create initial database schema:
    - users table: registered accounts
    - short_urls table: URL shortening mappings owned by users
    """
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'short_urls',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('short_code', sa.String(length=10), nullable=False),
        sa.Column('long_url', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_short_urls_short_code', 'short_urls', ['short_code'], unique=True)
    op.create_index('ix_short_urls_created_at', 'short_urls', ['created_at'])
    op.create_index('ix_short_urls_owner_id', 'short_urls', ['owner_id'])


def downgrade() -> None:
    """
    Drop all tables and indexes.
    """
    op.drop_index('ix_short_urls_owner_id', table_name='short_urls')
    op.drop_index('ix_short_urls_created_at', table_name='short_urls')
    op.drop_index('ix_short_urls_short_code', table_name='short_urls')
    op.drop_table('short_urls')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
