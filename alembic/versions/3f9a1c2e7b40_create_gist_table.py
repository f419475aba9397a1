"""create gist table and ephemeral partial index

Revision ID: 3f9a1c2e7b40
Revises: 
Create Date: 2023-06-13 07:55:44.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a1c2e7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'gist',
        sa.Column('id', sa.Text(), nullable=False),  # short alphanumeric identifier
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('sent_by', sa.BigInteger(), nullable=False),  # messaging platform user id
        sa.Column('sent_at_unix_time', sa.BigInteger(), nullable=False),
        sa.Column('language', sa.Text(), nullable=True),  # null if not provided
        sa.Column('is_ephemeral', sa.Boolean(), nullable=False),  # 0 or 1 on SQLite
        sa.PrimaryKeyConstraint('id'),
    )

    # Partial index: only ephemeral rows, so the purge sweep never scans permanent gists
    ephemeral_only = sa.column('is_ephemeral', sa.Boolean()) == sa.true()
    op.create_index(
        'gist_create_time',
        'gist',
        ['is_ephemeral', 'sent_at_unix_time'],
        unique=False,
        postgresql_where=ephemeral_only,
        sqlite_where=ephemeral_only,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('gist_create_time', table_name='gist')
    op.drop_table('gist')
