# gistbot/models/gist_table.py
# Table of user-submitted snippets plus the partial index for purge discovery

from sqlalchemy import Table, Column, BigInteger, Boolean, Text, Index, true

from gistbot.db.base import metadata


gist = Table(
    'gist',
    metadata,
    Column('id', Text, primary_key=True),  # short alphanumeric identifier
    Column('content', Text, nullable=False),
    Column('sent_by', BigInteger, nullable=False),  # messaging platform user id
    Column('sent_at_unix_time', BigInteger, nullable=False),
    Column('language', Text, nullable=True),  # null if not provided
    Column('is_ephemeral', Boolean, nullable=False),  # 0/1 on SQLite
)

# Only ephemeral rows are indexed; this is what the purge sweep scans.
EPHEMERAL_ONLY = gist.c.is_ephemeral == true()

gist_create_time = Index(
    'gist_create_time',
    gist.c.is_ephemeral,
    gist.c.sent_at_unix_time,
    postgresql_where=EPHEMERAL_ONLY,
    sqlite_where=EPHEMERAL_ONLY,
)
