# tests/unit/test_schema.py
# Table, partial index and migration checks

import os
import sqlite3

import pytest
from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
from sqlalchemy import BigInteger, Boolean, Text, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateIndex

from gistbot.models.gist_table import gist, gist_create_time
from gistbot.repositories.gist_repository import expired_ephemeral_query

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class TestGistTable:
    """Column set and nullability."""

    def test_columns(self):
        cols = {c.name: c for c in gist.columns}
        assert list(cols) == ["id", "content", "sent_by", "sent_at_unix_time", "language", "is_ephemeral"]
        assert isinstance(cols["id"].type, Text)
        assert isinstance(cols["content"].type, Text)
        assert isinstance(cols["sent_by"].type, BigInteger)
        assert isinstance(cols["sent_at_unix_time"].type, BigInteger)
        assert isinstance(cols["language"].type, Text)
        assert isinstance(cols["is_ephemeral"].type, Boolean)

    def test_nullability(self):
        nullable = {c.name for c in gist.columns if c.nullable}
        assert nullable == {"language"}

    def test_primary_key(self):
        assert [c.name for c in gist.primary_key.columns] == ["id"]


class TestPartialIndex:
    """gist_create_time covers only ephemeral rows."""

    def test_index_columns(self):
        assert [c.name for c in gist_create_time.columns] == ["is_ephemeral", "sent_at_unix_time"]
        assert gist_create_time.table is gist

    def test_sqlite_ddl_has_predicate(self):
        ddl = str(CreateIndex(gist_create_time).compile(dialect=sqlite.dialect()))
        assert "gist_create_time" in ddl
        assert "WHERE is_ephemeral = 1" in ddl

    def test_postgresql_ddl_has_predicate(self):
        ddl = str(CreateIndex(gist_create_time).compile(dialect=postgresql.dialect()))
        assert "where is_ephemeral = true" in ddl.lower()

    @pytest.mark.asyncio
    async def test_expired_query_uses_partial_index(self, session_factory):
        stmt = expired_ephemeral_query(1000)
        compiled = str(stmt.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))

        async with session_factory() as session:
            plan = (await session.execute(text("EXPLAIN QUERY PLAN " + compiled))).all()

        details = " ".join(str(row[-1]) for row in plan)
        assert "gist_create_time" in details


class TestMigration:
    """The Alembic revision builds the same objects as the metadata."""

    @pytest.fixture
    def migrated_db(self, tmp_path):
        db_path = tmp_path / "migrated.db"
        cfg = AlembicConfig(os.path.join(REPO_ROOT, "alembic.ini"))
        cfg.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")
        alembic_command.upgrade(cfg, "head")
        return cfg, db_path

    def test_upgrade_creates_table_and_index(self, migrated_db):
        _, db_path = migrated_db
        with sqlite3.connect(db_path) as conn:
            cols = {row[1]: row for row in conn.execute("PRAGMA table_info(gist)")}
            index_sql = conn.execute(
                "SELECT sql FROM sqlite_master WHERE type = 'index' AND name = 'gist_create_time'"
            ).fetchone()

        assert set(cols) == {"id", "content", "sent_by", "sent_at_unix_time", "language", "is_ephemeral"}
        # PRAGMA table_info: (cid, name, type, notnull, default, pk)
        assert {name for name, row in cols.items() if row[3] == 0 and row[5] == 0} == {"language"}
        assert cols["id"][5] == 1
        assert index_sql is not None
        assert "WHERE is_ephemeral = 1" in index_sql[0]

    def test_downgrade_drops_everything(self, migrated_db):
        cfg, db_path = migrated_db
        alembic_command.downgrade(cfg, "base")
        with sqlite3.connect(db_path) as conn:
            names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE name LIKE 'gist%'")}
        assert names == set()
