# tests/conftest.py
# Shared fixtures: a throwaway SQLite database per test, schema built from metadata.
# Environment is pinned before gistbot is imported so config never reads a developer .env.

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="gistbot-tests-")
os.environ["LOGS_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["DB_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "default.db")
os.environ.pop("EPHEMERAL_RETENTION_SECONDS", None)
os.environ.pop("TRACING_ENABLED", None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from gistbot.db.base import make_engine, make_session_factory, metadata  # noqa: E402
from gistbot.models import gist_table  # noqa: E402,F401
from gistbot.repositories.gist_repository import GistRepository  # noqa: E402


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'gists.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def repository(session_factory):
    return GistRepository(session_factory=session_factory)
