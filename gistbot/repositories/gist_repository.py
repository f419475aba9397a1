# gistbot/repositories/gist_repository.py
# Repository for gist persistence: create, lookup, delete and expired-ephemeral discovery

from __future__ import annotations

import secrets
import string
import time
from typing import Any, AsyncIterator, Callable, Mapping, Optional

import pydantic
from sqlalchemy import Select, delete, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gistbot.config import settings
from gistbot.db.base import AsyncSessionFactory
from gistbot.errors import ConflictError, DatabaseError, NotFoundError, ValidationError
from gistbot.models.gist_table import EPHEMERAL_ONLY, gist
from gistbot.observability.metrics import record_operation
from gistbot.schemas.gist import Gist
from gistbot.utils.logger import log_exception, log_info


def generate_gist_id(length: int = 8) -> str:
    """Generate a short alphanumeric gist id."""
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def _to_row(g: Gist) -> dict[str, Any]:
    # is_ephemeral crosses the boundary as a real bool; the dialect stores it (0/1 on SQLite)
    return {
        "id": g.id,
        "content": g.content,
        "sent_by": g.sent_by,
        "sent_at_unix_time": g.sent_at_unix_time,
        "language": g.language,
        "is_ephemeral": bool(g.is_ephemeral),
    }


def _from_row(row: Mapping[str, Any]) -> Gist:
    # Stored rows already satisfied the constraints; skip re-validation.
    return Gist.model_construct(
        id=row["id"],
        content=row["content"],
        sent_by=int(row["sent_by"]),
        sent_at_unix_time=int(row["sent_at_unix_time"]),
        language=row["language"],
        is_ephemeral=bool(row["is_ephemeral"]),
    )


def expired_ephemeral_query(older_than: int, limit: Optional[int] = None) -> Select:
    """SELECT for ephemeral gists sent before older_than, oldest first.

    The WHERE clause repeats the partial index predicate verbatim so the
    planner can use gist_create_time for it.
    """
    stmt = (
        select(gist)
        .where(EPHEMERAL_ONLY, gist.c.sent_at_unix_time < older_than)
        .order_by(gist.c.sent_at_unix_time.asc(), gist.c.id.asc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


def _validate(**fields: Any) -> Gist:
    try:
        return Gist(**fields)
    except pydantic.ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError("Invalid gist", details={"errors": errors}) from e


class GistRepository:
    """Repository for gist persistence.

    Gists are immutable: there is no update path, only create and delete.
    Every call runs in its own session and transaction.
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        id_factory: Callable[[int], str] = generate_gist_id,
        id_length: Optional[int] = None,
        max_id_attempts: Optional[int] = None,
    ):
        self._session_factory = session_factory or AsyncSessionFactory
        self._id_factory = id_factory
        self._id_length = id_length or settings.GIST_ID_LENGTH
        self._max_id_attempts = max_id_attempts or settings.GIST_ID_MAX_ATTEMPTS

    async def create(
        self,
        gist_id: str,
        content: str,
        sent_by: int,
        sent_at_unix_time: int,
        language: Optional[str],
        is_ephemeral: bool,
    ) -> Gist:
        """Insert a new gist.

        Raises ValidationError before touching the database if a field is
        missing or malformed, and ConflictError if the id is taken. An
        existing row is never overwritten.
        """
        new_gist = _validate(
            id=gist_id,
            content=content,
            sent_by=sent_by,
            sent_at_unix_time=sent_at_unix_time,
            language=language,
            is_ephemeral=is_ephemeral,
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(insert(gist).values(**_to_row(new_gist)))
        except IntegrityError as e:
            record_operation("create", "conflict")
            log_info(f"GistRepository: id collision id={gist_id}")
            raise ConflictError(details={"id": gist_id}) from e
        except SQLAlchemyError as e:
            record_operation("create", "error")
            log_exception(e, "GistRepository.create")
            raise DatabaseError(details={"operation": "create"}) from e

        record_operation("create")
        log_info(f"GistRepository: created gist id={new_gist.id} ephemeral={new_gist.is_ephemeral}")
        return new_gist

    async def save(
        self,
        content: str,
        sent_by: int,
        language: Optional[str] = None,
        is_ephemeral: bool = False,
        sent_at_unix_time: Optional[int] = None,
    ) -> Gist:
        """Create a gist under a freshly generated id, stamped with the current time.

        A colliding id is redrawn up to max_id_attempts times; the last
        ConflictError propagates.
        """
        if sent_at_unix_time is None:
            sent_at_unix_time = int(time.time())

        attempt = 1
        while True:
            gist_id = self._id_factory(self._id_length)
            try:
                return await self.create(
                    gist_id, content, sent_by, sent_at_unix_time, language, is_ephemeral
                )
            except ConflictError:
                if attempt >= self._max_id_attempts:
                    raise
                attempt += 1

    async def get_by_id(self, gist_id: str) -> Gist:
        """Load a gist by id. Raises NotFoundError if absent."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(gist).where(gist.c.id == gist_id))
                row = result.mappings().first()
        except SQLAlchemyError as e:
            record_operation("get", "error")
            log_exception(e, "GistRepository.get_by_id")
            raise DatabaseError(details={"operation": "get"}) from e

        if row is None:
            record_operation("get", "not_found")
            raise NotFoundError(details={"id": gist_id})
        record_operation("get")
        return _from_row(row)

    async def list_expired_ephemeral(
        self, older_than: int, limit: Optional[int] = None
    ) -> AsyncIterator[Gist]:
        """Yield ephemeral gists sent strictly before older_than, oldest first.

        Rows are streamed from a single statement inside one transaction, so
        the sequence is a point-in-time snapshot. Call again to iterate again.
        """
        stmt = expired_ephemeral_query(older_than, limit)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.stream(stmt)
                    async for row in result.mappings():
                        yield _from_row(row)
        except SQLAlchemyError as e:
            record_operation("list_expired", "error")
            log_exception(e, "GistRepository.list_expired_ephemeral")
            raise DatabaseError(details={"operation": "list_expired"}) from e
        record_operation("list_expired")

    async def delete(self, gist_id: str) -> bool:
        """Delete a gist by id. Idempotent: returns False if nothing was removed."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(delete(gist).where(gist.c.id == gist_id))
                    removed = (result.rowcount or 0) > 0
        except SQLAlchemyError as e:
            record_operation("delete", "error")
            log_exception(e, "GistRepository.delete")
            raise DatabaseError(details={"operation": "delete"}) from e

        record_operation("delete", "ok" if removed else "absent")
        if removed:
            log_info(f"GistRepository: deleted gist id={gist_id}")
        return removed

    async def delete_expired_ephemeral(self, older_than: int) -> int:
        """Delete every ephemeral gist sent strictly before older_than; return the count.

        Uses the same predicate as list_expired_ephemeral so the partial
        index serves the scan.
        """
        stmt = delete(gist).where(EPHEMERAL_ONLY, gist.c.sent_at_unix_time < older_than)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    removed = result.rowcount or 0
        except SQLAlchemyError as e:
            record_operation("delete_expired", "error")
            log_exception(e, "GistRepository.delete_expired_ephemeral")
            raise DatabaseError(details={"operation": "delete_expired"}) from e

        record_operation("delete_expired")
        log_info(f"GistRepository: deleted {removed} expired ephemeral gists older_than={older_than}")
        return removed
