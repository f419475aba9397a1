# gistbot/jobs/purge.py
# One-shot sweep that removes ephemeral gists older than the configured retention.
# Scheduling is external: run `gistbot-purge` from cron, a systemd timer or a k8s CronJob.

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from contextlib import aclosing
from typing import Any, Optional

from opentelemetry import trace

from gistbot import config
from gistbot.config import settings
from gistbot.db.base import async_engine
from gistbot.errors import ConfigurationError, DatabaseError
from gistbot.observability.logger import configure_logging
from gistbot.observability.metrics import PURGED
from gistbot.observability.tracing import init_tracing
from gistbot.repositories.gist_repository import GistRepository
from gistbot.utils.logger import log_exception, log_info

logger = logging.getLogger(__name__)


async def purge_expired_gists(
    repository: Optional[GistRepository] = None,
    now: Optional[int] = None,
    retention_seconds: Optional[int] = None,
    dry_run: bool = False,
) -> dict[str, Any]:
    """Delete ephemeral gists sent before now - retention_seconds.

    With dry_run the candidates are only listed. Raises ConfigurationError
    when no retention is configured.
    """
    retention = retention_seconds if retention_seconds is not None else settings.EPHEMERAL_RETENTION_SECONDS
    if retention is None:
        raise ConfigurationError(
            "EPHEMERAL_RETENTION_SECONDS is not set; refusing to purge",
            details={"setting": "EPHEMERAL_RETENTION_SECONDS"},
        )
    if retention <= 0:
        raise ConfigurationError(
            "Retention must be positive",
            details={"setting": "EPHEMERAL_RETENTION_SECONDS", "value": retention},
        )

    if now is None:
        now = int(time.time())
    older_than = now - retention
    repo = repository or GistRepository()
    tracer = trace.get_tracer("purge")

    with tracer.start_as_current_span("purge_expired_gists"):
        if dry_run:
            async with aclosing(repo.list_expired_ephemeral(older_than)) as listing:
                candidates = [g.id async for g in listing]
            log_info(f"purge: dry run, {len(candidates)} candidates older_than={older_than}")
            return {"older_than": older_than, "removed": 0, "candidates": candidates}

        removed = await repo.delete_expired_ephemeral(older_than)

    PURGED.inc(removed)
    log_info(f"purge: removed={removed} older_than={older_than} retention={retention}")
    return {"older_than": older_than, "removed": removed}


async def run(dry_run: bool = False) -> int:
    """Run one sweep against the configured database; return the process exit code."""
    configure_logging(config)
    init_tracing(settings, engine=async_engine)
    try:
        result = await purge_expired_gists(dry_run=dry_run)
    except (ConfigurationError, DatabaseError) as e:
        log_exception(e, "purge")
        logger.error(e.message, extra={"error_code": e.error_code})
        return 1
    finally:
        await async_engine.dispose()

    logger.info("purge finished", extra=result)
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="gistbot-purge",
        description="Delete ephemeral gists older than EPHEMERAL_RETENTION_SECONDS.",
    )
    parser.add_argument("--dry-run", action="store_true", help="list candidates without deleting")
    args = parser.parse_args(argv)
    sys.exit(asyncio.run(run(dry_run=args.dry_run)))


if __name__ == "__main__":
    main()
