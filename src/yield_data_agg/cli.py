"""CLI entry points for one-off maintenance (table creation, a single sync cycle).

Usage:
  poetry run init-db
  poetry run sync-once
"""
import asyncio
import json
import logging
import sys

from yield_data_agg.config import Settings
from yield_data_agg.container import init_container


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def init_db() -> None:
    """Create all tables in DATABASE_URL."""
    settings = Settings.from_env()
    _configure_logging(settings)
    if not settings.database_url:
        print("DATABASE_URL is not set", file=sys.stderr)
        sys.exit(1)
    container = init_container(settings)
    container.database().init_db()
    container.database().dispose()


async def _sync_once(settings: Settings) -> int:
    container = init_container(settings)
    container.database().init_db()
    try:
        result = await container.scheduler().run_once()
    finally:
        await container.registry().close()
        container.database().dispose()
    if result is None:
        return 1
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0 if result.success else 1


def sync_once() -> None:
    """Run one fetch -> save -> history -> alerts cycle and print the result."""
    settings = Settings.from_env()
    _configure_logging(settings)
    sys.exit(asyncio.run(_sync_once(settings)))
