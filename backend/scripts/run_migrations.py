"""Apply the cognitive twin schema with Alembic once the database answers.

Deploys run this before starting the API so ``cognitive_twins`` and
``neural_insights`` exist before the first chat request is analyzed.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

LOGGER = logging.getLogger("samvaad.migrations")
BACKEND_ROOT = Path(__file__).resolve().parent.parent
URL_PLACEHOLDER = "%(SAMVAAD_DATABASE_URL)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upgrade the Samvaad schema with Alembic.")
    parser.add_argument("--revision", default=os.getenv("SAMVAAD_DB_MIGRATION_REVISION", "head"))
    parser.add_argument(
        "--timeout",
        type=int,
        default=int(os.getenv("SAMVAAD_DB_MIGRATION_TIMEOUT", "60")),
        help="Seconds to wait for the database before giving up.",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=float(os.getenv("SAMVAAD_DB_MIGRATION_POLL_INTERVAL", "3")),
    )
    parser.add_argument("--config", default=str(BACKEND_ROOT / "alembic.ini"))
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the known revisions and exit without touching the database.",
    )
    return parser.parse_args(argv)


def build_config(config_path: str) -> Config:
    config = Config(config_path)
    config.set_main_option("script_location", str(BACKEND_ROOT / "alembic"))
    return config


def resolve_database_url(config: Config) -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url and url != URL_PLACEHOLDER:
        return url
    env_url = os.getenv("SAMVAAD_DATABASE_URL")
    if not env_url:
        raise RuntimeError("SAMVAAD_DATABASE_URL must be set before running migrations.")
    config.set_main_option("sqlalchemy.url", env_url)
    return env_url


def known_revisions(config: Config) -> List[str]:
    script = ScriptDirectory.from_config(config)
    return [revision.revision for revision in script.walk_revisions()]


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    deadline = time.monotonic() + timeout
    engine = create_engine(database_url, future=True, pool_pre_ping=True)
    last_error: Optional[Exception] = None
    try:
        while True:
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                LOGGER.info("Database is accepting connections.")
                return
            except OperationalError as exc:
                last_error = exc
                LOGGER.warning("Database not reachable yet: %s", exc)
            except SQLAlchemyError as exc:
                last_error = exc
                LOGGER.error("Database check failed permanently: %s", exc)
                break
            if time.monotonic() >= deadline:
                break
            time.sleep(poll_interval)
    finally:
        engine.dispose()
    raise RuntimeError(f"Database was not ready within {timeout}s.") from last_error


def run_migrations(
    revision: str,
    *,
    timeout: int,
    poll_interval: float,
    config: Optional[Config] = None,
) -> None:
    config = config or build_config(str(BACKEND_ROOT / "alembic.ini"))
    database_url = resolve_database_url(config)
    LOGGER.info("Upgrading schema to %s", revision)
    wait_for_database(database_url, timeout=timeout, poll_interval=poll_interval)
    command.upgrade(config, revision)
    LOGGER.info("Schema is at %s.", revision)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=os.getenv("SAMVAAD_DB_MIGRATION_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args = parse_args(argv)
    config = build_config(args.config)
    if args.list:
        for revision in known_revisions(config):
            print(revision)
        return 0
    try:
        run_migrations(
            args.revision,
            timeout=args.timeout,
            poll_interval=args.poll_interval,
            config=config,
        )
    except (RuntimeError, SQLAlchemyError) as exc:
        LOGGER.exception("Migration run failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
