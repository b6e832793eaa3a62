#!/usr/bin/env python3
"""Quick script to check that the competition tables exist in the database"""

import logging
import sys

from sqlalchemy import inspect

from tourney.database import engine

logger = logging.getLogger("check_migrations")

REQUIRED_TABLES = ["competition", "team", "competitionteam", "match", "feedback", "teamplayer"]


def missing_tables():
    """Names from REQUIRED_TABLES that the configured database lacks"""
    existing = set(inspect(engine).get_table_names())
    return [table for table in REQUIRED_TABLES if table not in existing]


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Database: %s", engine.url)
    missing = missing_tables()
    for table in REQUIRED_TABLES:
        logger.info("%s %s", "MISSING" if table in missing else "ok     ", table)
    if missing:
        logger.error("Missing tables detected. Run migrations with: alembic upgrade head")
        return 1
    logger.info("All required tables exist")
    return 0


if __name__ == "__main__":
    sys.exit(main())
