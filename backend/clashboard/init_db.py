"""Database initialization script.

Creates the ``core`` schema and every table defined by the ORM models.
"""

import asyncio
import sys
from typing import NoReturn

import structlog
from sqlalchemy.exc import SQLAlchemyError

from clashboard.core import Base, db_manager

# Register ORM models on Base.metadata
from clashboard.features.battles.orm_models import BattleORM  # noqa: F401
from clashboard.features.goals.orm_models import GoalORM  # noqa: F401

logger = structlog.get_logger(__name__)


async def init_db() -> None:
    """Create the schema and all tables.

    Raises:
        SQLAlchemyError: If database connection or table creation fails
    """
    logger.info("database_init_started", database_url=db_manager.redacted_url)
    try:
        table_names = await db_manager.create_tables()
    except SQLAlchemyError as e:
        logger.error("database_init_failed", error=str(e), error_type=type(e).__name__)
        raise
    logger.info(
        "database_init_completed",
        tables_created=len(table_names),
        table_names=table_names,
    )


async def drop_all_tables() -> None:
    """Drop all tables from the database.

    WARNING: This is destructive and will delete all data!
    """
    logger.warning("database_drop_started", tables=list(Base.metadata.tables.keys()))
    try:
        await db_manager.drop_tables()
    except SQLAlchemyError as e:
        logger.error("database_drop_failed", error=str(e), error_type=type(e).__name__)
        raise
    logger.info("database_drop_completed")


async def reset_db() -> None:
    """Drop and recreate all tables."""
    await drop_all_tables()
    await init_db()


COMMANDS = {"init": init_db, "drop": drop_all_tables, "reset": reset_db}


async def run(command: str) -> None:
    """Run one command, then release the connection pool."""
    try:
        await COMMANDS[command]()
    finally:
        await db_manager.close()


def main() -> NoReturn:
    """Run CLI for database initialization commands.

    Usage:
        clashboard-init-db [init|drop|reset]
    """
    command = sys.argv[1] if len(sys.argv) > 1 else "init"
    if command not in COMMANDS:
        logger.error("unknown_command", command=command, allowed=sorted(COMMANDS))
        print("Usage: clashboard-init-db [init|drop|reset]")
        sys.exit(1)

    asyncio.run(run(command))
    sys.exit(0)


if __name__ == "__main__":
    main()
