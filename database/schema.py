"""
Schema bootstrap — make sure the ``users`` table exists before serving.

Uses the store's own ``CREATE TABLE IF NOT EXISTS`` rather than an
inspect-then-create round trip, so two processes starting together cannot
both decide the table is missing.
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import CreateTable

from database.models import User

logger = logging.getLogger(__name__)

# Arbitrary 64-bit key; only needs to be stable across processes of this service.
SCHEMA_LOCK_KEY = 0x7573657273  # "users"


class SchemaInitError(RuntimeError):
    """The user table could not be verified or created. Fatal at start-up."""


def create_users_table() -> CreateTable:
    return CreateTable(User.__table__, if_not_exists=True)


async def ensure_schema(engine: AsyncEngine) -> None:
    """Create the ``users`` table if absent. Safe to call on every start."""
    try:
        async with engine.begin() as conn:
            if conn.dialect.name == "postgresql":
                # IF NOT EXISTS can still race on pg_type under concurrent DDL
                await conn.execute(
                    text("SELECT pg_advisory_xact_lock(:key)"),
                    {"key": SCHEMA_LOCK_KEY},
                )
            await conn.execute(create_users_table())
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Database initialisation failed: %s", exc)
        raise SchemaInitError("could not ensure the users table exists") from exc

    logger.info('Database table "%s" is ready.', User.__tablename__)
