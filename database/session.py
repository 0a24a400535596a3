"""
Async SQLAlchemy engine and session factory for PostgreSQL.

Nothing here is created at import time: the entry point builds one engine
per process and hands the session factory to the components that need it.
"""

from __future__ import annotations

import ssl
from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import Settings


def _connect_args(settings: Settings) -> Dict[str, Any]:
    if settings.database_ssl == "require":
        return {"ssl": ssl.create_default_context()}
    if settings.database_ssl == "no-verify":
        # TLS on the wire, but accept the self-signed certs hosted databases use
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        return {"ssl": ctx}
    return {}


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the pooled engine shared by the schema initializer and the user store."""
    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_recycle=settings.pool_recycle,
        pool_timeout=settings.pool_timeout,
        pool_pre_ping=True,
        connect_args=_connect_args(settings),
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
