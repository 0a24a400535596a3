"""
Credential service — application entry point.
"""

from __future__ import annotations

import logging
import pathlib
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.auth import register_exception_handlers
from api.auth import router as auth_router
from api.middleware import register_middleware
from auth.credentials import CredentialPolicy, CredentialService
from auth.password import PasswordHasher
from config.settings import Settings, config
from database.schema import ensure_schema
from database.session import build_engine, build_session_factory
from database.users import UserStore

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("asyncio", "sqlalchemy.engine", "uvicorn.access"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    engine = build_engine(settings)
    try:
        # SchemaInitError propagates: no traffic without a verified table
        await ensure_schema(engine)

        hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
        await hasher.dummy_hash()
        app.state.credential_service = CredentialService(
            store=UserStore(build_session_factory(engine)),
            hasher=hasher,
            policy=CredentialPolicy.from_settings(settings),
        )
        logger.info("Application ready to accept requests.")
        yield
    finally:
        await engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or config
    app = FastAPI(
        title="Credential Service",
        version="1.0.0",
        description="User registration and password verification.",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api")

    @app.get("/healthz", tags=["health"])
    async def healthz():
        return {"status": "ok"}

    static_dir = pathlib.Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")

    return app


app = create_app()

if __name__ == "__main__":
    logger.info("Server starting on port %d...", config.port)
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
