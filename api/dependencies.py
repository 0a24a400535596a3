"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from fastapi import Request

from auth.credentials import CredentialService


class ServiceNotReady(Exception):
    """Start-up has not attached a credential service yet."""


def get_credential_service(request: Request) -> CredentialService:
    """Return the service the lifespan attached to ``app.state``."""
    service = getattr(request.app.state, "credential_service", None)
    if service is None:
        raise ServiceNotReady()
    return service
