"""
Authentication routes — register and login.

Route prefix: /api
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.dependencies import ServiceNotReady, get_credential_service
from auth.credentials import (
    AuthOutcome,
    CredentialService,
    CredentialStoreError,
    InvalidCredentialInput,
    UsernameTaken,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

MSG_BAD_INPUT = "username and password are required"
MSG_TAKEN = "username already exists"
MSG_REJECTED = "invalid username or password"
MSG_SERVER_ERROR = "internal server error"
MSG_NOT_READY = "service not ready"


class CredentialsRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    id: int
    username: str


class RegisterResponse(BaseModel):
    message: str
    user: UserOut


class MessageResponse(BaseModel):
    message: str


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
    responses={400: {"model": MessageResponse}, 409: {"model": MessageResponse}},
)
async def register(
    req: CredentialsRequest,
    service: CredentialService = Depends(get_credential_service),
) -> Any:
    """Register a new user. The password is never echoed back."""
    result = await service.register(req.username, req.password)
    if isinstance(result, UsernameTaken):
        return _message(status.HTTP_409_CONFLICT, MSG_TAKEN)
    return {
        "message": "registration successful",
        "user": {"id": result.id, "username": result.username},
    }


@router.post(
    "/login",
    response_model=MessageResponse,
    responses={400: {"model": MessageResponse}, 401: {"model": MessageResponse}},
)
async def login(
    req: CredentialsRequest,
    service: CredentialService = Depends(get_credential_service),
) -> Any:
    """Check a username/password pair. No token is issued."""
    outcome = await service.authenticate(req.username, req.password)
    if outcome is AuthOutcome.ACCEPTED:
        return {"message": "login successful"}
    return _message(status.HTTP_401_UNAUTHORIZED, MSG_REJECTED)


def register_exception_handlers(app: FastAPI) -> None:
    """Map credential errors onto status codes with fixed, detail-free bodies."""

    @app.exception_handler(InvalidCredentialInput)
    async def _bad_input(request: Request, exc: InvalidCredentialInput) -> JSONResponse:
        return _message(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected malformed body on %s: %s", request.url.path, exc.errors())
        return _message(status.HTTP_400_BAD_REQUEST, MSG_BAD_INPUT)

    @app.exception_handler(CredentialStoreError)
    async def _store_failure(request: Request, exc: CredentialStoreError) -> JSONResponse:
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_SERVER_ERROR)

    @app.exception_handler(ServiceNotReady)
    async def _not_ready(request: Request, exc: ServiceNotReady) -> JSONResponse:
        return _message(status.HTTP_503_SERVICE_UNAVAILABLE, MSG_NOT_READY)
