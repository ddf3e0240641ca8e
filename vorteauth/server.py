"""FastAPI surface for the Vorte WebAuthn challenge service."""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Dict, Optional

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import VorteSettings
from .constants import API_PREFIX, FINGERPRINT_HEADER
from .errors import RateLimited, VorteAuthError
from .service import ChallengeService
from .transactions import Transaction

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = r"^[A-Za-z0-9_-]{16,}$"
_RATE_LIMIT_HEADERS = ["RateLimit-Limit", "RateLimit-Remaining", "RateLimit-Reset", "Retry-After"]


class ChallengeOptions(BaseModel):
    challenge: str
    rpId: str
    userVerification: str
    timeout: int


class ChallengeResult(BaseModel):
    transactionId: str
    options: ChallengeOptions


class ChallengeResponse(BaseModel):
    success: bool
    result: ChallengeResult


class CredentialResponse(BaseModel):
    clientDataJSON: str = Field(pattern=_TOKEN_PATTERN)
    attestationObject: str = Field(pattern=_TOKEN_PATTERN)


class Credential(BaseModel):
    id: str = Field(pattern=_TOKEN_PATTERN)
    response: CredentialResponse


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transaction_id: uuid.UUID = Field(alias="transactionId")
    credential: Credential


class ErrorResponse(BaseModel):
    success: bool
    error: str


# Attestation checking lives outside this service; it receives the consumed
# transaction and the submitted credential and returns the response result.
CredentialVerifier = Callable[[Transaction, Credential], Dict[str, object]]


def _error_response(exc: VorteAuthError, settings: VorteSettings) -> JSONResponse:
    headers: Dict[str, str] = {}
    if isinstance(exc, RateLimited):
        headers = {
            "RateLimit-Limit": settings.rate_limit_policy,
            "RateLimit-Remaining": "0",
            "RateLimit-Reset": str(exc.retry_after),
            "Retry-After": str(exc.retry_after),
        }
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def create_app(
    settings: Optional[VorteSettings] = None,
    *,
    service: Optional[ChallengeService] = None,
    verifier: Optional[CredentialVerifier] = None,
) -> FastAPI:
    if settings is None:
        settings = service.settings if service is not None else VorteSettings()
    if service is None:
        service = ChallengeService(settings)

    app = FastAPI(
        title="Vorte Credentials API",
        description="Public WebAuthn credential API for Vorte ERP",
        docs_url=f"{API_PREFIX}/webauthn/docs",
        openapi_url=f"{API_PREFIX}/webauthn/openapi.json",
        redoc_url=None,
    )
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(service.gate.allowed),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", FINGERPRINT_HEADER],
        expose_headers=_RATE_LIMIT_HEADERS + ["Cache-Control"],
        max_age=600,
    )

    @app.exception_handler(VorteAuthError)
    async def _handle_auth_error(request: Request, exc: VorteAuthError) -> JSONResponse:
        return _error_response(exc, settings)

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid or missing fields"},
        )

    @app.get(
        f"{API_PREFIX}/webauthn/challenge",
        response_model=ChallengeResponse,
        responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
        tags=["WebAuthn"],
        summary="Return a transactionId and options to start a discoverable WebAuthn ceremony.",
    )
    async def challenge(
        request: Request,
        x_fingerprint: Optional[str] = Header(default=None),
        origin: Optional[str] = Header(default=None),
    ) -> JSONResponse:
        host = request.headers.get("host") or request.url.hostname or ""
        grant = service.request_challenge(host=host, fingerprint=x_fingerprint, origin=origin)
        return JSONResponse(
            content=grant.to_dict(),
            headers={
                "Cache-Control": "no-store",
                "Vary": FINGERPRINT_HEADER,
                "RateLimit-Limit": grant.limit,
                "RateLimit-Remaining": str(grant.remaining),
                "RateLimit-Reset": str(grant.reset),
            },
        )

    @app.post(
        f"{API_PREFIX}/webauthn/register",
        status_code=201,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 501: {"model": ErrorResponse}},
        tags=["WebAuthn"],
        summary="Finalize WebAuthn credential registration",
    )
    async def register(body: RegisterRequest) -> JSONResponse:
        transaction = service.complete_registration(str(body.transaction_id))
        if verifier is None:
            logger.error("Registration for %s received but no verifier is configured", transaction.transaction_id)
            return JSONResponse(
                status_code=501,
                content={"success": False, "error": "Credential verification is not enabled"},
            )
        result = verifier(transaction, body.credential)
        return JSONResponse(status_code=201, content={"success": True, "result": result})

    return app


app = create_app()


__all__ = ["Credential", "CredentialVerifier", "RegisterRequest", "app", "create_app"]
