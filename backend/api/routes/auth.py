"""
Authentication endpoints.

Round trip start, redirect handoff, long-lived credential issuance and
public key retrieval.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse

from modules.credentials.interfaces import ICredentialService
from modules.credentials.models import (
    LongLivedCredential,
    LongLivedCredentialRequest,
    PublicKeyResponse,
)
from providers import UnknownProviderError
from shared.config import Settings
from shared.exceptions import BridgeError

from ..dependencies import get_auth_flow_service, get_container, get_credential_service
from ..models.errors import ErrorResponse
from ..services.auth_flow import AuthFlowService
from ..session import load_session, save_session

logger = logging.getLogger(__name__)

router = APIRouter()


def get_app_settings() -> Settings:
    """FastAPI dependency for the container's settings."""
    return get_container().settings


@router.get(
    "/callback",
    status_code=status.HTTP_302_FOUND,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def redirect_with_token(
    request: Request,
    flow: AuthFlowService = Depends(get_auth_flow_service),
) -> RedirectResponse:
    """
    Send the user back to the client application that started the round
    trip. Primary logins carry a custom token in the ``token`` parameter.

    Errors are reported to the client as an ``error`` parameter when the
    client is known. The round trip outcome is consumed, so replaying the
    callback never yields a second token.
    """
    session = load_session(request)
    save_session(request, flow.clear_outcome(session))
    try:
        url = await flow.finish(session)
    except BridgeError as e:
        url = flow.error_redirect(session, e)
        if url is None:
            raise
        logger.info(f"Redirecting {session.client_id} with error {e.code}")
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.post(
    "/token",
    response_model=LongLivedCredential,
    responses={401: {"model": ErrorResponse}},
)
async def generate_long_lived_token(
    body: LongLivedCredentialRequest,
    credentials: ICredentialService = Depends(get_credential_service),
) -> LongLivedCredential:
    """Exchange a valid identity assertion for a 30-day bearer credential."""
    return await credentials.issue_long_lived_credential(body.id_token)


@router.get("/publickey", response_model=PublicKeyResponse)
async def get_public_key(
    credentials: ICredentialService = Depends(get_credential_service),
) -> PublicKeyResponse:
    """Public key that verifies issued credentials."""
    return PublicKeyResponse(key=credentials.get_public_verification_material())


@router.get(
    "/{provider}",
    status_code=status.HTTP_302_FOUND,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def start_round_trip(
    provider: str,
    request: Request,
    client_id: Optional[str] = Query(default=None, description="Client application id"),
    flow: AuthFlowService = Depends(get_auth_flow_service),
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """
    Start a login (steam) or link (discord) round trip for a client and
    hand over to the provider's handshake entrypoint.
    """
    context = flow.start(load_session(request), provider, client_id)
    handshake_url = settings.handshake_urls.get(context.provider or "")
    if not handshake_url:
        raise UnknownProviderError(provider, "has no handshake entrypoint configured")

    save_session(request, context)
    return RedirectResponse(handshake_url, status_code=status.HTTP_302_FOUND)
