"""
Exception handlers.

The core raises BridgeError subclasses and never suppresses them; this is
the one place they are turned into HTTP responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from modules.tokens.exceptions import ProviderUnavailableError
from shared.exceptions import (
    AuthenticationError,
    BridgeError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific classes first
_STATUS_BY_ERROR: list[tuple[type[BridgeError], int]] = [
    (ProviderUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
]


def status_for(error: BridgeError) -> int:
    """HTTP status code for a domain error."""
    for error_class, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BridgeError, bridge_error_handler)
