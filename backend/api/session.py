"""
Session context for one login or link round trip.

The context lives in the signed session cookie (Starlette's
SessionMiddleware). Only identifiers and the round trip outcome are stored
there; verified profiles and refresh tokens go straight from the handshake
layer to the core.
"""

from typing import Optional

from fastapi import Request
from pydantic import BaseModel

SESSION_KEY = "auth"


class SessionContext(BaseModel):
    """
    Identifiers carried across a login or link round trip.

    ``completed`` is set only once the handshake for ``provider`` has been
    applied, and ``error`` holds the code of a failed handshake. The
    callback consumes both, so a round trip can be finished once.
    """

    user_id: Optional[str] = None
    client_id: Optional[str] = None
    provider: Optional[str] = None
    completed: bool = False
    error: Optional[str] = None


def load_session(request: Request) -> SessionContext:
    """Read the session context from the request's session."""
    return SessionContext(**request.session.get(SESSION_KEY, {}))


def save_session(request: Request, context: SessionContext) -> None:
    """Write the session context into the request's session."""
    request.session[SESSION_KEY] = context.model_dump(exclude_none=True)
