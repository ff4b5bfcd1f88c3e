"""
Auth Bridge API package.

Provides the FastAPI application for the Auth Bridge identity service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
