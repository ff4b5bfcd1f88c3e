"""API services package."""

from .auth_flow import AuthFlowService

__all__ = ["AuthFlowService"]
