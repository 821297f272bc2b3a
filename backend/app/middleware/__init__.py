"""HTTP middleware."""

from .auth import APIKeyMiddleware

__all__ = ["APIKeyMiddleware"]
