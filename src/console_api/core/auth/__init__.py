"""Authentication primitives shared by the HTTP layer and services."""

from .errors import AuthenticationError, PermissionDeniedError
from .principal import AuthenticatedPrincipal

__all__ = [
    "AuthenticatedPrincipal",
    "AuthenticationError",
    "PermissionDeniedError",
]
