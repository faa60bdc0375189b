"""HTTP dependency helpers built on the shared auth contracts."""

from .dependencies import (
    get_current_principal,
    require_authenticated,
    require_system_admin,
)
from .errors import register_auth_exception_handlers, register_domain_exception_handlers

__all__ = [
    "get_current_principal",
    "require_authenticated",
    "require_system_admin",
    "register_auth_exception_handlers",
    "register_domain_exception_handlers",
]
