"""Lightweight identity representation produced by token authentication."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from console_db.models import SystemRole


@dataclass(slots=True)
class AuthenticatedPrincipal:
    """Identity information available to downstream handlers."""

    user_id: UUID
    email: str
    system_roles: frozenset[SystemRole] = field(default_factory=frozenset)

    @property
    def is_system_admin(self) -> bool:
        return SystemRole.ADMIN in self.system_roles
