"""Central exports for the console SQLAlchemy models."""

from .menu import Menu, SystemRoleMenu, TeamRoleMenu
from .team import ROOT_TEAM_ID, Team, TeamMember, TeamRole
from .user import SystemRole, User, UserStatus, UserSystemRole

__all__ = [
    "Menu",
    "ROOT_TEAM_ID",
    "SystemRole",
    "SystemRoleMenu",
    "Team",
    "TeamMember",
    "TeamRole",
    "TeamRoleMenu",
    "User",
    "UserStatus",
    "UserSystemRole",
]
