"""Shared dependency aliases used by API routers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from console_api.core.http import require_authenticated, require_system_admin
from console_api.db import get_db_read, get_db_write
from console_api.settings import Settings, get_settings
from console_db.models import User

WriteSessionDep = Annotated[Session, Depends(get_db_write)]
ReadSessionDep = Annotated[Session, Depends(get_db_read)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
CurrentUserDep = Annotated[User, Depends(require_authenticated)]
SystemAdminDep = Annotated[User, Depends(require_system_admin)]

__all__ = [
    "CurrentUserDep",
    "ReadSessionDep",
    "SettingsDep",
    "SystemAdminDep",
    "WriteSessionDep",
]
