"""Shared auth/permission error types."""


class AuthenticationError(Exception):
    """Raised when a request cannot be authenticated."""


class PermissionDeniedError(Exception):
    """Raised when the operator lacks authority for an action."""

    def __init__(
        self,
        action: str,
        *,
        team_id: str | None = None,
        reason: str | None = None,
    ) -> None:
        self.action = action
        self.team_id = team_id
        self.reason = reason
        msg = reason or f"Not allowed to {action}"
        if team_id and not reason:
            msg = f"{msg} for team '{team_id}'"
        super().__init__(msg)
