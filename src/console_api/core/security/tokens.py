"""JWT access token helpers."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import jwt


def create_access_token(
    *,
    subject: UUID | str,
    secret: str,
    algorithm: str,
    expires_in: timedelta,
    claims: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> str:
    """Return a signed JWT whose ``sub`` claim is ``subject``."""

    issued_at = now or datetime.now(UTC)
    payload: dict[str, Any] = dict(claims or {})
    payload.update(
        {
            "sub": str(subject),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + expires_in).timestamp()),
        }
    )
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str,
    *,
    secret: str,
    algorithms: Sequence[str],
    audience: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Decode a JWT and return its payload."""

    if audience:
        return jwt.decode(
            token,
            secret,
            algorithms=list(algorithms),
            audience=list(audience),
        )
    return jwt.decode(
        token,
        secret,
        algorithms=list(algorithms),
        options={"verify_aud": False},
    )


__all__ = ["create_access_token", "decode_token"]
