"""Shared database schema + migrations for the team console."""

from .base import NAMING_CONVENTION, Base, TimestampMixin, UUIDPrimaryKeyMixin, metadata, utc_now
from .types import GUID, UTCDateTime

__all__ = [
    "Base",
    "metadata",
    "NAMING_CONVENTION",
    "GUID",
    "UTCDateTime",
    "UUIDPrimaryKeyMixin",
    "TimestampMixin",
    "utc_now",
]
