"""
Access levels for registered settings.

The access level decides which storage layers the store factories stack on
top of a setting's default value, and so whether the value can be overridden
and where an override is kept.
"""

from enum import Enum


class AccessLevel(Enum):
    """Policy governing whether and how a setting can be overridden."""

    READONLY = "readonly"
    """Fixed after registration. Loaders may still push new defaults."""

    WRITABLE = "writable"
    """User-mutable and persisted in the preference store."""

    TRANSIENT = "transient"
    """In-memory override only. Never persisted, resettable."""

    RELEASE_LOCKED = "releaseLocked"
    """Writable in non-release builds, behaves as readonly in release builds."""
