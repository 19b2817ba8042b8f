"""
Error types for the settings framework.

Two families with different handling:

Recoverable (bad input data):
    ``DataSourceError`` and ``DecodeError`` subclasses. Raised by data sources
    and mappers, propagated out of ``SettingsContainer.load`` to the caller.

Fatal (bad registration or API usage):
    ``SettingsUsageError`` subclasses. Raised through :func:`raise_fatal`, which
    either raises the typed error or halts the process depending on
    ``ContainerConfig.halt_on_fatal``.
"""

import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from layerprefs.config import ContainerConfig

logger = logging.getLogger(__name__)


class SettingsError(Exception):
    """Base class for every error raised by layerprefs."""


# ---------------------------------------------------------------------------
# Recoverable
# ---------------------------------------------------------------------------

class DataSourceError(SettingsError):
    """A data source could not produce its bytes."""


class FileDoesNotExistError(DataSourceError):
    def __init__(self, path: str):
        super().__init__(f"File does not exist: {path}")
        self.path = path


class FileReadError(DataSourceError):
    """The file exists but reading it failed (permissions, I/O error, ...)."""

    def __init__(self, path: str, reason: str = ""):
        message = f"Unable to read file {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path


class InvalidURLError(DataSourceError):
    def __init__(self, url: str):
        super().__init__(f"Invalid URL: {url}")
        self.url = url


class HTTPStatusError(DataSourceError):
    """The remote endpoint answered with something other than 200."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"Request to {url} failed with status {status_code}")
        self.url = url
        self.status_code = status_code


class RequestFailedError(DataSourceError):
    """Transport level failure (connection refused, timeout, ...)."""

    def __init__(self, url: str, reason: str = ""):
        message = f"Request to {url} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url


class DecodeError(SettingsError):
    """A mapper could not decode the bytes handed to it."""

    def __init__(self, format_name: str, reason: str = ""):
        message = f"Unable to decode {format_name} data"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.format_name = format_name


class UnexpectedDeserializationResult(DecodeError):
    """Decoding worked but produced a type the mapper cannot use."""

    def __init__(self, format_name: str, actual_type: type):
        super().__init__(format_name, f"unexpected result type {actual_type.__name__}")
        self.actual_type = actual_type


# ---------------------------------------------------------------------------
# Fatal
# ---------------------------------------------------------------------------

class SettingsUsageError(SettingsError):
    """Contract violation by calling code or by the settings metadata."""

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key


class DuplicateKeyError(SettingsUsageError):
    def __init__(self, key: str):
        super().__init__(key, f"Key {key} already registered")


class UnknownKeyError(SettingsUsageError):
    def __init__(self, key: str):
        super().__init__(key, f"Unknown key: {key}")


class SettingTypeError(SettingsUsageError):
    """Resolved value is not of the requested type."""

    def __init__(self, key: str, expected: type, actual: type):
        super().__init__(
            key,
            f"Cast failure for key {key}: expected {expected.__name__}, "
            f"found {actual.__name__}",
        )
        self.expected = expected
        self.actual = actual


class NotWritableError(SettingsUsageError):
    def __init__(self, key: str, store_name: str):
        super().__init__(key, f"Key {key} is not writable ({store_name})")
        self.store_name = store_name


class UnregisteredPreferenceError(SettingsUsageError):
    """Platform preference metadata declares a key the code never registered."""

    def __init__(self, key: str):
        super().__init__(key, f"Platform preference with key {key} not registered")


def raise_fatal(error: SettingsUsageError, config: Optional['ContainerConfig'] = None) -> None:
    """Raise a fatal error according to the configured policy.

    Args:
        error: The usage error to report
        config: Container config; falls back to the module default

    Raises:
        SettingsUsageError: when ``halt_on_fatal`` is off (the default)
        SystemExit: when ``halt_on_fatal`` is on
    """
    if config is None:
        from layerprefs.config import get_default_config
        config = get_default_config()

    if config.halt_on_fatal:
        logger.critical(f"🧨 {error}")
        raise SystemExit(1) from error
    raise error
