"""
Framework configuration.

``ContainerConfig`` carries the switches a ``SettingsContainer`` consults.
Containers built without an explicit config use the module level default,
which applications may replace once at startup with :func:`set_default_config`.

While a container runs its loaders it pushes its own config with
:func:`config_context`, so data sources read the active container's settings
through :func:`get_active_config` without explicit parameter passing.
"""

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class ContainerConfig:
    """Behaviour switches for a settings container."""
    register_platform_defaults: bool = True  # Scan platform preference metadata on first resolve
    validate_platform_keys: bool = True  # Unregistered platform keys are fatal
    settings_bundle: Optional[Union[str, Path]] = None  # Directory holding preference specifier files
    release_build: bool = False  # Locks RELEASE_LOCKED settings
    halt_on_fatal: bool = False  # SystemExit instead of raising SettingsUsageError
    http_timeout: float = 10.0  # Seconds, used by DataSource.url/request when no client is given


_default_config: ContainerConfig = ContainerConfig()

# Config of the container whose loaders are currently running
active_config: contextvars.ContextVar[Optional[ContainerConfig]] = contextvars.ContextVar(
    'active_config', default=None
)


def set_default_config(config: ContainerConfig) -> None:
    """Set the config used by containers created without one."""
    global _default_config
    _default_config = config


def get_default_config() -> ContainerConfig:
    """Get the config used by containers created without one."""
    return _default_config


def get_active_config() -> ContainerConfig:
    """Config pushed by the innermost ``config_context``, else the module default."""
    config = active_config.get()
    return config if config is not None else _default_config


@contextmanager
def config_context(config: ContainerConfig):
    """Make ``config`` the active config for the duration of the block."""
    token = active_config.set(config)
    try:
        yield config
    finally:
        active_config.reset(token)
