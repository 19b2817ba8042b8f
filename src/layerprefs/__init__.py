"""
Layered settings resolution.

This framework maps string keys to typed values backed by a chain of storage
layers, and loads new default values from external sources before first use.

Key Features:
- Per-key store chains built by pluggable store factories
- Access levels: readonly, writable, transient, release-locked
- Persistent layers over a pluggable preference store
- Sequential async loader pipeline (data source + mapper pairs)
- One-shot registration of platform preference defaults

Quick Start:
    >>> from layerprefs import (
    ...     AccessLevel,
    ...     DataSource,
    ...     Loader,
    ...     Mapper,
    ...     SettingsContainer,
    ... )
    >>>
    >>> settings = SettingsContainer()
    >>> settings.register("retries", AccessLevel.READONLY, 5)
    >>> settings.register("url", AccessLevel.WRITABLE, "http://a.com")
    >>>
    >>> await settings.load(
    ...     Loader(DataSource.url("https://example.com/settings.json"), Mapper.json_dictionary()),
    ... )
    >>> settings.resolve("retries", int)

Architecture:
    Each key owns a chain resolved outermost first:

        Transient / preference layer → DefaultStore (registered or loaded default)

    Writes and resets hit the outermost layer. Loaders only replace the
    default at the bottom of the chain, so stored overrides keep winning.

Modules:
    - access: Access level enumeration
    - stores: Store chain nodes
    - factories: Store factory policies
    - container: Settings container and loader pipeline
    - data_sources: Async byte sources (bytes, file, package file, HTTP)
    - mappers: Byte to settings decoders (JSON, plist, YAML)
    - loaders: Data source + mapper pairs
    - preferences: Preference store capability
    - bundle: Platform preference metadata scanner
    - config: Framework configuration
    - errors: Recoverable and fatal error types
"""

# Access
from layerprefs.access import AccessLevel

# Configuration
from layerprefs.config import (
    ContainerConfig,
    set_default_config,
    get_default_config,
)

# Errors
from layerprefs.errors import (
    SettingsError,
    # Recoverable
    DataSourceError,
    FileDoesNotExistError,
    FileReadError,
    InvalidURLError,
    HTTPStatusError,
    RequestFailedError,
    DecodeError,
    UnexpectedDeserializationResult,
    # Fatal
    SettingsUsageError,
    DuplicateKeyError,
    UnknownKeyError,
    SettingTypeError,
    NotWritableError,
    UnregisteredPreferenceError,
)

# Preference stores
from layerprefs.preferences import (
    PreferenceStore,
    MemoryPreferenceStore,
    JSONFilePreferenceStore,
)

# Store chain
from layerprefs.stores import (
    Store,
    DefaultStore,
    TransientStore,
    PreferenceReadonlyStore,
    PreferenceWritableStore,
)

# Factories
from layerprefs.factories import (
    StoreFactory,
    TransientStoreFactory,
    PreferenceStoreFactory,
    ReleaseLockedStoreFactory,
    default_store_factories,
)

# Loading
from layerprefs.data_sources import DataSource
from layerprefs.mappers import Mapper
from layerprefs.loaders import Loader, Loadable

# Platform metadata
from layerprefs.bundle import BundleScanner

# Container
from layerprefs.container import SettingsContainer, key_name

__all__ = [
    # Access
    'AccessLevel',
    # Configuration
    'ContainerConfig',
    'set_default_config',
    'get_default_config',
    # Errors
    'SettingsError',
    'DataSourceError',
    'FileDoesNotExistError',
    'FileReadError',
    'InvalidURLError',
    'HTTPStatusError',
    'RequestFailedError',
    'DecodeError',
    'UnexpectedDeserializationResult',
    'SettingsUsageError',
    'DuplicateKeyError',
    'UnknownKeyError',
    'SettingTypeError',
    'NotWritableError',
    'UnregisteredPreferenceError',
    # Preference stores
    'PreferenceStore',
    'MemoryPreferenceStore',
    'JSONFilePreferenceStore',
    # Store chain
    'Store',
    'DefaultStore',
    'TransientStore',
    'PreferenceReadonlyStore',
    'PreferenceWritableStore',
    # Factories
    'StoreFactory',
    'TransientStoreFactory',
    'PreferenceStoreFactory',
    'ReleaseLockedStoreFactory',
    'default_store_factories',
    # Loading
    'DataSource',
    'Mapper',
    'Loader',
    'Loadable',
    # Platform metadata
    'BundleScanner',
    # Container
    'SettingsContainer',
    'key_name',
]

__version__ = '1.0.0'
__description__ = 'Layered settings resolution with async default loaders'
