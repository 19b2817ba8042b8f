"""
Settings container.

Owns the mapping of setting key → store chain and exposes
register/resolve/store/reset, the ``update`` callback used by loaders, and the
sequential loader pipeline.

Registration builds one chain per key by folding the store factories over a
fresh ``DefaultStore``. The factory list is reversed once at construction so
the first factory in the caller's list becomes the outermost layer:

    factories = [TransientStoreFactory(), PreferenceStoreFactory(prefs)]
    writable key  → PreferenceWritableStore → DefaultStore
    transient key → TransientStore → DefaultStore

On the first ``resolve`` the container registers platform preference defaults
exactly once (see ``register_platform_defaults``).

Thread safety: Not thread-safe (all operations expected from one context).
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Type, Union

from layerprefs.access import AccessLevel
from layerprefs.bundle import BundleScanner
from layerprefs.config import ContainerConfig, config_context, get_default_config
from layerprefs.errors import (
    DuplicateKeyError,
    NotWritableError,
    SettingTypeError,
    UnknownKeyError,
    UnregisteredPreferenceError,
    raise_fatal,
)
from layerprefs.factories import StoreFactory, default_store_factories
from layerprefs.loaders import Loader
from layerprefs.preferences import MemoryPreferenceStore, PreferenceStore
from layerprefs.stores import DefaultStore, Store

logger = logging.getLogger(__name__)

SettingKey = Union[str, Enum]
PlatformDefaultsRegistrar = Callable[[], Mapping[str, Any]]


def key_name(key: SettingKey) -> str:
    """Normalize a key: enum members use their string value."""
    if isinstance(key, Enum):
        if not isinstance(key.value, str):
            raise TypeError(f"Enum setting keys need string values, {key!r} has {type(key.value).__name__}")
        return key.value
    return key


class SettingsContainer:
    """
    Registry of settings backed by layered store chains.

    Example:
        container = SettingsContainer()
        container.register("retries", AccessLevel.READONLY, 5)
        container.register("url", AccessLevel.WRITABLE, "http://a.com")
        await container.load(Loader(DataSource.url(...), Mapper.json_dictionary()))
        container.resolve("retries", int)
    """

    _shared: Optional['SettingsContainer'] = None

    def __init__(
        self,
        store_factories: Optional[Sequence[StoreFactory]] = None,
        *,
        preferences: Optional[PreferenceStore] = None,
        config: Optional[ContainerConfig] = None,
        platform_defaults_registrar: Optional[PlatformDefaultsRegistrar] = None,
    ):
        """
        Args:
            store_factories: Layer policies, outermost first; defaults to
                ``default_store_factories`` over ``preferences``
            preferences: Preference store for persistent layers (in-memory if omitted)
            config: Behaviour switches (module default if omitted)
            platform_defaults_registrar: Returns the platform declared defaults after
                registering them; defaults to scanning ``config.settings_bundle``
        """
        self.config = config if config is not None else get_default_config()
        self.preferences = preferences if preferences is not None else MemoryPreferenceStore()
        if store_factories is None:
            store_factories = default_store_factories(self.preferences, self.config.release_build)
        self._store_factories: List[StoreFactory] = list(reversed(store_factories))
        self._stores: Dict[str, Store] = {}

        if platform_defaults_registrar is None:
            scanner = BundleScanner(self.config.settings_bundle)
            platform_defaults_registrar = lambda: scanner.register(self.preferences)
        self.platform_defaults_registrar = platform_defaults_registrar

        self.register_platform_defaults = self.config.register_platform_defaults
        self.validate_platform_keys = self.config.validate_platform_keys
        self.platform_defaults_registered = False
        self._declared_platform_defaults: Optional[Dict[str, Any]] = None
        self._platform_defaults_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Shared instance
    # ------------------------------------------------------------------

    @classmethod
    def shared(cls) -> 'SettingsContainer':
        """Process-wide instance for callers that want one. Created on first use."""
        if cls._shared is None:
            logger.debug("🧩 Starting shared container...")
            cls._shared = cls()
        return cls._shared

    @classmethod
    def reset_shared(cls) -> None:
        """Drop the shared instance so the next ``shared()`` builds a new one."""
        cls._shared = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, key: SettingKey, access: AccessLevel, default: Any) -> None:
        """
        Register a setting.

        Args:
            key: Unique key, or string-valued enum member
            access: Access level deciding which layers are stacked
            default: Default value

        Raises:
            DuplicateKeyError: if the key is already registered
        """
        name = key_name(key)
        if name in self._stores:
            raise_fatal(DuplicateKeyError(name), self.config)

        store: Store = DefaultStore(name, default)
        for factory in self._store_factories:
            store = factory.create_store(name, access, store)
        self._stores[name] = store
        logger.debug(f"🧩 Registered {name} ({access.value}) = {default!r}")

    def register_readonly(self, key: SettingKey, default: Any) -> None:
        self.register(key, AccessLevel.READONLY, default)

    def register_all(self, *registrars: Callable[['SettingsContainer'], None]) -> None:
        """Run registration functions, each given this container."""
        for registrar in registrars:
            registrar(self)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def resolve(self, key: SettingKey, expected_type: Optional[Type] = None) -> Any:
        """
        Current value of a setting.

        Args:
            key: Setting key
            expected_type: If given, the value must be an instance of it

        Raises:
            UnknownKeyError: if the key was never registered
            SettingTypeError: if the value is not an ``expected_type``
            UnregisteredPreferenceError: if platform metadata declares an unknown key
        """
        self._ensure_platform_defaults()
        name = key_name(key)
        value = self._chain(name).value
        if expected_type is not None and not isinstance(value, expected_type):
            raise_fatal(SettingTypeError(name, expected_type, type(value)), self.config)
        return value

    def store(self, key: SettingKey, value: Any) -> None:
        """
        Write through the outermost layer of the setting's chain.

        Raises:
            UnknownKeyError: if the key was never registered
            NotWritableError: if the setting has no writable layer
        """
        name = key_name(key)
        chain = self._chain(name)
        try:
            chain.store(value)
        except NotWritableError as e:
            raise_fatal(e, self.config)
        logger.debug(f"🧩 Stored {name} = {value!r}")

    def reset(self, key: SettingKey) -> None:
        """Drop any stored override so the setting reads its current default."""
        name = key_name(key)
        self._chain(name).reset()
        logger.debug(f"🧩 Reset {name}")

    def update(self, key: SettingKey, new_default: Any) -> None:
        """Push a new default value into the setting's chain. Used by loaders."""
        name = key_name(key)
        logger.debug(f"🧩     Updating default value: {name} -> {new_default!r}")
        self._chain(name).update_default(new_default)

    def describe(self, key: SettingKey) -> List[str]:
        """Store class names of the setting's chain, outermost first."""
        return [type(node).__name__ for node in self._chain(key_name(key)).chain()]

    def keys(self) -> List[str]:
        return list(self._stores)

    def __contains__(self, key: SettingKey) -> bool:
        return key_name(key) in self._stores

    def __iter__(self) -> Iterator[str]:
        return iter(self._stores)

    def __getitem__(self, key: SettingKey) -> Any:
        return self.resolve(key)

    def __setitem__(self, key: SettingKey, value: Any) -> None:
        self.store(key, value)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, *loaders: Loader) -> None:
        """
        Run loaders one after the other.

        Loader n+1 only starts once loader n has finished. The first failure
        aborts the pipeline and propagates; updates applied by earlier loaders
        are kept. Nothing is retried. Sources see this container's config
        through ``config_context``.
        """
        logger.debug("🧩 Running loaders ...")
        with config_context(self.config):
            for loader in loaders:
                logger.debug(f"🧩 Executing loader {loader.source!r} ...")
                try:
                    count = await loader.load(into=self)
                except Exception:
                    logger.debug(f"🧩     Loader {loader.source!r} failed, aborting")
                    raise
                logger.debug(f"🧩     Loader finished, {count} defaults applied")
        logger.debug("🧩 Finished loading settings.")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _ensure_platform_defaults(self) -> None:
        """Register platform preference defaults once, validating their keys."""
        if self.platform_defaults_registered or not self.register_platform_defaults:
            return

        # The registrar runs at most once, whether it fails or validation fails below
        if self._platform_defaults_error is not None:
            raise self._platform_defaults_error
        if self._declared_platform_defaults is None:
            logger.debug("🧩 Registering platform preference defaults...")
            try:
                self._declared_platform_defaults = dict(self.platform_defaults_registrar())
            except Exception as e:
                logger.error(f"🧩 Platform preference registration failed: {e}")
                self._platform_defaults_error = e
                raise
        declared = self._declared_platform_defaults
        if self.validate_platform_keys:
            logger.debug("🧩 Validating platform preference keys...")
            for name in declared:
                if name not in self._stores:
                    raise_fatal(UnregisteredPreferenceError(name), self.config)
        self.platform_defaults_registered = True

    def _chain(self, name: str) -> Store:
        store = self._stores.get(name)
        if store is None:
            raise_fatal(UnknownKeyError(name), self.config)
        return store
