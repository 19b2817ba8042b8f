"""
Store factories.

A factory looks at a setting's access level and either wraps the parent chain
in a new layer or hands the parent back unchanged. The container folds its
factories over a fresh ``DefaultStore`` for every registered key, so the
factory applied last ends up as the outermost, caller-visible layer.
"""

from abc import ABC, abstractmethod
from typing import List

from layerprefs.access import AccessLevel
from layerprefs.preferences import PreferenceStore
from layerprefs.stores import (
    PreferenceReadonlyStore,
    PreferenceWritableStore,
    Store,
    TransientStore,
)


class StoreFactory(ABC):
    """Policy that conditionally inserts a layer into a store chain."""

    @abstractmethod
    def create_store(self, key: str, access: AccessLevel, parent: Store) -> Store:
        """
        Build the next layer for a setting.

        Args:
            key: The setting key
            access: The access level the setting was registered with
            parent: The chain built so far

        Returns:
            A new store wrapping ``parent``, or ``parent`` itself
        """


class TransientStoreFactory(StoreFactory):
    """Adds an in-memory layer to transient settings."""

    def create_store(self, key: str, access: AccessLevel, parent: Store) -> Store:
        return TransientStore(key, parent) if access is AccessLevel.TRANSIENT else parent


class PreferenceStoreFactory(StoreFactory):
    """Adds preference store layers to readonly and writable settings."""

    def __init__(self, preferences: PreferenceStore):
        self.preferences = preferences

    def create_store(self, key: str, access: AccessLevel, parent: Store) -> Store:
        if access is AccessLevel.WRITABLE:
            return PreferenceWritableStore(key, parent, self.preferences)
        if access is AccessLevel.READONLY:
            return PreferenceReadonlyStore(key, parent)
        return parent


class ReleaseLockedStoreFactory(StoreFactory):
    """Release-locked settings are writable in development builds only."""

    def __init__(self, preferences: PreferenceStore, release_build: bool = False):
        self.preferences = preferences
        self.release_build = release_build

    def create_store(self, key: str, access: AccessLevel, parent: Store) -> Store:
        if access is not AccessLevel.RELEASE_LOCKED:
            return parent
        if self.release_build:
            return PreferenceReadonlyStore(key, parent)
        return PreferenceWritableStore(key, parent, self.preferences)


def default_store_factories(preferences: PreferenceStore, release_build: bool = False) -> List[StoreFactory]:
    """Factories used by a container that is not given its own list."""
    return [
        TransientStoreFactory(),
        PreferenceStoreFactory(preferences),
        ReleaseLockedStoreFactory(preferences, release_build),
    ]
