"""Pytest configuration and shared fixtures."""
import pytest
from enum import Enum

from layerprefs import (
    AccessLevel,
    ContainerConfig,
    MemoryPreferenceStore,
    SettingsContainer,
    Store,
    StoreFactory,
    TransientStore,
)
import layerprefs.config as config_module


class AppKey(Enum):
    """String-valued enum keys, as applications declare them."""
    URL = "test.url"
    RETRIES = "test.retries"


class MockStoreFactory(StoreFactory):
    """Gives transient and writable settings an in-memory layer, nothing else."""

    def create_store(self, key: str, access: AccessLevel, parent: Store) -> Store:
        if access in (AccessLevel.TRANSIENT, AccessLevel.WRITABLE):
            return TransientStore(key, parent)
        return parent


class RecordingRegistrar:
    """Platform defaults registrar double that counts its invocations."""

    def __init__(self, declared=None):
        self.declared = dict(declared or {})
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.declared


@pytest.fixture(autouse=True)
def reset_framework_state():
    """Restore the default config and the shared container after each test."""
    original_config = config_module._default_config

    yield

    config_module._default_config = original_config
    SettingsContainer.reset_shared()


@pytest.fixture
def preferences():
    """Provide an empty in-memory preference store."""
    return MemoryPreferenceStore()


@pytest.fixture
def registrar():
    """Provide a registrar declaring no platform defaults."""
    return RecordingRegistrar()


@pytest.fixture
def container(preferences, registrar):
    """Provide a container with the default factories over in-memory preferences."""
    return SettingsContainer(preferences=preferences, platform_defaults_registrar=registrar)


@pytest.fixture
def mock_container(registrar):
    """Provide a container built with the mock store factory only."""
    return SettingsContainer([MockStoreFactory()], platform_defaults_registrar=registrar)


@pytest.fixture
def halting_config():
    """Provide a config that halts on fatal errors."""
    return ContainerConfig(halt_on_fatal=True)
