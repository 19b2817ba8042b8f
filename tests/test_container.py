"""
Tests for the settings container.

Tests cover:
- Registration, duplicate detection and enum keys
- Resolution, unknown keys and type checks
- Store, reset and default updates through the chain
- Factory ordering
- One-shot platform default registration
- Fatal error policy
- Shared instance
"""

import pytest
from enum import Enum

from layerprefs import (
    AccessLevel,
    ContainerConfig,
    DecodeError,
    DuplicateKeyError,
    MemoryPreferenceStore,
    NotWritableError,
    PreferenceStoreFactory,
    SettingsContainer,
    SettingTypeError,
    Store,
    StoreFactory,
    TransientStore,
    UnknownKeyError,
    UnregisteredPreferenceError,
    set_default_config,
)
from conftest import AppKey, RecordingRegistrar


class TestRegistration:
    """Test registering settings."""

    def test_register_and_resolve(self, container):
        container.register("retries", AccessLevel.READONLY, 5)
        assert container.resolve("retries") == 5

    def test_register_readonly_shortcut(self, container):
        container.register_readonly("abc", 5)
        assert container.describe("abc") == ["PreferenceReadonlyStore", "DefaultStore"]
        assert container.resolve("abc") == 5

    def test_duplicate_registration_fails(self, container):
        container.register("retries", AccessLevel.READONLY, 5)
        with pytest.raises(DuplicateKeyError, match="already registered") as exc_info:
            container.register("retries", AccessLevel.READONLY, 5)
        assert exc_info.value.key == "retries"

    def test_enum_keys(self, container):
        container.register(AppKey.RETRIES, AccessLevel.READONLY, 5)
        assert container.resolve(AppKey.RETRIES) == 5
        assert container.resolve("test.retries") == 5
        assert AppKey.RETRIES in container

    def test_enum_key_needs_string_value(self, container):
        class NumberKey(Enum):
            ONE = 1

        with pytest.raises(TypeError):
            container.register(NumberKey.ONE, AccessLevel.READONLY, 5)

    def test_register_all_runs_each_registrar(self, container):
        def network(settings):
            settings.register("url", AccessLevel.READONLY, "http://abc.com")

        def retry(settings):
            settings.register("retries", AccessLevel.READONLY, 5)

        container.register_all(network, retry)
        assert container.keys() == ["url", "retries"]


class TestResolve:
    """Test resolving settings."""

    def test_unknown_key(self, container):
        with pytest.raises(UnknownKeyError, match="abc"):
            container.resolve("abc")

    def test_type_check(self, container):
        container.register("abc", AccessLevel.READONLY, 5)
        assert container.resolve("abc", int) == 5

    def test_type_mismatch_names_key_and_types(self, container):
        container.register("abc", AccessLevel.READONLY, 5)
        with pytest.raises(SettingTypeError) as exc_info:
            container.resolve("abc", str)
        message = str(exc_info.value)
        assert "abc" in message
        assert "str" in message
        assert "int" in message
        assert exc_info.value.expected is str
        assert exc_info.value.actual is int

    def test_subscript_access(self, container):
        container.register("abc", AccessLevel.WRITABLE, 5)
        assert container["abc"] == 5
        container["abc"] = 10
        assert container["abc"] == 10

    def test_subscript_with_enum_key(self, container):
        container.register(AppKey.URL, AccessLevel.WRITABLE, "http://a.com")
        container[AppKey.URL] = "http://b.com"
        assert container[AppKey.URL] == "http://b.com"


class TestStoreAndReset:
    """Test writing through the chain."""

    def test_writable_store_and_reset(self, container, preferences):
        container.register("url", AccessLevel.WRITABLE, "http://a.com")
        container.store("url", "http://b.com")
        assert container.resolve("url") == "http://b.com"
        assert preferences.get("url") == "http://b.com"
        container.reset("url")
        assert container.resolve("url") == "http://a.com"

    def test_transient_store_is_not_persisted(self, container, preferences):
        container.register("debug", AccessLevel.TRANSIENT, False)
        container.store("debug", True)
        assert container.resolve("debug") is True
        assert preferences.contains("debug") is False
        container.reset("debug")
        assert container.resolve("debug") is False

    def test_release_locked_is_writable_in_development(self, container):
        container.register("server", AccessLevel.RELEASE_LOCKED, "prod")
        container.store("server", "staging")
        assert container.resolve("server") == "staging"

    def test_release_locked_is_readonly_in_release(self, registrar):
        container = SettingsContainer(
            config=ContainerConfig(release_build=True),
            platform_defaults_registrar=registrar,
        )
        container.register("server", AccessLevel.RELEASE_LOCKED, "prod")
        with pytest.raises(NotWritableError):
            container.store("server", "staging")
        assert container.resolve("server") == "prod"

    def test_readonly_store_fails(self, container):
        container.register("retries", AccessLevel.READONLY, 5)
        with pytest.raises(NotWritableError, match="retries"):
            container.store("retries", 6)

    def test_store_unknown_key(self, container):
        with pytest.raises(UnknownKeyError):
            container.store("abc", 5)

    def test_reset_unknown_key(self, container):
        with pytest.raises(UnknownKeyError):
            container.reset("abc")

    def test_reset_readonly_is_noop(self, container):
        container.register("retries", AccessLevel.READONLY, 5)
        container.reset("retries")
        assert container.resolve("retries") == 5

    def test_mock_factory_makes_writable_transient(self, mock_container):
        mock_container.register("abc", AccessLevel.WRITABLE, 5)
        mock_container.store("abc", 10)
        assert mock_container.resolve("abc") == 10
        assert mock_container.describe("abc") == ["TransientStore", "DefaultStore"]


class TestUpdate:
    """Test default updates pushed by loaders."""

    def test_update_readonly(self, container):
        container.register("retries", AccessLevel.READONLY, 5)
        container.update("retries", 3)
        assert container.resolve("retries") == 3

    def test_update_preserves_stored_override(self, container):
        container.register("url", AccessLevel.WRITABLE, "http://a.com")
        container.store("url", "http://b.com")
        container.update("url", "http://c.com")
        assert container.resolve("url") == "http://b.com"
        container.reset("url")
        assert container.resolve("url") == "http://c.com"

    def test_update_preserves_transient_override(self, container):
        container.register("debug", AccessLevel.TRANSIENT, False)
        container.store("debug", True)
        container.update("debug", False)
        assert container.resolve("debug") is True

    def test_update_unknown_key(self, container):
        with pytest.raises(UnknownKeyError):
            container.update("abc", 5)


class AlwaysTransientFactory(StoreFactory):
    def create_store(self, key: str, access: AccessLevel, parent: Store) -> Store:
        return TransientStore(key, parent)


class TestFactoryOrdering:
    """The first factory in the list becomes the outermost layer."""

    def test_default_chains(self, container):
        container.register("w", AccessLevel.WRITABLE, 1)
        container.register("r", AccessLevel.READONLY, 1)
        container.register("t", AccessLevel.TRANSIENT, 1)
        container.register("l", AccessLevel.RELEASE_LOCKED, 1)
        assert container.describe("w") == ["PreferenceWritableStore", "DefaultStore"]
        assert container.describe("r") == ["PreferenceReadonlyStore", "DefaultStore"]
        assert container.describe("t") == ["TransientStore", "DefaultStore"]
        assert container.describe("l") == ["PreferenceWritableStore", "DefaultStore"]

    def test_first_factory_is_outermost(self, registrar):
        prefs = MemoryPreferenceStore()
        container = SettingsContainer(
            [AlwaysTransientFactory(), PreferenceStoreFactory(prefs)],
            platform_defaults_registrar=registrar,
        )
        container.register("abc", AccessLevel.WRITABLE, 5)
        assert container.describe("abc") == [
            "TransientStore",
            "PreferenceWritableStore",
            "DefaultStore",
        ]
        container.store("abc", 10)
        assert container.resolve("abc") == 10
        assert prefs.contains("abc") is False

    def test_factories_see_key_and_access(self, registrar):
        seen = []

        class RecordingFactory(StoreFactory):
            def create_store(self, key, access, parent):
                seen.append((key, access))
                return parent

        container = SettingsContainer([RecordingFactory()], platform_defaults_registrar=registrar)
        container.register("abc", AccessLevel.TRANSIENT, 5)
        assert seen == [("abc", AccessLevel.TRANSIENT)]
        assert container.describe("abc") == ["DefaultStore"]


class TestPlatformDefaults:
    """Test the one-shot platform default registration."""

    def test_runs_on_first_resolve_not_on_register(self, container, registrar):
        container.register("abc", AccessLevel.READONLY, "hello")
        assert registrar.calls == 0
        assert container.resolve("abc") == "hello"
        assert registrar.calls == 1
        assert container.platform_defaults_registered is True

    def test_runs_at_most_once(self, container, registrar):
        container.register("abc", AccessLevel.READONLY, 5)
        for _ in range(5):
            container.resolve("abc")
        assert registrar.calls == 1

    def test_disabled(self, registrar):
        container = SettingsContainer(
            config=ContainerConfig(register_platform_defaults=False),
            platform_defaults_registrar=registrar,
        )
        container.register("abc", AccessLevel.READONLY, 5)
        assert container.resolve("abc") == 5
        assert registrar.calls == 0

    def test_disabled_on_instance(self, container, registrar):
        container.register("abc", AccessLevel.READONLY, 5)
        container.register_platform_defaults = False
        assert container.resolve("abc") == 5
        assert registrar.calls == 0

    def test_unregistered_platform_key_fails(self):
        registrar = RecordingRegistrar({"def": 5})
        container = SettingsContainer(platform_defaults_registrar=registrar)
        container.register("abc", AccessLevel.READONLY, 5)
        with pytest.raises(UnregisteredPreferenceError, match="def"):
            container.resolve("abc")
        with pytest.raises(UnregisteredPreferenceError):
            container.resolve("abc")
        assert registrar.calls == 1

    def test_failing_registrar_runs_once(self):
        calls = []

        def broken_registrar():
            calls.append(1)
            raise DecodeError("settings bundle", "truncated plist")

        container = SettingsContainer(platform_defaults_registrar=broken_registrar)
        container.register("abc", AccessLevel.READONLY, 5)
        for _ in range(3):
            with pytest.raises(DecodeError, match="truncated plist"):
                container.resolve("abc")
        assert len(calls) == 1
        assert container.platform_defaults_registered is False

    def test_validation_can_be_disabled(self):
        registrar = RecordingRegistrar({"def": 5})
        container = SettingsContainer(
            config=ContainerConfig(validate_platform_keys=False),
            platform_defaults_registrar=registrar,
        )
        container.register("abc", AccessLevel.READONLY, "hello")
        assert container.resolve("abc") == "hello"
        assert registrar.calls == 1

    def test_registered_platform_key_passes(self):
        # The double only reports the key, it does not touch the preference store
        registrar = RecordingRegistrar({"abc": 7})
        container = SettingsContainer(platform_defaults_registrar=registrar)
        container.register("abc", AccessLevel.WRITABLE, 5)
        assert container.resolve("abc") == 5


class TestFatalPolicy:
    """Fatal errors either raise or halt."""

    def test_halt_on_duplicate(self, halting_config, registrar):
        container = SettingsContainer(config=halting_config, platform_defaults_registrar=registrar)
        container.register("abc", AccessLevel.READONLY, 5)
        with pytest.raises(SystemExit):
            container.register("abc", AccessLevel.READONLY, 5)

    def test_halt_on_unknown_key(self, halting_config, registrar):
        container = SettingsContainer(config=halting_config, platform_defaults_registrar=registrar)
        with pytest.raises(SystemExit):
            container.resolve("abc")

    def test_module_default_config_is_used(self, registrar):
        set_default_config(ContainerConfig(halt_on_fatal=True))
        container = SettingsContainer(platform_defaults_registrar=registrar)
        with pytest.raises(SystemExit):
            container.resolve("abc")


class TestShared:
    """Test the shared instance convenience."""

    def test_shared_is_single_instance(self):
        assert SettingsContainer.shared() is SettingsContainer.shared()

    def test_reset_shared(self):
        first = SettingsContainer.shared()
        SettingsContainer.reset_shared()
        assert SettingsContainer.shared() is not first
