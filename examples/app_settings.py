"""
Application settings wired up with layerprefs.

Declares the setting keys for a small client application, registers them with
their access levels, then loads bundled and remote defaults before use.

Run with:
    python examples/app_settings.py https://example.com/settings.json
"""

import asyncio
import logging
import sys
from enum import Enum
from pathlib import Path

from layerprefs import (
    AccessLevel,
    ContainerConfig,
    DataSource,
    JSONFilePreferenceStore,
    Loader,
    Mapper,
    SettingsContainer,
    SettingsError,
)

logger = logging.getLogger(__name__)


class Setting(Enum):
    """Keys of every setting the application reads."""
    API_URL = "network.api_url"
    RETRIES = "network.retries"
    TIMEOUT = "network.timeout"
    THEME = "ui.theme"
    VERBOSE = "debug.verbose"
    SERVER = "debug.server"


def register_network(settings: SettingsContainer) -> None:
    settings.register(Setting.API_URL, AccessLevel.READONLY, "https://api.example.com")
    settings.register(Setting.RETRIES, AccessLevel.READONLY, 3)
    settings.register(Setting.TIMEOUT, AccessLevel.READONLY, 10.0)


def register_ui(settings: SettingsContainer) -> None:
    settings.register(Setting.THEME, AccessLevel.WRITABLE, "light")


def register_debug(settings: SettingsContainer) -> None:
    settings.register(Setting.VERBOSE, AccessLevel.TRANSIENT, False)
    settings.register(Setting.SERVER, AccessLevel.RELEASE_LOCKED, "production")


def build_settings(home: Path) -> SettingsContainer:
    settings = SettingsContainer(
        preferences=JSONFilePreferenceStore(home / "preferences.json"),
        config=ContainerConfig(settings_bundle=home / "Settings.bundle"),
    )
    settings.register_all(register_network, register_ui, register_debug)
    return settings


async def main(remote_url: str) -> int:
    logging.basicConfig(level=logging.DEBUG)
    home = Path.home() / ".example-app"
    settings = build_settings(home)

    try:
        await settings.load(
            Loader(DataSource.file(home / "defaults.yaml"), Mapper.yaml(lambda y: y or {})),
            Loader(DataSource.url(remote_url), Mapper.json_dictionary()),
        )
    except SettingsError as e:
        logger.warning(f"Using built-in defaults, loading failed: {e}")

    for setting in Setting:
        print(f"{setting.value} = {settings.resolve(setting)!r}")
    return 0


if __name__ == "__main__":
    url = sys.argv[1] if len(sys.argv) > 1 else "https://example.com/settings.json"
    sys.exit(asyncio.run(main(url)))
