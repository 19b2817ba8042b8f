"""
Loaders pair a data source with a mapper.

A loader reads its source, maps the bytes and pushes every resulting pair into
a ``Loadable`` as a new default value. Loaders only change defaults: a value
the user stored (or a transient override) still wins when the setting is
resolved.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from layerprefs.data_sources import DataSource
from layerprefs.mappers import Mapper

logger = logging.getLogger(__name__)


class Loadable(Protocol):
    """Receiver of new default values."""

    def update(self, key: str, new_default: Any) -> None:
        ...


@dataclass(frozen=True)
class Loader:
    """Immutable (data source, mapper) pair. Reusable."""
    source: DataSource
    mapper: Mapper

    async def load(self, into: Loadable) -> int:
        """
        Read, map and apply the settings.

        Args:
            into: Receiver of the new defaults

        Returns:
            Number of defaults applied

        Raises:
            DataSourceError: if the source cannot be read
            DecodeError: if the mapper cannot decode the data
        """
        logger.debug(f"🧩 Requesting data from {self.source!r}")
        data = await self.source.read()
        logger.debug("🧩 Data retrieved, calling mapper")
        settings = self.mapper.map(data)
        for key, value in settings.items():
            logger.debug(f"🧩     • {key} -> {value!r}")
            into.update(key, value)
        return len(settings)
