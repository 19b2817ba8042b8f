"""
Platform preference store capability.

The persistent layers of a store chain talk to a ``PreferenceStore``: an opaque
key/value persistence capability with get/set/remove. Like a platform user
defaults system it also keeps a registration domain of defaults declared by
settings metadata; ``get`` falls back to that domain, ``contains`` does not.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class PreferenceStore(ABC):
    """Persistent key/value capability used by the preference layers."""

    def __init__(self):
        self._registered_defaults: Dict[str, Any] = {}

    @abstractmethod
    def _get_explicit(self, key: str) -> Optional[Any]:
        """Return the explicitly stored value or None."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Persist an explicit value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove an explicit value. Registered defaults are kept."""

    @abstractmethod
    def contains(self, key: str) -> bool:
        """True if an explicit value is stored for ``key``."""

    def get(self, key: str) -> Optional[Any]:
        """Explicit value (None included), else registered default, else None."""
        if self.contains(key):
            return self._get_explicit(key)
        return self._registered_defaults.get(key)

    def has_value(self, key: str) -> bool:
        """True if ``get`` answers from an explicit value or a registered default."""
        return self.contains(key) or key in self._registered_defaults

    def register_defaults(self, defaults: Mapping[str, Any]) -> None:
        """Add values to the registration domain."""
        self._registered_defaults.update(defaults)


class MemoryPreferenceStore(PreferenceStore):
    """Dictionary backed store. Nothing survives the process."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        super().__init__()
        self._values: Dict[str, Any] = dict(values or {})

    def _get_explicit(self, key: str) -> Optional[Any]:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def contains(self, key: str) -> bool:
        return key in self._values


class JSONFilePreferenceStore(PreferenceStore):
    """
    Explicit values persisted as a single JSON object on disk.

    The file is read lazily on first access and rewritten atomically
    (temporary file in the same directory, then ``os.replace``) after every
    change. Values must be JSON serializable.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        self._values: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._values is None:
            if self.path.exists():
                data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
                if not isinstance(data, dict):
                    raise ValueError(f"Preference file {self.path} does not hold a JSON object")
                self._values = data
            else:
                self._values = {}
            logger.debug(f"🧩 Loaded {len(self._values)} preferences from {self.path}")
        return self._values

    def _flush(self, values: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(values, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _get_explicit(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        # Memory only changes once the file write succeeded
        values = dict(self._load())
        values[key] = value
        self._flush(values)
        self._values = values

    def remove(self, key: str) -> None:
        if key not in self._load():
            return
        values = dict(self._values)
        del values[key]
        self._flush(values)
        self._values = values

    def contains(self, key: str) -> bool:
        return key in self._load()
