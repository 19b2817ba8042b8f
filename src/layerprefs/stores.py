"""
Store chain nodes.

Every registered setting is backed by a chain of stores. The innermost node is
always a ``DefaultStore`` holding the registered (or most recently loaded)
default. Store factories wrap it in further layers; each layer owns exactly
one parent and decides how reads, writes, resets and default updates travel
down the chain:

    PreferenceWritableStore → DefaultStore
    TransientStore → DefaultStore
    PreferenceReadonlyStore → DefaultStore

Callers only ever talk to the outermost node.
"""

import logging
from typing import Generic, Iterator, Optional, TypeVar

from layerprefs.errors import NotWritableError
from layerprefs.preferences import PreferenceStore

logger = logging.getLogger(__name__)

T = TypeVar('T')

_UNSET = object()  # Distinguishes "no transient value" from a stored None


class Store(Generic[T]):
    """
    Base store node.

    The base implementation forwards everything to the parent. Subclasses
    override the operations their layer handles itself.
    """

    def __init__(self, key: str, parent: Optional['Store[T]'] = None):
        self.key = key
        self.parent = parent

    @property
    def value(self) -> T:
        return self.parent.value

    def store(self, value: T) -> None:
        raise NotWritableError(self.key, type(self).__name__)

    def reset(self) -> None:
        self.parent.reset()

    def update_default(self, value: T) -> None:
        self.parent.update_default(value)

    @property
    def has_stored_value(self) -> bool:
        """True if this node or an inner node holds an explicit override."""
        return self.parent.has_stored_value

    def chain(self) -> Iterator['Store[T]']:
        """Yield the nodes of the chain, outermost first."""
        node: Optional[Store[T]] = self
        while node is not None:
            yield node
            node = node.parent

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"


class DefaultStore(Store[T]):
    """Innermost node. Holds the literal default value."""

    def __init__(self, key: str, value: T):
        super().__init__(key)
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    def reset(self) -> None:
        pass

    def update_default(self, value: T) -> None:
        self._value = value

    @property
    def has_stored_value(self) -> bool:
        return False


class TransientStore(Store[T]):
    """In-memory override. Lost when the process ends."""

    def __init__(self, key: str, parent: Store[T]):
        super().__init__(key, parent)
        self._value = _UNSET

    @property
    def value(self) -> T:
        if self._value is _UNSET:
            return self.parent.value
        return self._value

    def store(self, value: T) -> None:
        self._value = value

    def reset(self) -> None:
        self._value = _UNSET

    @property
    def has_stored_value(self) -> bool:
        return self._value is not _UNSET or self.parent.has_stored_value


class PreferenceReadonlyStore(Store[T]):
    """
    Readonly layer for persisted settings.

    Reads and resets go straight to the parent and writes are rejected. New
    defaults from loaders only reach the parent while it holds no explicitly
    stored value, so an existing override is never replaced.
    """

    def update_default(self, value: T) -> None:
        if self.parent.has_stored_value:
            logger.warning(f"🧩 Ignoring new default for {self.key}: an explicit value is already stored")
            return
        self.parent.update_default(value)


class PreferenceWritableStore(Store[T]):
    """User-mutable layer persisted in the preference store."""

    def __init__(self, key: str, parent: Store[T], preferences: PreferenceStore):
        super().__init__(key, parent)
        self.preferences = preferences

    @property
    def value(self) -> T:
        if self.preferences.has_value(self.key):
            return self.preferences.get(self.key)
        return self.parent.value

    def store(self, value: T) -> None:
        self.preferences.set(self.key, value)

    def reset(self) -> None:
        self.preferences.remove(self.key)

    @property
    def has_stored_value(self) -> bool:
        return self.preferences.contains(self.key) or self.parent.has_stored_value
