"""Storage media — string key/value backends scoped to a session context."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for failures raised by a storage medium."""


class StorageQuotaExceeded(StorageError):
    """Raised when a write would push the medium past its quota."""


class StorageMedium(ABC):
    """Abstract key/value medium holding serialised blobs.

    Implementations may raise on any call (quota, disabled storage, I/O).
    Callers that need best-effort semantics must catch those errors
    themselves.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value stored under *key*, or ``None``."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete *key*; no-op if it is absent."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every key."""


class MemoryStorage(StorageMedium):
    """In-memory medium that lives exactly as long as its owner.

    ``quota`` caps the total size (in characters of keys plus values);
    ``None`` means unlimited.
    """

    def __init__(self, quota: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota = quota

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota is not None:
            used = sum(len(k) + len(v) for k, v in self._items.items() if k != key)
            if used + len(key) + len(value) > self._quota:
                raise StorageQuotaExceeded(
                    f"Writing {key!r} would exceed the {self._quota} byte quota"
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
