"""Client storage port (abstract interface).

Models the durable key-value storage a storefront client keeps between
visits. Values are strings; callers own their own encoding.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract durable key-value storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the key. Removing an absent key is a no-op."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        ...
