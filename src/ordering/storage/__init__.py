"""Client storage factory.

Provides get_store() / set_store() to swap implementations:
- MemoryStore for development and testing (default)
- JsonFileStore when CART_STORE=file, written to CART_STORE_PATH
"""

import os

from ordering.storage.port import KeyValueStore

_current_store: KeyValueStore | None = None


def get_store() -> KeyValueStore:
    """Return the configured client storage (singleton)."""
    global _current_store
    if _current_store is None:
        backend = os.environ.get("CART_STORE", "memory")
        if backend == "memory":
            from ordering.storage.memory_adapter import MemoryStore

            _current_store = MemoryStore()
        elif backend == "file":
            from ordering.storage.file_adapter import JsonFileStore

            _current_store = JsonFileStore(os.environ.get("CART_STORE_PATH", ".storefront/storage.json"))
        else:
            raise ValueError(f"Unknown cart store: {backend}")
    return _current_store


def set_store(store: KeyValueStore) -> None:
    """Override the active client storage (useful for tests)."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    global _current_store
    _current_store = None
