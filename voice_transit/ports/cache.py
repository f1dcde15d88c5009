"""Cache port - Injectable caching abstraction.

Station lookups for the same spoken name are repeated a lot (every
phonetic variant, every retry), and geocoding a fixed home address
never changes. Adapters receive a cache through this protocol instead
of keeping module-level dictionaries.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """Port for caching.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryCache) - Production
    - adapters/cache/null_cache.py (NullCache) - Caching disabled, tests
    """

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if missing or expired."""
        ...

    def set(self, key: str, value: T) -> None:
        """Store a value under ``key``."""
        ...

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Return the cached value or compute, store and return it.

        Args:
            key: The cache key.
            compute_fn: Called only on a cache miss.
        """
        ...

    def clear(self) -> int:
        """Clear all entries and return how many were removed."""
        ...

    def invalidate(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        ...

    def size(self) -> int:
        """Return the number of entries in the cache."""
        ...
