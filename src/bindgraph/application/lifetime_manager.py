import threading
from typing import Any, Callable, Dict, Optional

from bindgraph.domain import ILifetimeManager

_MISSING = object()


class LifetimeManager(ILifetimeManager):
    """Per-injector cache of singleton instances.

    Each key has its own re-entrant lock, held while that singleton is
    constructed. Concurrent requests for the same uncached singleton construct
    it once and the later caller receives the first caller's instance, while
    unrelated singletons never wait on each other.

    Attributes:
        _singleton_cache: Instances keyed by class node name.
        _key_locks: Construction lock per key.
        _guard: Guards creation of key locks.
    """

    def __init__(self) -> None:
        """Initialize the lifetime manager with an empty cache."""
        self._singleton_cache: Dict[str, Any] = {}
        self._key_locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.RLock()
            return lock

    def get_or_create(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the cached instance for ``key`` or create and cache a new one.

        A failing factory leaves the cache untouched.

        Args:
            key: Fully-qualified name of the singleton class node.
            factory: Function to create the instance if needed.

        Example:
            >>> manager = LifetimeManager()
            >>> first = manager.get_or_create("app.Database", Database)
            >>> assert manager.get_or_create("app.Database", Database) is first
        """
        instance = self._singleton_cache.get(key, _MISSING)
        if instance is not _MISSING:
            return instance

        with self._lock_for(key):
            instance = self._singleton_cache.get(key, _MISSING)
            if instance is _MISSING:
                instance = factory()
                self._singleton_cache[key] = instance
            return instance

    def get_cached(self, key: str) -> Optional[Any]:
        return self._singleton_cache.get(key)

    def is_cached(self, key: str) -> bool:
        return key in self._singleton_cache

    def clear_cache(self) -> None:
        """Drop all cached instances; constructions in progress still complete."""
        with self._guard:
            self._singleton_cache.clear()
