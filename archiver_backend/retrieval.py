"""Cache-aside retrieval of item archives.

    fetch(kind, name)
      -> cache hit: return bytes
      -> item folder missing: ItemNotFoundError
      -> build, then read back from the cache

Builds are serialized per (category_key, name): concurrent requests for the
same uncached item wait for one build and then share its result.
"""
from __future__ import annotations

import logging
import threading

from .asset_kinds import AssetKind
from .builder import ArchiveBuilder
from .cache import ArchiveCache
from .config import ArchiverConfig
from .errors import BuildFailedError, ItemNotFoundError
from .security import is_safe_item_name

log = logging.getLogger(__name__)


class KeyedLocks:
    """One lock per key, dropped again once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._users: dict[tuple[str, str], int] = {}

    def acquire(self, key: tuple[str, str]) -> threading.Lock:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        lock.acquire()
        return lock

    def release(self, key: tuple[str, str], lock: threading.Lock) -> None:
        lock.release()
        with self._guard:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class RetrievalService:
    def __init__(
        self,
        config: ArchiverConfig,
        builder: ArchiveBuilder | None = None,
        cache: ArchiveCache | None = None,
    ):
        self.config = config
        self.builder = builder or ArchiveBuilder()
        self.cache = cache or ArchiveCache(config.cache_path)
        self._locks = KeyedLocks()

    def item_exists(self, kind: AssetKind, name: str) -> bool:
        if not is_safe_item_name(name):
            return False
        kind_root = self.config.install_path / kind.content_root
        try:
            # Item folders may be symlinks into a shared mods tree.
            return (kind_root / name).is_dir()
        except OSError:
            return False

    def fetch(self, kind: AssetKind, name: str) -> bytes:
        """Return the archive bytes for one item, building it on a cache miss.

        Raises ItemNotFoundError or BuildFailedError.
        """
        cached = self.cache.get(kind, name)
        if cached is not None:
            log.debug("cache hit %s/%s", kind.category_key, name)
            return cached

        if not self.item_exists(kind, name):
            raise ItemNotFoundError(f"{kind.category_key}/{name}")

        key = (kind.category_key, name)
        lock = self._locks.acquire(key)
        try:
            # Another request may have finished the build while we waited.
            cached = self.cache.get(kind, name)
            if cached is not None:
                return cached

            log.info("building archive %s/%s", kind.category_key, name)
            self.builder.build(kind, name, self.config.install_path, self.config.cache_path)
        finally:
            self._locks.release(key, lock)

        cached = self.cache.get(kind, name)
        if cached is None:
            raise BuildFailedError(f"archive for {kind.category_key}/{name} missing after build")
        return cached
