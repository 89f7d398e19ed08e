from __future__ import annotations

import logging
from pathlib import Path

from .asset_kinds import AssetKind
from .security import is_safe_item_name

log = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"


def resolve_cache_root(cache_path: Path) -> Path:
    """Absolute cache root; relative paths are taken from the current working directory."""
    if cache_path.is_absolute():
        return cache_path
    return Path.cwd() / cache_path


def archive_path(cache_root: Path, kind: AssetKind, name: str) -> Path:
    return resolve_cache_root(cache_root) / kind.category_key / f"{name}{ARCHIVE_SUFFIX}"


class ArchiveCache:
    """Read side of the archive cache.

    The cache is simply whatever ZIP files exist under
    ``<cache_root>/<category_key>/``; ArchiveBuilder writes into the same tree.
    There is no expiry: a present file is served as-is.
    """

    def __init__(self, cache_root: Path):
        self.cache_root = cache_root

    def path_for(self, kind: AssetKind, name: str) -> Path:
        return archive_path(self.cache_root, kind, name)

    def get(self, kind: AssetKind, name: str) -> bytes | None:
        if not is_safe_item_name(name):
            return None
        path = self.path_for(kind, name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            # Unreadable entries count as a miss; the caller will rebuild.
            log.debug("cache read failed for %s: %s", path, e)
            return None
