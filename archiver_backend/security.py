from __future__ import annotations

from pathlib import Path


def is_safe_item_name(name: str) -> bool:
    """Allow only a single path segment (no directories, no traversal)."""
    if not isinstance(name, str) or not name:
        return False
    if name in (".", ".."):
        return False
    if "/" in name or "\\" in name or "\x00" in name:
        return False
    if name != Path(name).name:
        return False
    return True
