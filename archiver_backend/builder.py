"""Package an item folder into a ZIP the desktop installer can unpack as-is.

Entries are stored relative to the kind's content root, i.e.
``<item>/<subpath>``, so extracting the archive into the installer's own
``content/cars`` (or ``content/tracks``) places the item correctly.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
import zipfile
from pathlib import Path

from .asset_kinds import AssetKind
from .cache import ARCHIVE_SUFFIX, archive_path, resolve_cache_root
from .errors import BuildFailedError

log = logging.getLogger(__name__)

_COPY_CHUNK = 1024 * 1024
_ARCHIVE_MODE = 0o644


def collect_files(kind_root: Path, name: str) -> list[tuple[Path, str]]:
    """Return (source file, archive name) pairs for every file under kind_root/name.

    Directories are not listed; walk order is preserved.
    """
    item_root = kind_root / name
    pairs: list[tuple[Path, str]] = []

    def _raise(err: OSError) -> None:
        raise err

    for dirpath, _dirnames, filenames in os.walk(item_root, onerror=_raise):
        for filename in filenames:
            source = Path(dirpath) / filename
            if not source.is_file():
                continue
            arcname = source.relative_to(kind_root).as_posix()
            pairs.append((source, arcname))
    return pairs


class ArchiveBuilder:
    def build(self, kind: AssetKind, name: str, install_path: Path, cache_path: Path) -> Path:
        """Build ``<cache>/<category_key>/<name>.zip`` and return its path.

        The archive is written to a temporary file next to the destination
        and renamed into place, so readers never see a half-written ZIP.
        Raises BuildFailedError on any I/O or archive error.
        """
        cache_root = resolve_cache_root(cache_path)
        kind_root = install_path / kind.content_root
        dest = archive_path(cache_root, kind, name)

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            files = collect_files(kind_root, name)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{name}.", suffix=ARCHIVE_SUFFIX + ".tmp", dir=str(dest.parent)
            )
        except OSError as e:
            raise BuildFailedError(f"cannot prepare archive for {kind.category_key}/{name}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as fh:
                with zipfile.ZipFile(fh, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
                    for source, arcname in files:
                        log.debug("add file to archive: %s -> %s", source, arcname)
                        # from_file keeps the source mtime and permission bits.
                        info = zipfile.ZipInfo.from_file(source, arcname, strict_timestamps=False)
                        info.compress_type = zipfile.ZIP_DEFLATED
                        with source.open("rb") as src, zf.open(info, mode="w") as dst:
                            shutil.copyfileobj(src, dst, _COPY_CHUNK)
            # mkstemp creates 0600; cached archives are shared with operators.
            os.chmod(tmp_path, _ARCHIVE_MODE)
            os.replace(tmp_path, dest)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise BuildFailedError(f"cannot build archive for {kind.category_key}/{name}: {e}") from e

        log.info("built %s (%d files)", dest, len(files))
        return dest
