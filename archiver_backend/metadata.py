"""Inject download URLs into car/track metadata documents.

Runs once at startup, before downloads are served. Every item that is not
owned by a blacklisted author gets a ``downloadURL`` pointing back at this
service, so the desktop installer can fetch the archive from the item page.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import quote

from .asset_kinds import ASSET_KINDS, AssetKind
from .config import ArchiverConfig
from .errors import MetadataError, MetadataParseError, MetadataReadError, MetadataWriteError

log = logging.getLogger(__name__)

AUTHOR_KEY = "author"
DOWNLOAD_URL_KEY = "downloadURL"

# Route prefix served by server.py.
DOWNLOAD_ROUTE = "download"


def build_download_url(base_domain: str, kind: AssetKind, item_name: str) -> str:
    # safe="" so that "/" and spaces inside a name are escaped too.
    return f"{base_domain}/{DOWNLOAD_ROUTE}/{kind.category_key}/{quote(item_name, safe='')}"


def _author_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    # Numbers, booleans, lists: compare against their JSON spelling.
    return json.dumps(value, ensure_ascii=False)


def is_author_blacklisted(author: Any, blacklist: Iterable[str]) -> bool:
    return _author_str(author) in set(blacklist)


def _has_download_url(doc: dict) -> bool:
    value = doc.get(DOWNLOAD_URL_KEY)
    return isinstance(value, str) and value != ""


def _load_document(path: Path) -> dict:
    try:
        # utf-8-sig: metadata exported by content tools often carries a BOM.
        raw = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise MetadataParseError(path, f"not valid UTF-8 ({e})") from e
    except OSError as e:
        raise MetadataReadError(path, str(e)) from e

    try:
        doc = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MetadataParseError(path, str(e)) from e
    if not isinstance(doc, dict):
        raise MetadataParseError(path, "expected a JSON object")
    return doc


def rewrite_one(
    item_dir: Path,
    kind: AssetKind,
    base_domain: str,
    blacklist: Iterable[str],
    overwrite: bool,
) -> bool:
    """Set the download URL in one item's metadata document.

    Returns True when the file was rewritten, False when the item was skipped
    (blacklisted author, or a URL is already present and ``overwrite`` is off).
    Skipped files are not touched at all.

    Raises MetadataReadError, MetadataParseError or MetadataWriteError.
    """
    path = item_dir / kind.metadata_path
    doc = _load_document(path)

    if is_author_blacklisted(doc.get(AUTHOR_KEY), blacklist):
        log.debug("skip %s/%s: author is blacklisted", kind.category_key, item_dir.name)
        return False

    if not overwrite and _has_download_url(doc):
        log.debug("skip %s/%s: download URL already set", kind.category_key, item_dir.name)
        return False

    doc[DOWNLOAD_URL_KEY] = build_download_url(base_domain, kind, item_dir.name)

    try:
        path.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        raise MetadataWriteError(path, str(e)) from e
    return True


def rewrite_all(kind: AssetKind, config: ArchiverConfig) -> list[MetadataError]:
    """Rewrite every item of one kind.

    Per-item failures are collected and returned; they never stop the pass.
    """
    errors: list[MetadataError] = []
    root = config.install_path / kind.content_root

    try:
        item_dirs = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as e:
        errors.append(MetadataReadError(root, str(e)))
        return errors

    rewritten = 0
    for item_dir in item_dirs:
        try:
            if rewrite_one(
                item_dir,
                kind,
                config.base_domain,
                config.authors_blacklist,
                config.overwrite_url,
            ):
                rewritten += 1
        except MetadataError as e:
            errors.append(e)

    log.info(
        "set %s download URLs: %d rewritten, %d items, %d errors",
        kind.category_key,
        rewritten,
        len(item_dirs),
        len(errors),
    )
    return errors


def rewrite_all_kinds(
    config: ArchiverConfig, kinds: Iterable[AssetKind] = ASSET_KINDS
) -> list[MetadataError]:
    errors: list[MetadataError] = []
    for kind in kinds:
        errors.extend(rewrite_all(kind, config))
    return errors
