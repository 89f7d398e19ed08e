from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath


@dataclass(frozen=True)
class AssetKind:
    """Describes where one kind of installable content lives.

    category_key: slug used for cache folders and download URLs
    content_root: folder holding every item of this kind, relative to the install root
    metadata_path: item metadata JSON, relative to the item's own folder
    """

    category_key: str
    content_root: PurePosixPath
    metadata_path: PurePosixPath


CARS = AssetKind(
    category_key="cars",
    content_root=PurePosixPath("content/cars"),
    metadata_path=PurePosixPath("ui/ui_car.json"),
)

TRACKS = AssetKind(
    category_key="tracks",
    content_root=PurePosixPath("content/tracks"),
    metadata_path=PurePosixPath("ui/meta_data.json"),
)

# New kinds are added here; order is the order of the startup rewrite pass.
ASSET_KINDS: tuple[AssetKind, ...] = (CARS, TRACKS)

_BY_KEY = {k.category_key: k for k in ASSET_KINDS}


def get_asset_kind(token: str) -> AssetKind | None:
    return _BY_KEY.get(token)
