"""
Pytest fixtures: a throwaway content install tree and a matching config.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from archiver_backend.config import ArchiverConfig


def write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    """Install tree with one car (nested files) and one track."""
    root = tmp_path / "server"

    car = root / "content" / "cars" / "ferrari_f40"
    write_json(car / "ui" / "ui_car.json", {"name": "Ferrari F40", "author": "john", "year": 1987})
    (car / "data.acd").write_bytes(b"\x00\x01binary-data\xff")
    (car / "skins" / "red").mkdir(parents=True)
    (car / "skins" / "red" / "preview.jpg").write_bytes(b"jpeg" * 100)

    track = root / "content" / "tracks" / "monza"
    write_json(track / "ui" / "meta_data.json", {"name": "Monza", "author": "kunos"})
    (track / "models.ini").write_text("[MODEL_0]\nFILE=monza.kn5\n", encoding="utf-8")

    return root


@pytest.fixture
def config(install_root: Path, tmp_path: Path) -> ArchiverConfig:
    return ArchiverConfig(
        install_path=install_root,
        cache_path=tmp_path / "cache",
        base_domain="http://example.com",
    )
