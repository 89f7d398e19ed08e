"""Tests for the asset kind registry."""

from pathlib import PurePosixPath

from archiver_backend.asset_kinds import ASSET_KINDS, CARS, TRACKS, get_asset_kind


def test_cars_layout():
    assert CARS.category_key == "cars"
    assert CARS.content_root == PurePosixPath("content/cars")
    assert CARS.metadata_path == PurePosixPath("ui/ui_car.json")


def test_tracks_layout():
    assert TRACKS.category_key == "tracks"
    assert TRACKS.content_root == PurePosixPath("content/tracks")
    assert TRACKS.metadata_path == PurePosixPath("ui/meta_data.json")


def test_registry_order():
    assert ASSET_KINDS == (CARS, TRACKS)


def test_lookup_by_category_key():
    assert get_asset_kind("cars") is CARS
    assert get_asset_kind("tracks") is TRACKS
    assert get_asset_kind("Cars") is None
    assert get_asset_kind("skins") is None
