"""HTTP boundary tests using FastAPI's TestClient."""

from __future__ import annotations

import dataclasses
import io
import json
import zipfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from archiver_backend.errors import BuildFailedError
from server import create_app


@pytest.fixture
def client(config):
    with TestClient(create_app(config)) as c:
        yield c


def test_download_builds_archive(client, config):
    resp = client.get("/download/cars/ferrari_f40")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert "ferrari_f40.zip" in resp.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        assert "ferrari_f40/ui/ui_car.json" in zf.namelist()
    assert (config.cache_path / "cars" / "ferrari_f40.zip").is_file()


def test_zip_suffix_is_stripped(client):
    plain = client.get("/download/tracks/monza")
    suffixed = client.get("/download/tracks/monza.zip")

    assert suffixed.status_code == 200
    assert suffixed.content == plain.content


def test_missing_item_404(client, config):
    resp = client.get("/download/cars/ghost.zip")

    assert resp.status_code == 404
    assert resp.text == "not found"
    assert not (config.cache_path / "cars").exists()


def test_unknown_kind_404(client):
    assert client.get("/download/skins/ferrari_f40").status_code == 404


def test_item_names_are_case_sensitive(client):
    assert client.get("/download/cars/Ferrari_F40").status_code == 404


def test_build_failure_500(client, monkeypatch):
    def _fail(*args, **kwargs):
        raise BuildFailedError("boom")

    monkeypatch.setattr(client.app.state.retrieval.builder, "build", _fail)

    resp = client.get("/download/cars/ferrari_f40")

    assert resp.status_code == 500
    assert resp.text == "service error"


def test_disabled_404_and_no_rewrite(config, install_root: Path):
    cfg = dataclasses.replace(config, enabled=False)
    metadata = install_root / "content" / "cars" / "ferrari_f40" / "ui" / "ui_car.json"
    before = metadata.read_bytes()

    with TestClient(create_app(cfg)) as c:
        resp = c.get("/download/cars/ferrari_f40")

    assert resp.status_code == 404
    assert metadata.read_bytes() == before


def test_startup_rewrites_download_urls(client, install_root: Path):
    metadata = install_root / "content" / "tracks" / "monza" / "ui" / "meta_data.json"

    doc = json.loads(metadata.read_text(encoding="utf-8"))

    assert doc["downloadURL"] == "http://example.com/download/tracks/monza"


def test_startup_survives_broken_metadata(config, install_root: Path):
    (install_root / "content" / "cars" / "ferrari_f40" / "ui" / "ui_car.json").write_text("{", encoding="utf-8")

    with TestClient(create_app(config)) as c:
        assert c.get("/download/cars/ferrari_f40").status_code == 200


def test_status(client):
    resp = client.get("/api/status")

    assert resp.status_code == 200
    body = resp.json()
    assert body["enabled"] is True
    assert [k["category_key"] for k in body["kinds"]] == ["cars", "tracks"]
    assert body["kinds"][0]["metadata_path"] == "ui/ui_car.json"
