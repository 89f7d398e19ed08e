from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel

from archiver_backend.asset_kinds import ASSET_KINDS, get_asset_kind
from archiver_backend.cache import ARCHIVE_SUFFIX
from archiver_backend.config import ArchiverConfig, load_config
from archiver_backend.errors import BuildFailedError, ItemNotFoundError
from archiver_backend.metadata import DOWNLOAD_ROUTE, rewrite_all_kinds
from archiver_backend.retrieval import RetrievalService


log = logging.getLogger("archiver")


class AssetKindInfo(BaseModel):
    category_key: str
    content_root: str
    metadata_path: str


class StatusResponse(BaseModel):
    enabled: bool
    kinds: list[AssetKindInfo]


def _not_found() -> Response:
    return PlainTextResponse("not found", status_code=404)


def _strip_archive_suffix(name: str) -> str:
    if name.endswith(ARCHIVE_SUFFIX):
        return name[: -len(ARCHIVE_SUFFIX)]
    return name


def create_app(config: Optional[ArchiverConfig] = None) -> FastAPI:
    config = config or load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Patch download URLs once, before the download route is reachable.
        if config.enabled:
            errors = await asyncio.to_thread(rewrite_all_kinds, config)
            for err in errors:
                log.warning("download URL not set: %s", err)
            if errors:
                log.warning("%d metadata files could not be updated", len(errors))
        else:
            log.info("archiver disabled; downloads will answer 404")
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.config = config
    app.state.retrieval = RetrievalService(config)

    @app.get("/api/status", response_model=StatusResponse)
    async def status(request: Request) -> StatusResponse:
        cfg: ArchiverConfig = request.app.state.config
        return StatusResponse(
            enabled=cfg.enabled,
            kinds=[
                AssetKindInfo(
                    category_key=k.category_key,
                    content_root=str(k.content_root),
                    metadata_path=str(k.metadata_path),
                )
                for k in ASSET_KINDS
            ],
        )

    @app.get(f"/{DOWNLOAD_ROUTE}/{{kind}}/{{name}}")
    async def download(kind: str, name: str, request: Request) -> Response:
        """Serve the ZIP for one car/track, building it on first request.

        Status mapping:
        - 200 archive bytes
        - 404 archiver disabled, unknown kind, or item not on disk
        - 500 archive build failed
        """
        cfg: ArchiverConfig = request.app.state.config
        if not cfg.enabled:
            return _not_found()

        asset_kind = get_asset_kind(kind)
        if asset_kind is None:
            return _not_found()

        item_name = _strip_archive_suffix(name)
        service: RetrievalService = request.app.state.retrieval
        try:
            # Building is blocking filesystem work; keep it off the event loop.
            data = await asyncio.to_thread(service.fetch, asset_kind, item_name)
        except ItemNotFoundError:
            return _not_found()
        except BuildFailedError:
            log.exception("archive build failed for %s/%s", kind, item_name)
            return PlainTextResponse("service error", status_code=500)

        headers = {
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(item_name + ARCHIVE_SUFFIX, safe='')}",
            "X-Content-Type-Options": "nosniff",
        }
        return Response(content=data, media_type="application/zip", headers=headers)

    return app


app = create_app()


if __name__ == "__main__":
    # Convenience: python server.py
    import uvicorn

    port = int(os.environ.get("PORT", "8010"))
    uvicorn.run("server:app", host="127.0.0.1", port=port, reload=False)
