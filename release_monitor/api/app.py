import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from release_monitor.access_gate.errors import UnauthorizedError
from release_monitor.access_gate.service import AccessGate
from release_monitor.common.api import NO_DATA_MESSAGE, UNAUTHORIZED_MESSAGE, error_response, snapshot_response
from release_monitor.common.enums import AccessDecision, Freshness
from release_monitor.config import (
    ReleaseMonitorConfig,
    build_access_gate,
    build_snapshot_cache_service,
    load_release_monitor_config,
)
from release_monitor.snapshot_store.errors import NoDataAvailable
from release_monitor.snapshot_store.service import SnapshotCacheService

logger = logging.getLogger(__name__)

CACHE_STATUS_HEADER = "X-Cache-Status"
CACHE_CONTROL = "max-age=60, s-maxage=60"


def get_cache_service(request: Request) -> SnapshotCacheService:
    return request.app.state.cache_service


def get_access_gate(request: Request) -> AccessGate:
    return request.app.state.access_gate


def create_app(
    *,
    config: Optional[ReleaseMonitorConfig] = None,
    cache_service: Optional[SnapshotCacheService] = None,
    access_gate: Optional[AccessGate] = None,
) -> FastAPI:
    cfg = config or load_release_monitor_config()
    app = FastAPI(title="Release Monitor", docs_url=None, redoc_url=None)
    app.state.cache_service = cache_service or build_snapshot_cache_service(config=cfg)
    app.state.access_gate = access_gate or build_access_gate(cfg)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
        expose_headers=[CACHE_STATUS_HEADER],
    )

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/api/release")
    @app.get("/api/releases")
    async def get_releases(
        authorization: Optional[str] = Header(default=None),
        service: SnapshotCacheService = Depends(get_cache_service),
        gate: AccessGate = Depends(get_access_gate),
    ):
        try:
            decision = gate.authorize(authorization)
        except UnauthorizedError:
            return JSONResponse(status_code=401, content=error_response(UNAUTHORIZED_MESSAGE))

        try:
            entry = await service.get_snapshot(force_refresh=decision == AccessDecision.refresh)
        except NoDataAvailable:
            return JSONResponse(status_code=500, content=error_response(NO_DATA_MESSAGE))

        headers = {CACHE_STATUS_HEADER: entry.freshness.value}
        if entry.freshness in (Freshness.miss, Freshness.refreshed):
            headers["Cache-Control"] = CACHE_CONTROL
        return JSONResponse(status_code=200, content=snapshot_response(entry.snapshot), headers=headers)

    return app
