from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST

from tracklog import __version__
from tracklog.connectors.valkey import ValkeyConnector
from tracklog.errors import TrackLogError
from tracklog.models import AppendRequest, ScalarSetRequest
from tracklog.settings import Settings, settings as default_settings
from tracklog.store import ScalarStore, TrackStore
from tracklog.utils.logging import get_logger
from tracklog.utils.metrics import MetricsManager

logger = get_logger("API")

def create_app(settings: Optional[Settings] = None, connector: Optional[ValkeyConnector] = None) -> FastAPI:
    """
    Creates the tracklog HTTP application.

    Args:
        settings: Configuration; defaults to the environment-derived settings.
        connector: Pre-built connector. When omitted one is built from settings.
            It is connected on startup (a failure aborts startup) and closed
            on shutdown.
    """
    settings = settings or default_settings
    connector = connector or ValkeyConnector.from_settings(settings)
    metrics = MetricsManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await connector.connect()
        app.state.connector = connector
        app.state.tracks = TrackStore(connector, prefix=settings.TRACK_KEY_PREFIX,
                                      scan_batch_size=settings.SCAN_BATCH_SIZE)
        app.state.scalars = ScalarStore(connector)
        logger.info("tracklog API started")
        try:
            yield
        finally:
            await connector.close()
            logger.info("tracklog API stopped")

    app = FastAPI(title="tracklog", version=__version__, lifespan=lifespan)

    @app.middleware("http")
    async def count_requests(request: Request, call_next):
        response = await call_next(request)
        route = request.scope.get("route")
        metrics.counter("tracklog_http_requests_total", "HTTP requests by route and status",
                        ["method", "route", "status"]).labels(
            method=request.method,
            route=getattr(route, "path", "unmatched"),
            status=str(response.status_code),
        ).inc()
        return response

    @app.exception_handler(TrackLogError)
    async def handle_tracklog_error(request: Request, exc: TrackLogError) -> JSONResponse:
        content: Dict[str, Any] = {"error": exc.message}
        if exc.status_code >= 500:
            content["details"] = exc.details or str(exc)
            metrics.counter("tracklog_server_errors_total").inc()
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = "Invalid request"
        errors = exc.errors()
        if errors:
            loc = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            detail = errors[0].get("msg", "")
            message = f"Invalid request: {loc}: {detail}" if loc else f"Invalid request: {detail}"
        return JSONResponse(status_code=400, content={"error": message})

    @app.get("/health")
    async def health_check() -> JSONResponse:
        if await connector.ping():
            return JSONResponse({"status": "ok", "store": "up"})
        return JSONResponse({"status": "degraded", "store": "down"}, status_code=503)

    @app.get("/metrics")
    async def get_metrics() -> Response:
        return Response(content=metrics.export(), media_type=CONTENT_TYPE_LATEST)

    # --- Tracks ---

    @app.get("/api/track")
    async def get_track(request: Request, track_id: Optional[str] = Query(default=None, alias="trackId")) -> Dict[str, Any]:
        tracks: TrackStore = request.app.state.tracks
        if track_id is None:
            listing = await tracks.list_ids()
            return listing.model_dump(by_alias=True)
        snapshot = await tracks.read(track_id)
        return snapshot.model_dump(by_alias=True)

    @app.post("/api/track")
    async def append_track(request: Request, body: AppendRequest) -> Dict[str, Any]:
        tracks: TrackStore = request.app.state.tracks
        result = await tracks.append(body.track_id, body.data)
        return {
            "success": True,
            **result.model_dump(by_alias=True),
            "message": "New track created with data" if result.created else "Data appended to existing track",
        }

    @app.delete("/api/track")
    async def delete_track(request: Request, track_id: Optional[str] = Query(default=None, alias="trackId")) -> Dict[str, Any]:
        tracks: TrackStore = request.app.state.tracks
        deleted = await tracks.delete(track_id)
        return {
            "success": deleted,
            "message": "Track deleted" if deleted else "Track not found",
        }

    # --- Scalar key/value ---

    @app.get("/api/kv")
    async def get_value(request: Request, key: Optional[str] = Query(default=None)) -> Dict[str, Any]:
        scalars: ScalarStore = request.app.state.scalars
        value = await scalars.get(key)
        return {"key": key, "value": value, "exists": value is not None}

    @app.post("/api/kv")
    async def set_value(request: Request, body: ScalarSetRequest) -> Dict[str, Any]:
        scalars: ScalarStore = request.app.state.scalars
        await scalars.set(body.key, body.value, ttl_seconds=body.expires_in)
        return {"success": True, "key": body.key, "message": "Value saved"}

    @app.delete("/api/kv")
    async def delete_value(request: Request, key: Optional[str] = Query(default=None)) -> Dict[str, Any]:
        scalars: ScalarStore = request.app.state.scalars
        await scalars.delete(key)
        return {"success": True, "key": key, "message": "Value deleted"}

    return app
