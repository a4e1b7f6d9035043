"""FastAPI routes for the Wakedeck device registry and wake API."""

import logging
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from wakedeck import __version__
from wakedeck.api.models import (
    DeviceCreate,
    DeviceResponse,
    DeviceUpdate,
    HealthResponse,
    WakeRequest,
)
from wakedeck.config.loader import DEFAULT_CONFIG, Settings
from wakedeck.core.errors import WakeError
from wakedeck.storage.devices import DeviceNotFoundError, DeviceStore, DuplicateDeviceError

logger = logging.getLogger(__name__)


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    details: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        key = loc[-1] if loc else "body"
        details.setdefault(key, []).append(err.get("msg", "Invalid value"))
    return details


def _load_settings(config_path: Path) -> Settings:
    from wakedeck.config.loader import load_config, settings_from_config, validate_config

    if not config_path.exists():
        logger.warning("Config not found at %s, using defaults", config_path)
        return Settings()
    raw = load_config(config_path)
    if not raw:
        return Settings()
    errors = validate_config(raw)
    if errors:
        logger.warning("Config validation errors: %s", errors)
        return Settings()
    return settings_from_config(raw)


def create_app(config_path: Optional[str] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config_path: Path to wakedeck config.yaml. If None, uses the default location.

    Returns:
        FastAPI application instance
    """
    _config_path = Path(config_path) if config_path else DEFAULT_CONFIG

    app = FastAPI(
        title="Wakedeck",
        version=__version__,
        description="Register network devices and wake them with Wake-on-LAN",
    )

    # ── App state ─────────────────────────────────────────────────────────────
    app.state.config_path = _config_path
    app.state.settings = _load_settings(_config_path)
    app.state.store = DeviceStore(app.state.settings.data_file)
    logger.info("Device registry at %s", app.state.store.path)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"error": "Validation failed", "details": _field_errors(exc)},
            status_code=400,
        )

    def _store() -> DeviceStore:
        store: DeviceStore = app.state.store
        return store

    # ── Health ────────────────────────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse)
    async def get_health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    # ── Device CRUD ───────────────────────────────────────────────────────────

    @app.get("/api/devices", response_model=list[DeviceResponse])
    async def list_devices() -> list[dict[str, Any]]:
        return [d.to_dict() for d in _store().read_devices()]

    @app.post("/api/devices")
    async def create_device(req: DeviceCreate) -> JSONResponse:
        try:
            device = _store().add(req.name, req.mac, req.ip)
        except DuplicateDeviceError as exc:
            return JSONResponse({"error": str(exc)}, status_code=409)
        return JSONResponse(device.to_dict(), status_code=201)

    @app.patch("/api/devices/{device_id}")
    async def update_device(device_id: str, req: DeviceUpdate) -> JSONResponse:
        try:
            device = _store().update(
                device_id,
                name=req.name,
                mac=req.mac,
                ip=req.ip,
                status=req.status,
                last_woken=req.last_woken,
            )
        except DeviceNotFoundError:
            return JSONResponse({"error": "Device not found"}, status_code=404)
        except DuplicateDeviceError as exc:
            return JSONResponse({"error": str(exc)}, status_code=409)
        return JSONResponse(device.to_dict())

    @app.delete("/api/devices/{device_id}")
    async def delete_device(device_id: str) -> JSONResponse:
        if not _store().delete(device_id):
            return JSONResponse({"error": "Device not found"}, status_code=404)
        return JSONResponse({"success": True})

    # ── Wake ──────────────────────────────────────────────────────────────────

    @app.post("/api/wake")
    async def post_wake(req: WakeRequest) -> JSONResponse:
        from wakedeck.core.wol import send_magic_packet

        try:
            await run_in_threadpool(send_magic_packet, req.mac, req.ip, req.port)
        except WakeError as exc:
            logger.error(
                "Failed to send magic packet to %s via %s:%d: %s", req.mac, req.ip, req.port, exc
            )
            return JSONResponse({"error": str(exc)}, status_code=500)
        logger.info("Magic packet sent to %s via %s:%d", req.mac, req.ip, req.port)
        return JSONResponse({"success": True})

    @app.post("/api/devices/{device_id}/wake")
    async def post_device_wake(device_id: str) -> JSONResponse:
        from wakedeck.core.wol import send_magic_packet

        store = _store()
        try:
            device = store.get(device_id)
        except DeviceNotFoundError:
            return JSONResponse({"error": "Device not found"}, status_code=404)

        port = app.state.settings.wol_port
        try:
            await run_in_threadpool(send_magic_packet, device.mac, device.ip, port)
        except WakeError as exc:
            logger.error("Failed to wake %s (%s): %s", device.name, device.mac, exc)
            return JSONResponse({"error": str(exc)}, status_code=500)

        logger.info(
            "Magic packet sent to %s (%s) via %s:%d", device.name, device.mac, device.ip, port
        )
        try:
            device = store.mark_woken(device_id)
        except DeviceNotFoundError:
            return JSONResponse({"error": "Device not found"}, status_code=404)
        return JSONResponse(device.to_dict())

    return app
