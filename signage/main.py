import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from signage.api import (
    analytics,
    auth,
    content,
    customers,
    layouts,
    player_auth,
    player_device,
    players,
    playlists,
    schedules,
    sites,
    users,
    webhooks,
)
from signage.db import init_db
from signage.services.errors import SignageError
from signage.services.player_status import player_status_watcher
from signage.services.storage import ensure_storage
from signage.settings import (
    CORS_ORIGINS,
    LOG_LEVEL,
    PLAYER_STATUS_SWEEP_ENABLED,
    QUIET_ACCESS_LOG,
    STORAGE_DIR,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("signage")

if QUIET_ACCESS_LOG:
    # Keep warning/error lines, suppress normal access noise (200/201 etc).
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

init_db()
ensure_storage()

_player_status_task: asyncio.Task | None = None


def _error(status_code: int, message: str, code: str | None = None) -> JSONResponse:
    return JSONResponse({"status": "error", "message": message, "code": code}, status_code=status_code)


app = FastAPI(title="Digital Signage API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SignageError)
async def signage_error_handler(request: Request, exc: SignageError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message, exc.code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        text = str(first.get("msg", message)).removeprefix("Value error, ")
        message = f"{field}: {text}" if field else text
    return _error(400, message, "VALIDATION_ERROR")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "An unexpected error occurred", "INTERNAL_ERROR")


@app.get("/")
def root():
    return {
        "ok": True,
        "service": "signage-api",
        "time_utc": datetime.now(timezone.utc).isoformat(),
        "docs": "/docs",
    }


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.on_event("startup")
async def startup_events() -> None:
    global _player_status_task
    if not PLAYER_STATUS_SWEEP_ENABLED:
        return
    if _player_status_task is None or _player_status_task.done():
        _player_status_task = asyncio.create_task(player_status_watcher())


@app.on_event("shutdown")
async def shutdown_events() -> None:
    global _player_status_task
    if _player_status_task is not None:
        _player_status_task.cancel()
        try:
            await _player_status_task
        except asyncio.CancelledError:
            pass
        _player_status_task = None


api = APIRouter(prefix="/api/v1")
for module in (
    auth,
    player_auth,
    player_device,
    customers,
    users,
    sites,
    players,
    content,
    playlists,
    layouts,
    schedules,
    webhooks,
    analytics,
):
    api.include_router(module.router)
app.include_router(api)

app.mount("/storage", StaticFiles(directory=STORAGE_DIR), name="storage")
