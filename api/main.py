from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.orm import Session
import json
import logging
import socketio
import sys
import time

from app.api.v1.router import router as v1_router
from app.auth.dependencies import AUTH_EXPIRED_HEADER
from app.config.settings import settings
from app.db.session import SessionLocal, get_db
from app.realtime.socket_server import broadcaster, sio
from app.services.errors import DomainError
from app.services.timebomb_sweeper import TimeBombSweeper

# Configure structured logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

MAX_BODY_PREVIEW_CHARS = 600


def _error_summary_from_response(status_code: int, response) -> str | None:
    """Return the domain error code, or a short log-safe body preview, for an error response."""
    if status_code < 400:
        return None
    raw_body = getattr(response, "body", None)
    if not isinstance(raw_body, (bytes, bytearray)) or not raw_body:
        return None
    preview = raw_body.decode("utf-8", errors="replace").strip().replace("\n", " ")
    if not preview:
        return None
    try:
        detail = json.loads(preview).get("detail")
    except (ValueError, AttributeError):
        detail = None
    if isinstance(detail, dict) and detail.get("code"):
        return f"code={detail['code']} message={detail.get('message')}"
    if len(preview) > MAX_BODY_PREVIEW_CHARS:
        preview = f"{preview[:MAX_BODY_PREVIEW_CHARS]}..."
    return f"body={preview}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the TimeBomb sweeper and log startup/shutdown."""
    # Startup
    logger.info("Application starting up")
    logger.info("Debug mode: %s", settings.DEBUG)
    app.state.sweeper = None
    if settings.TIMEBOMB_SWEEP_ENABLED:
        app.state.sweeper = TimeBombSweeper(
            session_factory=SessionLocal,
            broadcaster=broadcaster,
            interval_seconds=settings.TIMEBOMB_SWEEP_INTERVAL_SECONDS,
        )
        app.state.sweeper.start()
    else:
        logger.info("TimeBomb sweeper disabled")
    yield
    # Shutdown
    if app.state.sweeper is not None:
        await app.state.sweeper.stop()
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Encore song request API",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(DomainError)
async def handle_domain_error(request: Request, exc: DomainError):
    """Map typed domain failures to a stable status and error code."""
    headers = {AUTH_EXPIRED_HEADER: "1"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.to_detail()},
        headers=headers,
    )


@app.middleware("http")
async def log_non_success_responses(request: Request, call_next):
    """Log 4xx/5xx responses with timing and the domain error code when there is one."""
    started_at = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = (time.perf_counter() - started_at) * 1000
        logger.exception(
            "Unhandled exception on %s %s after %.2fms",
            request.method,
            request.url.path,
            elapsed_ms,
        )
        raise

    if response.status_code >= 400:
        elapsed_ms = (time.perf_counter() - started_at) * 1000
        log_parts = [
            f"{request.method} {request.url.path}",
            f"status={response.status_code}",
            f"elapsed_ms={elapsed_ms:.2f}",
        ]
        if request.client and request.client.host:
            log_parts.append(f"client={request.client.host}")
        summary = _error_summary_from_response(response.status_code, response)
        if summary:
            log_parts.append(summary)
        logger.warning("HTTP response debug: %s", " | ".join(log_parts))

    return response


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    expose_headers=[AUTH_EXPIRED_HEADER],
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Welcome to Encore API"}


@app.get("/health")
async def health_check(request: Request, db: Session = Depends(get_db)):
    """Health check with database connectivity and sweeper state"""
    sweeper = getattr(request.app.state, "sweeper", None)
    sweeper_state = "running" if sweeper is not None and sweeper.is_running else "disabled"
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check failed: %s", e)
        return {"status": "unhealthy", "database": "disconnected", "timebomb_sweeper": sweeper_state}
    return {"status": "healthy", "database": "connected", "timebomb_sweeper": sweeper_state, "version": "1.0.0"}


# Include v1 routes
app.include_router(v1_router, prefix="/api/v1")

# Socket.IO rooms for per-event broadcasts
app.mount("/ws", socketio.ASGIApp(sio, socketio_path=settings.SOCKETIO_PATH))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
