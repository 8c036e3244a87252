"""HavenStay — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from havenstay.api.routes.admin import router as admin_router
from havenstay.api.routes.auth import router as auth_router
from havenstay.api.routes.bookings import router as bookings_router
from havenstay.api.routes.host import router as host_router
from havenstay.api.routes.messages import router as messages_router
from havenstay.api.routes.properties import router as properties_router
from havenstay.api.routes.reviews import router as reviews_router
from havenstay.api.routes.waitlist import router as waitlist_router
from havenstay.auth.dependencies import build_session_store
from havenstay.auth.sessions import SqlSessionStore
from havenstay.config import settings
from havenstay.errors import DomainError, InvalidInput
from havenstay.services.uploads import UPLOAD_URL_PREFIX
from havenstay.storage.memory import MemoryStorage

# Configure root logger so all havenstay.* loggers output to stderr.
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    if settings.storage_backend == "memory":
        app.state.memory_storage = MemoryStorage()
    sessions = build_session_store(settings)
    app.state.session_store = sessions
    if isinstance(sessions, SqlSessionStore):
        await sessions.purge_expired()
    logger.info(
        "%s %s started (storage=%s, sessions=%s)",
        settings.app_name,
        settings.app_version,
        settings.storage_backend,
        settings.session_backend,
    )
    yield
    # Shutdown — dispose engine connections
    from havenstay.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Short-term rental marketplace API: listings, bookings, reviews and messaging.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report schema violations as ``invalid_input`` with per-field detail."""
    error = InvalidInput.from_errors(exc.errors())
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "server_error", "message": "Internal server error"},
    )


# Routers
app.include_router(auth_router)
app.include_router(properties_router)
app.include_router(host_router)
app.include_router(bookings_router)
app.include_router(reviews_router)
app.include_router(messages_router)
app.include_router(waitlist_router)
app.include_router(admin_router)

# Uploaded listing images
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
