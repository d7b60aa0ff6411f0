"""
Main FastAPI application for the Stencil backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.dependencies.services import build_services
from app.routers import gateway, health, reports, templates
from app.services.section_writer import OllamaSectionWriter

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup helpers
# ---------------------------------------------------------------------------

async def _check_writer(writer) -> None:
    """Log whether the configured section writer is usable. Never raises."""
    if not isinstance(writer, OllamaSectionWriter):
        logger.info("✓ Section writer: deterministic template fill")
        return

    if await writer.check_health():
        logger.info("✓ Ollama reachable at %s (model %s)", writer.base_url, writer.model)
    else:
        logger.warning(
            "⚠ Ollama unreachable at %s — report generation will fail until it is up. "
            "Start it with: ollama serve",
            writer.base_url,
        )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting Stencil backend …")
    logger.info("=" * 60)

    # 1. Services (registries live for the process lifetime)
    app.state.services = build_services()

    # 2. Section writer (optional backend; logs warnings but continues)
    await _check_writer(app.state.services.writer)

    # 3. Upload staging directory
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    logger.info("✓ Upload directory: %s", os.path.abspath(settings.UPLOAD_DIR))

    logger.info("=" * 60)
    logger.info("  Stencil backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Gateway    : ws://%s:%d/ws/reports", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("Shutting down Stencil backend …")
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Stencil API",
    description=(
        "**Stencil** — template-driven report generation.\n\n"
        "Upload a PDF/DOCX as a template, let Stencil detect its sections, "
        "then generate structured reports that follow the template.\n\n"
        "Key endpoints:\n"
        "- `POST /api/templates/upload` — upload a template document\n"
        "- `GET  /api/templates` — list templates\n"
        "- `POST /api/reports/generate` — generate a report over HTTP\n"
        "- `GET  /api/reports` — list reports\n"
        "- `WS   /ws/reports` — generation gateway\n"
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health/", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Global exception handler
# ---------------------------------------------------------------------------

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,     prefix="/api/health",    tags=["Health"])
app.include_router(templates.router,  prefix="/api/templates", tags=["Templates"])
app.include_router(reports.router,    prefix="/api/reports",   tags=["Reports"])
app.include_router(gateway.router,    prefix="/ws",            tags=["Gateway"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root — returns basic service info."""
    return {
        "name": "Stencil API",
        "version": "0.1.0",
        "description": "Template-driven report generation backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "templates": "/api/templates",
            "reports": "/api/reports",
            "gateway": "/ws/reports",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
