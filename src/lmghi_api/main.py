"""
LMGHI API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Database and Redis connections
- CORS middleware and the admin access gate
- API and page routing
- Health check endpoints
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lmghi_api.api import api_router
from lmghi_api.core.admin_gate import AdminAccessError, AdminGateMiddleware
from lmghi_api.core.config import settings
from lmghi_api.core.database import close_db, init_db
from lmghi_api.core.redis import close_redis, init_redis
from lmghi_api.modules.volunteer_applications import pages_router


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Redis connection (rate limiting falls back to memory without it)
    - Database connection
    """
    # Startup
    print(f"Starting LMGHI API in {settings.python_env} mode...")

    # Initialize Redis
    try:
        await init_redis()
        print("[OK] Redis connected")
    except Exception as e:
        print(f"[FAIL] Redis connection failed: {e}")
        if settings.is_production:
            raise

    # Initialize Database
    try:
        await init_db()
        print("[OK] Database connected")
    except Exception as e:
        print(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    # Shutdown
    print("Shutting down LMGHI API...")
    await close_redis()
    await close_db()
    print("[OK] Cleanup complete")


app = FastAPI(
    title="LMGHI API",
    description="LMGHI volunteer intake and admin review API",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api")
app.include_router(pages_router)

# Pages under /admin are gated here; the admin API checks the cookie itself
app.add_middleware(AdminGateMiddleware)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_origin_regex=settings.preview_origin_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(AdminAccessError)
async def admin_access_error_handler(_request: Request, exc: AdminAccessError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "message": exc.message})


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to LMGHI API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check endpoint."""
    return {"status": "ready"}
