"""
Org Chart Service - FastAPI Application
Hosts the organization chart hierarchy engine behind a small HTTP surface.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from orgchart.app.config import get_settings
from orgchart.app.routers import org_chart
from orgchart.core.utils.logging import setup_logging

settings = get_settings()

# Initialize logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version}",
        extra={
            "environment": settings.environment,
            "node_store_backend": settings.node_store_backend
        }
    )
    yield
    logger.info(f"Shutting down {settings.app_name}")


tags_metadata = [
    {
        "name": "Org Chart",
        "description": "Organization chart hierarchy: tree view, search, and admin-only create, edit, move and delete."
    },
    {
        "name": "Health",
        "description": "Liveness endpoint."
    }
]

app = FastAPI(
    title="Org Chart Service",
    version=settings.app_version,
    description="Reporting hierarchy engine for the funding approval application.",
    docs_url="/docs" if settings.enable_api_docs else None,
    redoc_url="/redoc" if settings.enable_api_docs else None,
    openapi_tags=tags_metadata,
    lifespan=lifespan
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing."""
    start_time = time.time()

    # Pattern: /api/v1/org-chart/{org_id}/...
    org_id = "unknown"
    path_parts = request.url.path.strip("/").split("/")
    if len(path_parts) >= 4 and path_parts[:3] == ["api", "v1", "org-chart"]:
        org_id = path_parts[3]

    response = await call_next(request)

    duration_ms = round((time.time() - start_time) * 1000, 2)
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "org_id": org_id
        }
    )
    return response


@app.get("/health", tags=["Health"])
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


app.include_router(org_chart.router, prefix="/api/v1/org-chart", tags=["Org Chart"])
