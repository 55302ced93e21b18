import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.config.settings import get_settings
from src.infrastructure.external.storage.factory import StorageFactory
from src.infrastructure.persistence.database import engine, get_db
from src.presentation.api.dependencies import set_storage_service
from src.presentation.api.v1.routes import helper_documents
from src.presentation.middleware.security import (RequestIDMiddleware,
                                                  RequestSizeLimitMiddleware,
                                                  SecurityHeadersMiddleware)
from src.presentation.middleware.timeout import TimeoutMiddleware
from src.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for application initialization and cleanup"""
    setup_logging()

    # Database schema is managed outside the service (the helfer table is shared)

    # Build the blob store once so misconfiguration fails at startup
    storage = StorageFactory.create_blob_store(settings)
    set_storage_service(storage)
    logger.info(
        f"Document storage initialized: backend={settings.storage_backend} "
        f"({type(storage).__name__})"
    )

    yield

    set_storage_service(None)
    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Security middleware (order matters - applied in reverse)
# 1. Request size limit (first check)
app.add_middleware(RequestSizeLimitMiddleware, max_request_size=settings.max_request_size)

# 2. Request ID for log correlation
app.add_middleware(RequestIDMiddleware)

# 3. Security headers
app.add_middleware(SecurityHeadersMiddleware)

# 4. Request deadline
app.add_middleware(TimeoutMiddleware, timeout=settings.request_timeout_seconds)

# 5. CORS middleware
# Security: Using allow_credentials=True requires specific origins (not wildcard)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)

# Routers
app.include_router(helper_documents.router, prefix="/helpers", tags=["documents"])


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
    - 200 OK if the API and database are reachable
    - 503 Service Unavailable otherwise
    """
    checks: dict[str, Any] = {
        "api": True,
        "database": False,
        "storage_backend": settings.storage_backend,
    }

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        logger.warning(f"Health check database probe failed: {e}")
        checks["error"] = str(e)
        return JSONResponse(
            status_code=503, content={"status": "unhealthy", "checks": checks}
        )

    return {"status": "healthy", "checks": checks}


def run() -> None:
    """Serve the app with uvicorn (console entry point)"""
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
