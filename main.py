"""
HRMS - FastAPI Application Entry Point

This is the main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import close_db, init_db
from app.services.cache_service import close_cache_service
from app.utils.error_handling import setup_exception_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")

    # Initialize database (dev only - use migrations in production)
    if settings.is_development:
        await init_db()
        logger.info("Database tables initialized")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_cache_service()
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Human resources management API: employees, organization structure, leave and imports",
    version="0.1.0",
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url="/api/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)


# ===========================================
# API ROUTES
# ===========================================

@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "status": "running",
        "environment": settings.app_env,
        "api_docs": "/api/docs" if settings.is_development else "disabled",
    }


# ===========================================
# INCLUDE ROUTERS
# ===========================================

from app.routers import (  # noqa: E402
    activity_logs,
    auth,
    departments,
    employee_imports,
    employee_records,
    employees,
    employments,
    health,
    leave,
    lookups,
    notifications,
    positions,
    recycle_bin,
)

app.include_router(health.router)

# Authentication
app.include_router(auth.router, prefix=settings.api_prefix)

# Employees and their records
app.include_router(employees.router, prefix=settings.api_prefix, tags=["Employees"])
app.include_router(employee_records.router, prefix=settings.api_prefix, tags=["Employee Records"])
app.include_router(employments.router, prefix=settings.api_prefix, tags=["Employments"])
app.include_router(employee_imports.router, prefix=settings.api_prefix, tags=["Employee Import & Export"])

# Organization structure
app.include_router(departments.router, prefix=settings.api_prefix, tags=["Departments"])
app.include_router(positions.router, prefix=settings.api_prefix, tags=["Positions"])

# Leave
app.include_router(leave.router, prefix=settings.api_prefix, tags=["Leave"])

# Reference data
app.include_router(lookups.router, prefix=settings.api_prefix, tags=["Lookups"])

# Recycle bin, audit trail and notifications
app.include_router(recycle_bin.router, prefix=settings.api_prefix, tags=["Recycle Bin"])
app.include_router(activity_logs.router, prefix=settings.api_prefix)
app.include_router(notifications.router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
