"""
SchoolHub API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Database and Redis connections
- Background job scheduler and the holiday calendar bootstrap
- CORS middleware and exception handlers
- API routing
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from schoolhub.api import api_router
from schoolhub.core.config import settings
from schoolhub.core.database import async_session_maker, close_db, init_db
from schoolhub.core.errors import register_exception_handlers
from schoolhub.core.redis import close_redis, get_redis, init_redis
from schoolhub.core.scheduler import (
    list_registered_jobs,
    pause_job,
    resume_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from schoolhub.modules.holidays import initialize_holiday_system, register_holiday_jobs

logging.basicConfig(
    level=logging.DEBUG if settings.is_development else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Redis connection
    - Database connection
    - Holiday calendar seeding and event backfill
    - Background job scheduler
    """
    # Startup
    print(f"Starting SchoolHub API in {settings.python_env} mode...")

    # Initialize Redis
    try:
        await init_redis()
        print("[OK] Redis connected")
    except Exception as e:
        print(f"[FAIL] Redis connection failed (rate limiting falls back to memory): {e}")
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

    if settings.holiday_system_enabled:
        # Seed holidays and backfill their events
        try:
            result = await initialize_holiday_system()
            print(f"[OK] Holiday system initialized: {result}")
        except Exception as e:
            print(f"[FAIL] Holiday system initialization failed: {e}")

    # Initialize Background Job Scheduler
    try:
        if settings.holiday_system_enabled:
            register_holiday_jobs()

        await start_scheduler()
        print("[OK] Background scheduler started")
    except Exception as e:
        print(f"[FAIL] Background scheduler failed to start: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    # Shutdown
    print("Shutting down SchoolHub API...")

    # Stop the scheduler first (wait for running jobs)
    await stop_scheduler()
    print("[OK] Background scheduler stopped")

    await close_redis()
    await close_db()
    print("[OK] Cleanup complete")


app = FastAPI(
    title="SchoolHub API",
    description="School management API: subjects, enrollment, events and holidays",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")

register_exception_handlers(app)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to SchoolHub API",
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


@app.get("/debug/db", tags=["Debug"], include_in_schema=settings.is_development)
async def debug_db():
    """Test database connection."""
    try:
        async with async_session_maker() as session:
            result = await session.execute(text("SELECT 1"))
            return {"database": "connected", "result": result.scalar()}
    except Exception as e:
        return {"database": "error", "message": str(e)}


@app.get("/debug/redis", tags=["Debug"], include_in_schema=settings.is_development)
async def debug_redis():
    """Test Redis connection."""
    client = get_redis()
    try:
        if client:
            await client.ping()
            return {"redis": "connected"}
        return {"redis": "not initialized"}
    except Exception as e:
        return {"redis": "error", "message": str(e)}


# ============================================
# Background Job Debug Endpoints
# ============================================
# Manual triggering of background jobs. In normal operation jobs run on
# their cron schedule.


@app.get("/debug/jobs", tags=["Debug"], include_in_schema=settings.is_development)
async def list_jobs():
    """List all registered background jobs with next run time and pause status."""
    return {"jobs": list_registered_jobs()}


@app.post("/debug/jobs/{job_id}/trigger", tags=["Debug"], include_in_schema=settings.is_development)
async def trigger_job(job_id: str):
    """
    Run a background job immediately, bypassing its schedule.

    Args:
        job_id: The ID of the job to trigger. Available jobs:
            - holidays_annual_generation
            - holidays_monthly_check

    Raises:
        HTTPException 400: If job_id is not found.
    """
    try:
        return await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@app.post("/debug/jobs/{job_id}/pause", tags=["Debug"], include_in_schema=settings.is_development)
async def pause_job_endpoint(job_id: str):
    """Pause a scheduled job. It stays registered; resume it with /resume."""
    success = pause_job(job_id)
    return {"job_id": job_id, "paused": success}


@app.post("/debug/jobs/{job_id}/resume", tags=["Debug"], include_in_schema=settings.is_development)
async def resume_job_endpoint(job_id: str):
    """Resume a paused job."""
    success = resume_job(job_id)
    return {"job_id": job_id, "resumed": success}
