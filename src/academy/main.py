"""
Academy Reports FastAPI Application

Attendance, exam, finance and student statistics for school administrators.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from academy.config import settings
from academy.core.database import close_db, engine

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Academy Reports"
VERSION = "0.1.0"


async def ping_database() -> str | None:
    """Run a trivial query; returns the error text, or None when healthy."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return str(e)
    return None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Refuse to start without a database; dispose the pool on shutdown."""
    print(f"🚀 {SERVICE_NAME} starting ({settings.ENVIRONMENT})...")

    error = await ping_database()
    if error is not None:
        print(f"❌ Database unreachable: {error}")
        raise RuntimeError(f"Database unreachable: {error}")
    print("✅ Database reachable")

    yield

    await close_db()
    print(f"🛑 {SERVICE_NAME} stopped")


health = APIRouter(tags=["Health"])


@health.get("/")
async def root() -> dict[str, str]:
    return {
        "service": SERVICE_NAME,
        "status": "operational",
        "version": VERSION,
        "environment": settings.ENVIRONMENT,
    }


@health.get("/health", response_model=None)
async def health_check() -> JSONResponse:
    """Dependency checks for load balancers; 503 when any fails."""
    error = await ping_database()
    database = {"status": "healthy"} if error is None else {"status": "unhealthy", "error": error}

    healthy = error is None
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "environment": settings.ENVIRONMENT,
            "checks": {"database": database},
        },
    )


@health.get("/health/ready", response_model=None)
async def readiness_check() -> dict[str, str] | JSONResponse:
    if await ping_database() is None:
        return {"status": "ready"}
    return JSONResponse(status_code=503, content={"status": "not_ready"})


@health.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Process is up; does not touch the database."""
    return {"status": "alive"}


def create_app() -> FastAPI:
    """Build the API: health checks plus the read-only report endpoints."""
    from academy.api.v1 import reports

    app = FastAPI(
        title=SERVICE_NAME,
        description="Filterable statistics over school and tutoring administration data",
        version=VERSION,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )

    # Reports are read-only
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_local else [],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health)
    app.include_router(reports.router, prefix="/api/v1/reports", tags=["Reports"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "academy.main:app",
        host="0.0.0.0",  # nosec B104 - bound inside the container
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
