"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shared.config.settings import settings
from shared.config.logging import rest_api_logger as logger
from shared.infrastructure.db import SessionLocal
from shared.utils.schemas import HealthResponse
from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.commands import router as commands_router
from rest_api.routers.tables import router as tables_router


app = FastAPI(
    title="Command Ops REST API",
    description="Restaurant command lifecycle and billing API",
    version="0.1.0",
    lifespan=lifespan,
)

configure_cors(app)
register_middlewares(app)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        service="rest-api",
        environment=settings.environment,
    )


@app.get("/api/health/detailed")
def detailed_health_check():
    """
    Health check that verifies database connectivity.
    Returns 503 when the database cannot be reached.
    """
    checks = {
        "service": "rest-api",
        "environment": settings.environment,
        "dependencies": {},
    }

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        checks["dependencies"]["database"] = {"status": "healthy"}
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        checks["dependencies"]["database"] = {"status": "unhealthy", "error": str(e)}
        checks["status"] = "degraded"
        return JSONResponse(content=checks, status_code=503)

    checks["status"] = "healthy"
    return checks


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(commands_router)
app.include_router(tables_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=settings.debug,
    )
