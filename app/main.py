"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.routes import billing, health, readings, rooms
from app.core.config import settings
from app.core.database import Base, engine
from app.core.exceptions import InvalidBillingInput
from app.core.logging import configure_logging

# Import models for Base.metadata.create_all - order matters for foreign keys
from app.models import (
    room,  # noqa: F401
    meter_reading,  # noqa: F401
    bill,  # noqa: F401
)

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    # Startup: Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    # Shutdown: cleanup if needed


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Dormitory room billing service",
    lifespan=lifespan,
)


@app.exception_handler(InvalidBillingInput)
async def invalid_billing_input_handler(request: Request, exc: InvalidBillingInput) -> JSONResponse:
    """Reject billing requests the engine cannot calculate."""
    logger.info("Rejected billing request %s: %s", request.url.path, exc.message)
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message},
    )


# Include API routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(rooms.router, prefix="/api")
app.include_router(readings.router, prefix="/api")
app.include_router(billing.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
