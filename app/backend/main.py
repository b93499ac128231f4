"""
FastAPI application for the credit report worker.

Provides endpoints for:
- Processing a queued credit report job
- Looking up a job's status and result summary
- Health checks
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .models import HealthResponse, ProcessErrorResponse
from .routers import jobs, process

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if get_settings().debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    logger.info("Worker service running on port %d", settings.port)
    if not settings.openai_api_key:
        logger.warning(
            "OPENAI_API_KEY is not set. Every chunk will fail extraction until it is configured."
        )
    logger.info("Ready to process PDF jobs")
    yield
    logger.info("Shutting down credit report worker...")


# Create FastAPI application
app = FastAPI(
    title="Credit Report Worker",
    description="Extracts credit items from PDF credit reports",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(process.router)
app.include_router(jobs.router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report invalid /process bodies in the same shape as failed jobs."""
    if request.url.path != "/process":
        return await request_validation_exception_handler(request, exc)

    fields = ", ".join(
        ".".join(str(part) for part in error["loc"] if part != "body") for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ProcessErrorResponse(error=f"Invalid request: {fields}").model_dump(),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
