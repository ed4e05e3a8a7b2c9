"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from detail_composite.api.deps import container
from detail_composite.api.v1 import composite, health
from detail_composite.core.config import settings
from detail_composite.core.constants import API_PREFIX
from detail_composite.core.exceptions import DetailCompositeError
from detail_composite.core.logging import get_logger, setup_logging

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(
        "Starting DetailComposite",
        app_name=settings.app_name,
        env=settings.app_env,
        dataverse_url=settings.dataverse.url,
    )

    container.initialize()

    yield

    logger.info("Shutting down DetailComposite")
    await container.shutdown()


app = FastAPI(
    title="DetailComposite API",
    description="Resolves composite text values from Dataverse records",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)


# Exception handlers
@app.exception_handler(DetailCompositeError)
async def detail_composite_error_handler(
    request: Request,
    exc: DetailCompositeError,
) -> JSONResponse:
    """Handle engine errors."""
    logger.error(
        "Application error",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected errors."""
    logger.exception(
        "Unexpected error",
        error=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


# Include routers
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(composite.router, prefix=API_PREFIX, tags=["Composite"])


# Root endpoint
@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "endpoints": {
            "health": f"{API_PREFIX}/health",
            "resolve": f"{API_PREFIX}/composite/resolve",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "detail_composite.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
