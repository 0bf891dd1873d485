"""
Candidex - AI Mock Interview Platform

Main application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from candidex.config.settings import get_settings
from candidex.core.exceptions import ConfigurationError
from candidex.api.router import api_router
from candidex.api.dependencies import cleanup, get_admission_controller, get_gateway

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Candidex...")
    settings = get_settings()
    logger.info(f"Running in {'debug' if settings.debug else 'production'} mode")

    # Fail fast on a missing provider key instead of degrading every call
    try:
        get_gateway()
    except ConfigurationError as e:
        logger.error(f"Provider configuration error: {e}")
        raise

    await get_admission_controller().start()

    yield

    # Shutdown
    logger.info("Shutting down Candidex...")
    await cleanup()


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title="Candidex",
    description="AI Mock Interview Platform",
    version=settings.app_version,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount API routes
app.include_router(api_router, prefix="/api")


# ============================================================================
# ROOT ROUTES
# ============================================================================

@app.get("/")
async def root():
    """API banner."""
    return {
        "message": "Candidex API is running",
        "version": settings.app_version,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    try:
        get_gateway()
    except ConfigurationError:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "provider": "unconfigured",
                "version": settings.app_version,
            },
        )

    return {
        "status": "healthy",
        "provider": "configured",
        "version": settings.app_version,
    }


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
