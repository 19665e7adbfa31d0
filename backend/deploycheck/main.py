"""
Deployment Readiness Validator - FastAPI Application Entry Point
"""

from fastapi import FastAPI

from deploycheck.config import settings
from deploycheck.api.v1.endpoints import health, readiness
from deploycheck.logger import logger

# Create app
app = FastAPI(
    title=settings.APP_NAME,
    description="Deployment readiness validation with weighted and penalty scoring",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(readiness.router, prefix="/api/v1/readiness")


@app.on_event("startup")
async def startup():
    """Initialize on startup."""
    logger.info(f"Starting {settings.APP_NAME} for {settings.PROJECT_NAME}...")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs"
    }
