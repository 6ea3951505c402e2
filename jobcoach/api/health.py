"""
Health check endpoints.
"""
from fastapi import APIRouter
from pydantic import BaseModel

from jobcoach import __version__

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness probe."""
    return HealthResponse(status="ok")


@router.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "JobCoach Resume Service",
        "version": __version__,
        "docs": "/docs",
    }
