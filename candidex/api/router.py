"""
Main API router for Candidex

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from candidex.api.endpoints import interview

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    interview.router,
    prefix="/interview",
    tags=["Interview"]
)
