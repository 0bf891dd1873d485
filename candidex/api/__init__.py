"""
API layer for Candidex

Contains FastAPI routers for:
- Interview start and submission
- History and analytics
"""

from candidex.api.router import api_router

__all__ = ["api_router"]
