"""API v1 package."""

from .directories import router as directories_router
from .queries import router as queries_router

__all__ = ["directories_router", "queries_router"]
