"""
API routes module.
"""

from goq.api.routes.health import router as health_router
from goq.api.routes.jobs import router as jobs_router

__all__ = ["jobs_router", "health_router"]
