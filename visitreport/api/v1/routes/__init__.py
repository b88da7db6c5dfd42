"""
API Routes
All v1 API endpoints
"""
from visitreport.api.v1.routes.health import router as health_router
from visitreport.api.v1.routes.reports import router as reports_router

__all__ = [
    "health_router",
    "reports_router",
]
