"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from subcompliance.api.v1.dependencies (no manual
repo/service construction).
"""

from fastapi import APIRouter

from subcompliance.api.v1.endpoints import documents, health, reminders, subcontractors

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    subcontractors.router, prefix="/subcontractors", tags=["subcontractors"]
)
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(reminders.router, prefix="/reminders", tags=["reminders"])
