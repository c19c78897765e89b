"""Health check endpoints. No database access; used for liveness and readiness probes."""

from fastapi import APIRouter

from subcompliance.api.v1.dependencies import ContextDep
from subcompliance.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(context: ContextDep) -> ReadinessResponse:
    """Return 200 once the compliance context (document catalog) is loaded.

    Returns 500 with CONFIGURATION_ERROR while the context is missing.
    """
    return ReadinessResponse(document_types=len(context.catalog))
