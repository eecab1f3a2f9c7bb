"""Health check endpoints for debugging and monitoring."""

from fastapi import APIRouter

from src.api.core.dependencies import AsyncSessionDep
from src.modules.health.service import HealthService, OverallHealthStatus
from src.utils.settings.app import AppSettings

# Create separate routers for root and health endpoints
root_router = APIRouter()
router = APIRouter(prefix="/health", tags=["health"])


@root_router.get("/")
async def root():
    """Service banner."""
    return {"service": "blocktrade-access-api", "version": AppSettings().API_VERSION}


@router.get("/")
async def health_check(db: AsyncSessionDep) -> OverallHealthStatus:
    """Health check for the database and the role catalog."""
    health_service = HealthService(db)
    return await health_service.run_all_checks()


@router.get("/liveness")
async def liveness_check():
    """Simple liveness check - indicates if service is running."""
    return {"status": "alive", "service": "blocktrade-access-api"}
