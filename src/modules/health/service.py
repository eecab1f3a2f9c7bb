from dataclasses import dataclass
from typing import Literal

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.models import Role
from src.modules.roles.catalog import DEFAULT_PLATFORM_ROLES
from src.utils.datetime_helpers import utcnow
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: Literal["healthy", "unhealthy", "degraded"]
    connected: bool
    details: dict
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with individual service results."""

    status: Literal["healthy", "degraded", "unhealthy"]
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService:
    """Service for performing health checks on the database and role catalog."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def check_database_health(self) -> HealthCheckResult:
        """Database connection health check."""
        try:
            result = await self.db.execute(text("SELECT 1 as test"))
            test_value = result.scalar()

            return HealthCheckResult(
                service="database",
                status="healthy",
                connected=True,
                details={"test_query_result": test_value},
            )
        except Exception as e:
            logger.error(f"Database health check error: {e}")
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                details={},
                error=str(e),
            )

    async def check_role_catalog_health(self) -> HealthCheckResult:
        """Platform role catalog is seeded; degraded until bootstrap has run."""
        expected = {template.name for template in DEFAULT_PLATFORM_ROLES}
        try:
            result = await self.db.execute(
                select(func.count(Role.id)).where(
                    Role.name.in_(expected),
                    Role.organization_id.is_(None),
                    Role.is_active.is_(True),
                )
            )
            seeded = result.scalar_one()

            return HealthCheckResult(
                service="role_catalog",
                status="healthy" if seeded == len(expected) else "degraded",
                connected=True,
                details={"platform_roles": seeded, "expected": len(expected)},
            )
        except Exception as e:
            logger.error(f"Role catalog health check error: {e}")
            return HealthCheckResult(
                service="role_catalog",
                status="unhealthy",
                connected=False,
                details={},
                error=str(e),
            )

    async def run_all_checks(self) -> OverallHealthStatus:
        """Run all health checks and return overall status."""
        # Both checks share one session, so they run sequentially
        results = [
            await self.check_database_health(),
            await self.check_role_catalog_health(),
        ]

        services = {}
        overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"

        for service_result in results:
            if service_result.status == "unhealthy":
                overall_status = "unhealthy"
            elif service_result.status == "degraded" and overall_status == "healthy":
                overall_status = "degraded"
            services[service_result.service] = service_result

        return OverallHealthStatus(
            status=overall_status,
            services=services,
            timestamp=utcnow().isoformat(),
        )
