"""
Health Aggregator

Checks the graph database and PostgreSQL concurrently and reports a
composite status. Healthy only when both are connected. Never raises:
check failures are reported as 'disconnected' with the error message.
No retries, every call is a fresh point-in-time check.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict

from models.api.health import DependencyStatus, HealthResponse

logger = logging.getLogger(__name__)

StatusCheck = Callable[[], Awaitable[Dict[str, Any]]]


async def _check(name: str, check: StatusCheck) -> DependencyStatus:
    try:
        result = await check()
    except Exception as e:
        logger.debug(f"{name} check raised: {e}")
        result = {'connected': False, 'error': str(e) or type(e).__name__}

    if result.get('connected'):
        return DependencyStatus(status="connected")
    return DependencyStatus(status="disconnected", error=result.get('error'))


class HealthService:
    """Composite health of the two backing stores"""

    def __init__(self, graphdb_check: StatusCheck, postgres_check: StatusCheck):
        self.graphdb_check = graphdb_check
        self.postgres_check = postgres_check

    async def check_health(self) -> HealthResponse:
        graphdb, postgresql = await asyncio.gather(
            _check("graphdb", self.graphdb_check),
            _check("postgresql", self.postgres_check),
        )

        healthy = graphdb.status == "connected" and postgresql.status == "connected"
        health = HealthResponse(
            status="healthy" if healthy else "unhealthy",
            graphdb=graphdb,
            postgresql=postgresql,
        )

        if healthy:
            logger.debug("Health check passed")
        else:
            logger.warning(f"⚠️  Health check failed: {health.to_body()}")
        return health
