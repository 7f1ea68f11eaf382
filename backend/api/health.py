"""
Health API
==========

Endpoints:
- GET /health      - composite status of graph database and PostgreSQL
- GET /api/health  - same, under the API prefix used by the frontends

200 when healthy, 503 otherwise. Never raises to the client.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_health_service
from models.api.health import DISCONNECTED
from services.health_service import HealthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
@router.get("/api/health", include_in_schema=False)
async def health(health_service: Optional[HealthService] = Depends(get_health_service)):
    if health_service is None:
        return JSONResponse(status_code=503, content=DISCONNECTED.to_body())

    try:
        result = await health_service.check_health()
    except Exception as e:
        logger.error(f"❌ Health aggregator failed: {e}")
        return JSONResponse(status_code=503, content=DISCONNECTED.to_body())

    return JSONResponse(
        status_code=200 if result.is_healthy else 503,
        content=result.to_body(),
    )
