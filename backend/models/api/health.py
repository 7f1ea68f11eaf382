"""
Pydantic models for the health endpoint
"""

from pydantic import BaseModel
from typing import Literal, Optional


class DependencyStatus(BaseModel):
    status: Literal["connected", "disconnected"]
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: Literal["healthy", "unhealthy"]
    graphdb: DependencyStatus
    postgresql: DependencyStatus

    @property
    def is_healthy(self) -> bool:
        return self.status == "healthy"

    def to_body(self) -> dict:
        """JSON body with error keys omitted when absent"""
        return self.model_dump(exclude_none=True)


DISCONNECTED = HealthResponse(
    status="unhealthy",
    graphdb=DependencyStatus(status="disconnected"),
    postgresql=DependencyStatus(status="disconnected"),
)
