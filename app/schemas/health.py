"""Schema for the health check payload."""

from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel


class HealthResponse(CamelModel):
    """Liveness plus database reachability; returned inside the standard envelope."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    service: str = Field(description="Service name")
    version: str = Field(description="Running application version")
    environment: Literal["dev", "prod"] = Field(description="APP_ENV of this instance")
    database: Literal["connected", "disconnected"] = Field(
        description="Result of a SELECT 1 on the request's session",
    )
