"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import APP_NAME, APP_VERSION, settings
from app.core.database import check_db_connected, get_db
from app.schemas.common import ApiResponse
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=ApiResponse[HealthResponse])
def get_health(db: Annotated[Session, Depends(get_db)]) -> ApiResponse[HealthResponse]:
    """
    Return service health and database reachability.
    Always 200 so load balancers can distinguish "up, DB down" from "down".
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return ApiResponse(
        message="Service healthy" if db_status == "connected" else "Database unreachable",
        data=HealthResponse(
            service=APP_NAME,
            version=APP_VERSION,
            environment=settings.APP_ENV,
            database=db_status,
        ),
    )
