from fastapi import APIRouter
from pydantic import BaseModel

from app.db import check_db_connection

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    services: dict


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Liveness plus a database round-trip."""
    services = {"database": check_db_connection()}
    overall_status = "healthy" if all(services.values()) else "degraded"
    return HealthResponse(status=overall_status, services=services)
