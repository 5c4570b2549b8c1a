from fastapi import APIRouter, Depends

from organizer.core.config import Settings, get_settings
from organizer.schemas.health import HealthResponse
from organizer.services.health_service import HealthService

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def healthcheck(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthService(settings).get_status()
