from datetime import UTC, datetime

from organizer.core.config import Settings
from organizer.schemas.health import HealthResponse


class HealthService:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def get_status(self) -> HealthResponse:
        return HealthResponse(
            status="ok",
            service=self.settings.app_name,
            environment=self.settings.app_env,
            version=self.settings.app_version,
            timestamp=datetime.now(UTC),
        )
