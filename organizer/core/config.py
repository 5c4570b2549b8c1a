from functools import lru_cache
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Household Organizer API"
    app_env: str = "development"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    allowed_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8888",
    ]
    auth_secret_key: str = "change-me-in-production"
    google_calendar_api_base_url: str = "https://www.googleapis.com/calendar/v3"
    google_tasks_api_base_url: str = "https://tasks.googleapis.com/tasks/v1"
    google_api_timeout_seconds: float = 10.0
    ical_feed_timeout_seconds: float = 15.0
    ical_feed_user_agent: str = "HouseholdOrganizer/1.0"
    calendar_view_timezone: str = "UTC"
    meal_plan_calendar_keywords: Annotated[list[str], NoDecode] = ["anylist", "meal", "recipe"]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("meal_plan_calendar_keywords", mode="before")
    @classmethod
    def parse_meal_plan_calendar_keywords(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            value = value.split(",")
        return [keyword.strip().lower() for keyword in value if keyword.strip()]

    @field_validator("google_api_timeout_seconds", mode="before")
    @classmethod
    def normalize_google_api_timeout(cls, value: float | str) -> float:
        parsed_value = float(value)
        if parsed_value <= 0:
            return 10.0
        return parsed_value

    @field_validator("ical_feed_timeout_seconds", mode="before")
    @classmethod
    def normalize_ical_feed_timeout(cls, value: float | str) -> float:
        parsed_value = float(value)
        if parsed_value <= 0:
            return 15.0
        return parsed_value

    @field_validator("calendar_view_timezone", mode="before")
    @classmethod
    def normalize_calendar_view_timezone(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            return "UTC"
        try:
            ZoneInfo(cleaned)
        except (ZoneInfoNotFoundError, ValueError):
            return "UTC"
        return cleaned


@lru_cache
def get_settings() -> Settings:
    return Settings()
