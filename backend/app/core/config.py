from functools import lru_cache

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from timecard.config import TimecardSettings, get_settings_env_file


class ApiSettings(TimecardSettings):
    env: str = Field(default="dev", description="Deployment environment")
    app_name: str = "Timecard API"
    cors_origins: str = Field(default="", description="Comma separated list of allowed origins")
    sentry_dsn: str | None = Field(default=None, description="Sentry DSN for error monitoring")
    otlp_endpoint: str | None = Field(default=None, description="OTLP endpoint for traces/metrics")

    model_config = SettingsConfigDict(env_prefix="TIMECARD_", extra="ignore")

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> ApiSettings:
    return ApiSettings(_env_file=get_settings_env_file())


settings = get_settings()
