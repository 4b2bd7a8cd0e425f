import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .filters import SUNDAY
from .overtime import DailyTierRule


class TimecardSettings(BaseSettings):
    store_path: Path = Field(default=Path("data/timecards.json"), description="JSON file holding clock events")
    export_dir: Path = Field(default=Path("exports"), description="Directory receiving exported timecards")
    week_start: int = Field(
        default=SUNDAY,
        ge=0,
        le=6,
        description="First day of the reporting week, Python weekday numbering (0=Monday, 6=Sunday)",
    )
    daily_threshold: float = Field(default=8.0, ge=0, description="Daily hours paid at the regular rate")
    double_time_threshold: float = Field(default=12.0, ge=0, description="Daily hours after which double time applies")
    log_level: str = "INFO"
    log_json: bool = Field(default=True, description="Render logs as JSON lines; console format when false")

    model_config = SettingsConfigDict(env_prefix="TIMECARD_", extra="ignore")

    @model_validator(mode="after")
    def check_thresholds(self) -> "TimecardSettings":
        if self.double_time_threshold < self.daily_threshold:
            raise ValueError("double_time_threshold must not be below daily_threshold")
        return self

    def overtime_rule(self) -> DailyTierRule:
        return DailyTierRule(
            daily_threshold=self.daily_threshold,
            double_time_threshold=self.double_time_threshold,
        )


def get_settings_env_file() -> str | None:
    """Resolve the env file: ``TIMECARD_ENV_FILE``, else ``.env.<TIMECARD_ENV>`` or ``.env`` in the working directory."""
    explicit = os.getenv("TIMECARD_ENV_FILE")
    if explicit:
        return explicit
    env = os.getenv("TIMECARD_ENV", "dev")
    base_dir = Path.cwd()
    env_file = base_dir / f".env.{env}"
    default_file = base_dir / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None


@lru_cache
def get_settings() -> TimecardSettings:
    return TimecardSettings(_env_file=get_settings_env_file())
