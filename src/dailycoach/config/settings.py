"""Configuration management for dailycoach using Pydantic Settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoalSettings(BaseSettings):
    """Default daily targets used when a profile does not set its own."""

    model_config = SettingsConfigDict(env_prefix="GOAL_", env_file=".env", extra="ignore")

    calories: int = 2000
    steps: int = 10000
    water_ml: int = 2000
    sleep_hours: float = 8.0


class MacroSettings(BaseSettings):
    """Fallback macro targets in grams."""

    model_config = SettingsConfigDict(env_prefix="MACRO_", env_file=".env", extra="ignore")

    protein_grams: float = 150.0
    carbs_grams: float = 200.0
    fat_grams: float = 65.0
    tolerance: float = 0.1


class EngineSettings(BaseSettings):
    """Reminder quota and achievement detection tuning."""

    model_config = SettingsConfigDict(env_prefix="ENGINE_", env_file=".env", extra="ignore")

    min_tasks: int = 7
    max_tasks: int = 9
    max_filler_attempts: int = 20
    history_days: int = 90
    history_concurrency: int = 8
    completion_lookback_days: int = 7
    min_steps_for_record: int = 5000
    min_water_for_record: int = 1000


class DatabaseSettings(BaseSettings):
    """Database settings."""

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    database_url: str = Field(
        default="sqlite:///~/.local/share/dailycoach/dailycoach.db", alias="DATABASE_URL"
    )
    echo: bool = Field(default=False, alias="DATABASE_ECHO")


class SchedulerSettings(BaseSettings):
    """Daily job settings."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_", env_file=".env", extra="ignore")

    user_ids: list[str] = Field(default_factory=list)
    focus_hour: int = 5
    focus_minute: int = 0
    wins_hour: int = 2
    wins_minute: int = 30


class Settings(BaseSettings):
    """Main dailycoach settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # General
    environment: Literal["development", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    timezone: str = "America/Los_Angeles"

    # Sub-settings
    goals: GoalSettings = Field(default_factory=GoalSettings)
    macros: MacroSettings = Field(default_factory=MacroSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)


# Global settings instance
settings = Settings()
