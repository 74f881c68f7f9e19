"""
Configuration Management for Budget Core

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The numeric policies of the engine (paid-off epsilon, simulation cap,
cash-flow window) live here so the defaults are visible in one place.
"""

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Numeric policies of the analytics engine and debt simulator."""
    
    model_config = SettingsConfigDict(
        env_prefix="BUDGETCORE_ENGINE_",
        extra="ignore"
    )
    
    paid_off_epsilon: float = Field(
        default=0.1,
        ge=0.0,
        description="A balance at or below this is treated as fully paid"
    )
    max_simulation_months: int = Field(
        default=600,
        ge=1,
        le=6000,
        description="Safety cap on simulated months"
    )
    cash_flow_months: int = Field(
        default=6,
        ge=1,
        le=24,
        description="Number of trailing months in the cash-flow summary"
    )
    default_category_color: str = Field(
        default="#cbd5e1",
        description="Colour code used for categories without one"
    )
    local_timezone: Optional[str] = Field(
        default=None,
        description="IANA timezone for calendar bucketing (unset = host local time)"
    )
    
    @field_validator('local_timezone')
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        """Reject unknown timezone names at startup."""
        if v is None or not v.strip():
            return None
        try:
            ZoneInfo(v)
        except ZoneInfoNotFoundError:
            raise ValueError(f"Unknown timezone: {v}")
        return v


class DispatcherSettings(BaseSettings):
    """Background computation context configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="BUDGETCORE_DISPATCHER_",
        extra="ignore"
    )
    
    thread_name: str = Field(
        default="analytics-worker",
        description="Name of the background worker thread"
    )
    join_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="How long close() waits for the worker to finish"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local structured logs"
    )


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()
    
    @property
    def dispatcher(self) -> DispatcherSettings:
        return DispatcherSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    settings = get_settings()
    results = {}
    
    for name in ("engine", "dispatcher", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)
    
    return results
