"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SDM_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Shipping Distance Matrix API"
    api_prefix: str = "/api"
    method_id: str = Field(default="sdm", description="Identifier used for rate ids, cache keys and debug prefixes.")
    method_title: str = Field(default="Shipping Distance Matrix", description="Default shipping label.")
    distance_api_url: str = Field(
        default="https://maps.googleapis.com/maps/api/distancematrix/json",
        description="Distance Matrix API endpoint.",
    )
    distance_api_key: Optional[str] = Field(
        default=None,
        description="Fallback API key used when a shipping method does not carry its own.",
    )
    request_timeout_seconds: float = Field(default=15.0, gt=0.0)
    connect_timeout_seconds: float = Field(default=5.0, gt=0.0)
    max_retries: int = Field(default=0, ge=0)
    backoff_seconds: float = Field(default=0.5, ge=0.0)
    cache_ttl_seconds: int = Field(default=3600, ge=0, description="Lifetime of cached distance lookups.")
    cache_max_entries: int = Field(default=2048, ge=1)
    debug_mode: bool = Field(default=False, description="Emit diagnostics and bypass the request cache.")
    pro_enabled: bool = Field(default=False, description="Unlock pro-only rate fields and the formula total cost type.")
    language: str = Field(default="en_US", description="Response language requested from the distance API.")
    default_origin_lat: float = -6.175392
    default_origin_lng: float = 106.827156
    probe_destination_lat: float = -6.223623
    probe_destination_lng: float = 106.845816
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
