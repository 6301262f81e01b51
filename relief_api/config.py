"""
Configuration and settings for the relief backend.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Units accepted by the `ms` duration format used for EXPIRES_IN, in seconds.
_DURATION_UNITS = {
    "ms": 0.001,
    "msec": 0.001,
    "msecs": 0.001,
    "millisecond": 0.001,
    "milliseconds": 0.001,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
    "y": 31557600,
    "yr": 31557600,
    "yrs": 31557600,
    "year": 31557600,
    "years": 31557600,
}
_DURATION_PATTERN = re.compile(r"^\s*(\d*\.?\d+)\s*([a-z]*)\s*$", re.IGNORECASE)


def parse_expires_in(value: str | int | float) -> int:
    """
    Convert a token lifetime such as ``3600``, ``"10h"``, ``"2 hours"`` or
    ``"1y"`` to whole seconds. A bare number is read as seconds.

    Raises:
        ValueError: If the value is not a positive duration.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value
    else:
        match = _DURATION_PATTERN.match(str(value))
        unit = match.group(2).lower() if match else ""
        if not match or (unit and unit not in _DURATION_UNITS):
            raise ValueError(f"Unrecognized token lifetime: {value!r}")
        seconds = float(match.group(1)) * _DURATION_UNITS.get(unit, 1)
    if int(seconds) <= 0:
        raise ValueError(f"Token lifetime must be at least one second: {value!r}")
    return int(seconds)


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api/v1")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5000, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Database (MongoDB expected)
    mongodb_uri: Optional[str] = Field(default=None, validation_alias="MONGODB_URI")
    mongodb_database: str = Field(
        default="assignment-7-l2", validation_alias="MONGODB_DATABASE"
    )

    # Auth
    jwt_secret: str = Field(default="dev-change-me", validation_alias="JWT_SECRET")
    # Seconds; EXPIRES_IN also accepts strings like "1d" or "10 hours".
    jwt_expires_in: int = Field(default=86400, validation_alias="EXPIRES_IN")
    jwt_algorithm: str = Field(default="HS256")
    bcrypt_rounds: int = Field(default=10)
    require_auth: bool = Field(default=True, validation_alias="REQUIRE_AUTH")

    # Cloudinary media host
    cloud_name: Optional[str] = Field(default=None, validation_alias="CLOUD_NAME")
    api_key: Optional[str] = Field(default=None, validation_alias="API_KEY")
    api_secret: Optional[str] = Field(default=None, validation_alias="API_SECRET")
    media_folder: str = Field(default="weblearn", validation_alias="MEDIA_FOLDER")
    media_timeout_seconds: float = Field(
        default=30, validation_alias="MEDIA_TIMEOUT_SECONDS"
    )

    cors_origins: str = Field(
        default="https://dev--l2-assignment-7.netlify.app",
        validation_alias="CORS_ORIGINS",
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="RELIEF_USE_IN_MEMORY_BACKENDS"
    )

    @field_validator("jwt_expires_in", mode="before")
    @classmethod
    def _parse_jwt_expires_in(cls, value):
        return parse_expires_in(value)

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
