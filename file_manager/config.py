from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

_TIME_UNITS = ("seconds", "minutes", "hours", "days", "weeks")


class DiskConfig(BaseModel):
    """One storage backend as declared in FILE_MANAGER_DISKS."""

    driver: Literal["local", "s3"] = "local"

    # local
    root: Optional[str] = None
    url: Optional[str] = None  # public base url, e.g. "/storage" or a CDN host

    # s3
    bucket: Optional[str] = None
    prefix: str = ""
    region: Optional[str] = None
    endpoint: Optional[str] = None  # S3-compatible endpoints (minio, r2, ...)
    aws_profile: Optional[str] = None


def _default_disks() -> Dict[str, DiskConfig]:
    return {"public": DiskConfig(driver="local", root="storage/app/public", url="/storage")}


class Settings(BaseSettings):
    app_env: str = Field("dev", alias="APP_ENV")
    app_host: str = Field("0.0.0.0", alias="APP_HOST")
    app_port: int = Field(8000, alias="APP_PORT")

    # --- JWT ---
    # JWT secret is REQUIRED; fail fast if missing.
    jwt_secret: str = Field(..., alias="JWT_SECRET")
    jwt_issuer: Optional[str] = Field(None, alias="JWT_ISSUER")
    jwt_ttl_seconds: Optional[int] = Field(None, alias="JWT_TTL_SECONDS")

    # --- Disks ---
    default_disk: str = Field("public", alias="FILE_MANAGER_DEFAULT_DISK")
    disks: Dict[str, DiskConfig] = Field(default_factory=_default_disks, alias="FILE_MANAGER_DISKS")

    # --- Entity presentation ---
    file_analysis_enabled: bool = Field(False, alias="FILE_ANALYSIS_ENABLED")
    human_readable_size: bool = Field(True, alias="HUMAN_READABLE_SIZE")
    human_readable_datetime: bool = Field(True, alias="HUMAN_READABLE_DATETIME")
    display_timezone: str = Field("UTC", alias="DISPLAY_TIMEZONE")

    # --- Signed urls (only used by drivers that can sign) ---
    url_signing_enabled: bool = Field(False, alias="URL_SIGNING_ENABLED")
    url_signing_unit: str = Field("minutes", alias="URL_SIGNING_UNIT")
    url_signing_value: int = Field(30, alias="URL_SIGNING_VALUE")

    @field_validator("url_signing_unit")
    @classmethod
    def _normalize_unit(cls, value: str) -> str:
        return normalize_time_unit(value)

    class Config:
        env_file = ".env"
        case_sensitive = True


def normalize_time_unit(value: str) -> str:
    """Accepts "minute", "Minutes", "minutes" -> "minutes"."""
    unit = (value or "").strip().lower()
    if not unit.endswith("s"):
        unit += "s"
    if unit not in _TIME_UNITS:
        raise ValueError(f"unsupported time unit: {value!r} (expected one of {', '.join(_TIME_UNITS)})")
    return unit


@dataclass(frozen=True)
class EntityOptions:
    """Presentation switches handed to every entity of a manager."""

    file_analysis_enabled: bool = False
    human_readable_size: bool = True
    human_readable_datetime: bool = True
    url_signing_enabled: bool = False
    url_signing_unit: str = "minutes"
    url_signing_value: int = 30
    display_timezone: str = "UTC"

    def __post_init__(self):
        object.__setattr__(self, "url_signing_unit", normalize_time_unit(self.url_signing_unit))

    @classmethod
    def from_settings(cls, s: Settings) -> "EntityOptions":
        return cls(
            file_analysis_enabled=s.file_analysis_enabled,
            human_readable_size=s.human_readable_size,
            human_readable_datetime=s.human_readable_datetime,
            url_signing_enabled=s.url_signing_enabled,
            url_signing_unit=s.url_signing_unit,
            url_signing_value=s.url_signing_value,
            display_timezone=s.display_timezone,
        )


settings = Settings()
