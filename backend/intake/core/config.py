from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from intake.schemas.ingestion import IngestionConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    PROJECT_NAME: str = "Intake API"
    API_V1_STR: str = "/api/v1"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    PIPELINE_LOG_LEVEL: Optional[str] = None

    UPLOAD_DIR: str = "uploads"
    # zero means "use the built-in default" for both ceilings
    MAX_UPLOAD_BYTES: int = 0
    MAX_JSON_BYTES: int = 0
    ALLOW_UNKNOWN_JSON_FIELDS: bool = False
    ALLOWED_CONTENT_TYPES: Annotated[List[str], NoDecode] = Field(default_factory=list)

    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:5174",
            "http://127.0.0.1:5174",
        ]
    )

    @field_validator("CORS_ORIGINS", "ALLOWED_CONTENT_TYPES", mode="before")
    @classmethod
    def _split_csv(cls, value):
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    @field_validator("MAX_UPLOAD_BYTES", "MAX_JSON_BYTES")
    @classmethod
    def _validate_ceiling(cls, value):
        if value < 0:
            raise ValueError("size ceilings must be zero (default) or positive")
        return value


settings = Settings()


def get_ingestion_config() -> IngestionConfig:
    # A fresh snapshot per request; callers never share a mutable config.
    return IngestionConfig(
        max_upload_bytes=settings.MAX_UPLOAD_BYTES,
        allowed_content_types=frozenset(settings.ALLOWED_CONTENT_TYPES),
        max_json_bytes=settings.MAX_JSON_BYTES,
        allow_unknown_json_fields=settings.ALLOW_UNKNOWN_JSON_FIELDS,
    )


def get_upload_dir() -> Path:
    return Path(settings.UPLOAD_DIR)
