"""Application settings and configuration."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (and ``.env``)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ENV: Literal["dev", "staging", "prod", "test"] = Field(default="dev")
    PROJECT_NAME: str = Field(default="School Portal API")
    API_PREFIX: str = Field(default="/v1")

    # Comma-separated string or list; always a list after validation
    CORS_ORIGINS: str | list[str] = Field(default="http://localhost:3000", validate_default=True)

    LOG_LEVEL: str = Field(default="INFO")

    # CSV imports
    IMPORT_MAX_BYTES: int = Field(default=1_048_576, gt=0)
    TEMPLATE_SAMPLE_ROWS: int = Field(default=3, ge=0, le=50)

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def is_production(self) -> bool:
        return self.ENV == "prod"


settings = Settings()
