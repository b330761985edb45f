"""Application configuration using Pydantic Settings."""

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="development", description="Environment: development, stage, prod")
    debug: bool = Field(default=False, description="Debug mode")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )

    # Upload limits
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, description="Maximum decoded upload size in bytes (10 MiB)"
    )
    min_content_length: int = Field(
        default=100, description="Minimum characters of extracted screenplay text"
    )

    # Scene segmentation
    scene_min_length: int = Field(
        default=20, description="Fragments shorter than this are not treated as scenes"
    )

    # PDF extraction
    pdf_line_tolerance: float = Field(
        default=5.0, description="Max y-distance (PDF units) for runs on the same line"
    )
    pdf_whitespace_ratio: float = Field(
        default=0.4, description="Whitespace fraction above which letter-spacing is repaired"
    )
    pdf_max_pages: int = Field(default=500, description="Maximum PDF pages read per upload")

    # Operational endpoint controls
    metrics_enabled: bool = Field(default=True, description="Enable Prometheus metrics endpoint")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            value = v.strip()
            if not value:
                return []
            if value.startswith("["):
                parsed = json.loads(value)
                if not isinstance(parsed, list):
                    raise ValueError("CORS_ORIGINS JSON value must be a list")
                return [str(origin).strip() for origin in parsed if str(origin).strip()]
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        if isinstance(v, list):
            return [str(origin).strip() for origin in v if str(origin).strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        level = v.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env in {"prod", "production"}

    @property
    def pdf_options(self) -> dict[str, float | int]:
        """Keyword arguments for ``PDFExtractor``."""
        return {
            "line_tolerance": self.pdf_line_tolerance,
            "spaced_text_ratio": self.pdf_whitespace_ratio,
            "max_pages": self.pdf_max_pages,
        }

    @property
    def fdx_options(self) -> dict[str, int]:
        """Keyword arguments for ``FDXExtractor``."""
        return {"max_xml_bytes": self.max_upload_bytes}

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Reject limits that would make every upload fail or pass trivially."""
        if self.max_upload_bytes <= 0:
            raise ValueError("MAX_UPLOAD_BYTES must be positive")
        if self.min_content_length <= 0:
            raise ValueError("MIN_CONTENT_LENGTH must be positive")
        if not 0.0 < self.pdf_whitespace_ratio < 1.0:
            raise ValueError("PDF_WHITESPACE_RATIO must be between 0 and 1")
        if self.is_production and self.debug:
            raise ValueError("DEBUG must be false in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
