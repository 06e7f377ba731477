"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="console", description="Logging format (console or json)")
    debug: bool = Field(default=False, description="Enable per-step trace logging")

    # Tracing
    max_trace_steps: int = Field(
        default=100000, gt=0, description="Maximum facet crossings per traced path"
    )

    class Config:
        env_prefix = "WATERSHED_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
