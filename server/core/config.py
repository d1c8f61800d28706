"""Environment-driven configuration with Pydantic v2."""

from typing import Literal, Optional
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings driven entirely by environment variables."""

    # Server Configuration
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3010, ge=1024, le=65535)
    debug: bool = Field(default=False)

    # Cache Configuration
    cache_max_memory_size: int = Field(default=100 * 1024 * 1024, ge=1024)  # 100MB
    cache_max_entry_ratio: float = Field(default=0.1, gt=0.0, le=1.0)
    cache_default_ttl_ms: int = Field(default=300000)  # 5 minutes
    cache_route_match: Literal["first", "longest"] = Field(default="first")

    # Cache Maintenance
    cache_maintenance_enabled: bool = Field(default=True)
    cache_sweep_interval: int = Field(default=300, ge=1)  # 5 minutes
    cache_warmup_interval: int = Field(default=3600, ge=1)  # 1 hour
    cache_warmup_initial_delay: float = Field(default=5.0, ge=0.0)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")
    log_file: Optional[str] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Normalize and check the level name against the logging module."""
        level = v.upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file")
    @classmethod
    def validate_log_file(cls, v):
        """Ensure the log directory exists."""
        if v:
            Path(v).parent.mkdir(parents=True, exist_ok=True)
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": "none",
    }
