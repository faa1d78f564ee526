"""
Configuration management for the Server Status Monitor.

Centralizes all configuration with type-safe defaults and validation.
"""

from typing import Annotated, Any, Dict, List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class AppConfig(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Flask Configuration
    flask_debug: bool = Field(
        default=False,
        description="Enable Flask debug mode"
    )
    flask_host: str = Field(
        default="0.0.0.0",
        description="Flask server host"
    )
    flask_port: int = Field(
        default=5001,
        description="Flask server port"
    )
    testing: bool = Field(
        default=False,
        description="Enable testing mode"
    )

    # Rate Limiting Configuration
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting"
    )
    rate_limit_status: str = Field(
        default="30 per minute",
        description="Rate limit for status endpoints (each request probes every server)"
    )

    # CORS Configuration
    cors_enabled: bool = Field(
        default=True,
        description="Enable CORS"
    )
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (the dashboard)"
    )

    # Probe Configuration
    probe_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Deadline for each probe request in seconds"
    )
    cycle_grace_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Extra time a cycle waits for workers beyond the probe timeout"
    )
    measure_response_time: bool = Field(
        default=True,
        description="Measure response time with a second, independent request"
    )
    enrichment_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Deadline for each metrics enrichment call in seconds"
    )
    monitor_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Interval between cycles in continuous monitoring mode"
    )

    # Endpoint Configuration
    endpoints_file: Optional[str] = Field(
        default=None,
        description="Path to a JSON file listing monitored endpoints"
    )
    endpoints: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Monitored endpoints when no endpoints file is set (JSON in env)"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_file: str = Field(
        default="logs/status_monitor.log",
        description="Log file path"
    )
    log_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Maximum log file size in bytes"
    )
    log_backup_count: int = Field(
        default=10,
        description="Number of backup log files to keep"
    )

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    @field_validator('flask_debug', 'testing', 'measure_response_time',
                     'rate_limit_enabled', 'cors_enabled', mode='before')
    @classmethod
    def parse_bool(cls, v):
        """Parse boolean values from environment strings."""
        if isinstance(v, str):
            return v.lower() in ('true', '1', 'yes', 'on')
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        """Accept log levels in any case."""
        if isinstance(v, str):
            v = v.upper()
            if v not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
                raise ValueError(f"Unknown log level: {v}")
        return v


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    return config
