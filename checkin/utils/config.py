"""
Environment configuration loader with validation for the check-in service.
"""

import os
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv


class CheckinConfig(BaseModel):
    """Configuration model for the check-in service with validation."""

    # HTTP / WebSocket server
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=4000, ge=1, le=65535, description="Bind port")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Record store and realtime hub
    sequence_width: int = Field(
        default=3, ge=1, le=9, description="Zero-padding width of passenger sequence numbers"
    )
    outbox_size: int = Field(
        default=256, ge=1, description="Per-connection realtime outbox capacity"
    )

    # Valkey cross-process relay
    valkey_relay_enabled: bool = Field(
        default=False, description="Republish room events on Valkey Pub/Sub"
    )
    valkey_host: str = Field(default="localhost", description="Valkey server host")
    valkey_port: int = Field(
        default=6379, ge=1, le=65535, description="Valkey server port"
    )
    valkey_password: Optional[str] = Field(
        default=None, description="Valkey server password"
    )
    valkey_database: int = Field(
        default=0, ge=0, le=15, description="Valkey database number"
    )
    valkey_socket_timeout: float = Field(
        default=5.0, gt=0, description="Valkey socket timeout in seconds"
    )
    valkey_channel_prefix: str = Field(
        default="checkin:events", description="Prefix of per-flight event channels"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("valkey_channel_prefix")
    @classmethod
    def validate_channel_prefix(cls, v: str) -> str:
        """Channel prefix must be non-empty and not end with the separator."""
        v = v.strip().rstrip(":")
        if not v:
            raise ValueError("Channel prefix must not be empty")
        return v


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes", "on")


def load_config(env_file: Optional[str] = None) -> CheckinConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Optional path to .env file. If None, looks for .env in current directory.

    Returns:
        CheckinConfig: Validated configuration object

    Raises:
        ValueError: If configuration is invalid
    """
    if env_file is None:
        env_file = ".env"

    if os.path.exists(env_file):
        load_dotenv(env_file)

    try:
        config_data: Dict[str, Any] = {
            "host": os.getenv("CHECKIN_HOST", "0.0.0.0"),
            "port": int(os.getenv("CHECKIN_PORT", os.getenv("PORT", "4000"))),
            "debug": _env_flag("CHECKIN_DEBUG", "false"),
            "log_level": os.getenv("CHECKIN_LOG_LEVEL", "INFO"),
            "sequence_width": int(os.getenv("CHECKIN_SEQUENCE_WIDTH", "3")),
            "outbox_size": int(os.getenv("CHECKIN_OUTBOX_SIZE", "256")),
            "valkey_relay_enabled": _env_flag("VALKEY_RELAY_ENABLED", "false"),
            "valkey_host": os.getenv("VALKEY_HOST", "localhost"),
            "valkey_port": int(os.getenv("VALKEY_PORT", "6379")),
            "valkey_password": os.getenv("VALKEY_PASSWORD") or None,
            "valkey_database": int(os.getenv("VALKEY_DATABASE", "0")),
            "valkey_socket_timeout": float(os.getenv("VALKEY_SOCKET_TIMEOUT", "5.0")),
            "valkey_channel_prefix": os.getenv("VALKEY_CHANNEL_PREFIX", "checkin:events"),
        }
        return CheckinConfig(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")


# Global configuration instance
_config: Optional[CheckinConfig] = None


def get_config() -> CheckinConfig:
    """
    Get the global configuration instance, loading it if necessary.

    Returns:
        CheckinConfig: The global configuration object
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached global configuration."""
    global _config
    _config = None
