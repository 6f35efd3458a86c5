# Area: Shared
"""
spring_autohost.config — Interface configuration
=================================================

Options for AutoHostInterface, loaded from a JSON file and/or the
environment. A .env file in the working directory is honoured.

Environment variables:
    AUTOHOST_PORT            UDP port the game server sends to (8454)
    AUTOHOST_HOST            Loopback address to bind (127.0.0.1)
    AUTOHOST_WARN_UNHANDLED  Warn about commands nobody handles (true)
    AUTOHOST_RECV_BUFFER     Maximum datagram size read per pump (4096)
"""

from __future__ import annotations
import ipaddress
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger("spring_autohost.config")

ENV_MAPPINGS = {
    "AUTOHOST_PORT": "auto_host_port",
    "AUTOHOST_HOST": "host",
    "AUTOHOST_WARN_UNHANDLED": "warn_for_unhandled_messages",
    "AUTOHOST_RECV_BUFFER": "receive_buffer_size",
}


class AutoHostConfig(BaseModel):
    """Validated options for one autohost interface."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    auto_host_port: int = Field(default=8454, ge=1, le=65535)
    host: str = "127.0.0.1"
    warn_for_unhandled_messages: bool = True
    receive_buffer_size: int = Field(default=4096, gt=0)

    @field_validator("host")
    @classmethod
    def check_loopback_host(cls, value: str) -> str:
        """The autohost port accepts server commands, so it never leaves the host."""
        if value == "localhost":
            return value
        try:
            address = ipaddress.ip_address(value)
        except ValueError:
            raise ValueError(f"host must be an IPv4 loopback address, got {value!r}") from None
        if address.version != 4 or not address.is_loopback:
            raise ValueError(f"host must be an IPv4 loopback address, got {value!r}")
        return value

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "AutoHostConfig":
        """
        Build a config, ignoring (and logging) unknown keys.

        Raises:
            ConfigError: If a known key holds an invalid value
        """
        for key in values:
            if key not in cls.model_fields:
                logger.warning(f"Ignoring invalid configuration parameter ({key})")
        try:
            return cls.model_validate(dict(values))
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise ConfigError(f"Invalid autohost configuration: {errors}", errors) from e

    def with_overrides(self, **overrides: Any) -> "AutoHostConfig":
        values = self.model_dump()
        values.update(overrides)
        return AutoHostConfig.from_mapping(values)


def load_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> AutoHostConfig:
    """
    Load configuration from file, then environment.

    Args:
        config_path: Optional JSON file with config keys
        env_file: Optional .env file (defaults to searching the cwd)

    Returns:
        The validated AutoHostConfig

    Raises:
        ConfigError: If the file is unreadable or a value is invalid
    """
    load_dotenv(dotenv_path=env_file)
    values: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                values = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(values, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")

    # Override with environment variables
    for env_key, config_key in ENV_MAPPINGS.items():
        if env_key in os.environ:
            values[config_key] = os.environ[env_key]

    return AutoHostConfig.from_mapping(values)
