"""
Configuration module.

Tunables live in config.yaml next to this file; deployment values (service
URL, timeout, strategy, server bind address) can be overridden through
environment variables or a .env file.
"""

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Any

import yaml

from .errors import InvalidCoordinate
from .models.geometry import Coordinate


class ConfigurationError(Exception):
    """Raised when configuration is missing or malformed."""
    pass


# Load YAML config once at module level
_CONFIG_PATH = Path(__file__).parent / "config.yaml"
_YAML_CONFIG: dict = {}

STRATEGIES = ("remote", "direct")


def _load_yaml_config() -> dict:
    """Load configuration from config.yaml file."""
    global _YAML_CONFIG
    if not _YAML_CONFIG:
        if _CONFIG_PATH.exists():
            with open(_CONFIG_PATH, "r") as f:
                _YAML_CONFIG = yaml.safe_load(f) or {}
        else:
            raise ConfigurationError(f"Configuration file not found: {_CONFIG_PATH}")
    return _YAML_CONFIG


def get_yaml_setting(*keys: str, default: Any = None) -> Any:
    """
    Get a setting from config.yaml by walking nested keys.

    Example: get_yaml_setting("path_service", "timeout_s") -> 10.0
    """
    config = _load_yaml_config()
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def get_optional_env(key: str) -> Optional[str]:
    """Get an optional environment variable. Returns None if not set."""
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _as_float(name: str, raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def _as_int(name: str, raw: Any, minimum: int, maximum: Optional[int] = None) -> int:
    value = _as_float(name, raw)
    if not math.isfinite(value) or not value.is_integer():
        raise ConfigurationError(f"{name} must be a whole number, got {raw!r}")
    value = int(value)
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise ConfigurationError(f"{name} must be at most {maximum}, got {value}")
    return value


def _as_coordinate(name: str, raw: Any) -> Coordinate:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ConfigurationError(f"{name} must be a [latitude, longitude] pair, got {raw!r}")
    try:
        return Coordinate.of(raw[0], raw[1])
    except InvalidCoordinate as e:
        raise ConfigurationError(f"{name}: {e}")


@dataclass(frozen=True)
class Config:
    """Application configuration - immutable after creation."""

    # Path service
    path_service_url: str
    path_service_timeout_s: float

    # Synchronization
    strategy: str
    history_size: int

    # Initial map view
    default_source: Coordinate
    default_target: Coordinate
    map_center: Coordinate
    map_zoom: int

    # Echo path service bind address
    backend_host: str
    backend_port: int
    cors_origins: list[str]

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from config.yaml, overridden by environment variables."""

        path_service_url = get_optional_env("PATH_SERVICE_URL") or get_yaml_setting(
            "path_service", "base_url", default="http://127.0.0.1:8888"
        )
        timeout_s = _as_float(
            "PATH_SERVICE_TIMEOUT",
            get_optional_env("PATH_SERVICE_TIMEOUT")
            or get_yaml_setting("path_service", "timeout_s", default=10.0),
        )
        if not math.isfinite(timeout_s) or timeout_s <= 0:
            raise ConfigurationError(f"PATH_SERVICE_TIMEOUT must be a positive number of seconds, got {timeout_s}")

        strategy = (
            get_optional_env("PATH_STRATEGY")
            or get_yaml_setting("sync", "strategy", default="remote")
        ).lower()
        if strategy not in STRATEGIES:
            raise ConfigurationError(
                f"Unknown path strategy: {strategy}. Available: {list(STRATEGIES)}"
            )

        history_size = _as_int("sync.history_size", get_yaml_setting("sync", "history_size", default=100), minimum=1)

        default_source = _as_coordinate(
            "map.source", get_yaml_setting("map", "source", default=[48.012653, 7.835194])
        )
        default_target = _as_coordinate(
            "map.target", get_yaml_setting("map", "target", default=[48.010683, 7.817760])
        )
        center_raw = get_yaml_setting("map", "center")
        map_center = _as_coordinate("map.center", center_raw) if center_raw else default_source
        map_zoom = _as_int("map.zoom", get_yaml_setting("map", "zoom", default=15), minimum=0, maximum=22)

        backend_host = get_optional_env("BACKEND_HOST") or get_yaml_setting(
            "server", "host", default="127.0.0.1"
        )
        backend_port = _as_int(
            "BACKEND_PORT",
            get_optional_env("BACKEND_PORT") or get_yaml_setting("server", "port", default=8888),
            minimum=1,
            maximum=65535,
        )

        cors_raw = get_optional_env("CORS_ORIGINS")
        if cors_raw:
            cors_origins = [origin.strip() for origin in cors_raw.split(",")]
        else:
            cors_origins = list(get_yaml_setting("server", "cors_origins", default=["*"]))

        return cls(
            path_service_url=path_service_url.rstrip("/"),
            path_service_timeout_s=timeout_s,
            strategy=strategy,
            history_size=history_size,
            default_source=default_source,
            default_target=default_target,
            map_center=map_center,
            map_zoom=map_zoom,
            backend_host=backend_host,
            backend_port=backend_port,
            cors_origins=cors_origins,
        )


def load_config() -> Config:
    """Load and validate configuration."""
    from dotenv import load_dotenv

    # Load .env file if present
    load_dotenv()

    return Config.from_env()
