"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in src/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from src.core.config import Config, ValidationResult, validate_config
from src.core.geo import BoundingBox


logger = logging.getLogger(__name__)


# Mounted data volume when running in the container image
CONTAINER_DATA_DIR = Path("/app/data")

# Local development data directory
LOCAL_DATA_DIR = Path("data")

DB_FILENAME = "db.json"
BACKUP_DIRNAME = "backups"


class ConfigurationError(Exception):
    """Raised when the configuration is unusable and the bot must not start."""


def resolve_db_path() -> Path:
    """Determine the store path.

    Priority: 1) DB_PATH env var, 2) container data dir if it exists,
    3) local data dir.
    """
    explicit = os.environ.get("DB_PATH")
    if explicit:
        return Path(explicit)

    if CONTAINER_DATA_DIR.exists():
        return CONTAINER_DATA_DIR / DB_FILENAME

    return LOCAL_DATA_DIR / DB_FILENAME


def resolve_backup_dir() -> Path:
    """Determine the backup directory.

    Priority: 1) BACKUP_DIR env var, 2) container data dir if it exists,
    3) local data dir.
    """
    explicit = os.environ.get("BACKUP_DIR")
    if explicit:
        return Path(explicit)

    if CONTAINER_DATA_DIR.exists():
        return CONTAINER_DATA_DIR / BACKUP_DIRNAME

    return LOCAL_DATA_DIR / BACKUP_DIRNAME


def _resolve_value(value: Any) -> Any:
    """Resolve a ${ENV_VAR} placeholder from the environment.

    Non-strings and plain strings are returned unchanged. Unset variables
    leave the placeholder in place.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _parse_bounds(data: dict[str, Any]) -> BoundingBox:
    """Parse a bounding box from config data."""
    return BoundingBox(
        min_latitude=float(data["min_latitude"]),
        max_latitude=float(data["max_latitude"]),
        min_longitude=float(data["min_longitude"]),
        max_longitude=float(data["max_longitude"]),
    )


def _parse_sources(value: Any) -> list[str]:
    """Parse a source list from a comma-separated string or a list."""
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return [str(item).strip().lower() for item in items if str(item).strip()]


def _env_number(name: str, default: float, cast: type = float) -> Any:
    """Read a numeric environment variable.

    Raises:
        ConfigurationError: If the variable is set but not a number
    """
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return cast(default)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).
    Missing keys fall back to the environment, then to Config defaults.

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object

    Raises:
        ConfigurationError: If a value has the wrong type
    """
    env = load_config_from_env()

    try:
        bounds = env.usgs_bounds
        if "usgs_bounds" in data:
            bounds = _parse_bounds(data["usgs_bounds"])

        sources = env.enabled_sources
        if "enabled_sources" in data:
            sources = _parse_sources(data["enabled_sources"])

        db_path = env.db_path
        if data.get("db_path"):
            db_path = Path(_resolve_value(data["db_path"]))

        backup_dir = env.backup_dir
        if data.get("backup_dir"):
            backup_dir = Path(_resolve_value(data["backup_dir"]))

        return Config(
            discord_bot_token=_resolve_value(data.get("discord_bot_token", env.discord_bot_token)),
            polling_interval_seconds=int(data.get("polling_interval_seconds", env.polling_interval_seconds)),
            lookback_hours=float(data.get("lookback_hours", env.lookback_hours)),
            min_magnitude=float(data.get("min_magnitude", env.min_magnitude)),
            max_tracked=int(data.get("max_tracked", env.max_tracked)),
            enabled_sources=sources,
            usgs_bounds=bounds,
            mapbox_api_key=_resolve_value(data.get("mapbox_api_key", env.mapbox_api_key)) or None,
            db_path=db_path,
            backup_dir=backup_dir,
            backup_interval_hours=float(data.get("backup_interval_hours", env.backup_interval_hours)),
            backup_keep_count=int(data.get("backup_keep_count", env.backup_keep_count)),
            fetch_timeout_seconds=float(data.get("fetch_timeout_seconds", env.fetch_timeout_seconds)),
            delivery_timeout_seconds=float(data.get("delivery_timeout_seconds", env.delivery_timeout_seconds)),
            request_update_cooldown_seconds=float(
                data.get("request_update_cooldown_seconds", env.request_update_cooldown_seconds)
            ),
            lookup_cooldown_seconds=float(data.get("lookup_cooldown_seconds", env.lookup_cooldown_seconds)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file, falling back to the environment.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var; without it the
                    configuration comes from the environment only.

    Returns:
        Parsed Config object

    Raises:
        ConfigurationError: If the file is not valid YAML or has bad values
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH")

    if not config_path:
        return load_config_from_env()

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        logger.warning("Config file is empty, using environment")
        return load_config_from_env()

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    return load_config_from_dict(data)


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Environment variables:
        DISCORD_BOT_TOKEN: Bot token (required to run)
        POLLING_INTERVAL_MINUTES: Minutes between polls (default 5)
        LOOKBACK_HOURS: How far back each poll looks (default 6)
        MIN_MAGNITUDE: Minimum magnitude to announce (default 4.0)
        MAX_TRACKED_QUAKES: Cap on remembered earthquake IDs (default 1000)
        ENABLED_SOURCES: Comma-separated feeds (default "phivolcs")
        MAPBOX_API_KEY: Mapbox token for map images (optional)
        DB_PATH / BACKUP_DIR: Store and backup locations
        BACKUP_INTERVAL_HOURS: Hours between backups (default 24)
        BACKUP_KEEP_COUNT: Backups to keep (default 10)
        REQUEST_UPDATE_COOLDOWN_SECONDS: Per-user manual update cooldown (default 60)
        LOOKUP_COOLDOWN_SECONDS: Per-user latest-earthquake lookup cooldown (default 30)

    Returns:
        Config object from environment

    Raises:
        ConfigurationError: If a numeric variable is not a number
    """
    defaults = Config()

    sources = defaults.enabled_sources
    if os.environ.get("ENABLED_SOURCES"):
        sources = _parse_sources(os.environ["ENABLED_SOURCES"])

    polling_minutes = _env_number(
        "POLLING_INTERVAL_MINUTES", defaults.polling_interval_seconds / 60
    )

    return Config(
        discord_bot_token=os.environ.get("DISCORD_BOT_TOKEN", ""),
        polling_interval_seconds=int(polling_minutes * 60),
        lookback_hours=_env_number("LOOKBACK_HOURS", defaults.lookback_hours),
        min_magnitude=_env_number("MIN_MAGNITUDE", defaults.min_magnitude),
        max_tracked=_env_number("MAX_TRACKED_QUAKES", defaults.max_tracked, int),
        enabled_sources=sources,
        mapbox_api_key=os.environ.get("MAPBOX_API_KEY") or None,
        db_path=resolve_db_path(),
        backup_dir=resolve_backup_dir(),
        backup_interval_hours=_env_number("BACKUP_INTERVAL_HOURS", defaults.backup_interval_hours),
        backup_keep_count=_env_number("BACKUP_KEEP_COUNT", defaults.backup_keep_count, int),
        request_update_cooldown_seconds=_env_number(
            "REQUEST_UPDATE_COOLDOWN_SECONDS", defaults.request_update_cooldown_seconds
        ),
        lookup_cooldown_seconds=_env_number(
            "LOOKUP_COOLDOWN_SECONDS", defaults.lookup_cooldown_seconds
        ),
    )


def require_valid_config(config: Config) -> ValidationResult:
    """Validate configuration, logging warnings and failing on errors.

    Args:
        config: Configuration to check

    Returns:
        The validation result (warnings only)

    Raises:
        ConfigurationError: If any critical error was found
    """
    result = validate_config(config)

    for warning in result.warnings:
        logger.warning("Config warning (%s): %s", warning.field, warning.message)

    if not result.valid:
        for error in result.critical_errors:
            logger.error("Config error (%s): %s", error.field, error.message)
        fields = ", ".join(e.field for e in result.critical_errors)
        raise ConfigurationError(f"Invalid configuration: {fields}")

    logger.info("Environment validation passed")
    return result
