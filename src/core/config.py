"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field
from pathlib import Path

from src.core.backup import DEFAULT_KEEP_COUNT
from src.core.dedup import DEFAULT_MAX_TRACKED
from src.core.earthquake import SOURCE_PHIVOLCS, SOURCE_USGS
from src.core.geo import PHILIPPINES_BOUNDS, BoundingBox


KNOWN_SOURCES = (SOURCE_PHIVOLCS, SOURCE_USGS)


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        discord_bot_token: Bot token used to post to Discord channels
        polling_interval_seconds: How often to check for new earthquakes
        lookback_hours: How far back each fetch looks
        min_magnitude: Minimum magnitude to announce
        max_tracked: Cap on remembered earthquake IDs (oldest evicted first)
        enabled_sources: Feeds to poll ("phivolcs", "usgs"); PHIVOLCS only by default
        usgs_bounds: Region queried from USGS
        mapbox_api_key: Mapbox token for map images (Yandex is used without it)
        db_path: Path of the JSON store
        backup_dir: Directory for store backups
        backup_interval_hours: How often to back up the store
        backup_keep_count: How many backups to keep
        fetch_timeout_seconds: Timeout for each source request
        delivery_timeout_seconds: Upper bound on waiting for one event's deliveries
        request_update_cooldown_seconds: Per-user cooldown for manual updates
        lookup_cooldown_seconds: Per-user cooldown for latest-earthquake lookups
    """
    discord_bot_token: str = ""
    polling_interval_seconds: int = 300
    lookback_hours: float = 6
    min_magnitude: float = 4.0
    max_tracked: int = DEFAULT_MAX_TRACKED
    enabled_sources: list[str] = field(default_factory=lambda: [SOURCE_PHIVOLCS])
    usgs_bounds: BoundingBox = PHILIPPINES_BOUNDS
    mapbox_api_key: str | None = None
    db_path: Path = Path("data/db.json")
    backup_dir: Path = Path("data/backups")
    backup_interval_hours: float = 24
    backup_keep_count: int = DEFAULT_KEEP_COUNT
    fetch_timeout_seconds: float = 30
    delivery_timeout_seconds: float = 15
    request_update_cooldown_seconds: float = 60
    lookup_cooldown_seconds: float = 30


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_bounds(bounds: BoundingBox, field_name: str) -> list[ValidationError]:
    """Validate a bounding box.

    Pure function.

    Args:
        bounds: Bounding box to validate
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    errors.extend(validate_coordinates(
        bounds.min_latitude, bounds.min_longitude,
        f"{field_name}.min",
    ))
    errors.extend(validate_coordinates(
        bounds.max_latitude, bounds.max_longitude,
        f"{field_name}.max",
    ))

    if bounds.min_latitude > bounds.max_latitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_latitude ({bounds.min_latitude}) > max_latitude ({bounds.max_latitude})",
        ))

    if bounds.min_longitude > bounds.max_longitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_longitude ({bounds.min_longitude}) > max_longitude ({bounds.max_longitude})",
        ))

    return errors


def _validate_positive(value: float, field_name: str) -> list[ValidationError]:
    if value > 0:
        return []
    return [ValidationError(
        field=field_name,
        message=f"Must be positive, got {value}",
    )]


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if not config.discord_bot_token or config.discord_bot_token.startswith("${"):
        errors.append(ValidationError(
            field="discord_bot_token",
            message="DISCORD_BOT_TOKEN is not set",
        ))

    errors.extend(_validate_positive(config.polling_interval_seconds, "polling_interval_seconds"))
    errors.extend(_validate_positive(config.lookback_hours, "lookback_hours"))
    errors.extend(_validate_positive(config.max_tracked, "max_tracked"))
    errors.extend(_validate_positive(config.backup_interval_hours, "backup_interval_hours"))
    errors.extend(_validate_positive(config.fetch_timeout_seconds, "fetch_timeout_seconds"))
    errors.extend(_validate_positive(config.delivery_timeout_seconds, "delivery_timeout_seconds"))

    if config.backup_keep_count < 1:
        errors.append(ValidationError(
            field="backup_keep_count",
            message=f"Must keep at least one backup, got {config.backup_keep_count}",
        ))

    if config.request_update_cooldown_seconds < 0:
        errors.append(ValidationError(
            field="request_update_cooldown_seconds",
            message=f"Cooldown cannot be negative, got {config.request_update_cooldown_seconds}",
        ))

    if config.lookup_cooldown_seconds < 0:
        errors.append(ValidationError(
            field="lookup_cooldown_seconds",
            message=f"Cooldown cannot be negative, got {config.lookup_cooldown_seconds}",
        ))

    errors.extend(validate_bounds(config.usgs_bounds, "usgs_bounds"))

    unknown = sorted(set(config.enabled_sources) - set(KNOWN_SOURCES))
    for name in unknown:
        errors.append(ValidationError(
            field="enabled_sources",
            message=f"Unknown source '{name}' (expected one of: {', '.join(KNOWN_SOURCES)})",
        ))

    if not config.enabled_sources:
        errors.append(ValidationError(
            field="enabled_sources",
            message="No earthquake sources enabled",
        ))

    if not config.mapbox_api_key:
        errors.append(ValidationError(
            field="mapbox_api_key",
            message="MAPBOX_API_KEY not set, falling back to Yandex static maps",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
