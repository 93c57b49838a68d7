"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from src.core.config import Config
from src.core.geo import BoundingBox
from src.shell import config_loader
from src.shell.config_loader import (
    ConfigurationError,
    _parse_bounds,
    _parse_sources,
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
    require_valid_config,
    resolve_backup_dir,
    resolve_db_path,
)


BASE_ENV = {
    "DISCORD_BOT_TOKEN": "env-token",
    "DB_PATH": "/tmp/tremor/db.json",
    "BACKUP_DIR": "/tmp/tremor/backups",
}


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, BASE_ENV, clear=True):
        yield


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        """Non-string values are returned unchanged."""
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("hello") == "hello"

    def test_resolves_env_var_placeholder(self):
        """Resolves ${VAR} placeholders from environment."""
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert _resolve_value("${TEST_VAR}") == "test_value"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"


class TestParsers:
    """Tests for _parse_bounds and _parse_sources."""

    def test_parses_valid_bounds(self):
        data = {
            "min_latitude": 4,
            "max_latitude": 21,
            "min_longitude": 116,
            "max_longitude": 130,
        }

        assert _parse_bounds(data) == BoundingBox(4.0, 21.0, 116.0, 130.0)

    def test_parses_source_string(self):
        assert _parse_sources(" PHIVOLCS, usgs ,") == ["phivolcs", "usgs"]

    def test_parses_source_list(self):
        assert _parse_sources(["usgs"]) == ["usgs"]


class TestPathResolution:
    """Tests for store and backup path resolution."""

    def test_explicit_env_paths(self, clean_env):
        assert resolve_db_path() == Path("/tmp/tremor/db.json")
        assert resolve_backup_dir() == Path("/tmp/tremor/backups")

    def test_container_dir_when_present(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True), \
                patch.object(config_loader, "CONTAINER_DATA_DIR", tmp_path):
            assert resolve_db_path() == tmp_path / "db.json"
            assert resolve_backup_dir() == tmp_path / "backups"

    def test_local_dir_fallback(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True), \
                patch.object(config_loader, "CONTAINER_DATA_DIR", tmp_path / "missing"):
            assert resolve_db_path() == Path("data") / "db.json"
            assert resolve_backup_dir() == Path("data") / "backups"


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_defaults(self, clean_env):
        config = load_config_from_env()

        assert config.discord_bot_token == "env-token"
        assert config.polling_interval_seconds == 300
        assert config.lookback_hours == 6
        assert config.min_magnitude == 4.0
        assert config.max_tracked == 1000
        assert config.enabled_sources == ["phivolcs"]
        assert config.mapbox_api_key is None
        assert config.backup_keep_count == 10
        assert config.request_update_cooldown_seconds == 60
        assert config.lookup_cooldown_seconds == 30

    def test_reads_overrides(self, clean_env):
        with patch.dict(os.environ, {
            "POLLING_INTERVAL_MINUTES": "2",
            "MIN_MAGNITUDE": "5.5",
            "MAX_TRACKED_QUAKES": "50",
            "ENABLED_SOURCES": "usgs",
            "MAPBOX_API_KEY": "pk.test",
            "BACKUP_KEEP_COUNT": "3",
            "LOOKUP_COOLDOWN_SECONDS": "10",
        }):
            config = load_config_from_env()

        assert config.polling_interval_seconds == 120
        assert config.min_magnitude == 5.5
        assert config.max_tracked == 50
        assert config.enabled_sources == ["usgs"]
        assert config.mapbox_api_key == "pk.test"
        assert config.backup_keep_count == 3
        assert config.lookup_cooldown_seconds == 10

    def test_non_numeric_value_raises(self, clean_env):
        with patch.dict(os.environ, {"MIN_MAGNITUDE": "strong"}):
            with pytest.raises(ConfigurationError, match="MIN_MAGNITUDE"):
                load_config_from_env()


class TestLoadConfig:
    """Tests for load_config and load_config_from_dict."""

    def test_dict_overrides_env(self, clean_env):
        config = load_config_from_dict({
            "discord_bot_token": "${DISCORD_BOT_TOKEN}",
            "min_magnitude": 3.5,
            "enabled_sources": ["phivolcs", "usgs"],
            "usgs_bounds": {
                "min_latitude": 5,
                "max_latitude": 20,
                "min_longitude": 117,
                "max_longitude": 127,
            },
        })

        assert config.discord_bot_token == "env-token"
        assert config.min_magnitude == 3.5
        assert config.enabled_sources == ["phivolcs", "usgs"]
        assert config.usgs_bounds.max_longitude == 127.0
        assert config.lookback_hours == 6

    def test_bad_value_raises(self, clean_env):
        with pytest.raises(ConfigurationError):
            load_config_from_dict({"lookback_hours": "soon"})

    def test_loads_yaml_file(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("min_magnitude: 4.5\nlookback_hours: 2\n")

        config = load_config(path)

        assert config.min_magnitude == 4.5
        assert config.lookback_hours == 2

    def test_missing_file_uses_env(self, clean_env, tmp_path):
        config = load_config(tmp_path / "missing.yaml")
        assert config.discord_bot_token == "env-token"

    def test_empty_file_uses_env(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path).min_magnitude == 4.0

    def test_invalid_yaml_raises(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("min_magnitude: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_non_mapping_raises(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_no_path_uses_env(self, clean_env):
        assert load_config().discord_bot_token == "env-token"

    def test_config_path_env_var(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("min_magnitude: 6.0\n")

        with patch.dict(os.environ, {"CONFIG_PATH": str(path)}):
            assert load_config().min_magnitude == 6.0


class TestRequireValidConfig:
    """Tests for require_valid_config function."""

    def test_valid_config_passes(self):
        result = require_valid_config(Config(discord_bot_token="token"))

        assert result.valid is True
        assert [w.field for w in result.warnings] == ["mapbox_api_key"]

    def test_missing_token_raises(self):
        with pytest.raises(ConfigurationError, match="discord_bot_token"):
            require_valid_config(Config())
