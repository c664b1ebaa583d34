"""Unit tests for configuration management."""

from pathlib import Path

import yaml

from modsel_app.config.defaults import get_default_config
from modsel_app.config.loader import ConfigLoader
from modsel_app.config.validation import ConfigValidator


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        """Test that default configuration can be created."""
        config = get_default_config()
        assert config is not None
        assert config.resolver.track_override_prefix == "track:"
        assert config.cache.persist is False
        assert config.cache.db_path == "decisions.db"
        assert config.logging.level == "INFO"


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        """Test that ConfigLoader can be created."""
        loader = ConfigLoader.create()
        assert loader is not None
        assert isinstance(loader.config_dir, Path)
        assert loader.config_dir.name == "config"

    def test_merge_config_defaults_only(self, tmp_path) -> None:
        """Test config merging with no settings file."""
        loader = ConfigLoader.create(tmp_path)
        config = loader.merge_config()

        assert config == {
            "resolver": {"track_override_prefix": "track:"},
            "cache": {"persist": False, "db_path": "decisions.db"},
            "logging": {"level": "INFO", "format_json": False},
        }

    def test_settings_file_overrides_defaults(self, tmp_path) -> None:
        """Test that settings.yaml sits above the defaults."""
        (tmp_path / "settings.yaml").write_text(yaml.safe_dump({
            "cache": {"persist": True},
            "logging": {"level": "DEBUG"},
        }))

        config = ConfigLoader.create(tmp_path).merge_config()

        assert config["cache"]["persist"] is True
        assert config["cache"]["db_path"] == "decisions.db"
        assert config["logging"]["level"] == "DEBUG"
        assert config["logging"]["format_json"] is False

    def test_explicit_overrides_win(self, tmp_path) -> None:
        """Test that explicit overrides sit above settings.yaml."""
        (tmp_path / "settings.yaml").write_text(yaml.safe_dump({
            "resolver": {"track_override_prefix": "pin:"},
        }))

        config = ConfigLoader.create(tmp_path).merge_config(
            {"resolver": {"track_override_prefix": "force:"}}
        )

        assert config["resolver"]["track_override_prefix"] == "force:"

    def test_empty_settings_file(self, tmp_path) -> None:
        """Test that an empty settings file is treated as no overrides."""
        (tmp_path / "settings.yaml").write_text("")

        loader = ConfigLoader.create(tmp_path)
        assert loader.load_settings_file() == {}

    def test_merge_does_not_mutate_overrides(self, tmp_path) -> None:
        """Test that merging leaves the caller's dict untouched."""
        overrides = {"cache": {"persist": True}}
        ConfigLoader.create(tmp_path).merge_config(overrides)

        assert overrides == {"cache": {"persist": True}}


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_default_config(self, tmp_path) -> None:
        """Test that the defaults validate cleanly."""
        config = ConfigLoader.create(tmp_path).merge_config()
        assert ConfigValidator.validate_config(config) == []

    def test_empty_override_prefix(self) -> None:
        """Test validation of an empty track override prefix."""
        errors = ConfigValidator.validate_resolver_params({"track_override_prefix": ""})
        assert len(errors) == 1
        assert errors[0].field == "track_override_prefix"

    def test_invalid_cache_params(self) -> None:
        """Test validation of invalid cache parameters."""
        errors = ConfigValidator.validate_cache_params({"persist": "yes", "db_path": 42})
        assert [err.field for err in errors] == ["persist", "db_path"]

    def test_invalid_log_level(self) -> None:
        """Test validation of an unknown log level."""
        errors = ConfigValidator.validate_logging_params({"level": "VERBOSE"})
        assert len(errors) == 1
        assert errors[0].field == "level"
        assert errors[0].value == "VERBOSE"

    def test_log_level_is_case_insensitive(self) -> None:
        """Test that lower-case level names are accepted."""
        assert ConfigValidator.validate_logging_params({"level": "debug"}) == []

    def test_validate_config_collects_all_sections(self) -> None:
        """Test that errors from every section are reported together."""
        errors = ConfigValidator.validate_config({
            "resolver": {"track_override_prefix": None},
            "cache": {"persist": 1},
            "logging": {"format_json": "no"},
        })
        assert {err.field for err in errors} == {"track_override_prefix", "persist", "format_json"}
