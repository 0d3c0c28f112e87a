"""Tests for the Config class."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from accounting_storage.exceptions import ConfigError, ConnectionStringError
from accounting_storage.infrastructure.config import Config
from accounting_storage.infrastructure.connection import CONNECTION_STRING_FILENAME


@pytest.fixture(name="full_config_yaml")
def full_config_yaml_fixture(tmp_path: Path) -> Path:
    """Create a YAML config file with all fields."""
    config = {
        "connection_string": f"dbname={tmp_path / 'accounting.db'}",
        "connection_string_file": str(tmp_path / "connection"),
        "logging": {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": "DEBUG",
                }
            },
            "root": {"level": "DEBUG", "handlers": ["console"]},
        },
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(config), encoding="utf-8")
    return config_path


class TestConfigDefaults:
    """Tests for Config default values."""

    def test_default_connection_string(self) -> None:
        """Test that no connection string is set by default."""
        assert Config().connection_string is None

    def test_default_connection_string_file(self, tmp_path: Path) -> None:
        """Test that the connection string file defaults to the home directory."""
        with patch(
            "accounting_storage.infrastructure.connection.Path.home"
        ) as mock_home:
            mock_home.return_value = tmp_path
            config = Config()
        assert config.connection_string_file == tmp_path / CONNECTION_STRING_FILENAME

    def test_default_logging_config(self) -> None:
        """Test that default logging config is None."""
        assert Config().logging_config is None


class TestConfigParseYaml:
    """Tests for YAML config file parsing."""

    def test_parse_full_config(self, full_config_yaml: Path, tmp_path: Path) -> None:
        """Test parsing a config with all fields set."""
        config = Config()
        config.parse(full_config_yaml)

        assert config.connection_string == f"dbname={tmp_path / 'accounting.db'}"
        assert config.connection_string_file == tmp_path / "connection"
        assert config.logging_config is not None
        assert config.logging_config["version"] == 1

    def test_parse_empty_file_keeps_defaults(self, tmp_path: Path) -> None:
        """Test that an empty file leaves the defaults untouched."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("", encoding="utf-8")

        config = Config()
        default_file = config.connection_string_file
        config.parse(config_path)

        assert config.connection_string is None
        assert config.connection_string_file == default_file
        assert config.logging_config is None

    def test_parse_non_mapping_raises(self, tmp_path: Path) -> None:
        """Test that a YAML list is rejected."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="must hold a mapping"):
            Config().parse(config_path)

    def test_parse_unsupported_format_raises(self, tmp_path: Path) -> None:
        """Test that parsing a non-YAML file raises ValueError."""
        config_path = tmp_path / "config.json"
        config_path.write_text("{}")

        config = Config()
        with pytest.raises(ValueError, match="Unsupported file format: '.json'"):
            config.parse(config_path)


class TestConfigResolveConnectionString:
    """Tests for resolve_connection_string."""

    def test_explicit_connection_string_wins(self, tmp_path: Path) -> None:
        """Test that the configured string is preferred over the file."""
        file_path = tmp_path / "connection"
        file_path.write_text("dbname=from_file", encoding="utf-8")

        config = Config()
        config.connection_string = "dbname=explicit"
        config.connection_string_file = file_path

        assert config.resolve_connection_string() == "dbname=explicit"

    def test_connection_string_from_file(self, tmp_path: Path) -> None:
        """Test reading the connection string file."""
        file_path = tmp_path / "connection"
        file_path.write_text("dbname=from_file\n", encoding="utf-8")

        config = Config()
        config.connection_string_file = file_path

        assert config.resolve_connection_string() == "dbname=from_file"

    def test_oversized_connection_string_file(self, tmp_path: Path) -> None:
        """Test that an oversized file is reported."""
        file_path = tmp_path / "connection"
        file_path.write_text("x" * 500, encoding="utf-8")

        config = Config()
        config.connection_string_file = file_path

        with pytest.raises(ConnectionStringError):
            config.resolve_connection_string()

    def test_nothing_configured(self, tmp_path: Path) -> None:
        """Test that a missing connection string raises ConfigError."""
        config = Config()
        config.connection_string_file = tmp_path / "missing"

        with pytest.raises(ConfigError):
            config.resolve_connection_string()

    def test_open_storage(self, tmp_path: Path) -> None:
        """Test opening the configured storage."""
        config = Config()
        config.connection_string = f"dbname={tmp_path / 'accounting.db'}"

        repository = config.open_storage()
        try:
            assert repository.available()
            assert repository.select_accounts() == ()
        finally:
            repository.close()


class TestConfigSetupLogging:
    """Tests for the setup_logging method."""

    def test_setup_logging_default(self) -> None:
        """Test that default logging falls back to basicConfig."""
        with patch(
            "accounting_storage.infrastructure.config.logging.basicConfig"
        ) as mock_basic_config:
            Config().setup_logging()
        mock_basic_config.assert_called_once()

    def test_setup_logging_with_valid_dictconfig(self, full_config_yaml: Path) -> None:
        """Test that valid logging dictConfig is applied."""
        config = Config()
        config.parse(full_config_yaml)

        config.setup_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_with_invalid_dictconfig(self) -> None:
        """Test that invalid logging config falls back to basic config."""
        config = Config()
        config.logging_config = {"invalid": "config"}

        with patch(
            "accounting_storage.infrastructure.config.logging.basicConfig"
        ) as mock_basic_config:
            config.setup_logging()
        mock_basic_config.assert_called_once()
