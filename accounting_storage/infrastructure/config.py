"""Module for the Config class."""
import logging
import logging.config
from pathlib import Path
from typing import Any

import yaml

from accounting_storage.exceptions import ConfigError
from accounting_storage.infrastructure.connection import (
    default_connection_string_path,
    load_connection_string,
)
from accounting_storage.infrastructure.persistence.sqlite_repository import (
    SqliteRepository,
)

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Config:
    """A class to store the configuration."""

    def __init__(self) -> None:
        self.connection_string: str | None = None
        self.connection_string_file: Path = default_connection_string_path()
        self.logging_config: dict[str, Any] | None = None

    def __parse_yaml(self, yaml_path: Path) -> None:
        """Parse a YAML configuration file."""
        with open(yaml_path, encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}
        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file {yaml_path} must hold a mapping")
        if (connection_string := config.get("connection_string")) is not None:
            self.connection_string = str(connection_string)
        if (connection_string_file := config.get("connection_string_file")) is not None:
            self.connection_string_file = Path(connection_string_file).expanduser()
        self.logging_config = config.get("logging", self.logging_config)

    def parse(self, config_path: Path) -> None:
        """Parse a configuration file."""
        if config_path.suffix == ".yaml":
            self.__parse_yaml(config_path)
        else:
            raise ValueError(f"Unsupported file format: '{config_path.suffix}'")

    def setup_logging(self) -> None:
        """Configure logging from the ``logging`` section, if any.

        An invalid section falls back to a basic console configuration.
        """
        if self.logging_config is not None:
            try:
                logging.config.dictConfig(self.logging_config)
                return
            except (ValueError, TypeError, AttributeError, ImportError) as e:
                logging.basicConfig(level=logging.INFO, format=DEFAULT_LOG_FORMAT)
                logger.warning("Invalid logging configuration, using defaults: %s", e)
                return
        logging.basicConfig(level=logging.INFO, format=DEFAULT_LOG_FORMAT)

    def resolve_connection_string(self) -> str:
        """Return the connection string to open the store with.

        The explicit ``connection_string`` wins over the connection string file.

        Raises:
            ConfigError: If neither is available.
        """
        if self.connection_string:
            return self.connection_string
        if self.connection_string_file.is_file():
            return load_connection_string(self.connection_string_file)
        raise ConfigError(
            "No connection string configured and no connection string file "
            f"at {self.connection_string_file}"
        )

    def open_storage(self) -> SqliteRepository:
        """Build an initialized repository from the resolved connection string."""
        repository = SqliteRepository.from_connection_string(
            self.resolve_connection_string()
        )
        repository.initialize()
        return repository
