"""Configuration management for the rationale tracker."""

import logging
import os
from dataclasses import dataclass, field

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError
from .logging import DEFAULT_LOG_FORMAT

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "art-loan-cockpit-state"


@dataclass
class AppConfig:
    """Web application configuration."""
    title: str = "Approval Rationale Tracker"


@dataclass
class StorageConfig:
    """Snapshot persistence configuration."""
    backend: str = "file"  # "file" | "memory"
    state_dir: str = "data/state"
    storage_key: str = DEFAULT_STORAGE_KEY


@dataclass
class UploadConfig:
    """Credit memo upload limits."""
    max_file_size_mb: int = 10


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT
    file: str = ""


@dataclass
class Config:
    """Main configuration class."""
    app: AppConfig = field(default_factory=AppConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    uploads: UploadConfig = field(default_factory=UploadConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str = "config.yaml") -> "Config":
        """
        Load configuration from file and environment variables.

        Environment variables (a local .env file is honoured) override
        config file values:
        - ART_STORAGE_BACKEND
        - ART_STATE_DIR
        - ART_STORAGE_KEY
        - MAX_FILE_SIZE_MB
        - LOG_LEVEL

        A missing file falls back to built-in defaults.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigurationError: If the file exists but cannot be parsed
        """
        load_dotenv()

        config_data = {}
        if os.path.exists(config_path):
            try:
                with open(config_path, 'r') as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError.invalid(config_path, e) from e
            if not isinstance(config_data, dict):
                raise ConfigurationError.invalid(
                    config_path, ValueError("top level must be a mapping")
                )
        else:
            logger.warning(f"Config file {config_path} not found, using defaults")

        app_data = config_data.get("app", {}) or {}
        storage_data = config_data.get("storage", {}) or {}
        upload_data = config_data.get("uploads", {}) or {}
        logging_data = config_data.get("logging", {}) or {}

        defaults = cls()

        app_config = AppConfig(
            title=app_data.get("title", defaults.app.title)
        )

        storage_config = StorageConfig(
            backend=os.getenv("ART_STORAGE_BACKEND", storage_data.get("backend", defaults.storage.backend)),
            state_dir=os.getenv("ART_STATE_DIR", storage_data.get("state_dir", defaults.storage.state_dir)),
            storage_key=os.getenv("ART_STORAGE_KEY", storage_data.get("storage_key", defaults.storage.storage_key))
        )

        try:
            max_file_size_mb = int(
                os.getenv("MAX_FILE_SIZE_MB", upload_data.get("max_file_size_mb", defaults.uploads.max_file_size_mb))
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError.invalid(config_path, e) from e

        upload_config = UploadConfig(max_file_size_mb=max_file_size_mb)

        logging_config = LoggingConfig(
            level=os.getenv("LOG_LEVEL", logging_data.get("level", defaults.logging.level)),
            format=logging_data.get("format", defaults.logging.format),
            file=logging_data.get("file", defaults.logging.file) or ""
        )

        return cls(
            app=app_config,
            storage=storage_config,
            uploads=upload_config,
            logging=logging_config,
        )
