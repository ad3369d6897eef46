"""Tests for configuration loading."""

import pytest

from rationale_tracker.utils.config import DEFAULT_STORAGE_KEY, Config
from rationale_tracker.utils.errors import ConfigurationError, ErrorType

ENV_VARS = ["ART_STORAGE_BACKEND", "ART_STATE_DIR", "ART_STORAGE_KEY", "MAX_FILE_SIZE_MB", "LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_missing_file_uses_defaults(tmp_path):
    config = Config.load(str(tmp_path / "missing.yaml"))

    assert config.app.title == "Approval Rationale Tracker"
    assert config.storage.backend == "file"
    assert config.storage.state_dir == "data/state"
    assert config.storage.storage_key == DEFAULT_STORAGE_KEY
    assert config.uploads.max_file_size_mb == 10
    assert config.logging.level == "INFO"
    assert config.logging.file == ""


def test_yaml_values_are_loaded(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "storage:\n"
        "  backend: memory\n"
        "  storage_key: test-key\n"
        "uploads:\n"
        "  max_file_size_mb: 5\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  file: logs/tracker.log\n"
    )

    config = Config.load(str(path))

    assert config.storage.backend == "memory"
    assert config.storage.storage_key == "test-key"
    assert config.storage.state_dir == "data/state"
    assert config.uploads.max_file_size_mb == 5
    assert config.logging.level == "DEBUG"
    assert config.logging.file == "logs/tracker.log"


def test_empty_sections_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("storage:\nlogging:\n")

    config = Config.load(str(path))

    assert config.storage.backend == "file"
    assert config.logging.level == "INFO"


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("storage:\n  backend: file\nuploads:\n  max_file_size_mb: 5\n")
    monkeypatch.setenv("ART_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("ART_STATE_DIR", "/var/lib/art")
    monkeypatch.setenv("MAX_FILE_SIZE_MB", "25")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    config = Config.load(str(path))

    assert config.storage.backend == "memory"
    assert config.storage.state_dir == "/var/lib/art"
    assert config.uploads.max_file_size_mb == 25
    assert config.logging.level == "WARNING"


def test_malformed_yaml_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("storage: [unclosed\n")

    with pytest.raises(ConfigurationError) as excinfo:
        Config.load(str(path))

    assert excinfo.value.error_type == ErrorType.CONFIG_INVALID


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError):
        Config.load(str(path))


def test_bad_upload_limit_is_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("MAX_FILE_SIZE_MB", "ten")

    with pytest.raises(ConfigurationError):
        Config.load(str(tmp_path / "missing.yaml"))
