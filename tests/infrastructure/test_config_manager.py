"""Tests for queue configuration loading."""

import json
import logging
import os

import pytest
from pydantic import ValidationError

from triage_queue.infrastructure.config_manager import ConfigManager, QueueConfig
from triage_queue.infrastructure.logging_config import StructuredFormatter, setup_logging
from triage_queue.infrastructure.settings import Settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no TQ_* variables and no .env file in the working directory."""
    for name in ("TQ_DATA_FILE", "TQ_INITIAL_CAPACITY", "TQ_LOG_LEVEL", "TQ_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestQueueConfig:
    """Test suite for QueueConfig validation."""

    def test_defaults(self):
        config = QueueConfig()
        assert config.data_file == "patients.txt"
        assert config.initial_capacity == 8
        assert config.log_level == "WARNING"
        assert config.log_format == "text"

    def test_capacity_below_minimum(self):
        with pytest.raises(ValidationError):
            QueueConfig(initial_capacity=2)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ValidationError):
            QueueConfig(data_file=str(tmp_path / "missing" / "patients.txt"))

    def test_normalizes_log_settings(self):
        config = QueueConfig(log_level="debug", log_format="JSON")
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValidationError):
            QueueConfig(log_level="LOUD")


class TestConfigManager:
    """Test suite for ConfigManager sources."""

    def test_from_environment(self, clean_env, tmp_path):
        clean_env.setenv("TQ_DATA_FILE", str(tmp_path / "ward.txt"))
        clean_env.setenv("TQ_INITIAL_CAPACITY", "32")
        config = ConfigManager.from_environment().get_queue_config()
        assert config.data_file == str(tmp_path / "ward.txt")
        assert config.initial_capacity == 32

    def test_from_environment_reads_dotenv(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("TQ_LOG_LEVEL=ERROR\n", encoding="utf-8")
        try:
            config = ConfigManager.from_environment().get_queue_config()
            assert config.log_level == "ERROR"
        finally:
            # load_dotenv writes straight into os.environ
            os.environ.pop("TQ_LOG_LEVEL", None)

    def test_from_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"queue": {"initial_capacity": 16}}), encoding="utf-8")
        manager = ConfigManager.from_file(str(path))
        assert manager.get_queue_config().initial_capacity == 16
        assert manager.get("queue.initial_capacity") == 16
        assert manager.get("queue.missing", "fallback") == "fallback"

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager.from_file(str(tmp_path / "none.json"))

    def test_from_file_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager.from_file(str(path))


class TestSettings:
    """Test suite for Settings."""

    def test_settings_from_manager(self, tmp_path):
        manager = ConfigManager({"queue": {"data_file": str(tmp_path / "q.txt"), "initial_capacity": 12}})
        settings = Settings(config_manager=manager)
        assert settings.data_file == tmp_path / "q.txt"
        assert settings.initial_capacity == 12
        assert settings.app_version == "1.0.0"

    def test_reload_rereads_environment(self, clean_env):
        settings = Settings()
        assert settings.log_level == "WARNING"
        clean_env.setenv("TQ_LOG_LEVEL", "INFO")
        settings.reload()
        assert settings.log_level == "INFO"


class TestLogging:
    """Test suite for logging setup."""

    def test_structured_formatter_emits_json(self):
        record = logging.LogRecord("triage_queue.test", logging.INFO, __file__, 10, "served %s", (11,), None)
        payload = json.loads(StructuredFormatter().format(record))
        assert payload["level"] == "INFO"
        assert payload["message"] == "served 11"
        assert payload["logger"] == "triage_queue.test"

    def test_setup_logging_sets_level(self):
        root = logging.getLogger()
        saved_level, saved_handlers = root.level, list(root.handlers)
        try:
            setup_logging(use_json=True, log_level="debug")
            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
