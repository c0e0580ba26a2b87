"""
Unit tests for configuration loader functionality.

Tests configuration loading, file merging, environment overrides and saving.
"""

import json
import logging
import shutil
import tempfile
from pathlib import Path

import pytest

from config.defaults import DEFAULT_SETTINGS, ENV_VAR_MAPPING
from config.loader import ConfigurationLoader
from core.models.config import ArchiveSyncConfig, GlobalSettings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop configuration variables inherited from the shell"""
    for env_var in ENV_VAR_MAPPING:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("ARCHIVE_SYNC_CONFIG_FILE", raising=False)


class TestConfigurationLoader:
    """Test ConfigurationLoader functionality"""

    def setup_method(self):
        """Setup test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)
        self.loader = ConfigurationLoader(GlobalSettings(global_config_dir=self.temp_path))

    def teardown_method(self):
        """Cleanup test environment"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_loader_initialization(self):
        """Test loader initialization"""
        loader = ConfigurationLoader()

        assert isinstance(loader.global_settings, GlobalSettings)

    def test_load_defaults(self):
        """Test loading without any config file"""
        config = self.loader.load()

        assert config == ArchiveSyncConfig(**DEFAULT_SETTINGS)
        assert config.watcher.poll_interval_ms == 100

    def test_load_from_default_location(self):
        """Test the global config file is picked up"""
        (self.temp_path / "config.json").write_text(json.dumps({"sync": {"hash_buffer_size": 8192}}))

        config = self.loader.load()

        assert config.sync.hash_buffer_size == 8192

    def test_partial_file_merged_with_defaults(self):
        """Test keys missing from the file keep their defaults"""
        config_file = self.temp_path / "custom.json"
        config_file.write_text(json.dumps({"watcher": {"poll_interval_ms": 25}}))

        config = self.loader.load(config_file)

        assert config.watcher.poll_interval_ms == 25
        assert config.watcher.observer_join_timeout_s == 5.0
        assert config.logging.level == "INFO"

    def test_missing_explicit_file_warns(self, caplog):
        """Test a missing explicit file falls back to defaults"""
        with caplog.at_level(logging.WARNING):
            config = self.loader.load(self.temp_path / "missing.json")

        assert "does not exist" in caplog.text
        assert config == ArchiveSyncConfig()

    def test_invalid_json_ignored(self, caplog):
        """Test an unreadable file counts as empty"""
        config_file = self.temp_path / "broken.json"
        config_file.write_text("{not json")

        with caplog.at_level(logging.ERROR):
            config = self.loader.load(config_file)

        assert "Failed to load config" in caplog.text
        assert config == ArchiveSyncConfig()

    def test_non_object_json_ignored(self):
        config_file = self.temp_path / "list.json"
        config_file.write_text("[1, 2, 3]")

        assert self.loader.load(config_file) == ArchiveSyncConfig()

    def test_invalid_values_fall_back_to_defaults(self, caplog):
        """Test validation errors produce the default configuration"""
        config_file = self.temp_path / "invalid.json"
        config_file.write_text(json.dumps({"watcher": {"poll_interval_ms": -5}}))

        with caplog.at_level(logging.ERROR):
            config = self.loader.load(config_file)

        assert "Invalid configuration" in caplog.text
        assert config.watcher.poll_interval_ms == 100

    def test_environment_overrides(self, monkeypatch):
        """Test environment variables override file values"""
        config_file = self.temp_path / "custom.json"
        config_file.write_text(json.dumps({"watcher": {"poll_interval_ms": 25}}))
        monkeypatch.setenv("ARCHIVE_SYNC_POLL_INTERVAL_MS", "40")
        monkeypatch.setenv("ARCHIVE_SYNC_OBSERVER_JOIN_TIMEOUT", "2.5")
        monkeypatch.setenv("ARCHIVE_SYNC_LOG_LEVEL", "debug")
        monkeypatch.setenv("ARCHIVE_SYNC_LOG_FILE", str(self.temp_path / "sync.log"))

        config = self.loader.load(config_file)

        assert config.watcher.poll_interval_ms == 40
        assert config.watcher.observer_join_timeout_s == 2.5
        assert config.logging.level == "DEBUG"
        assert config.logging.log_file == self.temp_path / "sync.log"

    def test_save_and_reload(self):
        """Test saved configuration loads back unchanged"""
        config = ArchiveSyncConfig()
        config.watcher.poll_interval_ms = 75
        config.logging.log_file = self.temp_path / "logs" / "sync.log"

        saved_path = self.loader.save(config)

        assert saved_path == self.temp_path / "config.json"
        assert self.loader.load() == config


class TestEnvValueConversion:
    """Test environment value conversion"""

    def setup_method(self):
        self.loader = ConfigurationLoader(GlobalSettings(global_config_dir=Path(tempfile.gettempdir())))

    @pytest.mark.parametrize("raw, expected", [
        ("true", True),
        ("Yes", True),
        ("on", True),
        ("false", False),
        ("NO", False),
        ("off", False),
        ("1", 1),
        ("0", 0),
        ("262144", 262144),
        ("2.5", 2.5),
        ("plain", "plain"),
    ])
    def test_convert_env_value(self, raw, expected):
        """Test typed conversion of environment strings"""
        assert self.loader._convert_env_value(raw) == expected

    def test_set_nested_value_creates_sections(self):
        data = {}

        self.loader._set_nested_value(data, "watcher.poll_interval_ms", "10")

        assert data == {"watcher": {"poll_interval_ms": 10}}

    def test_string_keys_not_converted(self):
        """Test log settings stay strings"""
        data = {"logging": {}}

        self.loader._set_nested_value(data, "logging.level", "on")

        assert data["logging"]["level"] == "on"
