"""
Tests for application configuration loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from slotbook.config import AppConfig, get_default_config_path, load_config


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        """Test built-in defaults."""
        config = AppConfig()

        assert config.store_path == Path("slotbook.json")
        assert config.admin_secret is None
        assert config.log_level == "WARNING"
        assert config.schedule.working_days == [1, 2, 3, 4, 5]

    def test_load_from_yaml(self, tmp_path):
        """Test loading a YAML file with a nested schedule."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "store_path: data/store.json\n"
            "log_level: info\n"
            "schedule:\n"
            "  start_time: '08:00'\n"
            "  end_time: '12:00'\n"
            "  default_duration_minutes: 30\n"
            "  working_days: [6, 0]\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.store_path == tmp_path / "data" / "store.json"
        assert config.log_level == "INFO"
        assert config.schedule.start_time == "08:00"
        assert config.schedule.working_days == [0, 6]

    def test_absolute_store_path_kept(self, tmp_path):
        """Test an absolute store path is not re-rooted."""
        store = tmp_path / "elsewhere" / "store.json"
        path = tmp_path / "config.yaml"
        path.write_text(f"store_path: {store}\n", encoding="utf-8")

        assert AppConfig.load_from_yaml(path).store_path == store

    def test_empty_file_uses_defaults(self, tmp_path):
        """Test an empty YAML file yields defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert AppConfig.load_from_yaml(path).schedule.start_time == "07:00"

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML raises ValueError."""
        path = tmp_path / "config.yaml"
        path.write_text("schedule: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(path)

    def test_non_mapping_root(self, tmp_path):
        """Test a list at the root is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping at the root"):
            AppConfig.load_from_yaml(path)

    def test_unknown_log_level(self):
        """Test log levels must be known to logging."""
        with pytest.raises(ValidationError, match="Unknown log level"):
            AppConfig(log_level="chatty")

    def test_unquoted_blocked_dates(self, tmp_path):
        """Test that bare YAML dates in blocked_dates are loaded."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "schedule:\n"
            "  blocked_dates: [2024-12-25, '2024-12-24']\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.schedule.blocked_dates == ["2024-12-24", "2024-12-25"]

    def test_invalid_schedule(self):
        """Test the nested schedule is validated."""
        with pytest.raises(ValidationError):
            AppConfig(schedule={"start_time": "10:00", "end_time": "09:00"})


class TestLoadConfig:
    """Tests for config discovery."""

    def test_explicit_path(self, tmp_path):
        """Test an explicit file is loaded."""
        path = tmp_path / "custom.yaml"
        path.write_text("log_level: DEBUG\n", encoding="utf-8")

        assert load_config(path).log_level == "DEBUG"

    def test_explicit_missing_path(self, tmp_path):
        """Test an explicit missing file is an error, not a fallback."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_default_path_in_working_directory(self, tmp_path, monkeypatch):
        """Test config.yaml in the working directory is found."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yaml").write_text("log_level: ERROR\n", encoding="utf-8")

        assert get_default_config_path() == tmp_path / "config.yaml"
        assert load_config().log_level == "ERROR"
