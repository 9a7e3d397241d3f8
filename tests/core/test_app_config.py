"""Tests for YAML configuration loading."""
import logging
from pathlib import Path

import pytest

from core.config import DEFAULT_SID_FILTER, load_app_config
from core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("REGBASELINE_CONFIG", "REGBASELINE_SID_FILTER", "REGBASELINE_STRICT"):
        monkeypatch.delenv(name, raising=False)


class TestLoadAppConfig:
    """Tests for load_app_config()."""

    def test_defaults_without_file(self):
        config = load_app_config()
        assert config.baseline.sid_filter == DEFAULT_SID_FILTER
        assert config.baseline.strict is False
        assert config.baseline.targets_file is None
        assert config.logging.level_number == logging.INFO

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        config = load_app_config(tmp_path / "absent.yml")
        assert config.baseline.sid_filter == DEFAULT_SID_FILTER

    def test_values_from_file(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text(
            "logging:\n"
            "  level: debug\n"
            "baseline:\n"
            "  sid_filter: S-1-5-21-*\n"
            "  strict: true\n"
            "  targets_file: targets.yml\n",
            encoding="utf-8",
        )
        config = load_app_config(path)
        assert config.logging.level_number == logging.DEBUG
        assert config.baseline.sid_filter == "S-1-5-21-*"
        assert config.baseline.strict is True
        # Relative target file resolved next to the config file
        assert config.baseline.targets_file == tmp_path / "targets.yml"

    def test_environment_overrides(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("REGBASELINE_SID_FILTER", "S-1-5-18")
        monkeypatch.setenv("REGBASELINE_STRICT", "yes")
        config = load_app_config()
        assert config.baseline.sid_filter == "S-1-5-18"
        assert config.baseline.strict is True

    def test_config_path_from_environment(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "env.yml"
        path.write_text("baseline:\n  sid_filter: S-1-5-20\n", encoding="utf-8")
        monkeypatch.setenv("REGBASELINE_CONFIG", str(path))
        assert load_app_config().baseline.sid_filter == "S-1-5-20"

    def test_non_mapping_rejected(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_app_config(path)

    def test_invalid_yaml_rejected(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("baseline: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_app_config(path)

    def test_unknown_log_level_rejected(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("logging:\n  level: chatty\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_app_config(path)

    def test_bad_boolean_rejected(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("baseline:\n  strict: maybe\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_app_config(path)
