"""Tests for configuration management."""

import json
from pathlib import Path

from servicerules.core.config import (
    FilterConfig,
    get_default_config,
    load_config,
    save_config,
)


class TestFilterConfig:
    """Tests for FilterConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = FilterConfig()

        assert config.services_files == []
        assert config.known_types == []
        assert config.logs_dir.is_absolute()

    def test_relative_logs_dir_resolved(self, tmp_path: Path):
        """Test relative log directories are placed under config_dir."""
        config = FilterConfig(config_dir=tmp_path, logs_dir=Path("logs"))
        assert config.logs_dir == tmp_path / "logs"

    def test_from_dict_servicesfiles(self):
        """Test the lower-case servicesfiles key is accepted."""
        config = FilterConfig.from_dict({"servicesfiles": ["a.json", "b.json"]})
        assert config.services_files == ["a.json", "b.json"]

    def test_from_dict_alternate_keys(self):
        """Test camel-case and snake-case keys are accepted."""
        assert FilterConfig.from_dict({"servicesFiles": ["x.json"]}).services_files == ["x.json"]
        assert FilterConfig.from_dict({"services_files": ["y.json"]}).services_files == ["y.json"]

    def test_from_dict_known_types(self):
        """Test known types are loaded."""
        config = FilterConfig.from_dict({"known_types": ["redis", "nginx"]})
        assert config.known_types == ["redis", "nginx"]

    def test_from_dict_config_dir_moves_logs(self, tmp_path: Path):
        """Test logs follow config_dir when logs_dir is not given."""
        config = FilterConfig.from_dict({"config_dir": str(tmp_path)})

        assert config.config_dir == tmp_path
        assert config.logs_dir == tmp_path / "logs"

    def test_from_dict_relative_logs_dir(self, tmp_path: Path):
        """Test a relative logs_dir is placed under the configured config_dir."""
        config = FilterConfig.from_dict({"config_dir": str(tmp_path), "logs_dir": "var/log"})
        assert config.logs_dir == tmp_path / "var" / "log"

    def test_from_dict_null_lists(self):
        """Test null rule file and known type lists load as empty."""
        config = FilterConfig.from_dict({"servicesfiles": None, "known_types": None})

        assert config.services_files == []
        assert config.known_types == []

    def test_to_dict_round_trip(self, tmp_path: Path):
        """Test to_dict output loads back to the same settings."""
        config = FilterConfig(
            config_dir=tmp_path,
            services_files=["rules.json"],
            known_types=["redis"],
        )

        restored = FilterConfig.from_dict(config.to_dict())

        assert restored.config_dir == tmp_path
        assert restored.logs_dir == config.logs_dir
        assert restored.services_files == ["rules.json"]
        assert restored.known_types == ["redis"]


class TestLoadSave:
    """Tests for loading and saving config files."""

    def test_load_missing_file_returns_defaults(self, tmp_path: Path):
        """Test a missing config file yields the default config."""
        config = load_config(tmp_path / "missing.json")
        assert config.services_files == []

    def test_save_and_load(self, tmp_path: Path):
        """Test saving then loading a config file."""
        config_path = tmp_path / "nested" / "config.json"
        config = FilterConfig(config_dir=tmp_path, services_files=["a.json"])

        save_config(config, config_path)
        loaded = load_config(config_path)

        assert json.loads(config_path.read_text())["servicesfiles"] == ["a.json"]
        assert loaded.services_files == ["a.json"]

    def test_get_default_config(self):
        """Test get_default_config returns a fresh config."""
        assert get_default_config() is not get_default_config()
