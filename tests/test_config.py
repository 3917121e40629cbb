# ABOUTME: Tests for configuration loading and validation.
# ABOUTME: Uses temporary YAML files.

from __future__ import annotations

from pathlib import Path

import pytest

from notion2md_server.config import Config, ConfigError, load_config


def write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.port == 3000
        assert config.default_limit == 20
        assert config.max_limit == 100
        assert config.log_path is None

    def test_invalid_port(self):
        with pytest.raises(ConfigError, match="port"):
            Config(port=0)

    def test_default_limit_above_max(self):
        with pytest.raises(ConfigError, match="default_limit"):
            Config(default_limit=200, max_limit=100)

    def test_invalid_token_cache_size(self):
        with pytest.raises(ConfigError, match="max_cached_tokens"):
            Config(max_cached_tokens=0)

    def test_log_level_normalised(self):
        assert Config(log_level="DEBUG").log_level == "debug"

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError, match="log_level"):
            Config(log_level="loud")


class TestLoadConfig:
    def test_full_file(self, tmp_path):
        path = write(tmp_path, "port: 8080\nmax_limit: 50\ndefault_limit: 10\nlog_path: logs/app.log\n")
        config = load_config(path)
        assert config.port == 8080
        assert config.max_limit == 50
        assert config.default_limit == 10
        assert config.log_path == Path("logs/app.log")

    def test_empty_file_uses_defaults(self, tmp_path):
        assert load_config(write(tmp_path, "")) == Config()

    def test_null_values_use_defaults(self, tmp_path):
        assert load_config(write(tmp_path, "port:\n")).port == 3000

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(write(tmp_path, "port: [unclosed\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="mapping"):
            load_config(write(tmp_path, "- a\n- b\n"))

    def test_unknown_field(self, tmp_path):
        with pytest.raises(ConfigError, match="Unknown"):
            load_config(write(tmp_path, "colour: blue\n"))

    def test_non_numeric(self, tmp_path):
        with pytest.raises(ConfigError, match="must be a number"):
            load_config(write(tmp_path, "port: eighty\n"))
