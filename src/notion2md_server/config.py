# ABOUTME: Configuration loading and validation for notion2md-server.
# ABOUTME: Parses config.yaml into a validated dataclass; every key is optional.

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class ConfigError(Exception):
    """Raised when configuration is invalid."""
    pass


@dataclass
class Config:
    """Main configuration for notion2md-server."""
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"
    log_path: Path | None = None
    default_limit: int = 20
    max_limit: int = 100
    calls_per_second: float = 2.5
    max_retries: int = 3
    timeout_seconds: float = 30.0
    max_cached_tokens: int = 1024

    def __post_init__(self):
        if not 0 < self.port < 65536:
            raise ConfigError(f"port must be between 1 and 65535, got {self.port}")
        self.log_level = str(self.log_level).lower()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got '{self.log_level}'")
        if self.max_limit < 1:
            raise ConfigError(f"max_limit must be at least 1, got {self.max_limit}")
        if not 1 <= self.default_limit <= self.max_limit:
            raise ConfigError(
                f"default_limit must be between 1 and max_limit ({self.max_limit}), got {self.default_limit}"
            )
        if self.calls_per_second <= 0:
            raise ConfigError(f"calls_per_second must be positive, got {self.calls_per_second}")
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.timeout_seconds <= 0:
            raise ConfigError(f"timeout_seconds must be positive, got {self.timeout_seconds}")
        if self.max_cached_tokens < 1:
            raise ConfigError(f"max_cached_tokens must be at least 1, got {self.max_cached_tokens}")
        if self.log_path is not None:
            self.log_path = Path(self.log_path)


def load_config(path: Path) -> Config:
    """Load and validate configuration from a YAML file."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}")

    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a YAML mapping")

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown config field(s): {', '.join(unknown)}")

    numeric = {"port": int, "default_limit": int, "max_limit": int, "max_retries": int, "max_cached_tokens": int,
               "calls_per_second": float, "timeout_seconds": float}
    values = {}
    for key, value in raw.items():
        if value is None:
            continue
        if key in numeric:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"Config field '{key}' must be a number, got {value!r}")
            value = numeric[key](value)
        values[key] = value

    return Config(**values)
