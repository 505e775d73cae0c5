# ABOUTME: Configuration loading and validation for notion-toon.
# ABOUTME: Parses config.yaml into a validated dataclass.

from dataclasses import dataclass
from pathlib import Path
import os
import yaml

DEFAULT_TOKEN_ENV = "NOTION_TOKEN"


class ConfigError(Exception):
    """Raised when configuration is invalid."""
    pass


@dataclass
class Config:
    """Main configuration for notion-toon."""
    token_env: str = DEFAULT_TOKEN_ENV
    calls_per_second: float = 2.5
    max_retries: int = 3
    output_dir: Path | None = None
    log_file: Path | None = None

    def __post_init__(self):
        if not self.token_env:
            raise ConfigError("token_env must not be empty")
        if self.calls_per_second <= 0:
            raise ConfigError(f"calls_per_second must be positive, got {self.calls_per_second}")
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be at least 1, got {self.max_retries}")

    def get_token(self) -> str:
        """Retrieve the Notion integration token from the environment."""
        token = os.environ.get(self.token_env)
        if not token:
            raise ConfigError(f"Environment variable '{self.token_env}' not set")
        return token


def _optional_path(raw: dict, key: str) -> Path | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a path string")
    return Path(value).expanduser()


def load_config(path: Path) -> Config:
    """Load and validate configuration from a YAML file."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}")

    # An empty file means "all defaults"
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a YAML mapping")

    token_env = raw.get("token_env", DEFAULT_TOKEN_ENV)
    if not isinstance(token_env, str):
        raise ConfigError("'token_env' must be a string")

    calls_per_second = raw.get("calls_per_second", 2.5)
    if isinstance(calls_per_second, bool) or not isinstance(calls_per_second, (int, float)):
        raise ConfigError("'calls_per_second' must be a number")

    max_retries = raw.get("max_retries", 3)
    if isinstance(max_retries, bool) or not isinstance(max_retries, int):
        raise ConfigError("'max_retries' must be an integer")

    return Config(
        token_env=token_env,
        calls_per_second=float(calls_per_second),
        max_retries=max_retries,
        output_dir=_optional_path(raw, "output_dir"),
        log_file=_optional_path(raw, "log_file"),
    )
