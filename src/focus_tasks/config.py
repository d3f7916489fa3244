"""Configuration management for Focus Tasks."""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from dotenv import load_dotenv


logger = logging.getLogger(__name__)

DEFAULT_HOME = "~/.focus_tasks"

# Environment variable -> config field
ENV_OVERRIDES = {
    "FOCUS_TASKS_DB": "database_path",
    "FOCUS_TASKS_HOST": "host",
    "PORT": "port",
    "FOCUS_TASKS_PORT": "port",
    "FOCUS_TASKS_API_URL": "api_url",
    "FOCUS_TASKS_LOG_LEVEL": "log_level",
    "FOCUS_TASKS_CORS_ORIGINS": "cors_origins",
    "FOCUS_TASKS_TIMEOUT": "request_timeout",
}


@dataclass
class ConfigModel:
    """Global configuration model for Focus Tasks."""

    # Store
    database_path: str = f"{DEFAULT_HOME}/tasks.db"

    # Server
    host: str = "127.0.0.1"
    port: int = 5000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Client
    api_url: str = "http://127.0.0.1:5000/api/tasks"
    request_timeout: float = 30.0

    log_level: str = "INFO"

    def __post_init__(self):
        """Post-initialization setup."""
        self.database_path = os.path.expanduser(self.database_path)
        self.port = int(self.port)
        self.request_timeout = float(self.request_timeout)
        self.log_level = str(self.log_level).upper()
        if isinstance(self.cors_origins, str):
            self.cors_origins = [
                origin.strip() for origin in self.cors_origins.split(",") if origin.strip()
            ]

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        return yaml.dump(data, default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML, ignoring unknown keys."""
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ValueError(f"expected a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        return cls(**{key: value for key, value in data.items() if key in known})

    def with_env(self, environ: Optional[Dict[str, str]] = None) -> "ConfigModel":
        """Return a copy with environment overrides applied.

        Values that cannot be converted to the field's type are logged and
        skipped.
        """
        environ = os.environ if environ is None else environ
        config = replace(self)
        for env_name, field_name in ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if not value:
                continue
            try:
                config = replace(config, **{field_name: value})
            except ValueError:
                logger.warning("Ignoring invalid %s=%r", env_name, value)
        return config


def get_config_path() -> Path:
    """Get the default config file path."""
    return Path(os.path.expanduser(DEFAULT_HOME)) / "config.yaml"


class Config:
    """Configuration manager for Focus Tasks."""

    _instance: Optional[ConfigModel] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Load configuration from defaults, file, ``.env`` and environment."""
        load_dotenv()

        config = ConfigModel()
        if config_path is None:
            config_path = get_config_path()

        if config_path.exists():
            try:
                config = ConfigModel.from_yaml(config_path.read_text())
                logger.debug("Loaded configuration from %s", config_path)
            except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
                logger.warning("Failed to load config from %s: %s; using defaults", config_path, e)

        cls._instance = config.with_env()
        return cls._instance

    @classmethod
    def get(cls) -> ConfigModel:
        """Get the current configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def set(cls, config: Optional[ConfigModel]) -> None:
        cls._instance = config


def get_config() -> ConfigModel:
    """Get the current configuration."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file."""
    return Config.load(config_path)


def reset_config() -> None:
    """Forget the cached configuration."""
    Config.set(None)
