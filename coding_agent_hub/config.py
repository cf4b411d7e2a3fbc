"""Unified configuration management using YAML with environment overlay."""

import os
import re
import sys
import yaml
import logging
from pathlib import Path
from functools import lru_cache
from typing import Optional, Dict, Any, Tuple
from pydantic import BaseModel, Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Configuration file path (JSON content is accepted, it is valid YAML)
CONFIG_DIR = Path.home() / ".coding-agent-hub"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
# Earlier installs wrote JSON here; read when config.yaml is absent
LEGACY_CONFIG_FILE = CONFIG_DIR / "config.json"
CONFIG_FILE_ENV = "HUB_CONFIG_FILE"

DEFAULT_TIMEOUT_MS = 120_000


def get_config_path() -> Path:
    """
    Resolve the config file path.

    $HUB_CONFIG_FILE wins; otherwise config.yaml, falling back to
    config.json when only that exists.
    """
    explicit = os.getenv(CONFIG_FILE_ENV)
    if explicit:
        return Path(explicit).expanduser()
    if not CONFIG_FILE.exists() and LEGACY_CONFIG_FILE.exists():
        return LEGACY_CONFIG_FILE
    return CONFIG_FILE


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Logging level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class SessionConfig(BaseModel):
    """Conversation session configuration."""

    idle_timeout_ms: int = Field(
        30 * 60 * 1000, description="Idle time before a session is evicted", ge=1
    )
    max_context_turns: int = Field(
        50, description="Max conversation turns kept per session", ge=1
    )
    max_context_chars: int = Field(
        100_000, description="Max total characters of history kept", ge=1
    )


class BackendOverride(BaseModel):
    """
    Operator override for one backend.

    For a built-in backend every field is optional. A custom backend needs
    at least command, display_name and default_model.
    """

    display_name: Optional[str] = None
    command: Optional[str] = None
    enabled: Optional[bool] = None
    default_model: Optional[str] = None
    auth_env_var: Optional[str] = None
    timeout_ms: Optional[int] = Field(None, ge=1)
    arg_builder: Optional[str] = None


class Settings(BaseSettings):
    """Unified settings for coding-agent-hub."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    default_timeout_ms: Optional[int] = Field(
        None, description="Global timeout for built-in backends", ge=1
    )
    backends: Dict[str, BackendOverride] = Field(default_factory=dict)

    model_config = SettingsConfigDict(
        env_prefix="HUB_",
        env_nested_delimiter="__",  # Allows HUB_SESSION__IDLE_TIMEOUT_MS
        extra="ignore",
        validate_default=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Customize settings sources to include the YAML file and legacy env vars."""
        from pydantic_settings.sources import PydanticBaseSettingsSource

        class YamlConfigSource(PydanticBaseSettingsSource):
            """Load settings from the YAML config file."""

            def get_field_value(
                self, field: FieldInfo, field_name: str
            ) -> Tuple[Any, str, bool]:
                data = self()
                if field_name in data:
                    return data[field_name], field_name, True
                return None, field_name, False

            def __call__(self) -> Dict[str, Any]:
                return cls._yaml_config_source()

        class LegacyEnvVars(PydanticBaseSettingsSource):
            """Load legacy flat environment variables."""

            def get_field_value(
                self, field: FieldInfo, field_name: str
            ) -> Tuple[Any, str, bool]:
                data = self()
                if field_name in data:
                    return data[field_name], field_name, True
                return None, field_name, False

            def __call__(self) -> Dict[str, Any]:
                return cls._legacy_env_source()

        # Precedence (left to right - first source wins):
        # init > env_settings > legacy_env > yaml > defaults
        return (
            init_settings,
            env_settings,
            LegacyEnvVars(settings_cls),
            YamlConfigSource(settings_cls),
        )

    @classmethod
    def _yaml_config_source(cls) -> Dict[str, Any]:
        """Load configuration from the YAML file."""
        # Under pytest, skip the user's real config unless a test points
        # HUB_CONFIG_FILE somewhere explicitly
        if "pytest" in sys.modules and CONFIG_FILE_ENV not in os.environ:
            return {}

        config_file = get_config_path()
        if not config_file.exists():
            return {}

        try:
            with open(config_file) as f:
                config_data = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from {config_file}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load {config_file}: {e}")
            return {}

        if not isinstance(config_data, dict):
            logger.warning(f"Ignoring {config_file}: top level is not a mapping")
            return {}

        config_data = _snake_keys(config_data)

        # Handle None values from YAML (e.g., "session:" with no content)
        for key in ("logging", "session", "backends"):
            if key in config_data and config_data[key] is None:
                config_data[key] = {}

        backends = config_data.get("backends")
        if isinstance(backends, dict):
            # Backend names are user-chosen and keep their spelling
            config_data["backends"] = {
                name: _snake_keys(overrides or {})
                for name, overrides in backends.items()
            }

        return config_data

    @classmethod
    def _legacy_env_source(cls) -> Dict[str, Any]:
        """Support legacy flat environment variables."""
        config_data: Dict[str, Any] = {}

        legacy_mappings = {
            "LOG_LEVEL": ("logging", "level"),
            "HUB_IDLE_TIMEOUT_MS": ("session", "idle_timeout_ms"),
        }

        for env_key, path in legacy_mappings.items():
            value = os.getenv(env_key)
            if value is None:
                continue

            current = config_data
            for key in path[:-1]:
                current = current.setdefault(key, {})
            current[path[-1]] = value

        return config_data


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", str(key)).lower()


def _snake_keys(data: Any) -> Any:
    """Accept camelCase keys (``timeoutMs``) alongside snake_case ones."""
    if not isinstance(data, dict):
        return data
    result: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "backends":
            result[key] = value
        elif isinstance(value, dict):
            result[_snake_case(key)] = _snake_keys(value)
        else:
            result[_snake_case(key)] = value
    return result


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
