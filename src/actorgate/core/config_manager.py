"""Configuration Management for the ActorGate Client

Handles loading and validation of client configuration. Supports hierarchical
YAML files with environment variable overrides.
"""

import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..api.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECS
from ..api.compression import MIN_GZIP_BYTES
from ..api.retry import (
    DEFAULT_BACKOFF_MULTIPLIER, DEFAULT_BASE_DELAY_MS, DEFAULT_JITTER_MS,
    DEFAULT_MAX_ATTEMPTS, DEFAULT_MAX_DELAY_MS, RetryPolicy
)


ENV_PREFIX = "ACTORGATE_"
ENVIRONMENT_VARIABLE = "ACTORGATE_ENV"


class ClientConfig(BaseModel):
    """Configuration of an ActorGate client."""
    model_config = ConfigDict(validate_assignment=True, extra='forbid')

    base_url: str = Field(default=DEFAULT_BASE_URL)
    token: Optional[str] = None
    timeout_secs: float = Field(default=DEFAULT_TIMEOUT_SECS, gt=0)
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    base_delay_ms: float = Field(default=DEFAULT_BASE_DELAY_MS, ge=0)
    max_delay_ms: float = Field(default=DEFAULT_MAX_DELAY_MS, ge=0)
    backoff_multiplier: float = Field(default=DEFAULT_BACKOFF_MULTIPLIER, ge=1.0)
    jitter_ms: float = Field(default=DEFAULT_JITTER_MS, ge=0)
    max_page_limit: int = Field(default=1000, ge=1)
    min_gzip_bytes: int = Field(default=MIN_GZIP_BYTES, ge=0)
    gzip_enabled: bool = Field(default=True)
    stringify_functions: bool = Field(default=False)
    user_agent_suffix: Optional[str] = None
    verify_ssl: bool = Field(default=True)

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v):
        """Validate base URL format"""
        if not v.startswith(('http://', 'https://')):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip('/')

    @field_validator('token')
    @classmethod
    def validate_token(cls, v):
        """Empty tokens mean anonymous access"""
        if v is not None and not v.strip():
            return None
        return v

    def to_retry_policy(self) -> RetryPolicy:
        """Build the retry policy described by this configuration"""
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
            backoff_multiplier=self.backoff_multiplier,
            jitter_ms=self.jitter_ms
        )

    def masked_dict(self) -> Dict[str, Any]:
        """Configuration as a dict with the token hidden, for logging"""
        data = self.model_dump()
        if data.get('token'):
            data['token'] = '***MASKED***'
        return data


class ConfigManager:
    """Manages client configuration loading and validation."""

    def __init__(self, config_path: Optional[Path] = None, environment: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional directory holding the configuration files
            environment: Environment name (development, staging, production)
        """
        self.config_base_path = Path(config_path) if config_path else self._get_default_config_path()
        self.environment = environment or os.getenv(ENVIRONMENT_VARIABLE, 'development')
        self._config: Optional[ClientConfig] = None
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

        # Configuration file paths
        self.config_files = self._get_config_files()

    def _get_default_config_path(self) -> Path:
        """Get the default configuration directory."""
        config_locations = [
            Path("config"),
            Path.home() / ".actorgate",
        ]

        for location in config_locations:
            if location.exists() and location.is_dir():
                return location

        return Path("config")

    def _get_config_files(self) -> Dict[str, Path]:
        """Get configuration file paths for hierarchical loading."""
        base_dir = self.config_base_path

        return {
            'default': base_dir / 'default_config.yaml',
            'environment': base_dir / f'{self.environment}.yaml',
            'local': base_dir / 'local.yaml'  # For development overrides
        }

    def load_config(self) -> ClientConfig:
        """Load and validate configuration with hierarchical overrides.

        Returns:
            Validated client configuration

        Raises:
            ValueError: If the configuration is invalid
        """
        with self._lock:
            if self._config:
                return self._config

            config_data: Dict[str, Any] = {}

            for config_type, config_file in self.config_files.items():
                if config_file.exists():
                    self.logger.info(f"Loading {config_type} config from {config_file}")
                    config_data.update(self._load_yaml_file(config_file))

            env_overrides = self._get_env_overrides()
            if env_overrides:
                self.logger.info(f"Applying environment overrides: {list(env_overrides.keys())}")
                config_data.update(env_overrides)

            try:
                self._config = ClientConfig(**config_data)
            except ValidationError as e:
                self.logger.error(f"Configuration validation failed: {e}")
                raise ValueError(f"Invalid configuration: {e}") from e

            return self._config

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file."""
        try:
            with open(file_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error(f"Failed to parse YAML file {file_path}: {e}")
            raise ValueError(f"Invalid YAML in {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {file_path} must be a mapping")
        return data

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Get configuration overrides from environment variables.

        Environment variables follow pattern: ACTORGATE_<KEY>
        Example: ACTORGATE_MAX_ATTEMPTS -> max_attempts
        """
        overrides = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX) or key == ENVIRONMENT_VARIABLE:
                continue
            field_name = key[len(ENV_PREFIX):].lower()
            if field_name in ClientConfig.model_fields:
                # pydantic coerces the strings to the field types
                overrides[field_name] = value

        return overrides

    def update_config(self, updates: Dict[str, Any]) -> ClientConfig:
        """Return a validated copy of the configuration with updates applied.

        Raises:
            ValueError: If the updated configuration is invalid
        """
        current = self.load_config()
        with self._lock:
            try:
                self._config = ClientConfig(**{**current.model_dump(), **updates})
            except ValidationError as e:
                raise ValueError(f"Invalid configuration: {e}") from e
            return self._config

    def save_config(self, target: str = "local"):
        """Save the current configuration, without the token, to one of the config files."""
        if target not in self.config_files:
            raise ValueError(f"Invalid target: {target}")

        config_dict = self.load_config().model_dump()
        config_dict.pop('token', None)

        target_file = self.config_files[target]
        target_file.parent.mkdir(parents=True, exist_ok=True)
        with open(target_file, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

        self.logger.info(f"Configuration saved to {target_file}")

    def reload_config(self) -> ClientConfig:
        """Discard the cached configuration and load it again."""
        with self._lock:
            self._config = None
        return self.load_config()
