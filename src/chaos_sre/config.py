"""Environment configuration for chaos experiments.

Settings are kept per environment in a YAML (or JSON) file::

    QA:
      chaos:
        endpoint: http://chaos.qa.internal:8080
    STAGING:
      chaos:
        endpoint: http://chaos.staging.internal:8080
    PROD:
      chaos:
        endpoint: http://chaos.prod.internal:8080
        allow_production: false

The active environment comes from the ``CHAOS_SRE_ENV`` variable and is
read again on every call, so the safety gate always sees the live value.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from chaos_sre.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_VAR = "CHAOS_SRE_ENV"
ENDPOINT_ENV_VAR = "CHAOS_SRE_ENDPOINT"
DEFAULT_ENVIRONMENT = "QA"


@runtime_checkable
class ConfigProvider(Protocol):
    """What the orchestrator needs to know about its surroundings."""

    def chaos_endpoint(self) -> str | None: ...

    def current_environment_name(self) -> str: ...


class ChaosSettings(BaseModel):
    """Chaos control plane settings for one environment."""

    endpoint: str | None = Field(default=None, description="Base URL of the chaos control plane")
    allow_production: bool = Field(
        default=False,
        description="Permit experiments even when this environment is production",
    )


class EnvironmentSettings(BaseModel):
    """Settings block for one environment; unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    chaos: ChaosSettings = Field(default_factory=ChaosSettings)


class EnvironmentConfig:
    """Per-environment configuration with a live environment lookup.

    Usage:
        config = EnvironmentConfig.from_yaml("env-config.yaml")
        config.current_environment_name()  # "QA" unless CHAOS_SRE_ENV is set
        config.chaos_endpoint()
    """

    def __init__(
        self,
        environments: dict[str, EnvironmentSettings] | None = None,
        env_var: str = ENV_VAR,
        default_environment: str = DEFAULT_ENVIRONMENT,
    ) -> None:
        self._environments = {
            name.upper(): settings for name, settings in (environments or {}).items()
        }
        self._env_var = env_var
        self._default_environment = default_environment

    @classmethod
    def from_dict(cls, data: dict[str, Any], **kwargs: Any) -> EnvironmentConfig:
        if not isinstance(data, dict):
            raise ConfigError("Environment configuration must be a mapping of environments")
        try:
            environments = {
                str(name): EnvironmentSettings.model_validate(block or {})
                for name, block in data.items()
            }
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e
        return cls(environments, **kwargs)

    @classmethod
    def from_yaml(cls, path: str | Path, **kwargs: Any) -> EnvironmentConfig:
        """Load environments from a YAML file. JSON files parse the same way."""
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load environment config {path}: {e}") from e

        config = cls.from_dict(data or {}, **kwargs)
        logger.info("Loaded environment configuration from %s: %s", path, config.environments)
        return config

    @property
    def environments(self) -> list[str]:
        return sorted(self._environments)

    def current_environment_name(self) -> str:
        env = os.environ.get(self._env_var, self._default_environment).strip()
        if not env:
            raise ConfigError(f"{self._env_var} cannot be empty")
        return env.upper()

    def settings(self, environment: str | None = None) -> EnvironmentSettings:
        name = (environment or self.current_environment_name()).upper()
        settings = self._environments.get(name)
        if settings is None:
            raise ConfigError(f"No configuration found for environment: {name}")
        return settings

    def chaos_endpoint(self) -> str | None:
        override = os.environ.get(ENDPOINT_ENV_VAR, "").strip()
        if override:
            return override
        return self.settings().chaos.endpoint

    def allow_production(self) -> bool:
        name = self.current_environment_name()
        settings = self._environments.get(name)
        return settings is not None and settings.chaos.allow_production

    def __repr__(self) -> str:
        return f"EnvironmentConfig(environments={self.environments})"


class StaticConfig:
    """Fixed endpoint and environment, for scripts and tests."""

    def __init__(self, chaos_endpoint: str | None, environment_name: str = DEFAULT_ENVIRONMENT) -> None:
        self._chaos_endpoint = chaos_endpoint
        self.environment_name = environment_name

    def chaos_endpoint(self) -> str | None:
        return self._chaos_endpoint

    def current_environment_name(self) -> str:
        return self.environment_name
