"""Tests for environment configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from chaos_sre.config import (
    ENDPOINT_ENV_VAR,
    ENV_VAR,
    ConfigProvider,
    EnvironmentConfig,
    StaticConfig,
)
from chaos_sre.errors import ConfigError

CONFIG_YAML = """
QA:
  chaos:
    endpoint: http://chaos.qa.internal:8080
  apiBaseUrl: http://api.qa.internal
STAGING:
  chaos:
    endpoint: http://chaos.staging.internal:8080
PROD:
  chaos:
    endpoint: http://chaos.prod.internal:8080
    allow_production: true
dev: {}
"""


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "env-config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_VAR, raising=False)
    monkeypatch.delenv(ENDPOINT_ENV_VAR, raising=False)


class TestEnvironmentConfig:
    def test_load(self, config_path: Path) -> None:
        config = EnvironmentConfig.from_yaml(config_path)
        assert config.environments == ["DEV", "PROD", "QA", "STAGING"]

    def test_default_environment_is_qa(self, config_path: Path) -> None:
        config = EnvironmentConfig.from_yaml(config_path)
        assert config.current_environment_name() == "QA"
        assert config.chaos_endpoint() == "http://chaos.qa.internal:8080"

    def test_environment_is_read_live(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = EnvironmentConfig.from_yaml(config_path)
        assert config.current_environment_name() == "QA"
        monkeypatch.setenv(ENV_VAR, "staging")
        assert config.current_environment_name() == "STAGING"
        assert config.chaos_endpoint() == "http://chaos.staging.internal:8080"

    def test_blank_environment_rejected(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_VAR, "   ")
        with pytest.raises(ConfigError):
            EnvironmentConfig.from_yaml(config_path).current_environment_name()

    def test_unknown_environment(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_VAR, "perf")
        with pytest.raises(ConfigError, match="PERF"):
            EnvironmentConfig.from_yaml(config_path).chaos_endpoint()

    def test_missing_chaos_block(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_VAR, "dev")
        assert EnvironmentConfig.from_yaml(config_path).chaos_endpoint() is None

    def test_endpoint_override(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENDPOINT_ENV_VAR, "http://localhost:9999")
        assert EnvironmentConfig.from_yaml(config_path).chaos_endpoint() == "http://localhost:9999"

    def test_allow_production_flag(self, config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = EnvironmentConfig.from_yaml(config_path)
        assert config.allow_production() is False
        monkeypatch.setenv(ENV_VAR, "PROD")
        assert config.allow_production() is True

    def test_extra_keys_kept(self, config_path: Path) -> None:
        settings = EnvironmentConfig.from_yaml(config_path).settings("qa")
        assert settings.model_extra == {"apiBaseUrl": "http://api.qa.internal"}

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "env-config.json"
        path.write_text('{"QA": {"chaos": {"endpoint": "http://chaos:1"}}}', encoding="utf-8")
        assert EnvironmentConfig.from_yaml(path).chaos_endpoint() == "http://chaos:1"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            EnvironmentConfig.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("QA: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError):
            EnvironmentConfig.from_yaml(path)

    def test_invalid_settings(self) -> None:
        with pytest.raises(ConfigError):
            EnvironmentConfig.from_dict({"QA": {"chaos": {"allow_production": "maybe"}}})

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ConfigError):
            EnvironmentConfig.from_dict(["QA"])  # type: ignore[arg-type]


class TestStaticConfig:
    def test_values(self) -> None:
        config = StaticConfig("http://chaos:8080", "qa")
        assert config.chaos_endpoint() == "http://chaos:8080"
        assert config.current_environment_name() == "qa"

    def test_satisfies_protocol(self, config_path: Path) -> None:
        assert isinstance(StaticConfig(None), ConfigProvider)
        assert isinstance(EnvironmentConfig.from_yaml(config_path), ConfigProvider)
