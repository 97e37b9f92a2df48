"""Tests for the production safety gate."""

import logging

import pytest

from chaos_sre.chaos.safety import SafetyGate
from chaos_sre.errors import SafetyViolation


class TestSafetyGate:
    @pytest.mark.parametrize("env", ["PROD", "prod", "Prod", " prod "])
    def test_blocks_production(self, env: str) -> None:
        gate = SafetyGate()
        with pytest.raises(SafetyViolation) as exc_info:
            gate.check(env)
        assert exc_info.value.environment == env

    @pytest.mark.parametrize("env", ["QA", "staging", "dev", "production", "", None])
    def test_allows_other_environments(self, env: str) -> None:
        SafetyGate().check(env)

    def test_override_allows_production(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="chaos_sre.chaos.safety"):
            SafetyGate().check("PROD", override_allowed=True)
        assert any("production" in r.getMessage() for r in caplog.records)

    def test_custom_marker(self) -> None:
        gate = SafetyGate(production_marker="LIVE")
        gate.check("PROD")
        with pytest.raises(SafetyViolation):
            gate.check("live")

    def test_is_production(self) -> None:
        gate = SafetyGate()
        assert gate.is_production("prod") is True
        assert gate.is_production("qa") is False
        assert gate.is_production(None) is False
