"""Chaos scenarios — immutable, validated descriptions of a single fault."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from chaos_sre.errors import ValidationError


class ChaosType(Enum):
    """Types of faults the chaos control plane can inject."""

    LATENCY = "LATENCY"
    HTTP_ERROR = "HTTP_ERROR"
    KILL = "KILL"
    NETWORK_ISOLATION = "NETWORK_ISOLATION"


@dataclass(frozen=True)
class Scenario:
    """What fault to inject, where, and for how long.

    Build scenarios through the static constructors (``latency``,
    ``http_error``, ``kill``, ``network_isolation``). Every field is
    checked when the instance is created, so a scenario that exists is
    always safe to send.
    """

    chaos_type: ChaosType
    target_service: str
    duration: timedelta
    parameters: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.chaos_type, ChaosType):
            raise ValidationError(f"Unknown chaos type: {self.chaos_type!r}")
        _require_service(self.target_service)
        _require_positive("Duration", self.duration)
        _check_parameters(self.chaos_type, self.parameters)
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @staticmethod
    def latency(service: str, latency: timedelta, duration: timedelta) -> Scenario:
        _require_positive("Latency", latency)
        return Scenario(
            ChaosType.LATENCY,
            service,
            duration,
            {"latencyMs": _to_millis(latency)},
        )

    @staticmethod
    def http_error(
        service: str, status_code: int, percentage: int, duration: timedelta
    ) -> Scenario:
        return Scenario(
            ChaosType.HTTP_ERROR,
            service,
            duration,
            {"statusCode": status_code, "percentage": percentage},
        )

    @staticmethod
    def kill(service: str, duration: timedelta) -> Scenario:
        return Scenario(ChaosType.KILL, service, duration)

    @staticmethod
    def network_isolation(service: str, duration: timedelta) -> Scenario:
        return Scenario(ChaosType.NETWORK_ISOLATION, service, duration)

    @property
    def duration_ms(self) -> int:
        return _to_millis(self.duration)

    def to_wire_map(self) -> dict[str, Any]:
        """Serialize to the control plane's JSON shape."""
        return {
            "type": self.chaos_type.value,
            "targetService": self.target_service,
            "durationMs": self.duration_ms,
            "parameters": dict(self.parameters),
        }

    def to_dict(self) -> dict[str, Any]:
        """Audit form; same shape as the wire map."""
        return self.to_wire_map()

    def __str__(self) -> str:
        return (
            f"Scenario(type={self.chaos_type.value}, target={self.target_service}, "
            f"duration={self.duration_ms}ms, parameters={dict(self.parameters)})"
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _require_service(service: Any) -> None:
    if service is None:
        raise ValidationError("Target service cannot be None")
    if not isinstance(service, str):
        raise ValidationError(f"Target service must be a string, got {type(service).__name__}")
    if not service.strip():
        raise ValidationError("Target service cannot be blank")


def _require_positive(name: str, value: Any) -> None:
    if value is None:
        raise ValidationError(f"{name} cannot be None")
    if not isinstance(value, timedelta):
        raise ValidationError(f"{name} must be a timedelta, got {type(value).__name__}")
    if value <= timedelta(0):
        raise ValidationError(f"{name} must be positive")
    # sent as whole milliseconds; anything shorter would go out as 0
    if value < timedelta(milliseconds=1):
        raise ValidationError(f"{name} must be at least 1 ms, got {value!r}")


def _require_int_in_range(name: str, value: Any, low: int, high: int) -> None:
    # bool is an int subclass; True must not pass as status code 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < low or value > high:
        raise ValidationError(f"{name} must be between {low} and {high}, got {value}")


def _check_parameters(chaos_type: ChaosType, parameters: Mapping[str, Any]) -> None:
    if parameters is None:
        raise ValidationError("Parameters cannot be None")

    if chaos_type == ChaosType.LATENCY:
        _expect_keys(chaos_type, parameters, {"latencyMs"})
        latency_ms = parameters["latencyMs"]
        if isinstance(latency_ms, bool) or not isinstance(latency_ms, int) or latency_ms <= 0:
            raise ValidationError(f"Latency must be a positive number of ms, got {latency_ms!r}")
    elif chaos_type == ChaosType.HTTP_ERROR:
        _expect_keys(chaos_type, parameters, {"statusCode", "percentage"})
        _require_int_in_range("HTTP status", parameters["statusCode"], 400, 599)
        _require_int_in_range("Error percentage", parameters["percentage"], 1, 100)
    else:
        _expect_keys(chaos_type, parameters, set())


def _expect_keys(chaos_type: ChaosType, parameters: Mapping[str, Any], keys: set[str]) -> None:
    if set(parameters) != keys:
        expected = ", ".join(sorted(keys)) or "no parameters"
        raise ValidationError(
            f"{chaos_type.value} expects {expected}, got {sorted(parameters)}"
        )


def _to_millis(value: timedelta) -> int:
    return value // timedelta(milliseconds=1)
