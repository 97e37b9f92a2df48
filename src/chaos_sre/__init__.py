"""Chaos SRE — reversible chaos experiments for test suites.

chaos-sre drives a remote chaos control plane from tests. It injects
time-bounded faults into a target service and guarantees that every
fault it starts is rolled back, even when the test body raises.

Core concepts
-------------
* **Scenario** — an immutable, validated description of one fault:
  latency, HTTP errors, a process kill, or network isolation, plus the
  target service and how long the fault should last.

* **Safety gate** — refuses to start chaos when the current environment
  is production, unless an override is explicitly in effect.

* **Experiment handle** — returned for every started experiment.
  Closing it (or leaving its ``with`` block) sends exactly one stop
  request; a failed stop is logged and recorded, never raised.

Quick start::

    from datetime import timedelta

    from chaos_sre import ChaosOrchestrator, EnvironmentConfig

    orchestrator = ChaosOrchestrator(EnvironmentConfig.from_yaml("env-config.yaml"))
    with orchestrator.inject_latency(
        "search-service", timedelta(milliseconds=200), timedelta(seconds=30)
    ):
        run_search_checks()
"""

from chaos_sre.chaos import (
    ChaosOrchestrator,
    ChaosTransport,
    ChaosType,
    Experiment,
    ExperimentHandle,
    SafetyGate,
    Scenario,
)
from chaos_sre.config import EnvironmentConfig, StaticConfig
from chaos_sre.errors import (
    ChaosError,
    ConfigError,
    SafetyViolation,
    TransportError,
    ValidationError,
)

__all__ = [
    "ChaosError",
    "ChaosOrchestrator",
    "ChaosTransport",
    "ChaosType",
    "ConfigError",
    "EnvironmentConfig",
    "Experiment",
    "ExperimentHandle",
    "SafetyGate",
    "SafetyViolation",
    "Scenario",
    "StaticConfig",
    "TransportError",
    "ValidationError",
]

__version__ = "0.1.0"
