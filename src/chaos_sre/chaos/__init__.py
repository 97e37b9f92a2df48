"""Chaos orchestration — scoped, reversible fault injection against a remote control plane."""

from .scenario import ChaosType, Scenario
from .transport import ChaosTransport, TransportResponse
from .safety import SafetyGate
from .handle import Experiment, ExperimentHandle, HandleState
from .orchestrator import ChaosOrchestrator, RollbackFailure

__all__ = [
    "ChaosType", "Scenario",
    "ChaosTransport", "TransportResponse",
    "SafetyGate",
    "Experiment", "ExperimentHandle", "HandleState",
    "ChaosOrchestrator", "RollbackFailure",
]
