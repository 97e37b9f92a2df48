"""Chaos orchestrator — scoped, reversible fault injection for tests.

Chaos started through the orchestrator is always:
- checked against the production safety gate before anything is sent
- identified by a fresh experiment id
- returned as an :class:`ExperimentHandle` that rolls it back on close
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Protocol

from chaos_sre.chaos.handle import Experiment, ExperimentHandle
from chaos_sre.chaos.safety import SafetyGate
from chaos_sre.chaos.scenario import Scenario
from chaos_sre.chaos.transport import ChaosTransport
from chaos_sre.errors import SafetyViolation
from chaos_sre.tracing.spans import end_span, start_experiment_span

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

    from chaos_sre.config import ConfigProvider

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Start/stop interface the orchestrator drives."""

    def start(self, experiment_id: str, scenario: Scenario) -> Any: ...

    def stop(self, experiment_id: str) -> Any: ...


@dataclass
class RollbackFailure:
    """A rollback that could not be confirmed by the control plane."""

    experiment_id: str
    scenario: Scenario
    elapsed_seconds: float
    error: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "experiment_id": self.experiment_id,
            "scenario": self.scenario.to_dict(),
            "elapsed_seconds": self.elapsed_seconds,
            "error": self.error,
            "timestamp": self.timestamp,
        }


class ChaosOrchestrator:
    """Starts chaos experiments and hands back handles that undo them.

    Dependencies are injected so tests can swap in a fake transport and a
    fixed environment. When no transport is given, one is built from
    ``config.chaos_endpoint()`` for each experiment after the safety gate
    has passed.

    Failed rollbacks never raise. They are logged, recorded in
    :attr:`failed_rollbacks` and passed to ``on_rollback_failure`` so a
    test suite can check :attr:`cleanup_healthy` at the end of a run.
    """

    def __init__(
        self,
        config: ConfigProvider,
        transport: Transport | None = None,
        gate: SafetyGate | None = None,
        allow_production: bool | None = None,
        tracer: Tracer | None = None,
        on_rollback_failure: Callable[[RollbackFailure], None] | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._gate = gate or SafetyGate()
        self._allow_production = allow_production
        self._tracer = tracer
        self._on_rollback_failure = on_rollback_failure
        self._lock = threading.Lock()
        self._event_log: list[dict[str, Any]] = []
        self._failed_rollbacks: list[RollbackFailure] = []

    # ------------------------------------------------------------------
    # Convenience entry points
    # ------------------------------------------------------------------

    def inject_latency(
        self, service: str, latency: timedelta, duration: timedelta
    ) -> ExperimentHandle:
        return self.start_chaos(Scenario.latency(service, latency, duration))

    def inject_error_rate(
        self, service: str, status_code: int, percentage: int, duration: timedelta
    ) -> ExperimentHandle:
        return self.start_chaos(Scenario.http_error(service, status_code, percentage, duration))

    def kill_service(self, service: str, duration: timedelta) -> ExperimentHandle:
        return self.start_chaos(Scenario.kill(service, duration))

    def isolate_network(self, service: str, duration: timedelta) -> ExperimentHandle:
        return self.start_chaos(Scenario.network_isolation(service, duration))

    # ------------------------------------------------------------------
    # Core orchestration
    # ------------------------------------------------------------------

    def start_chaos(
        self, scenario: Scenario, allow_production: bool | None = None
    ) -> ExperimentHandle:
        """Start ``scenario`` and return an open handle.

        Raises:
            SafetyViolation: the current environment is production and no
                override is in effect. Nothing is sent.
            ConfigError: no usable chaos endpoint is configured.
            TransportError: the control plane refused or could not be
                reached. No handle exists for the experiment.
        """
        environment = self._config.current_environment_name()
        override = self._resolve_override(allow_production)
        try:
            self._gate.check(environment, override)
        except SafetyViolation as e:
            logger.error("Chaos blocked by safety gate: %s", e)
            self._emit_event("safety_blocked", environment=environment, scenario=scenario)
            raise

        transport = self._transport or ChaosTransport.from_config(self._config)

        experiment_id = str(uuid.uuid4())
        started_at = datetime.now(timezone.utc)
        logger.info(
            "Starting chaos experiment id=%s environment=%s scenario=%s",
            experiment_id,
            environment,
            scenario,
        )
        self._emit_event(
            "experiment_starting",
            experiment_id=experiment_id,
            environment=environment,
            scenario=scenario,
        )

        span = None
        if self._tracer is not None:
            span = start_experiment_span(self._tracer, experiment_id, scenario, environment)
        try:
            transport.start(experiment_id, scenario)
        except Exception as e:
            if span is not None:
                end_span(span, error=e)
            self._emit_event(
                "experiment_start_failed",
                experiment_id=experiment_id,
                environment=environment,
                scenario=scenario,
                error=e,
            )
            raise
        if span is not None:
            end_span(span)

        self._emit_event(
            "experiment_started",
            experiment_id=experiment_id,
            environment=environment,
            scenario=scenario,
        )
        experiment = Experiment(experiment_id, scenario, started_at)
        return ExperimentHandle(
            experiment,
            transport,
            listener=self._on_handle_closed,
            tracer=self._tracer,
        )

    @contextmanager
    def experiment(
        self, scenario: Scenario, allow_production: bool | None = None
    ) -> Iterator[ExperimentHandle]:
        """Run ``scenario`` for the duration of a ``with`` block.

        The rollback runs on every exit path, including when the block
        raises; the block's exception is never replaced by a rollback error.
        """
        handle = self.start_chaos(scenario, allow_production=allow_production)
        try:
            yield handle
        finally:
            handle.close()

    # ------------------------------------------------------------------
    # Cleanup health
    # ------------------------------------------------------------------

    @property
    def failed_rollbacks(self) -> list[RollbackFailure]:
        with self._lock:
            return list(self._failed_rollbacks)

    @property
    def cleanup_healthy(self) -> bool:
        with self._lock:
            return not self._failed_rollbacks

    @property
    def event_log(self) -> list[dict[str, Any]]:
        """Return the full audit trail."""
        with self._lock:
            return list(self._event_log)

    def _on_handle_closed(
        self, experiment: Experiment, elapsed: float, error: BaseException | None
    ) -> None:
        if error is None:
            self._emit_event(
                "experiment_rolled_back",
                experiment_id=experiment.experiment_id,
                scenario=experiment.scenario,
                elapsed_seconds=elapsed,
            )
            return

        failure = RollbackFailure(
            experiment_id=experiment.experiment_id,
            scenario=experiment.scenario,
            elapsed_seconds=elapsed,
            error=str(error),
        )
        with self._lock:
            self._failed_rollbacks.append(failure)
        self._emit_event(
            "rollback_failed",
            experiment_id=experiment.experiment_id,
            scenario=experiment.scenario,
            elapsed_seconds=elapsed,
            error=error,
        )
        if self._on_rollback_failure is not None:
            try:
                self._on_rollback_failure(failure)
            except Exception:
                logger.warning(
                    "on_rollback_failure callback failed for %s",
                    experiment.experiment_id,
                    exc_info=True,
                )

    def _resolve_override(self, allow_production: bool | None) -> bool:
        if allow_production is not None:
            return allow_production
        if self._allow_production is not None:
            return self._allow_production
        config_override = getattr(self._config, "allow_production", None)
        if callable(config_override):
            return bool(config_override())
        return False

    def _emit_event(self, event_type: str, **kwargs: Any) -> None:
        """Record an audit event."""
        entry: dict[str, Any] = {
            "event": event_type,
            "timestamp": time.time(),
        }
        if "experiment_id" in kwargs:
            entry["experiment_id"] = kwargs["experiment_id"]
        if "environment" in kwargs:
            entry["environment"] = kwargs["environment"]
        if "scenario" in kwargs:
            entry["scenario"] = kwargs["scenario"].to_dict()
        if "elapsed_seconds" in kwargs:
            entry["elapsed_seconds"] = kwargs["elapsed_seconds"]
        if "error" in kwargs:
            entry["error"] = str(kwargs["error"])

        with self._lock:
            self._event_log.append(entry)
        logger.debug("chaos event: %s", entry)
