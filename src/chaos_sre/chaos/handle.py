"""Experiment handles — caller-owned tokens that roll chaos back exactly once."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Protocol

from chaos_sre.chaos.scenario import Scenario
from chaos_sre.tracing.spans import end_span, start_rollback_span

if TYPE_CHECKING:
    from types import TracebackType

    from opentelemetry.trace import Tracer

logger = logging.getLogger(__name__)


class StopTransport(Protocol):
    """Anything that can revert a running experiment by id."""

    def stop(self, experiment_id: str) -> Any: ...


class HandleState(Enum):
    """Lifecycle state of an experiment handle."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class Experiment:
    """A chaos experiment the control plane accepted."""

    experiment_id: str
    scenario: Scenario
    started_at: datetime

    def elapsed_seconds(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (now - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "experiment_id": self.experiment_id,
            "scenario": self.scenario.to_dict(),
            "started_at": self.started_at.isoformat(),
        }


# Called once per handle with (experiment, elapsed_seconds, error or None)
CloseListener = Callable[[Experiment, float, "BaseException | None"], None]


class ExperimentHandle:
    """Handle returned to tests. Close it to roll the chaos back.

    ``close()`` sends one stop request the first time it is called and is
    a no-op afterwards. A failed stop is logged at error level and never
    raised, so teardown cannot mask the failure of the test body. The
    control plane still expires the experiment on its own once the
    scenario's duration has elapsed.

    Usage:
        with orchestrator.kill_service("search", timedelta(seconds=30)):
            exercise_search()
    """

    def __init__(
        self,
        experiment: Experiment,
        transport: StopTransport,
        listener: CloseListener | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        self._experiment = experiment
        self._transport = transport
        self._listener = listener
        self._tracer = tracer
        self._state = HandleState.OPEN
        self._lock = threading.Lock()

    @property
    def experiment(self) -> Experiment:
        return self._experiment

    @property
    def experiment_id(self) -> str:
        return self._experiment.experiment_id

    @property
    def scenario(self) -> Scenario:
        return self._experiment.scenario

    @property
    def started_at(self) -> datetime:
        return self._experiment.started_at

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state == HandleState.CLOSED

    def close(self) -> None:
        """Roll the experiment back. Safe to call any number of times."""
        with self._lock:
            if self._state == HandleState.CLOSED:
                return
            try:
                error = self._rollback()
            finally:
                self._state = HandleState.CLOSED

        if self._listener is not None:
            self._listener(self._experiment, self._experiment.elapsed_seconds(), error)

    def _rollback(self) -> BaseException | None:
        experiment = self._experiment
        span = None
        if self._tracer is not None:
            span = start_rollback_span(self._tracer, experiment)

        try:
            self._transport.stop(experiment.experiment_id)
        except Exception as exc:
            elapsed = experiment.elapsed_seconds()
            logger.error(
                "Failed to roll back chaos experiment %s (scenario=%s, elapsed=%.1fs); "
                "manual remediation may be required",
                experiment.experiment_id,
                experiment.scenario,
                elapsed,
                exc_info=True,
            )
            if span is not None:
                end_span(span, error=exc)
            return exc

        logger.info(
            "Chaos experiment rolled back: id=%s duration=%.1fs",
            experiment.experiment_id,
            experiment.elapsed_seconds(),
        )
        if span is not None:
            end_span(span)
        return None

    def __enter__(self) -> ExperimentHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"ExperimentHandle(id={self.experiment_id!r}, "
            f"type={self.scenario.chaos_type.value}, state={self._state.value})"
        )
