"""Helper functions to create properly attributed OpenTelemetry spans.

Each helper sets the semantic attributes from
:mod:`chaos_sre.tracing.conventions` so callers don't need to
remember attribute keys.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry.trace import Span, Status, StatusCode, Tracer

from chaos_sre.tracing.conventions import (
    CHAOS_DURATION_MS,
    CHAOS_ELAPSED_SECONDS,
    CHAOS_ENVIRONMENT,
    CHAOS_EXPERIMENT_ID,
    CHAOS_PARAMETER_PREFIX,
    CHAOS_TARGET_SERVICE,
    CHAOS_TYPE,
    EXPERIMENT_ROLLBACK,
    EXPERIMENT_START,
    SPAN_KIND_ATTRIBUTE,
)

if TYPE_CHECKING:
    from chaos_sre.chaos.handle import Experiment
    from chaos_sre.chaos.scenario import Scenario


def start_experiment_span(
    tracer: Tracer,
    experiment_id: str,
    scenario: Scenario,
    environment: str = "",
    **kwargs: Any,
) -> Span:
    """Start a span representing the start request of an experiment.

    Args:
        tracer: OpenTelemetry tracer instance.
        experiment_id: Id sent to the control plane.
        scenario: The scenario being injected.
        environment: Name of the environment the experiment runs in.
        **kwargs: Extra attributes to set on the span.

    Returns:
        A started ``Span`` with experiment attributes.
    """
    span = tracer.start_span(f"chaos_start:{scenario.chaos_type.value}:{scenario.target_service}")
    span.set_attribute(SPAN_KIND_ATTRIBUTE, EXPERIMENT_START)
    span.set_attribute(CHAOS_EXPERIMENT_ID, experiment_id)
    span.set_attribute(CHAOS_TYPE, scenario.chaos_type.value)
    span.set_attribute(CHAOS_TARGET_SERVICE, scenario.target_service)
    span.set_attribute(CHAOS_DURATION_MS, scenario.duration_ms)
    if environment:
        span.set_attribute(CHAOS_ENVIRONMENT, environment)
    for name, value in scenario.parameters.items():
        span.set_attribute(CHAOS_PARAMETER_PREFIX + name, value)
    for key, value in kwargs.items():
        span.set_attribute(key, value)
    return span


def start_rollback_span(
    tracer: Tracer,
    experiment: Experiment,
    **kwargs: Any,
) -> Span:
    """Start a span representing the rollback of an experiment."""
    scenario = experiment.scenario
    span = tracer.start_span(f"chaos_rollback:{scenario.chaos_type.value}:{scenario.target_service}")
    span.set_attribute(SPAN_KIND_ATTRIBUTE, EXPERIMENT_ROLLBACK)
    span.set_attribute(CHAOS_EXPERIMENT_ID, experiment.experiment_id)
    span.set_attribute(CHAOS_TYPE, scenario.chaos_type.value)
    span.set_attribute(CHAOS_TARGET_SERVICE, scenario.target_service)
    span.set_attribute(CHAOS_ELAPSED_SECONDS, experiment.elapsed_seconds())
    for key, value in kwargs.items():
        span.set_attribute(key, value)
    return span


def end_span(span: Span, error: BaseException | None = None) -> None:
    """Finish ``span``, marking it as an error when ``error`` is given."""
    if error is not None:
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, str(error)))
    else:
        span.set_status(Status(StatusCode.OK))
    span.end()
