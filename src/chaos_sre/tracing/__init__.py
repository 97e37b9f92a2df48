"""OpenTelemetry instrumentation for chaos experiments.

- conventions: attribute names and span kind constants
- spans: helpers to create attributed OTel spans around start and rollback
"""

from chaos_sre.tracing.spans import end_span, start_experiment_span, start_rollback_span

__all__ = ["end_span", "start_experiment_span", "start_rollback_span"]
