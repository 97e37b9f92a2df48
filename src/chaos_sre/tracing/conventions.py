"""OpenTelemetry semantic conventions for chaos experiments.

Defines attribute names and span kind constants following the
``chaos.*`` namespace.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Experiment attributes
# ---------------------------------------------------------------------------

CHAOS_EXPERIMENT_ID = "chaos.experiment.id"
CHAOS_TYPE = "chaos.type"
CHAOS_TARGET_SERVICE = "chaos.target.service"
CHAOS_DURATION_MS = "chaos.duration_ms"
CHAOS_ENVIRONMENT = "chaos.environment"
CHAOS_ELAPSED_SECONDS = "chaos.elapsed_seconds"
CHAOS_PARAMETER_PREFIX = "chaos.parameter."

# ---------------------------------------------------------------------------
# Span kind constants
# ---------------------------------------------------------------------------

SPAN_KIND_ATTRIBUTE = "chaos.span.kind"
EXPERIMENT_START = "EXPERIMENT_START"
EXPERIMENT_ROLLBACK = "EXPERIMENT_ROLLBACK"
