"""Error taxonomy for chaos experiments.

Failures that would create an experiment (validation, configuration,
safety, transport on start) always propagate. Failures while tearing an
experiment down are logged by :class:`~chaos_sre.chaos.handle.ExperimentHandle`
and never raised from ``close()``.
"""

from __future__ import annotations


class ChaosError(Exception):
    """Base class for every error raised by chaos-sre."""


class ValidationError(ChaosError, ValueError):
    """A scenario was described with invalid parameters."""


class ConfigError(ChaosError):
    """Chaos configuration is missing or malformed."""


class SafetyViolation(ChaosError):
    """A chaos action was attempted against a production environment."""

    def __init__(self, environment: str, message: str | None = None) -> None:
        self.environment = environment
        super().__init__(
            message or f"Chaos experiments are not allowed in {environment}"
        )


class TransportError(ChaosError):
    """The chaos control plane rejected a request or could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.path = path
        self.status_code = status_code
        self.cause = cause
        super().__init__(message)
