"""Safety gate — refuses chaos in production unless explicitly overridden."""

from __future__ import annotations

import logging

from chaos_sre.errors import SafetyViolation

logger = logging.getLogger(__name__)

PRODUCTION_MARKER = "PROD"


class SafetyGate:
    """Blocks chaos actions when the current environment is production.

    The check runs before any experiment id is generated or any request
    is sent, so a rejected call has no effect on the remote side.
    """

    def __init__(self, production_marker: str = PRODUCTION_MARKER) -> None:
        self.production_marker = production_marker

    def is_production(self, environment_name: str | None) -> bool:
        if environment_name is None:
            return False
        return environment_name.strip().casefold() == self.production_marker.casefold()

    def check(self, environment_name: str | None, override_allowed: bool = False) -> None:
        """Raise :class:`SafetyViolation` for production without an override."""
        if not self.is_production(environment_name):
            return

        if not override_allowed:
            raise SafetyViolation(str(environment_name))

        logger.warning(
            "Chaos override active: running experiment in production environment %s",
            environment_name,
        )
