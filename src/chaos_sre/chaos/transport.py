"""
HTTP transport for the chaos control plane.

Starts and stops experiments against a remote fault-injection service.
The transport knows nothing about environments or experiment lifetime;
those belong to :class:`~chaos_sre.chaos.orchestrator.ChaosOrchestrator`.

No external dependencies — uses http.client so the connect and read
timeouts can be bounded separately.
"""

from __future__ import annotations

import http.client
import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from chaos_sre.errors import ConfigError, TransportError

if TYPE_CHECKING:
    from chaos_sre.chaos.scenario import Scenario
    from chaos_sre.config import ConfigProvider

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 5.0
READ_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "chaos-sre/0.1.0"

START_PATH = "/experiments/start"
STOP_PATH = "/experiments/stop"

DEFAULT_PORTS = {"http": 80, "https": 443}

_DISALLOWED_HOST_CHARS = re.compile(r"[\x00-\x20\x7f]")


@dataclass
class TransportResponse:
    """A successful (2xx) reply from the control plane."""

    status_code: int
    body: str = ""


class ChaosTransport:
    """
    Stateless client for the chaos control plane.

    Every call is a single attempt: no retries, no background work.
    Each call blocks for at most the connect plus read timeout.

    Usage:
        transport = ChaosTransport("http://chaos.qa.internal:8080")
        transport.start(experiment_id, Scenario.kill("auth", timedelta(seconds=5)))
        transport.stop(experiment_id)
    """

    def __init__(self, endpoint: str | None, user_agent: str = DEFAULT_USER_AGENT) -> None:
        if endpoint is None or not str(endpoint).strip():
            raise ConfigError("Chaos endpoint must not be None or empty")

        endpoint = str(endpoint).strip().rstrip("/")
        try:
            parts = urlsplit(endpoint)
        except ValueError as e:
            raise ConfigError(f"Chaos endpoint is not a valid URL: {endpoint!r}") from e
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ConfigError(f"Chaos endpoint must be an http(s) URL, got {endpoint!r}")

        self._endpoint = endpoint
        self._scheme = parts.scheme
        self._host = parts.hostname
        if _DISALLOWED_HOST_CHARS.search(self._host):
            raise ConfigError(f"Chaos endpoint has an invalid host: {endpoint!r}")
        try:
            port = parts.port
        except ValueError as e:
            raise ConfigError(f"Chaos endpoint has an invalid port: {endpoint!r}") from e
        # always explicit, so http.client never re-parses an IPv6 host for a port
        self._port = port if port is not None else DEFAULT_PORTS[self._scheme]
        self._base_path = parts.path
        self._user_agent = user_agent

        try:
            self._connection()
        except (http.client.HTTPException, ValueError) as e:
            raise ConfigError(f"Chaos endpoint is not usable: {endpoint!r}: {e}") from e

    @classmethod
    def from_config(cls, config: ConfigProvider) -> ChaosTransport:
        return cls(config.chaos_endpoint())

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def start(self, experiment_id: str, scenario: Scenario) -> TransportResponse:
        """Ask the control plane to start injecting ``scenario``."""
        logger.info("Starting chaos experiment id=%s", experiment_id)
        payload = {"experimentId": experiment_id, "scenario": scenario.to_wire_map()}
        return self._post(START_PATH, payload)

    def stop(self, experiment_id: str) -> TransportResponse:
        """Ask the control plane to revert an experiment."""
        logger.info("Stopping chaos experiment id=%s", experiment_id)
        return self._post(STOP_PATH, {"experimentId": experiment_id})

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _post(self, path: str, payload: dict[str, Any]) -> TransportResponse:
        """Send a JSON POST. Isolated for testability."""
        body = json.dumps(payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
        }

        conn = None
        try:
            conn = self._connection()
            conn.connect()
            # http.client only knows one timeout; tighten it to the read
            # budget once the socket is up
            if conn.sock is not None:
                conn.sock.settimeout(READ_TIMEOUT_SECONDS)
            conn.request("POST", self._base_path + path, body=body, headers=headers)
            resp = conn.getresponse()
            text = resp.read().decode("utf-8", errors="replace")
        except (OSError, ValueError, http.client.HTTPException) as e:
            raise TransportError(
                f"Chaos API request failed: {path}: {e}", path=path, cause=e
            ) from e
        finally:
            if conn is not None:
                conn.close()

        if resp.status < 200 or resp.status >= 300:
            raise TransportError(
                f"Chaos API call failed: {path}: HTTP {resp.status}",
                path=path,
                status_code=resp.status,
            )

        logger.info("Chaos API call succeeded: %s (HTTP %s)", path, resp.status)
        return TransportResponse(status_code=resp.status, body=text)

    def _connection(self) -> http.client.HTTPConnection:
        if self._scheme == "https":
            return http.client.HTTPSConnection(
                self._host, self._port, timeout=CONNECT_TIMEOUT_SECONDS
            )
        return http.client.HTTPConnection(
            self._host, self._port, timeout=CONNECT_TIMEOUT_SECONDS
        )

    def __repr__(self) -> str:
        return f"ChaosTransport(endpoint={self._endpoint!r})"
