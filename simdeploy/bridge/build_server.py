"""Production build-server bridge.

rc and production deploys end with a single POST to the build server's
``/deploy-html-simulation`` endpoint.  The server queues the build and
answers immediately; success here means "request accepted" (HTTP 200 or
202), not "artifact live".  There are no retries.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

from simdeploy.errors import NetworkError
from simdeploy.models.release import BuildServerRequest

logger = logging.getLogger(__name__)

DEPLOY_ENDPOINT = "/deploy-html-simulation"
ACCEPTED_STATUS_CODES = frozenset({200, 202})


@runtime_checkable
class ProductionServerClient(Protocol):
    """Protocol for the production build server."""

    def request_build(self, request: BuildServerRequest) -> None:
        """Submit *request*; raise ``NetworkError`` unless it was accepted."""
        ...


class HttpBuildServerClient:
    """``ProductionServerClient`` using httpx.

    Parameters
    ----------
    base_url:
        Build server root URL (``productionServerURL``).
    timeout:
        Request timeout in seconds.
    transport:
        Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def deploy_url(self) -> str:
        return f"{self._base_url}{DEPLOY_ENDPOINT}"

    def request_build(self, request: BuildServerRequest) -> None:
        logger.info(
            "Sending build request for %s %s (brands=%s, servers=%s) to %s",
            request.sim_name,
            request.version,
            ",".join(request.brands),
            ",".join(request.servers),
            self.deploy_url,
        )
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self.deploy_url, json=request.to_payload())
        except httpx.HTTPError as exc:
            raise NetworkError(f"Build server request to {self.deploy_url} failed: {exc}") from exc

        if response.status_code not in ACCEPTED_STATUS_CODES:
            raise NetworkError(
                f"Build server rejected request for {request.sim_name} {request.version}: "
                f"HTTP {response.status_code} {response.text.strip()}"
            )
        logger.info("Build server accepted request (HTTP %s)", response.status_code)
