"""Backend client — asynchronous HTTP/JSON façade over the simulation service.

One method per backend operation, one request per call, no retries.
Holds nothing but the base endpoint and an ``httpx.AsyncClient`` pool.

Failure mapping:
  - transport failure (connect, DNS, timeout) → TransportError
  - 404 → NotFound, any other non-2xx → RemoteError(status)
  - 2xx with a malformed, undecodable or schema-violating body → DecodeError
  - any other request failure (redirect loop, bad protocol) → TransportError
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote
from uuid import UUID

import httpx

from haui.constants import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT_S, SIMULATION_PATH
from haui.core.errors import DecodeError, NotFound, RemoteError, TransportError
from haui.core.serializers import (
    dict_to_detail,
    dict_to_overviews,
    dict_to_submitted,
    simulation_to_dict,
)
from haui.models.results import SimulationDetail, SimulationOverview, SubmittedSimulation
from haui.models.simulation import Simulation

logger = logging.getLogger(__name__)


class BackendClient:
    """Async client for the simulation backend.

    Usage::

        async with BackendClient("http://localhost:8000") as client:
            overviews = await client.list_simulations()
            detail = await client.get_simulation(overviews[0].id)

    A custom ``transport`` (e.g. ``httpx.MockTransport``) can be injected
    for testing.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self._endpoint,
            timeout=timeout,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def aclose(self) -> None:
        """Release the connection pool."""
        await self._http.aclose()

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, path)
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.DecodingError as exc:
            logger.warning("%s %s undecodable body: %s", method, path, exc)
            raise DecodeError(f"response body could not be decoded: {exc}") from exc
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(f"{method} {path}: {exc}") from exc

        if response.status_code == 404:
            logger.warning("%s %s -> 404", method, path)
            raise NotFound(str(response.url))
        if not response.is_success:
            logger.warning("%s %s -> %d", method, path, response.status_code)
            raise RemoteError(response.status_code, str(response.url))
        return response

    async def _get_json(self, path: str) -> Any:
        response = await self._request("GET", path)
        return _json_body(response)

    async def _get_text(self, path: str) -> str:
        response = await self._request("GET", path)
        return response.text

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list_simulations(self) -> list[SimulationOverview]:
        """All stored simulations, in backend order (not sorted)."""
        return dict_to_overviews(await self._get_json(SIMULATION_PATH))

    async def get_simulation(self, sim_id: UUID) -> SimulationDetail:
        """Device names and report of one simulation.

        Raises:
            NotFound: unknown id.
        """
        return dict_to_detail(await self._get_json(_simulation_path(sim_id)))

    async def get_simulation_source(self, sim_id: UUID) -> str:
        """Originally submitted configuration, as opaque text."""
        return await self._get_text(f"{_simulation_path(sim_id)}/source")

    async def get_log(self, sim_id: UUID) -> str:
        """Combined log of all devices."""
        return await self._get_text(f"{_simulation_path(sim_id)}/log")

    async def get_device_log(self, sim_id: UUID, device_name: str) -> str:
        """Log of a single device.

        Raises:
            NotFound: unknown id, or no device of that name in the simulation.
        """
        segment = quote(device_name, safe="")
        return await self._get_text(f"{_simulation_path(sim_id)}/log/{segment}")

    async def submit(self, simulation: Simulation) -> SubmittedSimulation:
        """PUT a simulation; the backend computes the report synchronously."""
        response = await self._request(
            "PUT", SIMULATION_PATH, json=simulation_to_dict(simulation),
        )
        submitted = dict_to_submitted(_json_body(response))
        logger.info("Submitted simulation %s (result %d Wh)",
                    submitted.id, submitted.report.result)
        return submitted


def _simulation_path(sim_id: UUID) -> str:
    return f"{SIMULATION_PATH}/{sim_id}"


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(f"response body is not JSON: {exc}") from exc
