"""
Client for the two REST endpoints exposed by the coordinates mod.

Every transport problem is reported as Unreachable and every bad payload
as ProtocolMismatch, so callers only have to deal with the project's own
error types.
"""
from __future__ import annotations
import logging
from typing import Any, Optional

import httpx

from .errors import ProtocolMismatch, Unreachable
from .models import Coordinates, Endpoint, HealthStatus

HEALTH_PATH = "/health"
COORDS_PATH = "/coords"
DEFAULT_HEADERS = {"Accept": "application/json"}

logger = logging.getLogger("coordscout.api")
logger.addHandler(logging.NullHandler())


class RequestTimeout(Unreachable):
    """The request ran out of its own timeout."""


async def get_json(client: httpx.AsyncClient, url: str, timeout: Optional[float] = None) -> Any:
    """GETs a URL and returns its decoded JSON body."""
    try:
        response = await client.get(url, headers=DEFAULT_HEADERS, timeout=timeout)
    except httpx.TimeoutException as e:
        raise RequestTimeout(f"{url}: timed out") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise Unreachable(f"{url}: {e.__class__.__name__}: {e}") from e

    if not response.is_success:
        raise Unreachable(f"{url}: HTTP {response.status_code}")

    try:
        return response.json()
    except ValueError as e:
        raise ProtocolMismatch(f"{url}: response is not valid JSON") from e


class ModAPI:
    """Talks to one mod server."""

    def __init__(self, endpoint: Endpoint, client: httpx.AsyncClient, timeout: Optional[float] = 3.0):
        self.endpoint = endpoint
        self.client = client
        self.timeout = timeout

    async def check_health(self) -> HealthStatus:
        payload = await get_json(self.client, self.endpoint.base_url + HEALTH_PATH, self.timeout)
        return HealthStatus.from_dict(payload)

    async def fetch_coordinates(self) -> Coordinates:
        payload = await get_json(self.client, self.endpoint.base_url + COORDS_PATH, self.timeout)
        return Coordinates.from_dict(payload)

    async def fetch_player_name(self) -> str:
        """
        Reads only the player's name from GET /coords. A body that is a JSON
        object without a usable `playerName` gives an empty name.
        """
        payload = await get_json(self.client, self.endpoint.base_url + COORDS_PATH, self.timeout)
        if not isinstance(payload, dict):
            raise ProtocolMismatch(f"coords payload must be an object, got {type(payload).__name__}")
        name = payload.get("playerName")
        return name if isinstance(name, str) else ""
