"""
Bounded-time liveness and identity check against one endpoint.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Optional

import httpx

from ..api import ModAPI, RequestTimeout
from ..errors import CoordScoutError
from ..models import Endpoint, ProbeResult

PROBE_TIMEOUT = 1.5
UNKNOWN_PLAYER = "Unknown Player"
PLAYER_OFFLINE = "Player Offline"

logger = logging.getLogger("coordscout.probe")
logger.addHandler(logging.NullHandler())


async def _probe(api: ModAPI) -> Optional[ProbeResult]:
    health = await api.check_health()
    if not health.is_healthy:
        logger.debug("%s reports status %r", api.endpoint, health.status)
        return None

    try:
        player_name = await api.fetch_player_name()
    except RequestTimeout:
        # Out of budget, same as the health call never answering
        return None
    except CoordScoutError as e:
        logger.debug("%s is healthy but has no coordinates: %s", api.endpoint, e)
        return ProbeResult(endpoint=api.endpoint, player_name=PLAYER_OFFLINE, is_online=False)

    return ProbeResult(
        endpoint=api.endpoint,
        player_name=player_name or UNKNOWN_PLAYER,
        is_online=True,
    )


async def probe(endpoint: Endpoint, client: httpx.AsyncClient,
                timeout: float = PROBE_TIMEOUT) -> Optional[ProbeResult]:
    """
    Probes one endpoint.

    Returns None for anything that is not a healthy mod server; the two
    requests share a single `timeout` budget. Never raises (cancellation
    of the caller's task still propagates).
    """
    api = ModAPI(endpoint, client, timeout=timeout)
    try:
        return await asyncio.wait_for(_probe(api), timeout)
    except asyncio.TimeoutError:
        logger.debug("%s: no answer within %.1fs", endpoint, timeout)
    except CoordScoutError as e:
        logger.debug("%s: %s", endpoint, e)
    except Exception as e:
        logger.debug("%s: unexpected probe error: %s", endpoint, e)
    return None
