from __future__ import annotations
import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

HEALTHY = {"status": "ok", "timestamp": 1000}
STEVE = {
    "x": 10.0,
    "y": 64.0,
    "z": -5.0,
    "dimension": "overworld",
    "timestamp": 1000,
    "playerName": "Steve",
}


class FakeLan:
    """
    Routes requests by host and path.

    A route is (status, body), an async/sync callable taking the request,
    or an exception instance to raise. Unknown hosts refuse the connection.
    """

    def __init__(self, hosts: Optional[Dict[str, Dict[str, Any]]] = None):
        self.hosts: Dict[str, Dict[str, Any]] = hosts or {}
        self.requests: List[httpx.Request] = []

    def add_server(self, host: str, health: Any = (200, HEALTHY), coords: Any = (200, STEVE)) -> None:
        self.hosts[host] = {"/health": health, "/coords": coords}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        routes = self.hosts.get(request.url.host)
        if routes is None:
            raise httpx.ConnectError("Connection refused", request=request)

        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            result = route(request)
            if asyncio.iscoroutine(result):
                result = await result
            if isinstance(result, httpx.Response):
                return result
            route = result

        status, body = route
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths_for(self, host: str) -> List[str]:
        return [r.url.path for r in self.requests if r.url.host == host]


@pytest.fixture
def lan() -> FakeLan:
    return FakeLan()


def run(coro):
    return asyncio.run(coro)


def sequence(*routes: Any) -> Callable[[httpx.Request], Any]:
    """A route that answers with each item in turn, repeating the last."""
    items = list(routes)
    state = {"calls": 0}

    def route(request: httpx.Request) -> Any:
        index = min(state["calls"], len(items) - 1)
        state["calls"] += 1
        item = items[index]
        if isinstance(item, Exception):
            raise item
        return item

    return route
