"""
Manages the lifecycle of the coordinate polling loop.
"""
from __future__ import annotations
import asyncio
import logging
import time
from enum import Enum, auto
from typing import Callable, List, Optional

import httpx

from .api import ModAPI
from .errors import ConnectFailure, CoordScoutError, Unreachable
from .models import ConnectionSession, Coordinates, Endpoint

POLL_INTERVAL = 0.5
REQUEST_TIMEOUT = 3.0

logger = logging.getLogger("coordscout.polling")
logger.addHandler(logging.NullHandler())

SnapshotCallback = Callable[[Coordinates], None]
ErrorCallback = Callable[[Exception], None]


class PollState(Enum):
    """Represents the connection state of a PollingClient."""
    IDLE = auto()
    CONNECTED = auto()


def now_ms() -> int:
    return int(time.time() * 1000)


class LoopHandle:
    """
    Owned handle of one running polling loop.

    Stopping the handle ends future ticks; a tick that is already waiting
    on the network finishes and its result is dropped.
    """

    def __init__(self, generation: int):
        self.generation = generation
        self.task: Optional[asyncio.Task] = None
        self.stop_event = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    @property
    def active(self) -> bool:
        return not self.stopped and self.task is not None and not self.task.done()

    def stop(self) -> None:
        self.stop_event.set()


class PollingClient:
    """Connects to one mod server at a time and polls its coordinates."""

    def __init__(
        self,
        interval: float = POLL_INTERVAL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_state_change: Optional[Callable[[PollState], None]] = None,
    ):
        self.interval = interval
        self.timeout = timeout
        self.transport = transport
        self.on_state_change = on_state_change

        self.state = PollState.IDLE
        self.session: Optional[ConnectionSession] = None
        self._handle: Optional[LoopHandle] = None
        self._generation = 0
        self._client: Optional[httpx.AsyncClient] = None
        self._subscribers: List[SnapshotCallback] = []
        self._error_subscribers: List[ErrorCallback] = []

    @property
    def handle(self) -> Optional[LoopHandle]:
        return self._handle

    @property
    def endpoint(self) -> Optional[Endpoint]:
        return self.session.endpoint if self.session else None

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Registers a snapshot listener; returns a function that removes it."""
        self._subscribers.append(callback)
        return lambda: self._unsubscribe(self._subscribers, callback)

    def subscribe_errors(self, callback: ErrorCallback) -> Callable[[], None]:
        """Registers a listener for failed ticks; returns a function that removes it."""
        self._error_subscribers.append(callback)
        return lambda: self._unsubscribe(self._error_subscribers, callback)

    @staticmethod
    def _unsubscribe(listeners: list, callback) -> None:
        if callback in listeners:
            listeners.remove(callback)

    def _emit(self, listeners: list, value) -> None:
        for callback in list(listeners):
            try:
                callback(value)
            except Exception:
                logger.exception("Polling listener %r failed", callback)

    def _set_state(self, new_state: PollState) -> None:
        if self.state == new_state:
            return
        self.state = new_state
        if self.on_state_change:
            self.on_state_change(new_state)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(transport=self.transport)
        return self._client

    def _stop_loop(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.stop()
            self._handle = None

    async def connect(self, endpoint: Endpoint) -> Coordinates:
        """
        Connects to `endpoint` and starts polling.

        Any running loop is stopped first. Raises ConnectFailure if the
        health check or the first coordinate fetch fails; the client is
        then left IDLE.
        """
        self.disconnect()
        generation = self._generation
        api = ModAPI(endpoint, self._get_client(), timeout=self.timeout)

        try:
            health = await api.check_health()
            if not health.is_healthy:
                raise Unreachable(f"server reports status {health.status!r}")
            coords = await api.fetch_coordinates()
        except CoordScoutError as e:
            logger.error(f"Connection to {endpoint} failed: {e}")
            raise ConnectFailure(f"Could not connect to {endpoint}: {e}") from e

        if generation != self._generation:
            raise ConnectFailure(f"Connection to {endpoint} was superseded")

        self.session = ConnectionSession(endpoint=endpoint, connected_at=now_ms(), last_snapshot=coords)
        handle = LoopHandle(generation)
        handle.task = asyncio.ensure_future(self._run(handle, api))
        self._handle = handle
        logger.info(f"Connected to {endpoint}, polling every {self.interval * 1000:.0f}ms")

        self._set_state(PollState.CONNECTED)
        self._emit(self._subscribers, coords)
        return coords

    def disconnect(self) -> None:
        """Stops polling and forgets the session. Safe to call at any time."""
        previous = self.endpoint
        self._stop_loop()
        self.session = None
        if previous is not None:
            logger.info(f"Disconnected from {previous}.")
        self._set_state(PollState.IDLE)

    def _is_current(self, handle: LoopHandle) -> bool:
        return handle is self._handle and not handle.stopped

    async def _run(self, handle: LoopHandle, api: ModAPI) -> None:
        # Fixed schedule from connect; an overrunning tick only delays the next one
        next_at = time.monotonic() + self.interval
        while not handle.stopped:
            try:
                await asyncio.wait_for(handle.stop_event.wait(), max(0.0, next_at - time.monotonic()))
            except asyncio.TimeoutError:
                pass
            if handle.stopped:
                break
            await self._tick(handle, api)
            next_at = max(next_at + self.interval, time.monotonic())

    async def _tick(self, handle: LoopHandle, api: ModAPI) -> None:
        try:
            coords = await api.fetch_coordinates()
        except CoordScoutError as e:
            if self._is_current(handle):
                logger.warning(f"Failed to fetch coordinates from {api.endpoint}: {e}")
                self._emit(self._error_subscribers, e)
            return
        except Exception:
            if self._is_current(handle):
                logger.exception(f"Polling {api.endpoint} stopped after an unexpected error")
                self.disconnect()
            return

        if not self._is_current(handle) or self.session is None:
            return
        self.session = self.session.with_snapshot(coords)
        self._emit(self._subscribers, coords)

    async def aclose(self) -> None:
        """Disconnects and releases the HTTP client."""
        handle = self._handle
        self.disconnect()
        if handle is not None and handle.task is not None:
            await asyncio.gather(handle.task, return_exceptions=True)
        if self._client is not None:
            await self._client.aclose()
            self._client = None
