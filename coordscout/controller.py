"""
Core application controller for CoordScout.

Runs the asyncio core on a background thread so a synchronous UI toolkit
can drive it. Results come back through a queue that the UI drains from
its own timer with process_queue().
"""
from __future__ import annotations
import asyncio
import logging
import threading
from concurrent.futures import Future
from enum import Enum, auto
from queue import Queue, Empty
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from . import configuration
from .errors import ConnectFailure
from .formatting import connection_status, server_display_name
from .models import Coordinates, Endpoint, ProbeResult
from .polling import PollingClient, PollState, now_ms
from .scanner import Scanner

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

SHUTDOWN_TIMEOUT = 5.0


class AppState(Enum):
    """Represents the state shown by the front end."""
    IDLE = auto()
    SCANNING = auto()
    CONNECTING = auto()
    CONNECTED = auto()


class CoordScoutController:
    """Owns the scanner, the polling client and the event loop thread."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        on_state_change: Optional[Callable[[AppState], None]] = None,
        on_server_found: Optional[Callable[[ProbeResult], None]] = None,
        on_scan_complete: Optional[Callable[[List[ProbeResult]], None]] = None,
        on_snapshot: Optional[Callable[[Coordinates], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config if config is not None else configuration.load_config()
        configuration.validate_config(self.config)
        logging.getLogger("coordscout").setLevel(self.config['log_level'].upper())

        self.on_state_change = on_state_change
        self.on_server_found = on_server_found
        self.on_scan_complete = on_scan_complete
        self.on_snapshot = on_snapshot
        self.on_error = on_error

        self.state = AppState.IDLE
        self.servers: List[ProbeResult] = []
        self.endpoint: Optional[Endpoint] = None
        self.coordinates: Optional[Coordinates] = None
        self.last_update_ms: Optional[int] = None
        self.update_queue: Queue[Tuple[str, Any]] = Queue()

        self.scanner = Scanner.from_config(self.config, transport=transport)
        self.polling = PollingClient(
            interval=self.config['poll_interval_ms'] / 1000.0,
            timeout=self.config['request_timeout_seconds'],
            transport=transport,
            on_state_change=self._on_poll_state,
        )
        self.polling.subscribe(lambda coords: self.update_queue.put(("snapshot", coords)))
        self.polling.subscribe_errors(lambda error: self.update_queue.put(("error", error)))

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="coordscout-loop", daemon=True)
        self._thread.start()
        logging.info("Controller started.")

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def _submit(self, coro) -> Future:
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def _on_poll_state(self, poll_state: PollState) -> None:
        # Called on the loop thread
        new_state = AppState.CONNECTED if poll_state == PollState.CONNECTED else AppState.IDLE
        self.update_queue.put(("state", new_state))

    def _clear_session(self) -> None:
        self.endpoint = None
        self.coordinates = None
        self.last_update_ms = None

    def _set_state(self, new_state: AppState) -> None:
        """Sets the application state and notifies the UI."""
        self.state = new_state
        if self.on_state_change:
            self.on_state_change(new_state)

    def start_scan(self, port: Optional[int] = None) -> Future:
        """Starts a LAN scan; found servers arrive through process_queue()."""
        if self.state == AppState.IDLE:
            self._set_state(AppState.SCANNING)
        self.servers = []
        return self._submit(self._scan(port))

    async def _scan(self, port: Optional[int]) -> List[ProbeResult]:
        results = await self.scanner.scan(
            port,
            on_result=lambda result: self.update_queue.put(("server_found", result)),
        )
        self.update_queue.put(("scan_complete", results))
        return results

    def connect(self, endpoint: Endpoint) -> Future:
        """Starts connecting; the outcome arrives through process_queue()."""
        self._set_state(AppState.CONNECTING)
        return self._submit(self._connect(endpoint))

    async def _connect(self, endpoint: Endpoint) -> Coordinates:
        try:
            coords = await self.polling.connect(endpoint)
        except ConnectFailure as e:
            self.update_queue.put(("connect_failed", e))
            raise
        self.update_queue.put(("connected", endpoint))
        return coords

    def disconnect(self) -> Future:
        return self._submit(self._disconnect())

    async def _disconnect(self) -> None:
        self.polling.disconnect()

    def process_queue(self) -> None:
        """Drains pending updates and dispatches them on the calling thread."""
        while True:
            try:
                kind, value = self.update_queue.get_nowait()
            except Empty:
                break

            if kind == "state":
                if value == AppState.IDLE and self.state == AppState.CONNECTING:
                    # Old session torn down by a reconnect; the outcome comes as connected or connect_failed
                    continue
                if value == AppState.IDLE:
                    self._clear_session()
                self._set_state(value)
            elif kind == "server_found":
                self.servers.append(value)
                if self.on_server_found:
                    self.on_server_found(value)
            elif kind == "scan_complete":
                self.servers = list(value)
                if self.state == AppState.SCANNING:
                    self._set_state(AppState.IDLE)
                if self.on_scan_complete:
                    self.on_scan_complete(self.servers)
            elif kind == "connected":
                self.endpoint = value
            elif kind == "snapshot":
                self.coordinates = value
                self.last_update_ms = now_ms()
                if self.on_snapshot:
                    self.on_snapshot(value)
            elif kind in ("error", "connect_failed"):
                if kind == "connect_failed" and self.state == AppState.CONNECTING:
                    self._clear_session()
                    self._set_state(AppState.IDLE)
                if self.on_error:
                    self.on_error(value)
            else:
                logging.warning(f"Unknown update '{kind}' dropped.")

    def get_connection_status(self) -> str:
        return connection_status(self.state == AppState.CONNECTED, self.last_update_ms, now_ms())

    def get_server_name(self) -> str:
        if self.endpoint is None:
            return ""
        return server_display_name(self.endpoint, self.coordinates)

    def shutdown(self) -> None:
        """Disconnects and stops the background loop."""
        try:
            self._submit(self.polling.aclose()).result(timeout=SHUTDOWN_TIMEOUT)
        except Exception as e:
            logging.warning(f"Polling client did not close cleanly: {e}")
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=SHUTDOWN_TIMEOUT)
        if not self._thread.is_alive():
            self._loop.close()
        logging.info("Controller stopped.")
