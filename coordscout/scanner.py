"""
Orchestrates a LAN scan for mod servers.

Subnets are scanned one after another; the candidates of one subnet are
probed concurrently. This bounds open connection attempts to the
per-subnet candidate cap while still covering several likely subnets.
"""
from __future__ import annotations
import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from .models import DEFAULT_PORT, Endpoint, ProbeResult
from .network.candidates import MAX_CANDIDATES, PRIORITY_OCTETS, candidate_addresses
from .network.probe import PROBE_TIMEOUT, probe
from .network.resolver import SubnetResolver

logger = logging.getLogger("coordscout.scanner")
logger.addHandler(logging.NullHandler())

ResultCallback = Callable[[ProbeResult], None]
SubnetCallback = Callable[[str], None]


class Scanner:
    """Finds endpoints on likely subnets that answer like a mod server."""

    def __init__(
        self,
        resolver: Optional[SubnetResolver] = None,
        probe_timeout: float = PROBE_TIMEOUT,
        max_candidates: int = MAX_CANDIDATES,
        priority_octets: Sequence[int] = PRIORITY_OCTETS,
        default_port: int = DEFAULT_PORT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.resolver = resolver or SubnetResolver()
        self.probe_timeout = probe_timeout
        self.max_candidates = max_candidates
        self.priority_octets = list(priority_octets)
        self.default_port = default_port
        self.transport = transport

    @classmethod
    def from_config(cls, config: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None) -> "Scanner":
        resolver = SubnetResolver(
            defaults=config['default_subnets'],
            lookup_url=config['ip_lookup_url'],
            timeout=config['lookup_timeout_seconds'],
            use_local_interfaces=config['use_local_interfaces'],
            transport=transport,
        )
        return cls(
            resolver=resolver,
            probe_timeout=config['probe_timeout_seconds'],
            max_candidates=config['max_candidates'],
            priority_octets=config['priority_octets'],
            default_port=config['port'],
            transport=transport,
        )

    @staticmethod
    def _notify(callback: Optional[Callable[[Any], None]], value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.exception("Scan callback failed for %s", value)

    async def _scan_subnet(
        self,
        client: httpx.AsyncClient,
        base: str,
        port: int,
        on_result: Optional[ResultCallback],
    ) -> List[ProbeResult]:
        try:
            addresses = candidate_addresses(base, self.max_candidates, self.priority_octets)
        except ValueError as e:
            logger.warning(f"Skipping subnet: {e}")
            return []

        tasks = [
            asyncio.ensure_future(probe(Endpoint(address, port), client, self.probe_timeout))
            for address in addresses
        ]
        found: List[ProbeResult] = []
        for next_done in asyncio.as_completed(tasks):
            result = await next_done
            if result is not None:
                found.append(result)
                self._notify(on_result, result)
        return found

    async def scan(
        self,
        port: Optional[int] = None,
        on_result: Optional[ResultCallback] = None,
        on_subnet: Optional[SubnetCallback] = None,
    ) -> List[ProbeResult]:
        """
        Runs one scan and returns every endpoint that answered.

        Results keep settlement order within a subnet and subnet order
        across subnets. An empty list means no server was found. Probe
        failures are absorbed; this method does not raise.
        """
        port = self.default_port if port is None else port
        started = time.monotonic()
        bases = await self.resolver.resolve_bases()

        servers: List[ProbeResult] = []
        async with httpx.AsyncClient(transport=self.transport) as client:
            for base in bases:
                self._notify(on_subnet, base)
                batch = await self._scan_subnet(client, base, port, on_result)
                logger.info(f"Subnet {base}: {len(batch)} server(s) found")
                servers.extend(batch)

        logger.info(
            f"Scan finished in {time.monotonic() - started:.1f}s: "
            f"{len(servers)} server(s) on {len(bases)} subnet(s)"
        )
        return servers
