"""
Best-effort guess of which /24 subnets to scan first.

The public-IP lookup does not reveal the LAN subnet in general (NAT, VPN);
its answer only reorders the defaults and is never trusted on its own.
"""
from __future__ import annotations
import ipaddress
import logging
from typing import List, Optional, Sequence

import httpx

from ..api import get_json
from ..errors import CoordScoutError
from .interfaces import local_private_ipv4_addresses

DEFAULT_SUBNETS = ("192.168.1", "192.168.0", "10.0.0", "172.16.0")
IP_LOOKUP_URL = "https://api.ipify.org"
LOOKUP_TIMEOUT = 3.0
PRIVATE_PREFIXES = ("192.168.", "10.", "172.")

logger = logging.getLogger("coordscout.resolver")
logger.addHandler(logging.NullHandler())


def prefix_of(ip: str) -> Optional[str]:
    """First three octets of a dotted-quad IPv4 address, or None."""
    try:
        addr = ipaddress.IPv4Address(str(ip).strip())
    except ValueError:
        return None
    return str(addr).rsplit('.', 1)[0]


def looks_private(prefix: str) -> bool:
    return prefix.startswith(PRIVATE_PREFIXES)


def promote(bases: List[str], prefix: str) -> List[str]:
    """Moves `prefix` to the front of `bases` without duplicating it."""
    return [prefix] + [b for b in bases if b != prefix]


class SubnetResolver:
    """Produces the ordered list of subnet prefixes for a scan."""

    def __init__(
        self,
        defaults: Sequence[str] = DEFAULT_SUBNETS,
        lookup_url: str = IP_LOOKUP_URL,
        timeout: float = LOOKUP_TIMEOUT,
        use_local_interfaces: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.defaults = list(defaults) or list(DEFAULT_SUBNETS)
        self.lookup_url = lookup_url
        self.timeout = timeout
        self.use_local_interfaces = use_local_interfaces
        self.transport = transport

    async def _lookup_public_ip(self) -> str:
        url = f"{self.lookup_url}?format=json"
        async with httpx.AsyncClient(transport=self.transport) as client:
            payload = await get_json(client, url, self.timeout)
        if not isinstance(payload, dict) or not isinstance(payload.get("ip"), str):
            raise CoordScoutError("IP lookup answer has no 'ip' string")
        return payload["ip"]

    async def resolve_bases(self) -> List[str]:
        """
        Returns subnet prefixes to scan, most likely first.

        Never raises and never returns an empty list.
        """
        bases = list(self.defaults)

        try:
            ip = await self._lookup_public_ip()
        except CoordScoutError as e:
            logger.info(f"Could not determine local network, using defaults: {e}")
            ip = None
        except Exception as e:
            logger.info(f"IP lookup failed unexpectedly, using defaults: {e}")
            ip = None

        if ip is not None:
            prefix = prefix_of(ip)
            if prefix and looks_private(prefix):
                bases = promote(bases, prefix)
            else:
                logger.debug(f"Lookup answered {ip!r}, not a private-looking address.")

        if self.use_local_interfaces:
            for address in reversed(local_private_ipv4_addresses()):
                prefix = prefix_of(address)
                if prefix:
                    bases = promote(bases, prefix)

        logger.info(f"Subnets to scan: {bases}")
        return bases
