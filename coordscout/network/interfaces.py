"""
Reads the device's own IPv4 interface addresses.
"""
import ipaddress
import logging
import socket
from typing import List

import psutil

logger = logging.getLogger("coordscout.interfaces")
logger.addHandler(logging.NullHandler())


# Substrings of interface names and how much they move an interface up or
# down. The game host is usually on the same Wi-Fi or wired LAN as this
# device, never behind a container bridge or a tunnel.
NAME_WEIGHTS = {
    "wlan": 2, "wi-fi": 2, "wifi": 2, "wlp": 2,
    "eth": 1, "en0": 1, "enp": 1, "ethernet": 1,
    "docker": -3, "br-": -3, "veth": -3, "virbr": -3, "vmnet": -3, "vbox": -3,
    "tun": -2, "tap": -2, "wg": -2, "tailscale": -2, "zt": -2, "vpn": -2,
}


def lan_likelihood(iface_name: str) -> int:
    """Higher for interfaces that are likely to share a LAN with the game host."""
    name = iface_name.lower()
    return sum(weight for key, weight in NAME_WEIGHTS.items() if key in name)


def local_private_ipv4_addresses() -> List[str]:
    """
    Returns private IPv4 addresses of interfaces that are up, likeliest LAN
    interface first. Returns an empty list if psutil cannot read them.
    """
    ranked = []
    try:
        addrs = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except (OSError, RuntimeError) as e:
        logger.info(f"Could not read network interfaces: {e}")
        return []

    for iface, iface_addrs in addrs.items():
        if iface not in stats or not stats[iface].isup:
            continue
        for addr in iface_addrs:
            if addr.family != socket.AF_INET:
                continue
            try:
                ip = ipaddress.IPv4Address(addr.address)
            except ValueError:
                continue
            if ip.is_loopback or ip.is_link_local or not ip.is_private:
                continue
            ranked.append((lan_likelihood(iface), iface, str(ip)))

    ranked.sort(key=lambda item: item[0], reverse=True)
    logger.debug(f"Ranked local addresses (likelihood, iface, ip): {ranked}")
    return [ip for _, _, ip in ranked]
