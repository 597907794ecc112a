"""
Network discovery for CoordScout: candidate ordering, probing and subnet guessing.
"""

from .candidates import candidate_addresses, candidate_octets, PRIORITY_OCTETS, MAX_CANDIDATES
from .interfaces import local_private_ipv4_addresses
from .probe import probe, PLAYER_OFFLINE, UNKNOWN_PLAYER
from .resolver import SubnetResolver, DEFAULT_SUBNETS

__all__ = [
    "candidate_addresses",
    "candidate_octets",
    "PRIORITY_OCTETS",
    "MAX_CANDIDATES",
    "local_private_ipv4_addresses",
    "probe",
    "PLAYER_OFFLINE",
    "UNKNOWN_PLAYER",
    "SubnetResolver",
    "DEFAULT_SUBNETS",
]
