"""
Ordering of host addresses to try on a /24 subnet.
"""
from typing import List, Optional, Sequence

PRIORITY_OCTETS = (1, 100, 101, 102, 103, 104, 105, 110, 150, 200)
MAX_CANDIDATES = 30
FIRST_HOST, LAST_HOST = 1, 254


def validate_prefix(prefix: str) -> str:
    """Checks that a prefix is three dotted octets and returns it stripped."""
    if not isinstance(prefix, str):
        raise ValueError(f"{prefix!r} is not a subnet prefix like '192.168.1'.")
    s = prefix.strip()
    parts = s.split('.')
    if len(parts) != 3 or not all(p.isdigit() and 0 <= int(p) <= 255 for p in parts):
        raise ValueError(f"'{prefix}' is not a subnet prefix like '192.168.1'.")
    return s


def candidate_octets(limit: int = MAX_CANDIDATES, priority: Optional[Sequence[int]] = None) -> List[int]:
    """
    Host octets in probe order: the priority list first, then the smallest
    unused octets ascending, capped at `limit`.
    """
    priority = PRIORITY_OCTETS if priority is None else priority
    limit = max(0, min(limit, LAST_HOST))

    octets: List[int] = []
    for octet in priority:
        if isinstance(octet, bool) or not isinstance(octet, int):
            raise ValueError(f"Priority octet {octet!r} is not an integer.")
        if len(octets) >= limit:
            return octets
        if FIRST_HOST <= octet <= LAST_HOST and octet not in octets:
            octets.append(octet)

    used = set(octets)
    for octet in range(FIRST_HOST, LAST_HOST + 1):
        if len(octets) >= limit:
            break
        if octet not in used:
            octets.append(octet)
    return octets


def candidate_addresses(prefix: str, limit: int = MAX_CANDIDATES,
                        priority: Optional[Sequence[int]] = None) -> List[str]:
    """Full IPv4 addresses to probe on `prefix`, most likely first."""
    base = validate_prefix(prefix)
    return [f"{base}.{octet}" for octet in candidate_octets(limit, priority)]
