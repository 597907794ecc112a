"""
CoordScout: find a coordinates mod server on the LAN and follow its player live.
"""

from .errors import CoordScoutError, ConfigError, ConnectFailure, ProtocolMismatch, Unreachable
from .models import ConnectionSession, Coordinates, Endpoint, HealthStatus, ProbeResult
from .polling import LoopHandle, PollingClient, PollState
from .scanner import Scanner

__version__ = "1.0.0"

__all__ = [
    "CoordScoutError",
    "ConfigError",
    "ConnectFailure",
    "ProtocolMismatch",
    "Unreachable",
    "ConnectionSession",
    "Coordinates",
    "Endpoint",
    "HealthStatus",
    "ProbeResult",
    "LoopHandle",
    "PollingClient",
    "PollState",
    "Scanner",
]
