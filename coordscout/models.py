from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .errors import ProtocolMismatch

DEFAULT_PORT = 8080


@dataclass(frozen=True)
class Endpoint:
    """A (host, port) pair identifying a candidate or connected mod server."""
    host: str
    port: int = DEFAULT_PORT

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    @staticmethod
    def parse(value: str, default_port: int = DEFAULT_PORT) -> "Endpoint":
        """Parses 'host' or 'host:port' into an Endpoint."""
        s = (value or "").strip()
        if not s:
            raise ValueError("Empty address")
        if ":" not in s:
            return Endpoint(s, default_port)

        host, port_s = s.rsplit(":", 1)
        host = host.strip()
        port_s = port_s.strip()
        if not host:
            raise ValueError(f"Invalid host in '{value}'")
        if not port_s.isdigit():
            raise ValueError(f"Port must be numeric in '{value}'")
        port = int(port_s)
        if not (1 <= port <= 65535):
            raise ValueError(f"Port out of range in '{value}'")
        return Endpoint(host, port)


@dataclass(frozen=True)
class ProbeResult:
    """An endpoint that answered a probe, with the name to show for it."""
    endpoint: Endpoint
    player_name: str
    is_online: bool


def _require(payload: Any, key: str, kinds: Tuple[type, ...], what: str) -> Any:
    if not isinstance(payload, dict):
        raise ProtocolMismatch(f"{what} payload is not a JSON object")
    if key not in payload:
        raise ProtocolMismatch(f"{what} payload is missing '{key}'")
    value = payload[key]
    # bool is an int subclass; JSON true/false is never a valid number here
    if isinstance(value, bool) or not isinstance(value, kinds):
        raise ProtocolMismatch(f"{what} field '{key}' has unexpected type {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Coordinates:
    """One position snapshot returned by GET /coords."""
    x: float
    y: float
    z: float
    dimension: str
    timestamp: int
    player_name: str

    @staticmethod
    def from_dict(payload: Any) -> "Coordinates":
        return Coordinates(
            x=float(_require(payload, "x", (int, float), "coords")),
            y=float(_require(payload, "y", (int, float), "coords")),
            z=float(_require(payload, "z", (int, float), "coords")),
            dimension=_require(payload, "dimension", (str,), "coords"),
            timestamp=int(_require(payload, "timestamp", (int, float), "coords")),
            player_name=_require(payload, "playerName", (str,), "coords"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "dimension": self.dimension,
            "timestamp": self.timestamp,
            "playerName": self.player_name,
        }


@dataclass(frozen=True)
class HealthStatus:
    """Liveness answer from GET /health."""
    status: str
    timestamp: int

    @property
    def is_healthy(self) -> bool:
        return self.status.strip().lower() == "ok"

    @staticmethod
    def from_dict(payload: Any) -> "HealthStatus":
        return HealthStatus(
            status=_require(payload, "status", (str,), "health"),
            timestamp=int(_require(payload, "timestamp", (int, float), "health")),
        )


@dataclass(frozen=True)
class ConnectionSession:
    """Live state of a connected endpoint while polling runs."""
    endpoint: Endpoint
    connected_at: int
    last_snapshot: Optional[Coordinates] = None

    def with_snapshot(self, coords: Coordinates) -> "ConnectionSession":
        return replace(self, last_snapshot=coords)
