"""
Display helpers shared by any front end that renders coordinates.
"""
from __future__ import annotations
from typing import Optional, Tuple

from .models import Coordinates, Endpoint

# Blocks in the overworld per block in the nether
NETHER_SCALE = 8

_DIMENSIONS = {
    "overworld": ("Overworld", "🌍", "#4CAF50"),
    "nether": ("Nether", "🔥", "#F44336"),
    "the_nether": ("Nether", "🔥", "#F44336"),
    "end": ("The End", "🌌", "#9C27B0"),
    "the_end": ("The End", "🌌", "#9C27B0"),
}
_DEFAULT_COLOR = "#2196F3"


def format_coord(value: float) -> str:
    return f"{value:.1f}"


def _dimension_key(dimension: str) -> str:
    key = dimension.strip().lower()
    # Namespaced ids such as 'minecraft:the_nether'
    return key.split(":", 1)[-1]


def dimension_info(dimension: str) -> Tuple[str, str, str]:
    """Returns (label, emoji, color) for a dimension name."""
    return _DIMENSIONS.get(_dimension_key(dimension), (dimension, "🗺️", _DEFAULT_COLOR))


def portal_coordinates(coords: Coordinates) -> Optional[Tuple[str, float, float, float]]:
    """
    Position in the linked dimension, as (dimension, x, y, z).

    Overworld maps to nether at 1/8 scale and back; other dimensions have
    no portal link and give None.
    """
    label = dimension_info(coords.dimension)[0]
    if label == "Overworld":
        return "Nether", coords.x / NETHER_SCALE, coords.y, coords.z / NETHER_SCALE
    if label == "Nether":
        return "Overworld", coords.x * NETHER_SCALE, coords.y, coords.z * NETHER_SCALE
    return None


def connection_status(connected: bool, last_update_ms: Optional[int], now_ms: int) -> str:
    """Human readable freshness of the last snapshot."""
    if not connected:
        return "Not Connected"
    if not last_update_ms:
        return "Waiting for data"

    seconds_ago = max(0, (now_ms - last_update_ms) // 1000)
    if seconds_ago < 2:
        return "Connected"
    if seconds_ago < 10:
        return f"{seconds_ago}s ago"
    return "No data"


def server_display_name(endpoint: Endpoint, coords: Optional[Coordinates] = None) -> str:
    if coords is not None and coords.player_name:
        return f"{coords.player_name}'s Server"
    return str(endpoint)
