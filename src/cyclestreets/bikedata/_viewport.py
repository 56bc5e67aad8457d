"""Map viewport as a query-ready bounding box."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def format_extent(bounds: Any) -> Optional[str]:
    """Format ipyleaflet bounds as ``west,south,east,north``.

    Args:
        bounds: ``((south, west), (north, east))`` as reported by ``Map.bounds``.

    Returns:
        The bbox string with 4 decimals and no spaces, or None when the map has
        not reported its bounds yet.
    """
    if not isinstance(bounds, (tuple, list)) or len(bounds) != 2:
        return None
    (south, west), (north, east) = bounds
    return f"{west:.4f},{south:.4f},{east:.4f},{north:.4f}"


class ViewportTracker:
    """Expose the current extent of an ``ipyleaflet.Map`` and its settle events.

    The front end syncs ``Map.bounds`` once per ``moveend``, so observing that
    trait yields exactly one event per pan or zoom gesture, after the view has
    stabilised.
    """

    def __init__(self, map_):
        self._map = map_

    def current_extent(self) -> Optional[str]:
        return format_extent(self._map.bounds)

    def on_extent_settled(self, callback: Callable[[str], None]) -> None:
        """Register ``callback(extent)`` for every settled viewport change.

        Args:
            callback: Called with the new extent string.
        """

        def _on_bounds(change):
            extent = format_extent(change["new"])
            if extent is None or extent == format_extent(change["old"]):
                return
            logger.debug("Viewport settled at %s", extent)
            callback(extent)

        self._map.observe(_on_bounds, names="bounds")
