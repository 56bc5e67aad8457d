"""Location search box that moves the map to a geocoded place."""

from __future__ import annotations

import html
import logging
from typing import Any, Optional

import orjson
import requests
from ipywidgets import HTML, Button, Dropdown, HBox, Layout, Text, VBox
from shapely.geometry import shape as shp_shape

from .._settings import BikeDataSettings

logger = logging.getLogger(__name__)


def geocode(settings: BikeDataSettings, query: str) -> list[dict[str, Any]]:
    """Look up places matching ``query`` within the autocomplete bbox.

    Args:
        settings: Application settings (API key, base URL, bbox, timeout).
        query: Free-text place name.

    Returns:
        GeoJSON features of the matching places, best match first.

    Raises:
        requests.HTTPError: If the geocoder returns a non-success status.
    """
    params = {
        "key": settings.api_key,
        "bounded": 1,
        "bbox": settings.autocomplete_bbox,
        "q": query,
    }
    resp = requests.get(settings.geocoder_url, params=params, timeout=settings.geocoder_timeout)
    resp.raise_for_status()
    data = orjson.loads(resp.content)
    return list(data.get("features", []) or [])


def _label(feature: dict[str, Any]) -> str:
    props = feature.get("properties", {}) or {}
    name = props.get("name") or "Unnamed place"
    near = props.get("near")
    return f"{name}, {near}" if near else name


def feature_bounds(feature: dict[str, Any]) -> Optional[list[list[float]]]:
    """Return ``[[south, west], [north, east]]`` for a feature's geometry, or None."""
    geometry = feature.get("geometry")
    if not geometry:
        return None
    minx, miny, maxx, maxy = shp_shape(geometry).bounds
    return [[miny, minx], [maxy, maxx]]


def location_search_box(settings: BikeDataSettings, map_: Any) -> VBox:
    """Create a search box that fits the map to the chosen place.

    Args:
        settings: Application settings.
        map_: Map to move (``fit_bounds``).

    Returns:
        ipywidgets.VBox for display in Jupyter.
    """
    query = Text(placeholder="Search for a location", layout=Layout(width="60%"))
    search_btn = Button(description="Search")
    results = Dropdown(options=[], description="Go to", layout=Layout(width="100%"))
    status = HTML(value="")
    found: list[dict[str, Any]] = []

    def _search(_btn=None) -> None:
        text = query.value.strip()
        if not text:
            return
        try:
            features = geocode(settings, text)
        except requests.RequestException as e:
            logger.warning("Geocoder lookup for %r failed: %s", text, e)
            status.value = f"<b>❌ Error:</b> location search failed ({html.escape(str(e))})"
            return
        found[:] = features
        # Reset before repopulating so selecting the first result fires a change
        results.value = None
        results.options = [(_label(f), i) for i, f in enumerate(features)]
        status.value = "" if features else "<b>No matching locations.</b>"

    def _select(change) -> None:
        index = change["new"]
        if index is None:
            return
        bounds = feature_bounds(found[index])
        if bounds:
            map_.fit_bounds(bounds)

    search_btn.on_click(_search)
    query.continuous_update = False
    query.observe(lambda _change: _search(), names="value")
    results.observe(_select, names="value")

    return VBox([HBox([query, search_btn]), results, status])
