"""Turn feature collections into ipyleaflet marker layers."""

from __future__ import annotations

import html
import logging
from typing import NamedTuple

from ipyleaflet import Icon, LayerGroup, Marker
from ipywidgets import HTML

from ._config import NULL_PLACEHOLDER
from ._exceptions import UnknownCategoryError
from ._features import Feature, FeatureCollection
from ._settings import BikeDataSettings

logger = logging.getLogger(__name__)


def popup_html(feature: Feature, placeholder: str = NULL_PLACEHOLDER) -> str:
    """Build the popup table for a feature.

    One row per attribute, in attribute order. ``&``, ``<`` and ``>`` are
    escaped; null values show ``placeholder``.

    Args:
        feature: Feature to describe.
        placeholder: Text shown for null values.

    Returns:
        An HTML ``<table>`` fragment.
    """
    rows = []
    for key, value in feature.attributes:
        if value is None:
            value = placeholder
        rows.append(
            f"<tr><td>{html.escape(key, quote=False)}:</td>"
            f"<td><strong>{html.escape(value, quote=False)}</strong></td></tr>"
        )
    return "<table>" + "".join(rows) + "</table>"


class RenderedLayer(NamedTuple):
    """Result of rendering one collection.

    Attributes:
        layer: LayerGroup holding every marker, ready to add to the map.
        markers: Markers in feature order.
        skipped: Features that could not be rendered.
    """

    layer: LayerGroup
    markers: tuple
    skipped: tuple


class FeatureRenderer:
    """Render collisions as severity-iconed markers with attribute popups."""

    def __init__(self, settings: BikeDataSettings):
        self._settings = settings
        self._icons = {
            category: Icon(icon_url=url, icon_size=list(settings.icon_size))
            for category, url in settings.icons.items()
        }

    def icon_for(self, feature: Feature) -> Icon:
        if not isinstance(feature.category, str) or feature.category not in self._icons:
            raise UnknownCategoryError(feature.category)
        return self._icons[feature.category]

    def marker_for(self, feature: Feature) -> Marker:
        """Build the marker and its popup for one feature.

        Raises:
            UnknownCategoryError: If the feature's category has no icon.
        """
        icon = self.icon_for(feature)
        popup = HTML(value=popup_html(feature, self._settings.null_placeholder))
        return Marker(
            location=feature.location,
            icon=icon,
            draggable=False,
            popup=popup,
        )

    def render(self, collection: FeatureCollection) -> RenderedLayer:
        markers = []
        skipped = []
        for feature in collection:
            try:
                markers.append(self.marker_for(feature))
            except UnknownCategoryError as e:
                logger.warning("Skipping feature at %s: %s", feature.location, e)
                skipped.append(feature)
        return RenderedLayer(
            layer=LayerGroup(layers=markers),
            markers=tuple(markers),
            skipped=tuple(skipped),
        )
