"""Collision features as returned by the locations endpoint."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, NamedTuple, Optional

from ._config import CATEGORY_PROPERTY


class Feature(NamedTuple):
    """A single collision point.

    Attributes:
        latitude: WGS84 latitude.
        longitude: WGS84 longitude.
        category: Icon-selecting category, e.g. ``"slight"``.
        attributes: Display attributes as ``(key, value)`` pairs in server order.
    """

    latitude: float
    longitude: float
    category: Optional[str]
    attributes: tuple[tuple[str, Optional[str]], ...]

    @property
    def location(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)

    @classmethod
    def from_geojson(
        cls, feature: dict[str, Any], category_property: str = CATEGORY_PROPERTY
    ) -> "Feature":
        """Build a Feature from a GeoJSON Point feature.

        Args:
            feature: GeoJSON Feature mapping with a Point geometry.
            category_property: Property holding the category.

        Returns:
            The parsed feature.

        Raises:
            ValueError: If the feature, its geometry or its properties are not
                mappings, or the geometry is not a Point with two coordinates.
        """
        if not isinstance(feature, dict):
            raise ValueError(f"Expected a GeoJSON Feature object, got {type(feature).__name__}")
        geometry = feature.get("geometry") or {}
        if not isinstance(geometry, dict):
            raise ValueError("Feature geometry is not an object")
        coordinates = geometry.get("coordinates") or []
        if geometry.get("type") != "Point" or len(coordinates) < 2:
            raise ValueError(f"Expected a Point geometry, got {geometry.get('type')!r}")
        lon, lat = float(coordinates[0]), float(coordinates[1])

        properties = feature.get("properties") or {}
        if not isinstance(properties, dict):
            raise ValueError("Feature properties is not an object")
        attributes = tuple(
            (str(key), None if value is None else str(value)) for key, value in properties.items()
        )
        return cls(
            latitude=lat,
            longitude=lon,
            category=properties.get(category_property),
            attributes=attributes,
        )


class FeatureCollection(Sequence):
    """Ordered collection of features returned by one query."""

    def __init__(self, features: Optional[Sequence[Feature]] = None):
        self._features = tuple(features or ())

    def __getitem__(self, index):
        return self._features[index]

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._features)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FeatureCollection):
            return NotImplemented
        return self._features == other._features

    def __repr__(self) -> str:
        return f"FeatureCollection({len(self)} features)"

    @classmethod
    def from_geojson(
        cls, data: Any, category_property: str = CATEGORY_PROPERTY
    ) -> "FeatureCollection":
        """Parse a GeoJSON FeatureCollection mapping.

        Args:
            data: Decoded JSON body.
            category_property: Property holding the category.

        Returns:
            The parsed collection.

        Raises:
            ValueError: If ``data`` is not a FeatureCollection or a feature is malformed.
        """
        if not isinstance(data, dict) or data.get("type", "FeatureCollection") != "FeatureCollection":
            raise ValueError("Response is not a GeoJSON FeatureCollection")
        features = data.get("features")
        if not isinstance(features, list):
            raise ValueError("FeatureCollection has no 'features' array")
        return cls([Feature.from_geojson(f, category_property) for f in features])

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [f.longitude, f.latitude]},
                    "properties": dict(f.attributes),
                }
                for f in self._features
            ],
        }
