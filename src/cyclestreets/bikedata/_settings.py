"""Start-up settings shared by every bikedata component.

:class:`BikeDataSettings` is built once when the application starts and handed
to each component's constructor. It is immutable for the lifetime of the
process.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from ._config import (
    API_BASE_URL,
    API_RESOURCE,
    AUTOCOMPLETE_BBOX,
    CATEGORY_PROPERTY,
    DEFAULT_CENTER,
    DEFAULT_ZOOM,
    DELIMITER,
    ENV_PREFIX,
    GEOCODER_TIMEOUT,
    ICON_SIZE,
    NULL_PLACEHOLDER,
    REQUEST_TIMEOUT,
    TILE_ATTRIBUTION,
    TILE_URL,
)
from ._icons import default_icons


@dataclass(frozen=True)
class BikeDataSettings:
    """Configuration inputs for one bikedata application.

    Attributes:
        api_key: CycleStreets API key sent with every request.
        api_base_url: Base URL of the CycleStreets API.
        resource: Resource queried by the locations endpoint.
        tile_url: Tile-source URL template for the base map.
        tile_attribution: HTML attribution for the tile layer.
        autocomplete_bbox: ``west,south,east,north`` box bounding geocoder results.
        icons: Category -> icon URL mapping used by the renderer.
        icon_size: Marker icon size in pixels (width, height).
        delimiter: Joins grouped checkbox values; must match the API.
        null_placeholder: Popup text for null attribute values.
        category_property: Feature property that selects the icon.
        center: Initial map centre (lat, lon).
        zoom: Initial map zoom.
        request_timeout: Total timeout in seconds for a locations request.
        geocoder_timeout: Timeout in seconds for a geocoder request.
        log_level: Level passed to :func:`setup_logging` by the application.
    """

    api_key: str
    api_base_url: str = API_BASE_URL
    resource: str = API_RESOURCE
    tile_url: str = TILE_URL
    tile_attribution: str = TILE_ATTRIBUTION
    autocomplete_bbox: str = AUTOCOMPLETE_BBOX
    icons: dict = field(default_factory=default_icons)
    icon_size: tuple = ICON_SIZE
    delimiter: str = DELIMITER
    null_placeholder: str = NULL_PLACEHOLDER
    category_property: str = CATEGORY_PROPERTY
    center: tuple = DEFAULT_CENTER
    zoom: int = DEFAULT_ZOOM
    request_timeout: float = REQUEST_TIMEOUT
    geocoder_timeout: float = GEOCODER_TIMEOUT
    log_level: Optional[str] = None

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("An API key is required.")
        object.__setattr__(self, "api_base_url", self.api_base_url.rstrip("/"))

    @property
    def locations_url(self) -> str:
        return f"{self.api_base_url}/v2/{self.resource}.locations"

    @property
    def geocoder_url(self) -> str:
        return f"{self.api_base_url}/v2/geocoder"

    @classmethod
    def from_env(cls, environ: Optional[dict] = None, **overrides) -> "BikeDataSettings":
        """Build settings from ``BIKEDATA_*`` environment variables.

        Recognised variables are ``BIKEDATA_API_KEY``, ``BIKEDATA_API_BASE_URL``,
        ``BIKEDATA_TILE_URL``, ``BIKEDATA_AUTOCOMPLETE_BBOX`` and
        ``BIKEDATA_LOG_LEVEL``. Keyword overrides win over the environment.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            **overrides: Explicit field values.

        Returns:
            A new settings instance.

        Raises:
            ValueError: If no API key is available.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in ("api_key", "api_base_url", "tile_url", "autocomplete_bbox", "log_level"):
            value = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if value:
                values[name] = value
        values.update(overrides)
        if "api_key" not in values:
            raise ValueError(f"Set {ENV_PREFIX}API_KEY or pass api_key=...")
        return cls(**values)
