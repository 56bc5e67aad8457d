"""Query collision locations for a bounding box."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp
import orjson

from ._exceptions import QueryError
from ._features import FeatureCollection
from ._settings import BikeDataSettings

logger = logging.getLogger(__name__)


def _error_message(body: bytes, status: int) -> str:
    """Extract the ``error`` member of a JSON error body, or a generic message."""
    try:
        data = orjson.loads(body)
    except orjson.JSONDecodeError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"Failed to retrieve data (HTTP {status})"


class DataFetcher:
    """Issue one locations query per refresh cycle.

    Args:
        settings: Application settings (endpoint, timeout, category property).
    """

    def __init__(self, settings: BikeDataSettings):
        self._settings = settings

    def build_request(self, extent: str, form_params: dict, api_key: str) -> dict:
        """Merge the extent, API key and form parameters into one query mapping."""
        params = {"bbox": extent, "key": api_key}
        params.update(form_params)
        return params

    async def fetch(
        self,
        extent: str,
        form_params: Optional[dict] = None,
        api_key: Optional[str] = None,
    ) -> FeatureCollection:
        """Fetch the collisions inside ``extent`` matching ``form_params``.

        Args:
            extent: ``west,south,east,north`` bbox string.
            form_params: Encoded form parameters.
            api_key: API key; defaults to the configured one.

        Returns:
            The parsed feature collection.

        Raises:
            QueryError: On a non-success status, a transport failure or a body
                that is not a FeatureCollection.
        """
        params = self.build_request(extent, form_params or {}, api_key or self._settings.api_key)
        url = self._settings.locations_url
        timeout = aiohttp.ClientTimeout(total=self._settings.request_timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params) as resp:
                    body = await resp.read()
                    status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Locations request to %s failed: %s", url, e)
            raise QueryError("Could not connect to the data server.") from e

        if status >= 400:
            message = _error_message(body, status)
            logger.warning("Locations request returned HTTP %s: %s", status, message)
            raise QueryError(message, status=status)

        try:
            collection = FeatureCollection.from_geojson(
                orjson.loads(body), self._settings.category_property
            )
        except (orjson.JSONDecodeError, ValueError, TypeError) as e:
            raise QueryError(f"Malformed response from the data server: {e}", status=status) from e

        logger.info("Fetched %d features for bbox %s", len(collection), extent)
        return collection
