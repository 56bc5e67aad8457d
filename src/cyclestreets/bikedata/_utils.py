import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import geopandas as gpd
import pandas as pd

from ._features import FeatureCollection

_T = TypeVar("_T")


def _run_sync(coro: Coroutine[Any, Any, _T]) -> _T:
    """Run an async coroutine from synchronous code.

    Detects an existing event loop (e.g., in notebooks) and applies a
    compatibility shim to allow awaiting from sync contexts; otherwise runs the
    coroutine in a new event loop.

    Args:
        coro: Coroutine object to execute.

    Returns:
        The result produced by the coroutine.

    Notes:
        - Imports and applies `nest_asyncio` when an active loop is detected.
        - Intended for internal use only.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None
    if loop and loop.is_running():
        # Jupyter/IPython or already running event loop
        import nest_asyncio  # type: ignore

        nest_asyncio.apply()
        return loop.run_until_complete(coro)
    return asyncio.run(coro)


def _to_dataframe(collection: FeatureCollection) -> pd.DataFrame:
    """Flatten a collection into one row per feature.

    Attribute columns keep the order in which they first appear; coordinates
    are added as ``latitude``/``longitude``.

    Notes:
        - Intended for internal use only.
    """
    rows = []
    for feature in collection:
        row = dict(feature.attributes)
        row["latitude"] = feature.latitude
        row["longitude"] = feature.longitude
        rows.append(row)
    return pd.DataFrame(rows)


def _to_geopandas(collection: FeatureCollection) -> gpd.GeoDataFrame:
    """Convert a collection to a GeoDataFrame of points in EPSG:4326.

    Notes:
        - Intended for internal use only.
    """
    df = _to_dataframe(collection)
    if df.empty:
        return gpd.GeoDataFrame(df, geometry=[], crs="EPSG:4326")
    return gpd.GeoDataFrame(
        df,
        geometry=gpd.points_from_xy(df["longitude"], df["latitude"], crs="EPSG:4326"),
    )
