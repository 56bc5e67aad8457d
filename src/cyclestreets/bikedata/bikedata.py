"""Interactive collisions map for Jupyter.

This module exposes :class:`~cyclestreets.bikedata.bikedata.BikeData`, which
builds the map, the tabbed filter form and the location search, and wires them
to a :class:`~cyclestreets.bikedata._controller.RefreshController` so the
collisions shown always match the current viewport and filters.

Examples:
    In a notebook:

    .. code-block:: python

        from cyclestreets.bikedata import BikeData, BikeDataSettings

        app = BikeData(BikeDataSettings(api_key="..."))
        app.show()                       # display the widget

    Pull the current view as a table:

    .. code-block:: python

        gdf = app.get_data()             # GeoDataFrame of the visible collisions
"""

from __future__ import annotations

import html
from typing import Optional, Union

import geopandas as gpd
import orjson
import pandas as pd
from ipyleaflet import Map, ScaleControl, TileLayer
from ipywidgets import HTML, Layout, VBox

from ._controller import RefreshController, RefreshState
from ._fetcher import DataFetcher
from ._gui import FilterForm, default_form, location_search_box
from ._logging import setup_logging
from ._render import FeatureRenderer
from ._settings import BikeDataSettings
from ._utils import _run_sync, _to_dataframe, _to_geopandas
from ._viewport import ViewportTracker


class BikeData:
    """Collisions map bound to a filter form.

    Every component receives the same :class:`BikeDataSettings`; nothing is
    kept in module-level state, so several maps can live in one notebook.

    Args:
        settings: Start-up configuration. Defaults to ``BikeDataSettings.from_env()``.
        form: Filter form; defaults to :func:`~cyclestreets.bikedata._gui.default_form`.
    """

    def __init__(self, settings: Optional[BikeDataSettings] = None, form: Optional[FilterForm] = None):
        self.settings = settings or BikeDataSettings.from_env()
        if self.settings.log_level:
            setup_logging(self.settings.log_level)

        self.map = self._create_map()
        self.form = form or default_form()
        self.status = HTML(value="")

        self.viewport = ViewportTracker(self.map)
        self.fetcher = DataFetcher(self.settings)
        self.renderer = FeatureRenderer(self.settings)
        self.controller = RefreshController(
            self.settings,
            self.map,
            self.viewport,
            self.form,
            self.fetcher,
            self.renderer,
            notify=self._show_error,
            on_rendered=self._clear_status,
        )
        self._widget: Optional[VBox] = None

    def _create_map(self) -> Map:
        tiles = TileLayer(
            url=self.settings.tile_url,
            attribution=self.settings.tile_attribution,
            base=True,
        )
        m = Map(
            basemap=tiles,
            center=self.settings.center,
            zoom=self.settings.zoom,
            scroll_wheel_zoom=True,
            layout=Layout(width="100%", height="600px"),
        )
        m.add(ScaleControl(position="bottomleft"))
        return m

    def _show_error(self, message: str) -> None:
        self.status.value = f"<b>❌ Error:</b> {html.escape(message)}"

    def _clear_status(self) -> None:
        self.status.value = ""

    @property
    def state(self) -> RefreshState:
        return self.controller.state

    def widget(self) -> VBox:
        """Build the application widget and start refreshing.

        The first call starts the controller. Collisions are fetched once the
        displayed map reports its bounds; later calls return the same widget.

        Returns:
            ipywidgets.VBox for display in Jupyter.
        """
        if self._widget is None:
            search = location_search_box(self.settings, self.map)
            self._widget = VBox([search, self.form.widget(), self.map, self.status])
            self.controller.start()
        return self._widget

    def show(self):
        """Display the application in the current notebook cell."""
        from IPython.display import display

        display(self.widget())

    def _ipython_display_(self):
        self.show()

    def get_data(self, dformat: Optional[str] = "gpd") -> Union[gpd.GeoDataFrame, pd.DataFrame, str]:
        """Retrieve the collisions for the current viewport and filters.

        Args:
            dformat: Output format.
                - "geojson" or "json": returns a pretty-printed GeoJSON string.
                - "pandas" (or "pd"): returns a pandas DataFrame.
                - "geopandas" (or "gpd") (default): returns a GeoDataFrame.

        Returns:
            Data in the requested format.

        Raises:
            RuntimeError: If the map has not reported its bounds yet.
            ValueError: If an invalid dformat is provided.
            QueryError: If the query fails.
        """
        if dformat not in ("geojson", "json", "pandas", "pd", "geopandas", "gpd"):
            raise ValueError(
                "Invalid 'dformat' specified. Supported values are: "
                "'pandas' (or 'pd'), 'geopandas' (or 'gpd'), 'geojson', and 'json'."
            )

        extent = self.viewport.current_extent()
        if extent is None:
            raise RuntimeError("The map has no bounds yet; display it first with show().")

        collection = _run_sync(
            self.fetcher.fetch(extent, self.controller.parameters(), self.settings.api_key)
        )

        if dformat in ("geojson", "json"):
            return orjson.dumps(collection.to_geojson(), option=orjson.OPT_INDENT_2).decode("utf-8")
        if dformat in ("pandas", "pd"):
            return _to_dataframe(collection)
        return _to_geopandas(collection)
