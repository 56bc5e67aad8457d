"""bikedata: an interactive collisions map for Jupyter.

This package binds a filter form to an ipyleaflet map. Whenever the map settles
after a pan or zoom, or a filter changes, it re-queries the CycleStreets
collisions API for the visible area and redraws the markers, one per
collision, iconed by severity and with a popup listing its attributes.

Public API:
    - :class:`~cyclestreets.bikedata.bikedata.BikeData`: the map application
    - :class:`~cyclestreets.bikedata._settings.BikeDataSettings`: start-up configuration
    - :func:`~cyclestreets.bikedata._encoding.encode_parameters`: form state to query parameters
    - :class:`~cyclestreets.bikedata._exceptions.QueryError`: failed locations query

Quick Start:
    .. code-block:: python

        from cyclestreets.bikedata import BikeData, BikeDataSettings

        app = BikeData(BikeDataSettings(api_key="..."))
        app.show()

Notes:
    - Modules and names prefixed with ``_`` are **internal** and may change without notice.
"""

from ._encoding import FormControl, degroup_name, encode_parameters
from ._exceptions import BikeDataError, QueryError, UnknownCategoryError
from ._logging import setup_logging
from ._settings import BikeDataSettings
from .bikedata import BikeData

__all__ = [
    "BikeData",
    "BikeDataSettings",
    "BikeDataError",
    "QueryError",
    "UnknownCategoryError",
    "FormControl",
    "degroup_name",
    "encode_parameters",
    "setup_logging",
]
