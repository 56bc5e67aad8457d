from .filter_form import FilterForm, default_form
from .location_search import location_search_box

__all__ = ["FilterForm", "default_form", "location_search_box"]
