"""Filter form for the collisions map.

The form is a set of named ipywidgets controls arranged in tabs. Reading it
with :meth:`FilterForm.controls` yields :class:`FormControl` snapshots in
document order (the order fields were added), which is what the parameter
encoder consumes.
"""

from __future__ import annotations

import datetime
from typing import Any, Callable, NamedTuple, Optional

from ipywidgets import Checkbox, DatePicker, Dropdown, Layout, Tab, Text, VBox

from .._encoding import CHECKBOX, FormControl


class _Field(NamedTuple):
    section: str
    name: str
    type: str
    widget: Any
    value: Optional[str] = None  # fixed value, checkboxes only


def _widget_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value)


class FilterForm:
    """Named form controls grouped into tabbed sections."""

    def __init__(self):
        self._fields: list[_Field] = []

    def _add(self, section: str, name: str, type_: str, widget: Any, value: Optional[str] = None):
        self._fields.append(_Field(section, name, type_, widget, value))
        return widget

    def add_checkbox(
        self, name: str, value: str, description: str, checked: bool = False, section: str = "Filters"
    ) -> Checkbox:
        """Add a checkbox; use a ``[]``-suffixed name to group several into one parameter."""
        widget = Checkbox(value=checked, description=description, indent=False)
        return self._add(section, name, CHECKBOX, widget, value)

    def add_text(self, name: str, description: str, value: str = "", section: str = "Filters") -> Text:
        widget = Text(value=value, description=description, continuous_update=False)
        return self._add(section, name, "text", widget)

    def add_select(
        self,
        name: str,
        options: list[tuple[str, str]],
        description: str,
        value: str = "",
        section: str = "Filters",
    ) -> Dropdown:
        """Add a drop-down of ``(label, value)`` options; an ``""`` value means "any"."""
        widget = Dropdown(options=options, value=value, description=description)
        return self._add(section, name, "select-one", widget)

    def add_date(self, name: str, description: str, section: str = "Filters") -> DatePicker:
        widget = DatePicker(description=description)
        return self._add(section, name, "date", widget)

    def controls(self) -> list[FormControl]:
        """Snapshot every control in document order."""
        snapshot = []
        for field in self._fields:
            if field.type == CHECKBOX:
                snapshot.append(
                    FormControl(field.name, field.value or "", CHECKBOX, bool(field.widget.value))
                )
            else:
                snapshot.append(FormControl(field.name, _widget_value(field.widget.value), field.type))
        return snapshot

    def on_change(self, callback: Callable[[], None]) -> None:
        """Call ``callback()`` whenever any control's value changes."""

        def _changed(_change):
            callback()

        for field in self._fields:
            field.widget.observe(_changed, names="value")

    def sections(self) -> list[str]:
        seen = []
        for field in self._fields:
            if field.section not in seen:
                seen.append(field.section)
        return seen

    def widget(self) -> Tab:
        """Lay the sections out as tabs."""
        children = [
            VBox(
                [f.widget for f in self._fields if f.section == section],
                layout=Layout(padding="6px"),
            )
            for section in self.sections()
        ]
        tab = Tab(children=children)
        tab.titles = tuple(self.sections())
        return tab


def default_form() -> FilterForm:
    """Filter form for the CycleStreets collisions API."""
    form = FilterForm()

    for value, label in (("slight", "Slight"), ("serious", "Serious"), ("fatal", "Fatal")):
        form.add_checkbox("severity[]", value, label, checked=True, section="Severity")

    for value, label in (
        ("pedalcycle", "Bicycle"),
        ("car", "Car"),
        ("motorcycle", "Motorcycle"),
        ("goodsvehicle", "Goods vehicle"),
        ("bus", "Bus"),
    ):
        form.add_checkbox("vehicles[]", value, label, section="Vehicles")

    form.add_date("date_from", "From", section="Dates")
    form.add_date("date_to", "To", section="Dates")

    form.add_select(
        "casualtiesinclude",
        [("Any casualty", ""), ("Cyclists", "cyclist"), ("Pedestrians", "pedestrian")],
        "Casualties",
        section="Casualties",
    )
    return form
