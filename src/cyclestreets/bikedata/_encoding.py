"""Encode filter form state into API query parameters.

The form is read as a flat sequence of :class:`FormControl` snapshots in
document order. Checkboxes sharing a group name (``vehicles[]``) collapse into a
single delimited value; every other control contributes its value when it is
non-empty.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from ._config import DELIMITER, GROUP_MARKER

CHECKBOX = "checkbox"


class FormControl(NamedTuple):
    """Snapshot of one form control.

    Attributes:
        name: Raw control name, possibly carrying the group marker.
        value: Control value as a string ("" when empty).
        type: Control type, e.g. ``"checkbox"``, ``"text"``, ``"select-one"``.
        checked: Checked state; only meaningful for checkboxes.
    """

    name: str
    value: str
    type: str = "text"
    checked: bool = False


def degroup_name(raw_name: str) -> tuple[str, bool]:
    """Strip the trailing group marker from a control name.

    Args:
        raw_name: Name as declared on the control, e.g. ``"vehicles[]"``.

    Returns:
        ``(logical_name, is_grouped)``; names without the marker map to themselves.

    Examples:
        >>> degroup_name("vehicles[]")
        ('vehicles', True)
        >>> degroup_name("date_from")
        ('date_from', False)
    """
    if raw_name.endswith(GROUP_MARKER):
        return raw_name[: -len(GROUP_MARKER)], True
    return raw_name, False


def encode_parameters(
    controls: Iterable[FormControl],
    delimiter: str = DELIMITER,
) -> dict[str, str]:
    """Build the minimal parameter mapping for the current form state.

    Checked checkboxes append their value to their logical group name, joined
    by ``delimiter`` in document order; unchecked ones contribute nothing.
    Other controls set ``params[name] = value`` when the value is non-empty,
    the last control of a given name winning. Empty values and unnamed controls
    never produce a key.

    Args:
        controls: Form controls in document order.
        delimiter: Separator for grouped checkbox values; must match the API.

    Returns:
        Mapping of parameter name to value.
    """
    parameters: dict[str, str] = {}

    for control in controls:
        if not control.name:
            continue

        if control.type == CHECKBOX:
            if not control.checked or not control.value:
                continue
            name, _ = degroup_name(control.name)
            if parameters.get(name):
                parameters[name] += delimiter + control.value
            else:
                parameters[name] = control.value
            continue

        if control.value:
            parameters[control.name] = control.value

    return parameters
