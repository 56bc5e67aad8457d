"""Marker icons for collision severities.

The default icon set is a single packaged SVG pin recoloured per severity and
embedded as a data URI, so markers render in a notebook without serving any
static files.
"""

from __future__ import annotations

import base64
import importlib.resources as ir
from typing import Optional
from xml.etree.ElementTree import register_namespace

from defusedxml import ElementTree as ET

from ._config import ICON_COLOURS

# Serialise the SVG namespace as the default one rather than "ns0:"
register_namespace("", "http://www.w3.org/2000/svg")


def _as_svg_data_uri(
    svg_bytes: bytes,
    *,
    fill: Optional[str] = None,
) -> str:
    """Encode SVG bytes as a data URI, optionally overriding fill attributes.

    Args:
        svg_bytes: Raw SVG content as bytes.
        fill: Colour to set on every element that already carries a fill.
            Defaults to None (keep the original colours).

    Returns:
        A data URI string in the form "data:image/svg+xml;base64,<...>".
    """
    root = ET.fromstring(
        svg_bytes.decode("utf-8"),
        forbid_dtd=True,
        forbid_entities=True,
        forbid_external=True,
    )
    if fill is not None:
        for el in root.iter():
            if el.get("fill") not in (None, "none"):
                el.set("fill", fill)
    recoloured = ET.tostring(root, encoding="utf-8")
    b64 = base64.b64encode(recoloured).decode("ascii")
    return f"data:image/svg+xml;base64,{b64}"


def _pin_svg() -> bytes:
    with ir.files("cyclestreets.bikedata.assets").joinpath("collision_pin.svg").open("rb") as f:
        return f.read()


def default_icons(colours: Optional[dict[str, str]] = None) -> dict[str, str]:
    """Build the default category -> icon URL mapping.

    Args:
        colours: Optional category -> fill colour mapping. Defaults to
            ``ICON_COLOURS``.

    Returns:
        Mapping of category name to an SVG data URI.
    """
    colours = colours or ICON_COLOURS
    svg = _pin_svg()
    return {category: _as_svg_data_uri(svg, fill=colour) for category, colour in colours.items()}
