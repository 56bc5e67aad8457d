import pytest

from cyclestreets.bikedata import BikeDataSettings

ICONS = {
    "slight": "icons/slight.svg",
    "serious": "icons/serious.svg",
    "fatal": "icons/fatal.svg",
}


def make_feature(lat, lon, severity, **properties):
    props = {"severity": severity}
    props.update(properties)
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "properties": props,
    }


def make_collection(*features):
    return {"type": "FeatureCollection", "features": list(features)}


@pytest.fixture
def settings():
    return BikeDataSettings(
        api_key="test-key",
        api_base_url="https://api.example.org/",
        icons=dict(ICONS),
    )
