import orjson
import pytest

from conftest import make_collection, make_feature
from cyclestreets.bikedata import BikeData, QueryError
from cyclestreets.bikedata._controller import RefreshState
from cyclestreets.bikedata._fetcher import DataFetcher
from cyclestreets.bikedata._features import FeatureCollection

BOUNDS = ((52.0, 0.1), (52.1, 0.2))


@pytest.fixture
def mocked_fetch(monkeypatch):
    captured = {"calls": [], "outcomes": []}

    async def fake_fetch(self, extent, form_params=None, api_key=None):
        captured["calls"].append((extent, form_params, api_key))
        outcome = captured["outcomes"].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return FeatureCollection.from_geojson(outcome)

    monkeypatch.setattr(DataFetcher, "fetch", fake_fetch)
    return captured


def collision_layers(app):
    return [layer for layer in app.map.layers if not getattr(layer, "base", False)]


def test_no_fetch_until_map_reports_bounds(settings, mocked_fetch):
    app = BikeData(settings)
    app.widget()

    assert mocked_fetch["calls"] == []
    assert app.state is RefreshState.IDLE


def test_bounds_report_populates_map(settings, mocked_fetch):
    mocked_fetch["outcomes"].append(
        make_collection(make_feature(52.05, 0.15, "slight"), make_feature(52.06, 0.16, "fatal"))
    )
    app = BikeData(settings)
    app.widget()

    app.map.set_trait("bounds", BOUNDS)

    assert mocked_fetch["calls"] == [
        ("0.1000,52.0000,0.2000,52.1000", {"severity": "slight,serious,fatal"}, "test-key")
    ]
    assert app.state is RefreshState.RENDERED
    assert collision_layers(app) == [app.controller.rendered.layer]
    assert len(app.controller.rendered.markers) == 2


def test_error_shown_in_status(settings, mocked_fetch):
    mocked_fetch["outcomes"].extend(
        [make_collection(make_feature(52.05, 0.15, "slight")), QueryError("Bad bbox", status=400)]
    )
    app = BikeData(settings)
    app.widget()
    app.map.set_trait("bounds", BOUNDS)
    shown = app.controller.rendered

    app.map.set_trait("bounds", ((52.5, 0.5), (52.6, 0.6)))

    assert app.state is RefreshState.FAILED
    assert "Bad bbox" in app.status.value
    assert collision_layers(app) == [shown.layer]


def test_get_data_formats(settings, mocked_fetch):
    data = make_collection(make_feature(52.05, 0.15, "serious", id="9"))
    mocked_fetch["outcomes"].extend([data, data, data])
    app = BikeData(settings)
    app.map.set_trait("bounds", BOUNDS)

    gdf = app.get_data()
    assert list(gdf["id"]) == ["9"]
    assert app.get_data("pd").loc[0, "severity"] == "serious"
    assert orjson.loads(app.get_data("geojson")) == data


def test_get_data_rejects_unknown_format(settings):
    with pytest.raises(ValueError):
        BikeData(settings).get_data("xlsx")


def test_get_data_before_display(settings):
    with pytest.raises(RuntimeError):
        BikeData(settings).get_data()


def test_error_message_is_escaped_and_cleared_on_success(settings, mocked_fetch):
    mocked_fetch["outcomes"].extend(
        [
            QueryError("bbox must be <w,s,e,n>", status=400),
            make_collection(make_feature(52.05, 0.15, "slight")),
        ]
    )
    app = BikeData(settings)
    app.widget()

    app.map.set_trait("bounds", BOUNDS)
    assert "bbox must be &lt;w,s,e,n&gt;" in app.status.value

    app.map.set_trait("bounds", ((52.5, 0.5), (52.6, 0.6)))
    assert app.state is RefreshState.RENDERED
    assert app.status.value == ""
