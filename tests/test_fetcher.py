import asyncio

import aiohttp
import orjson
import pytest

from conftest import make_collection, make_feature
from cyclestreets.bikedata import QueryError
from cyclestreets.bikedata._fetcher import DataFetcher


@pytest.fixture
def mocked_aiohttp(monkeypatch):
    captured = {"status": 200, "body": orjson.dumps(make_collection()), "error": None}

    class MockResponse:
        def __init__(self, status, body):
            self.status = status
            self._body = body

        async def read(self):
            return self._body

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

    class MockClientSession:
        def __init__(self, *args, **kwargs):
            captured["timeout"] = kwargs.get("timeout")

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

        def get(self, url, params=None):
            captured["url"] = url
            captured["params"] = params
            if captured["error"] is not None:
                raise captured["error"]
            return MockResponse(captured["status"], captured["body"])

    monkeypatch.setattr("cyclestreets.bikedata._fetcher.aiohttp.ClientSession", MockClientSession)
    return captured


def test_fetch_builds_query(settings, mocked_aiohttp):
    fetcher = DataFetcher(settings)

    asyncio.run(fetcher.fetch("0.1000,51.0000,0.2000,52.0000", {"severity": "fatal"}, "abc"))

    assert mocked_aiohttp["url"] == "https://api.example.org/v2/collisions.locations"
    assert mocked_aiohttp["params"] == {
        "bbox": "0.1000,51.0000,0.2000,52.0000",
        "key": "abc",
        "severity": "fatal",
    }
    assert mocked_aiohttp["timeout"].total == settings.request_timeout


def test_fetch_defaults_to_configured_key(settings, mocked_aiohttp):
    asyncio.run(DataFetcher(settings).fetch("0,0,1,1"))
    assert mocked_aiohttp["params"] == {"bbox": "0,0,1,1", "key": "test-key"}


def test_fetch_parses_features(settings, mocked_aiohttp):
    mocked_aiohttp["body"] = orjson.dumps(
        make_collection(
            make_feature(52.2, 0.12, "slight", id="1"),
            make_feature(52.3, 0.13, "fatal", id="2", road=None),
        )
    )

    collection = asyncio.run(DataFetcher(settings).fetch("0,0,1,1", {}))

    assert len(collection) == 2
    assert [f.category for f in collection] == ["slight", "fatal"]
    assert collection[0].location == (52.2, 0.12)
    assert collection[1].attributes == (("severity", "fatal"), ("id", "2"), ("road", None))


def test_fetch_error_body_message(settings, mocked_aiohttp):
    mocked_aiohttp["status"] = 400
    mocked_aiohttp["body"] = b'{"error":"Bad bbox"}'

    with pytest.raises(QueryError) as excinfo:
        asyncio.run(DataFetcher(settings).fetch("bad", {}))

    assert excinfo.value.message == "Bad bbox"
    assert excinfo.value.status == 400


def test_fetch_error_without_json_body(settings, mocked_aiohttp):
    mocked_aiohttp["status"] = 502
    mocked_aiohttp["body"] = b"<html>Bad gateway</html>"

    with pytest.raises(QueryError) as excinfo:
        asyncio.run(DataFetcher(settings).fetch("0,0,1,1", {}))

    assert excinfo.value.message == "Failed to retrieve data (HTTP 502)"


def test_fetch_transport_failure(settings, mocked_aiohttp):
    mocked_aiohttp["error"] = aiohttp.ClientConnectionError("connection refused")

    with pytest.raises(QueryError) as excinfo:
        asyncio.run(DataFetcher(settings).fetch("0,0,1,1", {}))

    assert excinfo.value.status is None


def test_fetch_malformed_success_body(settings, mocked_aiohttp):
    mocked_aiohttp["body"] = b'{"type": "Feature"}'

    with pytest.raises(QueryError):
        asyncio.run(DataFetcher(settings).fetch("0,0,1,1", {}))


@pytest.mark.parametrize(
    "feature",
    [
        None,
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [0.1, 52.0]},
            "properties": ["x"],
        },
        {"type": "Feature", "geometry": "POINT (0.1 52.0)", "properties": {}},
    ],
    ids=["null-feature", "list-properties", "string-geometry"],
)
def test_fetch_malformed_feature(settings, mocked_aiohttp, feature):
    mocked_aiohttp["body"] = orjson.dumps({"type": "FeatureCollection", "features": [feature]})

    with pytest.raises(QueryError) as excinfo:
        asyncio.run(DataFetcher(settings).fetch("0,0,1,1", {}))

    assert excinfo.value.message.startswith("Malformed response")
