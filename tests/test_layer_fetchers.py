import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from fakes import DummyResponse, DummySession, invalid_json_response, refused
from oceantwin import (
    ApiClient,
    ClientConfig,
    fetch_chlorophyll,
    fetch_chlorophyll_data,
    fetch_currents,
    fetch_currents_data,
)

DATA_DIR = Path(__file__).parent / "data"
EMPTY = {"type": "FeatureCollection", "features": []}

SCENARIO_BODY = (
    '{"type":"FeatureCollection","features":[{"type":"Feature","geometry":'
    '{"type":"Point","coordinates":[1,2]},"properties":{"id":1,'
    '"measurement_time":"2024-01-01T00:00:00Z","chlor_a":0.42}}]}'
)


def _load(name):
    with open(DATA_DIR / name, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _client(session, base_url="http://127.0.0.1:3000"):
    return ApiClient(ClientConfig(base_url=base_url, timeout_ms=None), session=session)


@pytest.fixture(scope="module")
def chlorophyll_payload():
    return _load("chlorophyll_points.json")


@pytest.fixture(scope="module")
def currents_payload():
    return _load("currents_points.json")


@pytest.mark.parametrize(
    "fetch, endpoint",
    [(fetch_chlorophyll_data, "chlorophyll"), (fetch_currents_data, "currents")],
)
def test_plain_fetch_has_no_query_string(fetch, endpoint):
    session = DummySession(DummyResponse(EMPTY))

    fetch(client=_client(session))

    assert session.last_url == f"http://127.0.0.1:3000/{endpoint}"
    assert session.last_params is None
    assert session.prepared_url() == f"http://127.0.0.1:3000/{endpoint}"


@pytest.mark.parametrize(
    "fetch, endpoint",
    [(fetch_chlorophyll_data, "chlorophyll"), (fetch_currents_data, "currents")],
)
def test_raw_data_flag_adds_query_string(fetch, endpoint):
    session = DummySession(DummyResponse(EMPTY))

    fetch(True, client=_client(session))

    assert session.last_params == {"raw_data": "true"}
    assert session.prepared_url() == f"http://127.0.0.1:3000/{endpoint}?raw_data=true"

    fetch(raw_data=False, client=_client(session))
    assert session.prepared_url() == f"http://127.0.0.1:3000/{endpoint}"


def test_window_and_bbox_filters():
    session = DummySession(DummyResponse(EMPTY))
    start = datetime(2024, 6, 1, tzinfo=timezone.utc)
    end = datetime(2024, 6, 8, 12, 30, 15, 999)

    fetch_currents_data(
        client=_client(session),
        start=start,
        end=end,
        bbox=(1.1, 40.5, 2.83, 41.46),
    )

    assert session.last_params == {
        "start_time": "2024-06-01T00:00:00Z",
        "end_time": "2024-06-08T12:30:15Z",
        "min_lat": "40.500000",
        "min_lon": "1.100000",
        "max_lat": "41.460000",
        "max_lon": "2.830000",
    }


def test_invalid_bbox_is_rejected_before_request():
    session = DummySession(DummyResponse(EMPTY))

    with pytest.raises(ValueError):
        fetch_chlorophyll_data(client=_client(session), bbox=(2.0, 40.0, 1.0, 41.0))
    with pytest.raises(ValueError, match="min_lon, min_lat, max_lon, max_lat"):
        fetch_currents_data(client=_client(session), bbox=(1.0, 2.0, 3.0))
    assert session.calls == []


def test_scenario_body_round_trips_unchanged():
    expected = json.loads(SCENARIO_BODY)
    session = DummySession(DummyResponse(json.loads(SCENARIO_BODY)))

    result = fetch_chlorophyll_data(client=_client(session))

    assert result == expected


def test_features_keep_server_order(chlorophyll_payload, currents_payload):
    chl = fetch_chlorophyll_data(client=_client(DummySession(DummyResponse(chlorophyll_payload))))
    cur = fetch_currents_data(client=_client(DummySession(DummyResponse(currents_payload))))

    assert [f["properties"]["id"] for f in chl["features"]] == [101, 102, 103]
    assert chl == chlorophyll_payload
    assert [f["properties"]["id"] for f in cur["features"]] == [7, 8]
    assert cur["features"][0]["properties"]["u_current"] == 0.3


@pytest.mark.parametrize("status", [400, 404, 500, 503])
@pytest.mark.parametrize("fetch", [fetch_chlorophyll_data, fetch_currents_data])
def test_error_status_returns_empty_collection(fetch, status, chlorophyll_payload):
    session = DummySession(DummyResponse(chlorophyll_payload, status_code=status, text="error"))

    assert fetch(client=_client(session)) == EMPTY


def test_500_with_empty_body_returns_empty_collection():
    session = DummySession(DummyResponse(None, status_code=500))

    assert fetch_chlorophyll_data(client=_client(session)) == EMPTY


@pytest.mark.parametrize("fetch", [fetch_chlorophyll_data, fetch_currents_data])
def test_connection_refused_returns_empty_collection(fetch):
    session = DummySession(error=refused())

    assert fetch(client=_client(session)) == EMPTY


def test_invalid_json_returns_empty_collection():
    session = DummySession(invalid_json_response())

    assert fetch_currents_data(client=_client(session)) == EMPTY


def test_empty_collections_are_fresh_objects():
    session = DummySession(error=refused())

    first = fetch_chlorophyll_data(client=_client(session))
    first["features"].append({"type": "Feature"})
    second = fetch_chlorophyll_data(client=_client(session))

    assert second == EMPTY


def test_fetch_result_reports_failure_kind():
    status = fetch_chlorophyll(client=_client(DummySession(DummyResponse(None, status_code=404))))
    transport = fetch_currents(client=_client(DummySession(error=refused())))
    decode = fetch_currents(client=_client(DummySession(invalid_json_response())))
    not_object = fetch_chlorophyll(client=_client(DummySession(DummyResponse([1, 2, 3]))))

    assert status.failure.kind == "status"
    assert status.failure.status_code == 404
    assert transport.failure.kind == "transport"
    assert decode.failure.kind == "decode"
    assert not_object.failure.kind == "decode"
    for result in (status, transport, decode, not_object):
        assert not result.ok
        assert result.is_empty
        assert result.collection == EMPTY


def test_fetch_result_distinguishes_no_data_from_failure():
    result = fetch_chlorophyll(client=_client(DummySession(DummyResponse(dict(EMPTY)))))

    assert result.ok
    assert result.is_empty
    assert result.failure is None


def test_failures_are_logged(caplog):
    session = DummySession(error=refused())

    with caplog.at_level(logging.ERROR, logger="oceantwin.fetch"):
        fetch_currents_data(client=_client(session))

    assert "Error fetching currents data" in caplog.text


def test_default_client_targets_data_host(monkeypatch):
    session = DummySession(DummyResponse(EMPTY))
    monkeypatch.setattr("oceantwin.client.requests.Session", lambda: session)

    fetch_chlorophyll_data(True)

    assert session.prepared_url() == "http://127.0.0.1:3000/chlorophyll?raw_data=true"
    assert session.last_call[2]["timeout"] is None
    assert session.closed


def test_injected_client_is_left_open():
    session = DummySession(DummyResponse(EMPTY))

    fetch_currents_data(client=_client(session))

    assert not session.closed
