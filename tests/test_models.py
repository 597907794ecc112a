import pytest

from coordscout.errors import ProtocolMismatch
from coordscout.models import ConnectionSession, Coordinates, Endpoint, HealthStatus

from conftest import STEVE


def test_endpoint_equality_is_structural():
    assert Endpoint("192.168.1.5", 8080) == Endpoint("192.168.1.5", 8080)
    assert Endpoint("192.168.1.5", 8080) != Endpoint("192.168.1.5", 8081)
    assert len({Endpoint("a", 1), Endpoint("a", 1)}) == 1


def test_endpoint_urls_and_str():
    endpoint = Endpoint("10.0.0.2", 9000)
    assert endpoint.base_url == "http://10.0.0.2:9000"
    assert str(endpoint) == "10.0.0.2:9000"


def test_endpoint_parse():
    assert Endpoint.parse("10.0.0.2") == Endpoint("10.0.0.2", 8080)
    assert Endpoint.parse(" 10.0.0.2:9000 ") == Endpoint("10.0.0.2", 9000)


@pytest.mark.parametrize("value", ["", ":8080", "host:abc", "host:0", "host:70000"])
def test_endpoint_parse_rejects_bad_input(value):
    with pytest.raises(ValueError):
        Endpoint.parse(value)


def test_coordinates_from_dict_round_trips_wire_form():
    coords = Coordinates.from_dict(STEVE)
    assert coords == Coordinates(10.0, 64.0, -5.0, "overworld", 1000, "Steve")
    assert coords.to_dict() == STEVE


def test_coordinates_accept_integer_positions():
    coords = Coordinates.from_dict(dict(STEVE, x=3, y=70, z=-1))
    assert (coords.x, coords.y, coords.z) == (3.0, 70.0, -1.0)
    assert isinstance(coords.x, float)


@pytest.mark.parametrize("payload", [
    None,
    [],
    "coords",
    {k: v for k, v in STEVE.items() if k != "playerName"},
    dict(STEVE, x="10"),
    dict(STEVE, y=True),
    dict(STEVE, dimension=0),
    dict(STEVE, timestamp=None),
])
def test_coordinates_reject_schema_violations(payload):
    with pytest.raises(ProtocolMismatch):
        Coordinates.from_dict(payload)


def test_health_status():
    assert HealthStatus.from_dict({"status": "ok", "timestamp": 5}).is_healthy
    assert HealthStatus.from_dict({"status": "OK", "timestamp": 5}).is_healthy
    assert not HealthStatus.from_dict({"status": "starting", "timestamp": 5}).is_healthy
    with pytest.raises(ProtocolMismatch):
        HealthStatus.from_dict({"status": "ok"})


def test_session_snapshots_are_replaced_not_mutated():
    first = Coordinates.from_dict(STEVE)
    second = Coordinates.from_dict(dict(STEVE, x=11.0, timestamp=1500))
    session = ConnectionSession(Endpoint("h"), connected_at=1, last_snapshot=first)

    updated = session.with_snapshot(second)

    assert session.last_snapshot is first
    assert updated.last_snapshot is second
    assert updated.endpoint == session.endpoint
    with pytest.raises(Exception):
        first.x = 0.0  # type: ignore[misc]
