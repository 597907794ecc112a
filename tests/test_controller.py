import pytest

from coordscout.configuration import DEFAULT_CONFIG
from coordscout.controller import AppState, CoordScoutController
from coordscout.errors import ConfigError, ConnectFailure
from coordscout.models import Endpoint, ProbeResult

TIMEOUT = 5


@pytest.fixture
def controller(lan):
    lan.add_server("10.9.9.1")
    config = dict(DEFAULT_CONFIG, default_subnets=["10.9.9"], max_candidates=3, poll_interval_ms=50)
    events = {"states": [], "found": [], "complete": [], "snapshots": [], "errors": []}
    ctrl = CoordScoutController(
        config=config,
        on_state_change=events["states"].append,
        on_server_found=events["found"].append,
        on_scan_complete=events["complete"].append,
        on_snapshot=events["snapshots"].append,
        on_error=events["errors"].append,
        transport=lan.transport,
    )
    ctrl.events = events
    yield ctrl
    ctrl.shutdown()


def test_scan_results_arrive_through_the_queue(controller):
    results = controller.start_scan().result(timeout=TIMEOUT)
    assert controller.state == AppState.SCANNING

    controller.process_queue()

    expected = [ProbeResult(Endpoint("10.9.9.1", 8080), "Steve", True)]
    assert results == expected
    assert controller.servers == expected
    assert controller.events["found"] == expected
    assert controller.events["complete"] == [expected]
    assert controller.events["states"] == [AppState.SCANNING, AppState.IDLE]


def test_connect_and_disconnect(controller):
    endpoint = Endpoint("10.9.9.1", 8080)
    first = controller.connect(endpoint).result(timeout=TIMEOUT)
    controller.process_queue()

    assert controller.state == AppState.CONNECTED
    assert controller.endpoint == endpoint
    assert controller.coordinates == first
    assert controller.events["snapshots"][0] == first
    assert controller.get_server_name() == "Steve's Server"
    assert controller.get_connection_status() == "Connected"

    controller.disconnect().result(timeout=TIMEOUT)
    controller.process_queue()

    assert controller.state == AppState.IDLE
    assert controller.endpoint is None
    assert controller.get_connection_status() == "Not Connected"
    assert controller.events["states"][-1] == AppState.IDLE


def test_failed_connect_is_reported_once(controller):
    with pytest.raises(ConnectFailure):
        controller.connect(Endpoint("10.9.9.2", 8080)).result(timeout=TIMEOUT)
    controller.process_queue()

    assert controller.state == AppState.IDLE
    assert len(controller.events["errors"]) == 1
    assert isinstance(controller.events["errors"][0], ConnectFailure)
    assert controller.events["states"] == [AppState.CONNECTING, AppState.IDLE]


def test_reconnect_goes_straight_from_connecting_to_connected(controller, lan):
    lan.add_server("10.9.9.50", coords=(200, {"x": 1.0, "y": 2.0, "z": 3.0, "dimension": "the_end",
                                              "timestamp": 2000, "playerName": "Alex"}))
    controller.connect(Endpoint("10.9.9.1", 8080)).result(timeout=TIMEOUT)
    controller.process_queue()
    del controller.events["states"][:]

    other = Endpoint("10.9.9.50", 8080)
    second = controller.connect(other).result(timeout=TIMEOUT)
    controller.process_queue()

    assert controller.events["states"] == [AppState.CONNECTING, AppState.CONNECTED]
    assert controller.state == AppState.CONNECTED
    assert controller.endpoint == other
    assert controller.coordinates.player_name == "Alex"
    assert second.player_name == "Alex"


def test_failed_reconnect_clears_the_old_session(controller):
    controller.connect(Endpoint("10.9.9.1", 8080)).result(timeout=TIMEOUT)
    controller.process_queue()
    del controller.events["states"][:]

    with pytest.raises(ConnectFailure):
        controller.connect(Endpoint("10.9.9.2", 8080)).result(timeout=TIMEOUT)
    controller.process_queue()

    assert controller.events["states"] == [AppState.CONNECTING, AppState.IDLE]
    assert controller.endpoint is None
    assert controller.coordinates is None


def test_unknown_log_level_is_a_config_error(lan):
    config = dict(DEFAULT_CONFIG, log_level="verbose")
    with pytest.raises(ConfigError):
        CoordScoutController(config=config, transport=lan.transport)
