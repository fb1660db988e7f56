import pytest

from thermalsentinel.model.api import ApiClient, ApiError
from thermalsentinel.model.records import RemoteConfig

from fakes import INVALID_JSON, FakeResponse, FakeSession

LIVE = {
    "last_update": 1_700_000_000,
    "turbine_token": "a1b2c3-turbine",
    "mode": "SCANNING",
    "current_angle": 90.5,
    "current_max_temp": 48.2,
    "is_online": True,
}

MATRIX = {"frame_index": 3, "width": 2, "height": 2, "pixels": [20, 21, 22, 23], "min_temp": 20, "max_temp": 23}


def client_for(routes, **kwargs):
    return ApiClient(base_url="http://backend/api/", session=FakeSession(routes), **kwargs)


def test_live_status():
    client = client_for({"/live": FakeResponse(LIVE)})
    status = client.get_live_status()
    assert status.current_max_temp == pytest.approx(48.2)
    assert status.short_token == "a1b2c3..."
    method, url, kwargs = client.session.calls[0]
    assert (method, url) == ("GET", "http://backend/api/live")
    assert kwargs["timeout"] == client.timeout


def test_alerts_and_evolution():
    client = client_for({
        "/alerts": FakeResponse([{"id": "a", "timestamp": 10, "max_temp": 71, "dataset_path": "scan_001"}]),
        "/evolution/scan_001": FakeResponse([{"frame_index": 0, "max_temp": 70, "avg_temp": 31}]),
    })
    alerts = client.get_alerts()
    assert alerts[0].dataset_path == "scan_001"
    assert client.get_evolution("scan_001")[0].avg_temp == 31.0


def test_thermal_matrix():
    frame = client_for({"/matrix/scan_001/3": FakeResponse(MATRIX)}).get_thermal_matrix("scan_001", 3)
    assert (frame.width, frame.height, frame.frame_index) == (2, 2, 3)
    assert frame.as_grid()[1, 0] == 22.0


@pytest.mark.parametrize("response", [
    FakeResponse({"detail": "missing"}, status_code=404, reason="Not Found"),
    FakeResponse(INVALID_JSON),
    FakeResponse({"width": 2}),
    FakeResponse({**MATRIX, "pixels": [1, 2, 3]}),
])
def test_bad_matrix_responses_raise(response):
    with pytest.raises(ApiError):
        client_for({"/matrix/scan_001/3": response}).get_thermal_matrix("scan_001", 3)


def test_status_code_is_kept():
    client = client_for({"/live": FakeResponse(None, status_code=503, reason="Unavailable")})
    with pytest.raises(ApiError) as info:
        client.get_live_status()
    assert info.value.status_code == 503
    assert info.value.endpoint == "/live"


def test_connection_error_raises():
    with pytest.raises(ApiError):
        client_for({}).get_alerts()


def test_list_endpoint_requires_array():
    with pytest.raises(ApiError):
        client_for({"/alerts": FakeResponse({"alerts": []})}).get_alerts()


def test_synthetic_fallback_is_opt_in():
    with pytest.raises(ApiError):
        client_for({}).get_thermal_matrix("scan_001", 4)

    frame = client_for({}, synthetic_fallback=True).get_thermal_matrix("scan_001", 4)
    assert frame.frame_index == 4
    assert frame.width * frame.height == frame.pixels.size


def test_config_round_trip():
    client = client_for({
        "/config": FakeResponse({"max_temp_trigger": 60, "system_enabled": True, "api_key": "k-123"}),
    })
    config = client.get_config()
    assert config.system_enabled is True
    assert config.api_key == "k-123"

    client.update_config(RemoteConfig(max_temp_trigger=65.0, extra={"api_key": "k-123"}))
    method, _url, kwargs = client.session.calls[-1]
    assert method == "POST"
    assert kwargs["json"]["max_temp_trigger"] == 65.0
    assert kwargs["json"]["api_key"] == "k-123"


def test_file_listing():
    client = client_for({"/files": FakeResponse([{"name": "scan_001.h5", "size_kb": 12.5, "type": "capture"}])})
    files = client.list_files()
    assert files[0].name == "scan_001.h5"
    assert files[0].size_kb == 12.5


def test_json_content_type_header():
    client = client_for({})
    assert client.session.headers["Content-Type"] == "application/json"
