import pytest
import requests

from routing import osrm_client
from routing.osrm_client import OSRMClient, OSRMError


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


@pytest.fixture
def client():
    return OSRMClient(base_url="http://osrm.test/", timeout=3)


def test_compute_route_formats_lon_lat_and_normalizes_output(client, monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        return FakeResponse({"code": "Ok", "routes": [{"distance": 6512.4, "duration": 780.0}]})

    monkeypatch.setattr(osrm_client.requests, "get", fake_get)

    route = client.compute_route([(40.7128, -74.0060), (40.7306, -73.9352)])

    assert route == {"distance": 6512.4, "duration": 780.0}
    url, params, timeout = calls[0]
    assert url == "http://osrm.test/route/v1/driving/-74.006,40.7128;-73.9352,40.7306"
    assert params == {"overview": "false"}
    assert timeout == 3


def test_road_distance_km_works_as_eta_distance_provider(client, monkeypatch):
    monkeypatch.setattr(
        osrm_client.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse({"code": "Ok", "routes": [{"distance": 7250.0, "duration": 900.0}]}),
    )
    assert client.road_distance_km((40.70, -74.00), (40.7306, -73.9352)) == pytest.approx(7.25)


def test_non_ok_code_raises(client, monkeypatch):
    monkeypatch.setattr(
        osrm_client.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse({"code": "NoRoute", "message": "Impossible route"}),
    )
    with pytest.raises(OSRMError, match="Impossible route"):
        client.compute_route([(0, 0), (0, 1)])


def test_http_failure_raises_osrm_error(client, monkeypatch):
    def boom(url, params=None, timeout=None):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(osrm_client.requests, "get", boom)
    with pytest.raises(OSRMError):
        client.compute_route([(0, 0), (0, 1)])

    monkeypatch.setattr(osrm_client.requests, "get", lambda url, params=None, timeout=None: FakeResponse({}, 503))
    with pytest.raises(OSRMError):
        client.compute_route([(0, 0), (0, 1)])


def test_requires_two_coordinates(client):
    with pytest.raises(ValueError):
        client.compute_route([(0, 0)])


def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv("OSRM_BASE_URL", "http://router.example")
    assert OSRMClient().base_url == "http://router.example"

    monkeypatch.delenv("OSRM_BASE_URL")
    with pytest.raises(ValueError):
        OSRMClient()
