import logging

import pytest
from fastapi.testclient import TestClient

import genetic_tsp.api as api
from genetic_tsp.exceptions import InvalidArgumentError
from genetic_tsp.settings import ServiceSettings

SIX_CITIES = [
    [0, 64, 378, 519, 434, 200],
    [64, 0, 318, 455, 375, 164],
    [378, 318, 0, 170, 265, 344],
    [519, 455, 170, 0, 223, 428],
    [434, 375, 265, 223, 0, 273],
    [200, 164, 344, 428, 273, 0],
]


@pytest.fixture
def client():
    return TestClient(api.create_app(ServiceSettings(device="cpu")))


def test_not_found(client):
    response = client.get("/does/not/exist")
    assert response.status_code == 404
    assert response.headers["content-type"] == "application/json"
    assert response.json() == "Not found!"


def test_liveness(client):
    response = client.get("/alive")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.text == '"alive"'


def test_tsp(client):
    response = client.post("/tsp", json={"distances": SIX_CITIES, "n_generations": 300})
    assert response.status_code == 200
    routes = response.json()
    assert len(routes) == 3
    for item in routes:
        route = item["route"]
        assert sorted(route) == list(range(6))
        length = sum(SIX_CITIES[a][b] for a, b in zip(route, route[1:] + route[:1]))
        assert item["fitness"] == pytest.approx(length)
    distances = [item["fitness"] for item in routes]
    assert distances == sorted(distances)


def test_tsp_zero_generations(client):
    response = client.post("/tsp", json={"distances": [[0, 5], [5, 0]], "n_generations": 0})
    assert response.status_code == 200
    assert [item["fitness"] for item in response.json()] == [10, 10, 10]


def test_non_square_matrix_is_client_error(client):
    response = client.post("/tsp", json={"distances": [[0, 1, 2], [1, 0], [2, 1, 0]], "n_generations": 5})
    assert response.status_code == 422
    assert "row 1" in response.json()["detail"]


def test_negative_distance_is_client_error(client):
    response = client.post("/tsp", json={"distances": [[0, -1], [1, 0]], "n_generations": 5})
    assert response.status_code == 422


def test_malformed_body_is_client_error(client):
    response = client.post("/tsp", json={"distances": "nope", "n_generations": 5})
    assert response.status_code == 422
    response = client.post("/tsp", json={"distances": SIX_CITIES, "n_generations": -1})
    assert response.status_code == 422


def test_generation_cap():
    client = TestClient(api.create_app(ServiceSettings(max_generations=10, device="cpu")))
    response = client.post("/tsp", json={"distances": SIX_CITIES, "n_generations": 11})
    assert response.status_code == 422


def test_timeout():
    client = TestClient(api.create_app(ServiceSettings(timeout=-1.0, device="cpu")))
    response = client.post("/tsp", json={"distances": SIX_CITIES, "n_generations": 50})
    assert response.status_code == 503
    assert response.json() == "Your computation took too long."


def test_internal_failure_is_generic(client, monkeypatch):
    def broken(*args, **kwargs):
        raise InvalidArgumentError("keep", 99, "0 <= keep <= 30")

    monkeypatch.setattr(api, "solve_tsp", broken)
    response = client.post("/tsp", json={"distances": SIX_CITIES, "n_generations": 5})
    assert response.status_code == 500
    assert response.json() == "Your computation could not be done."


def test_unexpected_failure_is_generic(monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(api, "solve_tsp", broken)
    client = TestClient(api.create_app(ServiceSettings(device="cpu")), raise_server_exceptions=False)
    response = client.post("/tsp", json={"distances": SIX_CITIES, "n_generations": 5})
    assert response.status_code == 500
    assert "secret" not in response.text


def test_matrix_logged_only_at_debug(caplog):
    request = {"distances": [[0, 5], [5, 0]], "n_generations": 1}
    with caplog.at_level(logging.DEBUG, logger="genetic_tsp"):
        TestClient(api.create_app(ServiceSettings(device="cpu", log_level="INFO"))).post("/tsp", json=request)
    assert not [r for r in caplog.records if r.getMessage().startswith("distances:")]
    caplog.clear()
    with caplog.at_level(logging.DEBUG, logger="genetic_tsp"):
        TestClient(api.create_app(ServiceSettings(device="cpu", log_level="DEBUG"))).post("/tsp", json=request)
    assert "distances: [[0.0, 5.0], [5.0, 0.0]]" in [r.getMessage() for r in caplog.records]


def test_tsp_with_worker_processes():
    client = TestClient(api.create_app(ServiceSettings(device="cpu", workers=2)))
    response = client.post("/tsp", json={"distances": SIX_CITIES, "n_generations": 20})
    assert response.status_code == 200
    assert len(response.json()) == 3
