"""
Integration tests for the SAILROUTE API.

Fixtures (client, polar) provided by tests/conftest.py.
"""


def _uniform(rows, cols, value):
    return [[value] * cols for _ in range(rows)]


def _request(rows=4, cols=4, slices=1, **overrides):
    body = {
        "grid": {"lat_origin": 20.0, "lon_origin": -155.0, "spacing_deg": 1 / 60, "rows": rows, "cols": cols},
        "slices": [
            {
                "wind_deg": _uniform(rows, cols, 180.0),
                "wind_kts": _uniform(rows, cols, 12.0 + k),
                "current_deg": _uniform(rows, cols, 150.0),
                "current_kts": _uniform(rows, cols, 0.3),
            }
            for k in range(slices)
        ],
        "obstacles": [{"row": 1, "col": 1}],
        "start": {"lat": 20.0, "lon": -155.0},
        "finish": {"lat": 20.0 + 3 / 60, "lon": -155.0 + 2 / 60},
        "time_interval_min": 10.0,
        "pruning": "dominance",
    }
    body.update(overrides)
    return body


# ============================================================================
# System Endpoint Tests
# ============================================================================

def test_root_endpoint(client):
    """Test API root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "SAILROUTE API"
    assert data["status"] == "operational"


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data


def test_metrics_json(client):
    client.post("/api/routing/minimum-time", json=_request())
    response = client.get("/api/metrics/json")
    assert response.status_code == 200
    data = response.json()
    assert "minimum_time_route" in data["timings"]
    assert data["counters"]["routes_found"] >= 1


# ============================================================================
# Routing Endpoint Tests
# ============================================================================

def test_polar_summary(client):
    response = client.get("/api/routing/polar")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "default_keelboat"
    assert data["wind_speeds_kts"][-1] == 30.0
    assert data["speeds"]["90"][0] == 0.0


def test_minimum_time_route(client):
    response = client.post("/api/routing/minimum-time", json=_request(slices=3))
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["start_cell"] == {"row": 0, "col": 0}
    assert data["finish_cell"] == {"row": 3, "col": 2}
    assert data["path"][0] == {"row": 0, "col": 0}
    assert data["path"][-1] == {"row": 3, "col": 2}
    assert {"row": 1, "col": 1} not in data["path"]
    assert len(data["positions"]) == len(data["path"])
    assert data["steps"] == len(data["path"]) - 1
    assert data["duration_min"] > 0
    assert data["pruning"] == "dominance"


def test_exact_pruning_on_small_grid(client):
    response = client.post("/api/routing/minimum-time", json=_request(rows=3, cols=3, pruning="exact",
                                                                      finish={"lat": 20.0 + 2 / 60, "lon": -155.0}))
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["pruning"] == "exact"


def test_default_pruning_is_exact(client):
    body = _request(rows=3, cols=3, finish={"lat": 20.0 + 2 / 60, "lon": -155.0 + 1 / 60})
    del body["pruning"]
    response = client.post("/api/routing/minimum-time", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["pruning"] == "exact"


def test_positions_snap_to_grid(client):
    body = _request(start={"lat": 20.001, "lon": -154.999})
    response = client.post("/api/routing/minimum-time", json=body)
    assert response.status_code == 200
    assert response.json()["start_cell"] == {"row": 0, "col": 0}


def test_no_route(client):
    body = _request(rows=3, cols=3, obstacles=[{"row": 1, "col": 1}, {"row": 1, "col": 2}, {"row": 2, "col": 1}],
                    finish={"lat": 20.0 + 2 / 60, "lon": -155.0 + 2 / 60})
    response = client.post("/api/routing/minimum-time", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is False
    assert data["path"] == []
    assert data["duration_min"] == 1000.0


def test_finish_on_obstacle_rejected(client):
    body = _request(obstacles=[{"row": 3, "col": 2}])
    response = client.post("/api/routing/minimum-time", json=body)
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "routing_problem_invalid"


def test_slice_shape_mismatch_rejected(client):
    body = _request()
    body["slices"][0]["wind_kts"] = _uniform(2, 4, 12.0)
    response = client.post("/api/routing/minimum-time", json=body)
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "routing_problem_invalid"


def test_schema_validation(client):
    body = _request(pruning="greedy")
    response = client.post("/api/routing/minimum-time", json=body)
    assert response.status_code == 422

    body = _request(slices=0)
    response = client.post("/api/routing/minimum-time", json=body)
    assert response.status_code == 422


def test_negative_wind_speed_rejected(client):
    body = _request()
    body["slices"][0]["wind_kts"][0][0] = -1.0
    response = client.post("/api/routing/minimum-time", json=body)
    assert response.status_code == 422


def test_reference_route(client):
    response = client.post("/api/routing/reference", json={"slices": 50, "pruning": "dominance"})
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["path"][0] == {"row": 0, "col": 3}
    assert data["path"][-1] == {"row": 8, "col": 3}
    assert data["pruning"] == "dominance"
