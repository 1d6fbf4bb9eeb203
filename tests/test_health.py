def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "up"
    assert data["environment"] == "testing"
    assert "timestamp" in data


def test_readiness_reports_components(client):
    """Database must be connected; mail is reported as disabled without SMTP_HOST."""
    response = client.get("/readiness")
    assert response.status_code == 200
    components = response.json()["components"]
    assert components["database"] == "connected"
    assert components["email"] in ("configured", "disabled")


def test_root_endpoint(client):
    assert client.get("/").json()["message"] == "Leave Management API"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_request_id_is_generated(client):
    response = client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 32
    assert response.headers["X-Process-Time"].endswith("ms")


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "HTTP_404"
