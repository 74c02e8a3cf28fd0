from scheduling_factories import TENANT_ID, request_body


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["timestamp"].endswith("Z")
    assert "gitSha" in data


def test_prometheus_exposes_generation_counters(client, world):
    client.post(
        "/api/v1/sessions/generate/preview",
        json=request_body(world),
        headers={"X-Tenant-ID": TENANT_ID},
    )

    response = client.get("/metrics/prometheus?refresh=1")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "session_generation_occurrences_total" in response.text
    assert "tutorcenter_service_operations_total" in response.text
