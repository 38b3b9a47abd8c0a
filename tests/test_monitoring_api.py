from contramind.models.admin import RumMetric

RUM = {
    "name": "LCP",
    "value": 2512.7,
    "rating": "needs-improvement",
    "delta": 2512.4,
    "id": "v3-1700000000000-1234567890",
    "navigationType": "navigate",
    "url": "https://app.contramind.ai/dashboard",
    "timestamp": 1700000000000,
}


def test_health_endpoints(client):
    health = client.get("/api/health")

    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert "timestamp" in health.json()
    assert client.get("/healthz").json() == {"status": "ok"}


def test_rum_metric_is_stored_with_rounded_values(client, db_session):
    response = client.post(
        "/api/rum",
        json=RUM,
        headers={"user-agent": "Mozilla/5.0 test", "x-forwarded-for": "203.0.113.9, 10.0.0.1"},
    )

    assert response.status_code == 201
    metric = db_session.query(RumMetric).one()
    assert metric.metric_name == "LCP"
    assert metric.metric_value == 2513
    assert metric.metric_delta == 2512
    assert metric.navigation_type == "navigate"
    assert metric.user_agent == "Mozilla/5.0 test"
    assert metric.ip_address == "203.0.113.9"


def test_invalid_rum_payload_is_rejected(client, db_session):
    assert client.post("/api/rum", json=dict(RUM, name="XYZ")).status_code == 422
    assert client.post("/api/rum", json=dict(RUM, rating="great")).status_code == 422
    assert client.post("/api/rum", json=dict(RUM, url="not a url")).status_code == 422
    assert client.post("/api/rum", json={k: v for k, v in RUM.items() if k != "value"}).status_code == 422
    assert db_session.query(RumMetric).count() == 0


def test_rum_metrics_are_admin_only_and_capped(client, user_headers, admin_headers):
    for _ in range(3):
        client.post("/api/rum", json=RUM)

    assert client.get("/api/rum/metrics", headers=user_headers).status_code == 403
    page = client.get("/api/rum/metrics?limit=5000&offset=1", headers=admin_headers).json()

    assert page["success"] is True
    assert page["limit"] == 1000
    assert page["offset"] == 1
    assert page["total"] == 3
    assert len(page["data"]) == 2


def test_rum_halves_round_up(client, db_session):
    client.post("/api/rum", json=dict(RUM, name="CLS", value=2.5, delta=0.5))

    metric = db_session.query(RumMetric).one()
    assert metric.metric_value == 3
    assert metric.metric_delta == 1
