from finance_tracker.middleware import security_headers


def test_101st_request_is_throttled(client):
    for _ in range(100):
        assert client.get("/api/health").status_code == 200

    resp = client.get("/api/health")

    assert resp.status_code == 429
    assert resp.json() == {"error": "Too many requests, please try again later."}


def test_budget_is_shared_across_routes(client):
    for _ in range(50):
        client.get("/api/health")
    for _ in range(50):
        client.get("/api/categories")

    assert client.get("/api/transactions").status_code == 429


def test_security_headers_on_json_responses(client):
    resp = client.get("/api/categories")

    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert resp.headers["Referrer-Policy"] == "no-referrer"
    assert "default-src 'self'" in resp.headers["Content-Security-Policy"]
    assert resp.headers["Strict-Transport-Security"].startswith("max-age=")


def test_security_headers_on_pages_and_errors(client):
    page = client.get("/login")
    unauthorized = client.get("/api/transactions")

    for resp in (page, unauthorized):
        for name, value in security_headers().items():
            assert resp.headers[name] == value


def test_hsts_can_be_turned_off():
    class NoHsts:
        CONTENT_SECURITY_POLICY = "default-src 'none'"
        HSTS_MAX_AGE = 0

    headers = security_headers(NoHsts)

    assert "Strict-Transport-Security" not in headers
    assert headers["Content-Security-Policy"] == "default-src 'none'"
