from fastapi.testclient import TestClient

from bolt_proxy.common.settings import Settings
from bolt_proxy.main import create_app


def test_disallowed_origin_is_rejected_without_body(client, fake_driver):
    # Validates origin enforcement because rejected callers must not see query output.
    fake_driver.records = [{"secret": "value"}]

    response = client.post(
        "/query",
        json={"cypher": "RETURN 'value' AS secret"},
        headers={"Origin": "https://evil.example"},
    )

    assert response.status_code == 403
    assert response.content == b""
    assert fake_driver.sessions == []


def test_request_without_origin_is_allowed(client):
    response = client.post("/query", json={"cypher": "RETURN 1"})

    assert response.status_code == 200


def test_allow_listed_origin_gets_cors_headers(client):
    response = client.post(
        "/query",
        json={"cypher": "RETURN 1"},
        headers={"Origin": "https://tool.example.org"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://tool.example.org"


def test_preflight_from_allowed_origin(client):
    response = client.options(
        "/query",
        headers={
            "Origin": "https://app.example.org",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert "POST" in response.headers["access-control-allow-methods"]


def test_preflight_from_disallowed_origin_is_rejected(client):
    response = client.options(
        "/query",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 403


def test_oversized_body_is_rejected_before_parsing(client, fake_driver):
    payload = b'{"cypher": "' + b"x" * 2048 + b'"}'

    response = client.post("/query", content=payload, headers={"Content-Type": "application/json"})

    assert response.status_code == 413
    assert fake_driver.sessions == []


def test_oversized_chunked_body_is_rejected(client, fake_driver):
    def chunks():
        for _ in range(8):
            yield b"x" * 256

    response = client.post("/query", content=chunks(), headers={"Content-Type": "application/json"})

    assert response.status_code == 413
    assert fake_driver.sessions == []


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["x-request-id"] == "req-42"


def test_request_id_generated_when_absent(client):
    response = client.get("/health")

    assert len(response.headers["x-request-id"]) == 32


def test_empty_allow_list_still_allows_same_origin(fake_driver):
    settings = Settings(NEO4J_PASSWORD="secret", ORIGIN_ALLOW_LIST="")
    app = create_app(settings, driver_factory=lambda _s: fake_driver)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert client.get("/health", headers={"Origin": "https://app.example.org"}).status_code == 403
