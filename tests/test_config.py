import pytest
from fastapi.testclient import TestClient

from maintgate.config import GateSettings, build_gate_config


def test_settings_defaults():
    settings = GateSettings.from_env()

    assert settings.management_path == "/maintenance"
    assert settings.protected_prefix == "/api"
    assert settings.access_key is None
    assert settings.refresh_interval_ms == 60000
    assert settings.store_kind == "none"


def test_settings_read_from_env(monkeypatch):
    monkeypatch.setenv("MAINTGATE_MANAGEMENT_PATH", "/ops/maintenance")
    monkeypatch.setenv("MAINTGATE_PROTECTED_PREFIX", "/v1")
    monkeypatch.setenv("MAINTGATE_ACCESS_KEY", " key-1 ")
    monkeypatch.setenv("MAINTGATE_REFRESH_INTERVAL_MS", "2500")
    monkeypatch.setenv("MAINTGATE_STORE", "LOCAL")

    settings = GateSettings.from_env()

    assert settings.management_path == "/ops/maintenance"
    assert settings.protected_prefix == "/v1"
    assert settings.access_key == "key-1"
    assert settings.refresh_interval_ms == 2500
    assert settings.store_kind == "local"


@pytest.mark.parametrize("raw", ["soon", "-1", "1.5"])
def test_malformed_refresh_interval_rejected(monkeypatch, raw):
    monkeypatch.setenv("MAINTGATE_REFRESH_INTERVAL_MS", raw)
    with pytest.raises(ValueError, match="MAINTGATE_REFRESH_INTERVAL_MS"):
        GateSettings.from_env()


def test_unknown_store_rejected(monkeypatch):
    monkeypatch.setenv("MAINTGATE_STORE", "redis")
    with pytest.raises(ValueError, match="MAINTGATE_STORE"):
        GateSettings.from_env()


def test_build_gate_config_without_store_has_no_hooks():
    config = build_gate_config(GateSettings(access_key="k", refresh_interval_ms=5))

    assert config.access_key == "k"
    assert config.refresh_interval_ms == 5
    assert config.read_external_state is None
    assert config.write_external_state is None


def test_local_store_from_env_persists_management_changes(tmp_path, monkeypatch):
    state_file = tmp_path / "shared" / "state.json"
    monkeypatch.setenv("MAINTGATE_STORE", "local")
    monkeypatch.setenv("MAINTGATE_STATE_FILE", str(state_file))
    from maintgate.main import create_app

    client = TestClient(create_app())
    response = client.post("/maintenance", json={"statusCode": 503, "body": {"msg": "down"}})
    assert response.status_code == 200
    assert client.get("/health").json() == {"status": "ok", "maintenance_mode": "maintenance", "store": "local"}

    # A fresh instance reads the shared file on its first refresh.
    monkeypatch.setenv("MAINTGATE_REFRESH_INTERVAL_MS", "0")
    other = TestClient(create_app())
    blocked = other.get("/api/status")
    assert blocked.status_code == 503
    assert blocked.json() == {"msg": "down"}


def test_prod_env_requires_access_key(monkeypatch):
    from maintgate.main import create_app

    monkeypatch.setenv("MAINTGATE_ENV", "prod")
    with pytest.raises(RuntimeError, match="access key"):
        create_app()


def test_docs_and_openapi_disabled_in_prod(monkeypatch):
    from maintgate.main import create_app

    monkeypatch.setenv("MAINTGATE_ENV", "prod")
    monkeypatch.setenv("MAINTGATE_ACCESS_KEY", "prod-key")

    client = TestClient(create_app())
    assert client.get("/docs").status_code == 404
    assert client.get("/redoc").status_code == 404
    assert client.get("/openapi.json").status_code == 404
    assert client.get("/maintenance").status_code == 401


def test_cors_preflight_when_enabled(monkeypatch):
    from maintgate.main import create_app

    monkeypatch.setenv("MAINTGATE_CORS_ENABLED", "1")
    monkeypatch.setenv("MAINTGATE_CORS_ALLOW_ORIGINS", "https://example.com")
    client = TestClient(create_app())

    response = client.options(
        "/health",
        headers={"Origin": "https://example.com", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code in {200, 204}
    assert response.headers.get("access-control-allow-origin") == "https://example.com"


def test_cors_headers_on_gate_responses(monkeypatch):
    from maintgate.main import create_app

    monkeypatch.setenv("MAINTGATE_CORS_ENABLED", "1")
    monkeypatch.setenv("MAINTGATE_CORS_ALLOW_ORIGINS", "https://example.com")
    client = TestClient(create_app())
    origin = {"Origin": "https://example.com"}

    activate = client.post("/maintenance", headers=origin, json={"statusCode": 503, "body": {"msg": "down"}})
    assert activate.status_code == 200
    assert activate.headers.get("access-control-allow-origin") == "https://example.com"

    blocked = client.get("/api/status", headers=origin)
    assert blocked.status_code == 503
    assert blocked.json() == {"msg": "down"}
    assert blocked.headers.get("access-control-allow-origin") == "https://example.com"

    preflight = client.options(
        "/maintenance",
        headers={"Origin": "https://example.com", "Access-Control-Request-Method": "DELETE"},
    )
    assert preflight.status_code in {200, 204}
    assert preflight.headers.get("access-control-allow-origin") == "https://example.com"


@pytest.mark.parametrize("raw", ["fast", "0", "-2"])
def test_malformed_http_timeout_rejected(monkeypatch, raw):
    monkeypatch.setenv("MAINTGATE_HTTP_TIMEOUT_SEC", raw)
    with pytest.raises(ValueError, match="MAINTGATE_HTTP_TIMEOUT_SEC"):
        GateSettings.from_env()


def test_http_timeout_read_from_env(monkeypatch):
    monkeypatch.setenv("MAINTGATE_HTTP_TIMEOUT_SEC", "2.5")
    assert GateSettings.from_env().http_timeout_sec == 2.5


def test_memory_store_from_env(monkeypatch):
    from maintgate.main import create_app

    monkeypatch.setenv("MAINTGATE_STORE", "memory")
    client = TestClient(create_app())

    client.post("/maintenance", json={"statusCode": 503, "body": {"msg": "down"}})
    assert client.get("/health").json() == {"status": "ok", "maintenance_mode": "maintenance", "store": "memory"}


def test_health_reports_custom_store_for_injected_gate(monkeypatch):
    from maintgate.main import create_app
    from maintgate.maintenance.gate import MaintenanceGate

    monkeypatch.setenv("MAINTGATE_STORE", "local")
    client = TestClient(create_app(gate=MaintenanceGate()))

    assert client.get("/health").json()["store"] == "custom"
