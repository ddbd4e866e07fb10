from insight_hub_mcp.transports.http.app import build_http_app
from insight_hub_mcp.transports.http.config import HttpConfig
from insight_hub_mcp.transports.http.ops import build_readiness_status, is_ops_path
from starlette.testclient import TestClient

ENV_VARS = (
    "INSIGHT_HUB_AUTH_TOKEN",
    "INSIGHT_HUB_PROJECT_API_KEY",
    "INSIGHT_HUB_ENDPOINT",
)


def _clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _build_app(cfg: HttpConfig | None = None):
    return build_http_app(cfg=cfg or HttpConfig())


def test_healthz_ok_without_env(monkeypatch):
    _clear_env(monkeypatch)
    client = TestClient(_build_app())

    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["Cache-Control"] == "no-store"


def test_readyz_ok_with_token(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("INSIGHT_HUB_AUTH_TOKEN", "tok")
    client = TestClient(_build_app())

    resp = client.get("/readyz")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["failed"] == []
    assert body["checks"] == {
        "default_auth_token_present": True,
        "endpoint_valid": True,
    }


def test_readyz_missing_token(monkeypatch):
    _clear_env(monkeypatch)
    client = TestClient(_build_app())

    resp = client.get("/readyz")
    assert resp.status_code == 503
    body = resp.json()
    assert body["status"] == "fail"
    assert body["failed"] == ["default_auth_token_present"]


def test_readyz_invalid_endpoint(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("INSIGHT_HUB_AUTH_TOKEN", "tok")
    monkeypatch.setenv("INSIGHT_HUB_ENDPOINT", "not-a-valid-url")
    client = TestClient(_build_app())

    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert resp.json()["failed"] == ["endpoint_valid"]


def test_ops_ignore_accept_header(monkeypatch):
    _clear_env(monkeypatch)
    client = TestClient(_build_app())

    resp = client.get("/healthz", headers={"Accept": "text/plain"})
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_ops_helpers():
    assert is_ops_path("/healthz")
    assert is_ops_path("/readyz")
    assert not is_ops_path("/mcp")
    assert not is_ops_path(None)
    assert build_readiness_status({"a": True, "b": False}) == {
        "status": "fail",
        "checks": {"a": True, "b": False},
        "failed": ["b"],
    }
