from starlette.testclient import TestClient

import main
from github_ci_mcp.http_routes import healthz


def _set_token(monkeypatch, value):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    if value is None:
        monkeypatch.delenv("GITHUB_PERSONAL_ACCESS_TOKEN", raising=False)
    else:
        monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", value)


def test_healthz_reports_ok_when_token_and_unzip_present(monkeypatch, server_config):
    _set_token(monkeypatch, "token")
    monkeypatch.setattr(healthz.shutil, "which", lambda name: "/usr/bin/unzip")

    resp = TestClient(main.app).get("/healthz")

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ok"
    assert payload["github_token_present"] is True
    assert payload["unzip_available"] is True
    assert payload["uptime_seconds"] >= 0
    assert payload["tool_count"] >= 32
    assert payload["defaults"]["owner"] == "octo"
    assert payload["defaults"]["ci_repo"] == "askscio/scio"
    assert payload["defaults"]["ci_workflow_id"] == "bazel_pr_runner.yml"


def test_healthz_warns_when_token_missing(monkeypatch, empty_config):
    _set_token(monkeypatch, None)
    monkeypatch.setattr(healthz.shutil, "which", lambda name: "/usr/bin/unzip")

    payload = TestClient(main.app).get("/healthz").json()

    assert payload["status"] == "warning"
    assert payload["github_token_present"] is False
    assert payload["defaults"]["owner"] is None


def test_healthz_warns_when_unzip_missing(monkeypatch, server_config):
    _set_token(monkeypatch, "token")
    monkeypatch.setattr(healthz.shutil, "which", lambda name: None)

    payload = healthz._build_health_payload()

    assert payload["status"] == "warning"
    assert payload["unzip_available"] is False
