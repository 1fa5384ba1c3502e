"""
tests/test_health.py -- Integration tests for the GET /health and GET /ready probes.

Covers:
  - /health returns 200 with status and version, no auth required
  - /ready returns 200 with database "connected" when the store answers
  - /ready returns 503 with the error envelope when the ping fails
"""

from __future__ import annotations

from unittest.mock import patch


def test_health_returns_200(api_client):
    client, _, _ = api_client
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["version"] == "1.0.0"


def test_health_no_auth_required(api_client):
    """Health endpoint is accessible without any authentication headers."""
    client, _, _ = api_client
    resp = client.get("/health", headers={})
    assert resp.status_code == 200


def test_ready_reports_database_connected(api_client):
    client, _, _ = api_client
    resp = client.get("/ready")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "connected"}


def test_ready_returns_503_when_database_down(api_client):
    client, _, _ = api_client
    user_store = client.app.state.user_store
    with patch.object(user_store, "ping", return_value=False):
        resp = client.get("/ready")
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "not_ready"
