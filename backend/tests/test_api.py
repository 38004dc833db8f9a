"""Tests for the HTTP surface."""

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from conftest import ALICE_TOKEN, BOB_TOKEN, json_reply, pending_reply
from wphub.auth import create_session_token
from wphub.main import create_app

ALICE = {"Authorization": f"Bearer {ALICE_TOKEN}"}
BOB = {"Authorization": f"Bearer {BOB_TOKEN}"}


@pytest.fixture
def client(settings, store, backend, sessions):
    app = create_app(settings, store=store, backend=backend, sessions=sessions, poll_interval=0)
    with TestClient(app) as test_client:
        yield test_client


def _create_site(client, base_url="https://example.com"):
    response = client.post("/api/sites", json={"name": "Blog", "base_url": base_url}, headers=ALICE)
    assert response.status_code == 201
    return response.json()


def _connect(client, site_id):
    client.get(f"/api/sites/{site_id}/connect", headers=ALICE, follow_redirects=False)
    response = client.get(
        "/api/connect/callback",
        params={"site_url": "https://example.com", "user_login": "admin", "password": "abcd1234"},
        headers=ALICE,
    )
    assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


def test_request_id_is_echoed(client):
    response = client.get("/api/health", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"


def test_anonymous_requests_are_unauthorized(client):
    response = client.get("/api/sites")

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_signed_session_cookie_is_accepted(settings, store, backend):
    app = create_app(settings, store=store, backend=backend, poll_interval=0)
    token = create_session_token("user-carol", settings.auth_secret_key)
    with TestClient(app) as test_client:
        test_client.cookies.set("wphub_session", token)
        response = test_client.get("/api/sites")

    assert response.status_code == 200
    assert response.json() == {"sites": []}


def test_site_crud(client):
    site = _create_site(client)
    assert site["status"] == "unconnected"

    response = client.patch(f"/api/sites/{site['id']}", json={"name": "Renamed"}, headers=ALICE)
    assert response.json()["name"] == "Renamed"

    assert client.get(f"/api/sites/{site['id']}", headers=BOB).status_code == 404

    assert client.delete(f"/api/sites/{site['id']}", headers=ALICE).status_code == 204
    assert client.get("/api/sites", headers=ALICE).json() == {"sites": []}


def test_invalid_site_url_is_unprocessable(client):
    response = client.post("/api/sites", json={"name": "Blog", "base_url": "not a url"}, headers=ALICE)

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_request"


def test_connect_flow(client):
    site = _create_site(client)

    redirect = client.get(f"/api/sites/{site['id']}/connect", headers=ALICE, follow_redirects=False)
    assert redirect.status_code == 307
    location = urlparse(redirect.headers["location"])
    assert location.netloc == "example.com"
    assert location.path == "/wp-admin/authorize-application.php"
    assert "success_url" in parse_qs(location.query)

    pending = client.get(f"/api/sites/{site['id']}", headers=ALICE).json()
    assert pending["status"] == "pending_external_auth"

    params = {"site_url": "https://example.com", "user_login": "admin", "password": "abcd1234"}
    first = client.get("/api/connect/callback", params=params, headers=ALICE).json()
    second = client.get("/api/connect/callback", params=params, headers=ALICE).json()

    assert first["site"]["status"] == "connected"
    assert first["already_processed"] is False
    assert second["already_processed"] is True

    disconnected = client.post(f"/api/sites/{site['id']}/disconnect", headers=ALICE).json()
    assert disconnected["status"] == "unconnected"


def test_callback_missing_parameters(client):
    response = client.get("/api/connect/callback", params={"site_url": "https://example.com"}, headers=ALICE)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "missing_parameters"
    assert body["missing"] == ["user_login", "password"]


def test_callback_without_match(client):
    response = client.get(
        "/api/connect/callback",
        params={"site_url": "https://nowhere.example", "user_login": "admin", "password": "x"},
        headers=ALICE,
    )

    assert response.status_code == 404
    assert response.json()["error"] == "no_matching_site"


def test_plugins_list_and_toggle(client, backend):
    site = _create_site(client)
    _connect(client, site["id"])

    backend.queue(json_reply([{"plugin": "akismet/akismet", "name": "Akismet", "status": "active"}]))
    listed = client.get(f"/api/sites/{site['id']}/plugins", headers=ALICE).json()
    assert listed["plugins"][0]["name"] == "Akismet"
    assert listed["pending"] == {}

    backend.queue(json_reply({"plugin": "akismet/akismet", "status": "inactive"}))
    toggled = client.post(
        f"/api/sites/{site['id']}/plugins/toggle",
        json={"slug": "akismet/akismet", "current_status": "active"},
        headers=ALICE,
    )
    assert toggled.status_code == 200
    assert toggled.json()["status"] == "inactive"
    assert backend.submitted[-1][1]["endpoint"] == "/wp/v2/plugins/akismet%2Fakismet"


def test_plugins_on_unconnected_site(client):
    site = _create_site(client)
    response = client.get(f"/api/sites/{site['id']}/plugins", headers=ALICE)

    assert response.status_code == 409
    assert response.json()["error"] == "site_not_connected"


def test_no_response_is_gateway_timeout(client, backend):
    site = _create_site(client)
    _connect(client, site["id"])

    backend.queue(pending_reply())
    response = client.post(
        f"/api/sites/{site['id']}/themes/manage",
        json={"action": "update", "slug": "twentytwentyfour"},
        headers=ALICE,
    )

    assert response.status_code == 504
    assert response.json()["error"] == "no_response"


def test_remote_failure_is_bad_gateway(client, backend):
    site = _create_site(client)
    _connect(client, site["id"])

    backend.queue(json_reply({"message": "Could not delete plugin"}, status_code=500))
    response = client.post(
        f"/api/sites/{site['id']}/plugins/manage",
        json={"action": "delete", "plugin": "hello-dolly/hello.php"},
        headers=ALICE,
    )

    assert response.status_code == 502
    assert response.json() == {"error": "remote_failed", "message": "Could not delete plugin"}


def test_moving_site_requires_reconnect_and_fresh_read(client, backend):
    site = _create_site(client)
    _connect(client, site["id"])

    backend.queue(json_reply([{"plugin": "old/old.php", "status": "active"}]))
    client.get(f"/api/sites/{site['id']}/plugins", headers=ALICE)

    moved = client.patch(f"/api/sites/{site['id']}", json={"base_url": "https://other-host.org"}, headers=ALICE)
    assert moved.json()["status"] == "unconnected"
    assert client.get(f"/api/sites/{site['id']}/plugins", headers=ALICE).status_code == 409

    client.get(
        "/api/connect/callback",
        params={"site_url": "https://other-host.org", "user_login": "admin", "password": "efgh5678"},
        headers=ALICE,
    )
    submitted = len(backend.submitted)
    backend.queue(json_reply([{"plugin": "new/new.php", "status": "inactive"}]))
    listed = client.get(f"/api/sites/{site['id']}/plugins", headers=ALICE).json()

    assert len(backend.submitted) == submitted + 1
    assert [p["plugin"] for p in listed["plugins"]] == ["new/new.php"]
