from __future__ import annotations

import pytest

from src.pesantren_system.pesantren_system.core.constants import ACCESS_DENIED_MESSAGE
from src.pesantren_system.pesantren_system.main import create_app


@pytest.fixture
def client(monkeypatch):
    # testing settings never auto-init the database; repositories connect lazily
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("AUTO_INIT_DB", "0")
    monkeypatch.setenv("AUTO_SEED_DB", "0")
    app = create_app()
    return app.test_client()


def _login_as(client, role: str, roles=None):
    with client.session_transaction() as sess:
        sess["user_id"] = 1
        sess["name"] = "Tester"
        sess["role"] = role
        sess["roles"] = roles or [role]


def _location(resp) -> str:
    return resp.headers["Location"].replace("http://localhost", "")


def _flashes(client) -> list[str]:
    with client.session_transaction() as sess:
        return [m for _, m in sess.get("_flashes", [])]


@pytest.mark.parametrize("path", ["/ota/pemasukan", "/admin/audit-log", "/wali", "/akademik/presensi"])
def test_anonymous_redirected_to_login_with_next(client, path):
    resp = client.get(path)

    assert resp.status_code == 302
    assert _location(resp).startswith("/login")


@pytest.mark.parametrize(
    "role, path, expected",
    [
        ("wali", "/ota/pemasukan", "/dashboard/ota"),
        ("guru", "/ota/laporan", "/dashboard/ota"),
        ("ota", "/ota/kategori", "/dashboard/ota"),
        ("guru", "/admin/users", "/dashboard/akademik"),
        ("wali", "/admin/pesan", "/dashboard/pengurus"),
        ("bendahara", "/wali", "/dashboard/bendahara"),
    ],
)
def test_wrong_role_redirected_to_fallback(client, role, path, expected):
    _login_as(client, role)

    resp = client.get(path)

    assert resp.status_code == 302
    assert _location(resp) == expected
    assert _flashes(client) == [ACCESS_DENIED_MESSAGE]


def test_role_dashboard_renders_for_owner(client):
    _login_as(client, "musyrif")

    resp = client.get("/dashboard/musyrif")

    assert resp.status_code == 200
    assert "Dashboard Musyrif" in resp.get_data(as_text=True)


def test_index_sends_user_to_role_dashboard(client):
    _login_as(client, "pengurus")
    assert _location(client.get("/")) == "/dashboard/pengurus"


def test_index_without_session_goes_to_login(client):
    assert _location(client.get("/")).startswith("/login")


def test_chained_fallback_shows_access_denied_once(client):
    # /dashboard/ota also refuses guru, so the fallback chain ends at the guru dashboard
    _login_as(client, "guru")

    resp = client.get("/ota/laporan", follow_redirects=True)

    assert resp.status_code == 200
    assert resp.request.path == "/dashboard/akademik"
    assert resp.get_data(as_text=True).count(ACCESS_DENIED_MESSAGE) == 1


def test_denied_again_later_flashes_again(client):
    _login_as(client, "wali")
    client.get("/ota/pemasukan")
    with client.session_transaction() as sess:
        sess.pop("_flashes", None)

    resp = client.get("/admin/pesan")

    assert _location(resp) == "/dashboard/pengurus"
    assert _flashes(client) == [ACCESS_DENIED_MESSAGE]
