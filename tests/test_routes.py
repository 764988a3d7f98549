"""
End-to-end checks of the public pages and the admin endpoints via TestClient.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from campus.app import create_app
from campus.core.csrf import csrf_token_for
from campus.core.security import hash_password
from campus.services.sync_service import Synchronizer

PASSWORD = "correct horse"
PASSWORD_HASH = hash_password(PASSWORD)
PNG = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture()
def settings(make_settings):
    return make_settings(admin_password_hash=PASSWORD_HASH)


@pytest.fixture()
def app(settings, mirror):
    return create_app(settings, synchronizer=Synchronizer(mirror))


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


def _login(client) -> str:
    resp = client.post("/admin/login", data={"username": "admin", "password": PASSWORD})
    assert resp.status_code == 200
    return resp.json()["token"]


def test_public_pages_render_on_cold_start(client, settings):
    for path in ["/", "/students", "/teachers", "/gallery", "/about", "/developer", "/admin"]:
        assert client.get(path).status_code == 200, path
    assert settings.data_file.exists()


def test_unknown_route_renders_error_page(client):
    resp = client.get("/no-such-page")
    assert resp.status_code == 404
    assert "Page not found" in resp.text


def test_only_site_pages_are_routed(client):
    resp = client.get("/.well-known/appspecific/com.chrome.devtools.json")
    assert resp.status_code == 404
    assert "Page not found" in resp.text


def test_login_validation(client):
    assert client.post("/admin/login", data={"username": "admin"}).json() == {
        "error": "Username and password are required"
    }
    resp = client.post("/admin/login", data={"username": "admin", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid credentials"}
    resp = client.post("/admin/login", data={"username": "root", "password": PASSWORD})
    assert resp.status_code == 401


def test_login_sets_cookie_and_opens_panel(client):
    token = _login(client)

    assert "=" not in token
    assert client.cookies.get("token") == token
    resp = client.get("/admin/panel")
    assert resp.status_code == 200
    assert csrf_token_for(token, "test-secret") in resp.text


def test_panel_redirects_anonymous_users(client):
    resp = client.get("/admin/panel", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/admin"


def test_logout_clears_cookie(client):
    _login(client)
    resp = client.get("/admin/logout", follow_redirects=False)
    assert resp.status_code == 303
    assert client.get("/admin/panel", follow_redirects=False).status_code == 303


def test_mutations_require_authentication(client):
    resp = client.post("/admin/students", data={"name": "Ada"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Authentication required"}

    resp = client.post("/admin/teachers", data={"name": "Ada"}, headers={"Authorization": "Bearer junk.sig"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid or expired token"}


def test_cookie_session_requires_csrf_token(client):
    _login(client)
    resp = client.post("/admin/students", data={"name": "Ada"})
    assert resp.status_code == 403


def test_add_student_with_cookie_session(client, app, mirror):
    token = _login(client)
    resp = client.post("/admin/students", data={"name": "  Ada  ", "csrf_token": csrf_token_for(token, "test-secret")})

    assert resp.json() == {"success": True, "message": "Student added successfully"}
    doc = app.state.store.load()
    assert [s.name for s in doc.students] == ["Ada"]
    assert ("commit", "Update database") in mirror.calls
    assert "Ada" in client.get("/students").text


def test_add_teacher_with_bearer_token(app, settings):
    with TestClient(app) as anon:
        token = _login(anon)
    with TestClient(app) as api:
        resp = api.post("/admin/teachers", data={"name": "Edsger"}, headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
    assert resp.json()["message"] == "Teacher added successfully"
    assert [t.name for t in app.state.store.load().teachers] == ["Edsger"]


def test_blank_name_is_rejected(client):
    token = _login(client)
    resp = client.post("/admin/teachers", data={"name": "   ", "csrf_token": csrf_token_for(token, "test-secret")})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Valid name is required"}


def test_gallery_upload_stores_image_and_record(client, app, settings, mirror):
    token = _login(client)
    resp = client.post(
        "/admin/gallery",
        data={"csrf_token": csrf_token_for(token, "test-secret")},
        files={"image": ("cat.png", PNG, "image/png")},
    )

    assert resp.json() == {"success": True, "message": "Image added successfully"}
    (record,) = app.state.store.load().gallery
    assert record.path.startswith("/uploads/") and record.path.endswith(".png")
    stored = settings.uploads_dir / record.path.rsplit("/", 1)[1]
    assert stored.read_bytes() == PNG
    assert client.get(record.path).content == PNG
    assert mirror.calls[0] == ("stage", [settings.data_file])
    assert mirror.calls[1] == ("stage", [stored])
    assert mirror.calls[2][1].startswith("Add gallery image ")


def test_gallery_upload_validation(client):
    token = _login(client)
    csrf = csrf_token_for(token, "test-secret")

    resp = client.post("/admin/gallery", data={"csrf_token": csrf})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Image is required"}

    resp = client.post("/admin/gallery", data={"csrf_token": csrf}, files={"image": ("a.txt", b"hi", "text/plain")})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Only image files are allowed"}

    resp = client.post("/admin/gallery", data={"csrf_token": csrf}, files={"image": ("a.png", b"x" * 2048, "image/png")})
    assert resp.status_code == 413


def test_failed_save_reports_500_and_skips_sync(client, app, settings, mirror, monkeypatch):
    token = _login(client)
    csrf = csrf_token_for(token, "test-secret")
    app.state.store.load()

    def boom(_doc):
        raise OSError("disk full")

    monkeypatch.setattr(app.state.store, "_write", boom)

    resp = client.post("/admin/students", data={"name": "Ada", "csrf_token": csrf})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to save data"}

    resp = client.post("/admin/gallery", data={"csrf_token": csrf}, files={"image": ("cat.png", PNG, "image/png")})
    assert resp.status_code == 500
    assert list(settings.uploads_dir.iterdir()) == []
    assert mirror.calls == []


def test_login_is_rate_limited(client):
    for _ in range(10):
        client.post("/admin/login", data={"username": "admin", "password": "wrong"})
    resp = client.post("/admin/login", data={"username": "admin", "password": PASSWORD})
    assert resp.status_code == 429
