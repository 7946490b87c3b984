# tests/test_app.py
from automarket import create_app
from automarket.extensions import db
from automarket.routes import listings


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json()["status"] == "OK"
    assert r.get_json()["timestamp"]

    r = client.get("/api/health")
    assert r.get_json() == {"status": "OK", "message": "AutoMarket API is running!"}


def test_unknown_route(client):
    r = client.get("/api/nowhere")
    assert r.status_code == 404
    assert r.get_json() == {"error": "Route not found"}


def test_method_not_allowed_uses_error_envelope(client):
    r = client.patch("/api/cars")
    assert r.status_code == 405
    assert "error" in r.get_json()


def test_security_headers(client):
    r = client.get("/api/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert r.headers["Referrer-Policy"] == "no-referrer"


def test_cors_for_dev_origin(client):
    r = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
    assert r.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    r = client.get("/api/health", headers={"Origin": "http://evil.test"})
    assert "Access-Control-Allow-Origin" not in r.headers


def test_non_json_body_is_treated_as_empty(client):
    r = client.post("/api/auth/login", data="email=a", content_type="application/x-www-form-urlencoded")
    assert r.status_code == 400
    assert r.get_json() == {"error": "Email is required."}


def test_unexpected_error_is_500(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(listings, "count", boom)
    r = client.get("/api/cars")
    assert r.status_code == 500
    assert r.get_json() == {"error": "Internal server error."}


def test_unexpected_error_detail_in_development(app_config, monkeypatch):
    app = create_app({**app_config, "APP_ENV": "development"})
    with app.app_context():
        db.create_all()

    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(listings, "count", boom)
    r = app.test_client().get("/api/bikes")
    assert r.status_code == 500
    assert r.get_json() == {"error": "disk on fire"}


def test_images_are_served(app_config, tmp_path):
    images = tmp_path / "images"
    images.mkdir()
    (images / "camry.txt").write_text("not really a jpeg")

    app = create_app({**app_config, "IMAGES_DIR": str(images)})
    r = app.test_client().get("/images/camry.txt")
    assert r.status_code == 200
    assert r.data == b"not really a jpeg"


def test_cli_create_admin(app_instance, client, register):
    runner = app_instance.test_cli_runner()

    # new account needs a password
    result = runner.invoke(args=["create-admin", "boss@test.local"])
    assert result.exit_code != 0

    result = runner.invoke(args=["create-admin", "boss@test.local", "--password", "secret1", "--name", "Boss"])
    assert result.exit_code == 0, result.output
    assert "created" in result.output

    r = client.post("/api/auth/login", json={"email": "boss@test.local", "password": "secret1"})
    token = r.get_json()["token"]
    r = client.get("/api/admin/users", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200

    # existing account is promoted in place
    _, headers = register("member@test.local")
    assert client.get("/api/admin/users", headers=headers).status_code == 403
    result = runner.invoke(args=["create-admin", "member@test.local"])
    assert result.exit_code == 0, result.output
    assert client.get("/api/admin/users", headers=headers).status_code == 200


def test_sqlite_foreign_keys_are_enforced(app_instance):
    from sqlalchemy import text

    with app_instance.app_context():
        assert db.session.execute(text("PRAGMA foreign_keys")).scalar() == 1
