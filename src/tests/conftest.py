# tests/conftest.py
import itertools
import pytest
from sqlalchemy import update
from automarket import create_app
from automarket.extensions import db
from automarket.models import User

VALID_PAYLOADS = {
    "cars": {
        "make": "Toyota", "model": "Camry", "year": 2021, "price": 22000,
        "body_type": "Sedan", "fuel_type": "Petrol", "transmission": "Automatic",
        "doors": 4, "image_urls": ["https://img.test/camry.jpg"],
    },
    "bikes": {
        "make": "Yamaha", "model": "MT-07", "year": 2020, "price": 7500,
        "body_type": "Sport", "fuel_type": "Petrol",
    },
    "trucks": {
        "make": "Volvo", "model": "FH16", "year": 2019, "price": 95000,
        "body_type": "Tractor", "doors": 2,
    },
    "parts": {
        "name": "Brake pads", "price": 120, "category": "Brakes", "brand": "Bosch",
        "compatibility": "Toyota Camry 2018-2022", "condition": "new", "warranty": "12 months",
    },
}


@pytest.fixture()
def app_config(tmp_path):
    return {
        "TESTING": True,
        "APP_ENV": "test",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.sqlite'}",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "BCRYPT_LOG_ROUNDS": 4,
        "JWT_SECRET_KEY": "test-jwt-secret-0123456789-abcdefghijklmnop",
    }


@pytest.fixture()
def app_instance(app_config):
    """
    Fresh app per test on a temporary SQLite file (foreign keys on, so
    ON DELETE CASCADE behaves like MySQL/PostgreSQL).
    """
    application = create_app(app_config)
    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def register(client):
    """
    Registers a user and returns (user_id, headers with Bearer token).
    """
    seq = itertools.count(1)

    def _mk(email=None, password="secret1", name="Test User"):
        email = email or f"user{next(seq)}@example.com"
        r = client.post("/api/auth/register", json={
            "email": email,
            "password": password,
            "name": name,
        })
        assert r.status_code == 201, r.get_json()
        body = r.get_json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['token']}"}
    return _mk


@pytest.fixture()
def admin_headers(app_instance, register):
    uid, headers = register("admin@example.com", name="Admin")
    with app_instance.app_context():
        db.session.execute(update(User).where(User.id == uid).values(role="admin"))
        db.session.commit()
    return headers


@pytest.fixture()
def payload():
    def _payload(category, /, **overrides):
        data = dict(VALID_PAYLOADS[category])
        data.update(overrides)
        return data
    return _payload


@pytest.fixture()
def create_listing(client, payload):
    def _create(category, headers, /, **overrides):
        r = client.post(f"/api/{category}", json=payload(category, **overrides), headers=headers)
        assert r.status_code == 201, r.get_json()
        return r.get_json()[category[:-1]]
    return _create
