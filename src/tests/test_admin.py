# tests/test_admin.py
from datetime import datetime, timedelta
from types import SimpleNamespace
import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from automarket import security
from automarket.extensions import db
from automarket.models import Bike, Car, Part, Truck


@pytest.mark.parametrize("method,path", [
    ("get", "/api/admin/users"),
    ("get", "/api/admin/users/1"),
    ("put", "/api/admin/users/1/role"),
    ("delete", "/api/admin/users/1"),
    ("get", "/api/admin/listings"),
    ("get", "/api/admin/listings/cars"),
    ("put", "/api/admin/listings/cars/1"),
    ("delete", "/api/admin/listings/cars/1"),
])
def test_admin_routes_need_admin_role(client, register, method, path):
    _, headers = register()

    r = getattr(client, method)(path, json={})
    assert r.status_code == 401

    r = getattr(client, method)(path, json={}, headers=headers)
    assert r.status_code == 403
    assert r.get_json() == {"error": "Admin access required."}


def test_role_lookup_failure_is_500(client, admin_headers, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT role", {}, Exception("connection lost"))

    monkeypatch.setattr(security, "db", SimpleNamespace(session=SimpleNamespace(scalar=broken)))
    r = client.get("/api/admin/users", headers=admin_headers)
    assert r.status_code == 500
    assert r.get_json() == {"error": "Failed to verify admin role."}


def test_list_and_get_users(client, register, admin_headers):
    uid, _ = register("someone@test.local", name="Someone")

    r = client.get("/api/admin/users", headers=admin_headers)
    assert r.status_code == 200
    users = r.get_json()["users"]
    assert {u["email"] for u in users} == {"admin@example.com", "someone@test.local"}
    assert all("password_hash" not in u for u in users)

    r = client.get(f"/api/admin/users/{uid}", headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json()["user"]["role"] == "user"

    r = client.get("/api/admin/users/9999", headers=admin_headers)
    assert r.status_code == 404


def test_update_user_role(client, register, admin_headers):
    uid, headers = register()

    r = client.put(f"/api/admin/users/{uid}/role", json={}, headers=admin_headers)
    assert r.status_code == 400
    r = client.put(f"/api/admin/users/{uid}/role", json={"role": "superuser"}, headers=admin_headers)
    assert r.status_code == 400
    r = client.put("/api/admin/users/9999/role", json={"role": "admin"}, headers=admin_headers)
    assert r.status_code == 404

    r = client.put(f"/api/admin/users/{uid}/role", json={"role": "admin"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json()["user"]["role"] == "admin"

    # the existing token now passes the guard, the role is read fresh
    assert client.get("/api/admin/users", headers=headers).status_code == 200

    client.put(f"/api/admin/users/{uid}/role", json={"role": "user"}, headers=admin_headers)
    assert client.get("/api/admin/users", headers=headers).status_code == 403


def test_delete_user_cascades(client, register, admin_headers, create_listing):
    seller_id, seller = register("gone@test.local")
    _, buyer = register()
    car = create_listing("cars", seller)
    bike = create_listing("bikes", seller)
    client.post(f"/api/user/favorites/{car['id']}", headers=buyer)
    client.post(f"/api/cars/{car['id']}/inquiries", json={"message": "Hi"}, headers=buyer)

    r = client.delete(f"/api/admin/users/{seller_id}", headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json()["message"] == "User deleted."

    assert client.get(f"/api/cars/{car['id']}").status_code == 404
    assert client.get(f"/api/bikes/{bike['id']}").status_code == 404
    assert client.get("/api/user/favorites", headers=buyer).get_json()["favorites"] == []
    assert client.get("/api/user/inquiries", query_string={"box": "sent"}, headers=buyer).get_json()["inquiries"] == []
    assert client.get("/api/user/listings", headers=seller).get_json()["listings"] == []
    assert client.get(f"/api/admin/users/{seller_id}", headers=admin_headers).status_code == 404

    r = client.post("/api/auth/login", json={"email": "gone@test.local", "password": "secret1"})
    assert r.status_code == 401

    r = client.delete(f"/api/admin/users/{seller_id}", headers=admin_headers)
    assert r.status_code == 404


def test_all_listings_sorted_and_tagged(app_instance, client, register, admin_headers, create_listing):
    _, seller = register()
    car = create_listing("cars", seller)
    bike = create_listing("bikes", seller, status="sold")
    truck = create_listing("trucks", seller)
    part = create_listing("parts", seller)

    base = datetime(2025, 3, 1, 9, 0, 0)
    stamps = [(Car, car, 2), (Bike, bike, 4), (Truck, truck, 1), (Part, part, 3)]
    with app_instance.app_context():
        for model, row, hours in stamps:
            db.session.execute(
                update(model).where(model.id == row["id"]).values(created_at=base + timedelta(hours=hours))
            )
        db.session.commit()

    r = client.get("/api/admin/listings", headers=admin_headers)
    assert r.status_code == 200
    listings = r.get_json()["listings"]
    assert [(item["category"], item["id"]) for item in listings] == [
        ("bikes", bike["id"]),
        ("parts", part["id"]),
        ("cars", car["id"]),
        ("trucks", truck["id"]),
    ]
    # every status is visible to admins
    assert listings[0]["status"] == "sold"

    tagged_part = listings[1]
    assert tagged_part["part_category"] == "Brakes"
    assert tagged_part["model"] == "Brake pads"
    assert tagged_part["year"] is None


def test_category_listings(client, register, admin_headers, create_listing):
    _, seller = register()
    first = create_listing("trucks", seller)
    second = create_listing("trucks", seller, status="pending")

    r = client.get("/api/admin/listings/trucks", headers=admin_headers)
    assert r.status_code == 200
    ids = {item["id"] for item in r.get_json()["listings"]}
    assert ids == {first["id"], second["id"]}

    r = client.get(f"/api/admin/listings/trucks/{first['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json()["listing"]["category"] == "trucks"

    r = client.get("/api/admin/listings/trucks/9999", headers=admin_headers)
    assert r.status_code == 404


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_invalid_category_is_400(client, admin_headers, method):
    r = getattr(client, method)("/api/admin/listings/boats/1", json={"price": 10}, headers=admin_headers)
    assert r.status_code == 400
    assert r.get_json() == {"error": "Invalid category."}


def test_admin_update_listing(client, register, admin_headers, create_listing):
    _, seller = register()
    part = create_listing("parts", seller)
    car = create_listing("cars", seller)

    # part-only fields on a part
    r = client.put(f"/api/admin/listings/parts/{part['id']}", json={
        "brand": "ATE",
        "warranty": "24 months",
        "status": "sold",
    }, headers=admin_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body["message"] == "Listing updated."
    assert body["listing"]["brand"] == "ATE"
    assert body["listing"]["warranty"] == "24 months"
    assert body["listing"]["status"] == "sold"

    # vehicle fields on a car; aliases work here too
    r = client.put(f"/api/admin/listings/cars/{car['id']}", json={"manufacturer": "Lexus", "mileage": 42000},
                   headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json()["listing"]["make"] == "Lexus"
    assert r.get_json()["listing"]["mileage"] == 42000

    # fields of another category are not writable
    r = client.put(f"/api/admin/listings/cars/{car['id']}", json={"brand": "Bosch"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.get_json() == {"error": "No updatable fields provided."}

    r = client.put(f"/api/admin/listings/cars/{car['id']}", json={"price": 0}, headers=admin_headers)
    assert r.status_code == 400

    r = client.put("/api/admin/listings/cars/9999", json={"price": 10}, headers=admin_headers)
    assert r.status_code == 404
    assert r.get_json() == {"error": "Listing not found."}


def test_admin_delete_listing(client, register, admin_headers, create_listing):
    _, seller = register()
    bike = create_listing("bikes", seller)

    r = client.delete(f"/api/admin/listings/bikes/{bike['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json() == {"message": "Listing deleted."}
    assert client.get(f"/api/bikes/{bike['id']}").status_code == 404

    r = client.delete(f"/api/admin/listings/bikes/{bike['id']}", headers=admin_headers)
    assert r.status_code == 404
