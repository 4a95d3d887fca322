from datetime import date

from conftest import auth_headers, make_appointment, make_formula

BASE = "/api/v1/formulas"

PAYLOAD = {
    "title": "Hydra Glow",
    "label": "Bestseller",
    "price": 75.5,
    "duration": 90,
    "treatments": ["cleanse", "mask"],
    "description": "Deep hydration facial",
}


def test_public_listing_hides_inactive(db, client):
    make_formula(db, "Active one")
    make_formula(db, "Retired", is_active=False)

    response = client.get(BASE)
    assert response.status_code == 200
    assert [f["title"] for f in response.json()["data"]] == ["Active one"]


def test_empty_catalogue_message(client):
    body = client.get(BASE).json()
    assert body["data"] == []
    assert body["message"] == "No active formula found."


def test_get_inactive_formula_is_404(db, client):
    retired = make_formula(db, "Retired", is_active=False)
    assert client.get(f"{BASE}/{retired.id}").status_code == 404


def test_admin_creates_formula(client, admin):
    response = client.post(BASE, json=PAYLOAD, headers=auth_headers(admin))
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["title"] == "Hydra Glow"
    assert data["treatments"] == ["cleanse", "mask"]
    assert data["isActive"] is True


def test_client_cannot_create_formula(client, alice):
    assert client.post(BASE, json=PAYLOAD, headers=auth_headers(alice)).status_code == 403


def test_duplicate_title_conflicts(client, admin):
    client.post(BASE, json=PAYLOAD, headers=auth_headers(admin))
    assert client.post(BASE, json=PAYLOAD, headers=auth_headers(admin)).status_code == 409


def test_invalid_formula_payload(client, admin):
    response = client.post(BASE, json={**PAYLOAD, "price": -1}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_update_formula(client, admin, formula):
    response = client.put(
        f"{BASE}/{formula.id}", json={"price": 80, "isActive": False}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["price"] == 80
    assert data["isActive"] is False
    assert data["title"] == formula.title


def test_admin_listing_includes_inactive(db, client, alice, admin):
    make_formula(db, "Active one")
    make_formula(db, "Retired", is_active=False)

    assert client.get(f"{BASE}/admin/all", headers=auth_headers(alice)).status_code == 403
    data = client.get(f"{BASE}/admin/all", headers=auth_headers(admin)).json()["data"]
    assert len(data) == 2


def test_delete_unused_formula(client, admin, formula):
    response = client.delete(f"{BASE}/{formula.id}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["data"] == {"id": formula.id}
    assert client.get(f"{BASE}/{formula.id}").status_code == 404


def test_delete_referenced_formula_conflicts(db, client, alice, admin, formula):
    make_appointment(db, alice, formula, date(2025, 6, 1), "09:00", "10:00")
    assert client.delete(f"{BASE}/{formula.id}", headers=auth_headers(admin)).status_code == 409
