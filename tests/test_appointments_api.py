from datetime import date

from conftest import auth_headers, make_appointment

from salon_api.models import Appointment

BASE = "/api/v1/appointments"


def _book(client, user, formula, day="2025-06-01", start="14:00", end="15:00"):
    return client.post(
        BASE,
        json={"formulaId": formula.id, "date": day, "startTime": start, "endTime": end},
        headers=auth_headers(user),
    )


def test_booking_requires_authentication(client, formula):
    response = client.post(
        BASE, json={"formulaId": formula.id, "date": "2025-06-01", "startTime": "14:00", "endTime": "15:00"}
    )
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_invalid_token_is_rejected(client):
    response = client.get(f"{BASE}/my", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_book_cancel_rebook_scenario(client, alice, bob, formula):
    first = _book(client, alice, formula)
    assert first.status_code == 201
    body = first.json()
    assert body["success"] is True
    assert body["message"] == "Appointment booked. Awaiting confirmation."
    assert body["data"]["status"] == "pending"
    assert body["data"]["formula"]["title"] == formula.title
    assert body["data"]["client"]["firstName"] == "Alice"

    clash = _book(client, bob, formula, start="14:30", end="15:30")
    assert clash.status_code == 409
    assert clash.json() == {
        "success": False,
        "message": "This time slot is already booked. Please choose another time.",
    }

    cancel = client.put(
        f"{BASE}/{body['data']['id']}/cancel",
        json={"cancellationReason": "Change of plans"},
        headers=auth_headers(alice),
    )
    assert cancel.status_code == 200
    assert cancel.json()["data"]["status"] == "cancelled"
    assert cancel.json()["data"]["cancellationReason"] == "Change of plans"

    retry = _book(client, bob, formula, start="14:30", end="15:30")
    assert retry.status_code == 201


def test_booking_missing_fields_returns_400(client, alice):
    response = client.post(BASE, json={"date": "2025-06-01"}, headers=auth_headers(alice))
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_booking_malformed_body_returns_400(client, alice, formula):
    response = client.post(
        BASE,
        json={"formulaId": formula.id, "date": "not-a-date", "startTime": "14:00", "endTime": "15:00"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 400
    assert "date" in response.json()["message"]


def test_booking_bad_time_format_returns_400(client, alice, formula):
    response = _book(client, alice, formula, start="2pm")
    assert response.status_code == 400


def test_booking_time_with_trailing_newline_returns_400(db, client, alice, formula):
    response = _book(client, alice, formula, start="14:00\n")
    assert response.status_code == 400
    assert db.query(Appointment).count() == 0


def test_booking_unknown_formula_returns_404(client, alice):
    response = client.post(
        BASE,
        json={"formulaId": 999, "date": "2025-06-01", "startTime": "14:00", "endTime": "15:00"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 404


def test_booking_in_the_past_returns_400(client, alice, formula):
    response = _book(client, alice, formula, day="2025-05-19")
    assert response.status_code == 400


def test_cancel_without_body(client, alice, formula):
    appointment_id = _book(client, alice, formula).json()["data"]["id"]
    response = client.put(f"{BASE}/{appointment_id}/cancel", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json()["data"]["cancellationReason"] is None


def test_stranger_cannot_cancel(client, alice, bob, formula):
    appointment_id = _book(client, alice, formula).json()["data"]["id"]
    response = client.put(f"{BASE}/{appointment_id}/cancel", headers=auth_headers(bob))
    assert response.status_code == 403


def test_cancelling_twice_returns_400(client, alice, formula):
    appointment_id = _book(client, alice, formula).json()["data"]["id"]
    client.put(f"{BASE}/{appointment_id}/cancel", headers=auth_headers(alice))
    response = client.put(f"{BASE}/{appointment_id}/cancel", headers=auth_headers(alice))
    assert response.status_code == 400


def test_status_change_is_admin_only(client, alice, admin, formula):
    appointment_id = _book(client, alice, formula).json()["data"]["id"]

    denied = client.put(
        f"{BASE}/{appointment_id}/status", json={"status": "confirmed"}, headers=auth_headers(alice)
    )
    assert denied.status_code == 403

    allowed = client.put(
        f"{BASE}/{appointment_id}/status",
        json={"status": "confirmed", "adminNotes": "Bring towel"},
        headers=auth_headers(admin),
    )
    assert allowed.status_code == 200
    data = allowed.json()["data"]
    assert data["status"] == "confirmed"
    assert data["adminNotes"] == "Bring towel"
    assert data["processedBy"]["id"] == admin.id


def test_status_change_on_unknown_appointment(client, alice, admin):
    assert client.put(f"{BASE}/999/status", json={"status": "confirmed"}, headers=auth_headers(alice)).status_code == 403
    assert client.put(f"{BASE}/999/status", json={"status": "confirmed"}, headers=auth_headers(admin)).status_code == 404


def test_status_change_rejects_unknown_value(client, alice, admin, formula):
    appointment_id = _book(client, alice, formula).json()["data"]["id"]
    response = client.put(
        f"{BASE}/{appointment_id}/status", json={"status": "archived"}, headers=auth_headers(admin)
    )
    assert response.status_code == 400


def test_get_appointment_ownership(client, alice, bob, admin, formula):
    appointment_id = _book(client, alice, formula).json()["data"]["id"]

    assert client.get(f"{BASE}/{appointment_id}", headers=auth_headers(alice)).status_code == 200
    assert client.get(f"{BASE}/{appointment_id}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"{BASE}/{appointment_id}", headers=auth_headers(bob)).status_code == 403
    assert client.get(f"{BASE}/999", headers=auth_headers(admin)).status_code == 404


def test_my_appointments_only_lists_own(client, alice, bob, formula):
    _book(client, alice, formula)
    _book(client, bob, formula, start="16:00", end="17:00")

    response = client.get(f"{BASE}/my", headers=auth_headers(alice))
    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data) == 1
    assert data[0]["clientId"] == alice.id


def test_history_endpoint(db, client, alice, formula):
    make_appointment(db, alice, formula, date(2025, 4, 1), "10:00", "11:00", status="completed")
    make_appointment(db, alice, formula, date(2025, 6, 1), "10:00", "11:00")

    data = client.get(f"{BASE}/history", headers=auth_headers(alice)).json()["data"]
    assert [a["date"] for a in data] == ["2025-04-01"]


def test_admin_listing_and_filters(db, client, alice, bob, admin, formula):
    make_appointment(db, alice, formula, date(2025, 6, 1), "09:00", "10:00", status="confirmed")
    make_appointment(db, bob, formula, date(2025, 6, 2), "09:00", "10:00")

    assert client.get(f"{BASE}/admin", headers=auth_headers(alice)).status_code == 403

    everything = client.get(f"{BASE}/admin", headers=auth_headers(admin)).json()["data"]
    assert len(everything) == 2

    pending = client.get(f"{BASE}/admin", params={"status": "pending"}, headers=auth_headers(admin))
    assert [a["clientId"] for a in pending.json()["data"]] == [bob.id]

    by_date = client.get(f"{BASE}/admin", params={"date": "2025-06-01"}, headers=auth_headers(admin))
    assert [a["clientId"] for a in by_date.json()["data"]] == [alice.id]


def test_upcoming_is_admin_only(db, client, alice, admin, formula):
    make_appointment(db, alice, formula, date(2025, 5, 21), "09:00", "10:00")

    assert client.get(f"{BASE}/upcoming", headers=auth_headers(alice)).status_code == 403
    data = client.get(f"{BASE}/upcoming", headers=auth_headers(admin)).json()["data"]
    assert [a["date"] for a in data] == ["2025-05-21"]


def test_admin_edit_moves_appointment(client, alice, admin, formula):
    appointment_id = _book(client, alice, formula).json()["data"]["id"]

    response = client.put(
        f"{BASE}/{appointment_id}",
        json={"date": "2025-06-02", "startTime": "09:00", "endTime": "10:00", "adminNotes": "moved"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert (data["date"], data["startTime"], data["endTime"]) == ("2025-06-02", "09:00", "10:00")
    assert data["adminNotes"] == "moved"


def test_admin_edit_into_taken_slot_conflicts(client, alice, bob, admin, formula):
    _book(client, alice, formula)
    other_id = _book(client, bob, formula, start="16:00", end="17:00").json()["data"]["id"]

    response = client.put(
        f"{BASE}/{other_id}", json={"startTime": "14:30", "endTime": "15:30"}, headers=auth_headers(admin)
    )
    assert response.status_code == 409


def test_admin_edit_is_admin_only(client, alice, formula):
    appointment_id = _book(client, alice, formula).json()["data"]["id"]
    response = client.put(f"{BASE}/{appointment_id}", json={"adminNotes": "x"}, headers=auth_headers(alice))
    assert response.status_code == 403


def test_clock_controls_same_day_booking(client, clock, alice, formula):
    # The frozen clock reads 2025-05-20 10:00
    assert _book(client, alice, formula, day="2025-05-20", start="09:30", end="10:30").status_code == 400
    assert _book(client, alice, formula, day="2025-05-20", start="10:01", end="11:00").status_code == 201
