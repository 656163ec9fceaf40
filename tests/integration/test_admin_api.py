"""Admin dashboard: users, doctors, appointment status and reports."""
import pytest

from conftest import next_weekday_at

NEW_DOCTOR = {
    "name": "Anna Berg",
    "specialty": "Endocrinology",
    "experience": 10,
    "rating": 4.6,
    "consultation_fee": 110,
    "working_days": [4, 0, 0],
}


@pytest.fixture
def appointment(client, patient, doctor_id):
    _, headers = patient
    slot = next_weekday_at(11, 0, weekday=3)
    response = client.post("/appointments", headers=headers, json={"doctor_id": doctor_id, "date_time": slot.isoformat()})
    assert response.status_code == 201, response.text
    return response.json()


def test_patients_are_forbidden(client, patient):
    _, headers = patient
    assert client.get("/admin/users", headers=headers).status_code == 403
    assert client.get("/admin/reports/appointment-stats", headers=headers).status_code == 403


def test_anonymous_is_unauthorized(client):
    assert client.get("/admin/users").status_code == 401


def test_list_users(client, admin, patient):
    _, headers = admin

    body = client.get("/admin/users", headers=headers).json()
    assert body["total"] == 2
    assert all("hashed_password" not in u for u in body["data"])

    patients = client.get("/admin/users", params={"role": "patient"}, headers=headers).json()
    assert [u["email"] for u in patients["data"]] == ["jane@example.com"]


def test_create_update_delete_user(client, admin):
    _, headers = admin

    created = client.post("/admin/users", headers=headers, json={
        "name": "Front Desk", "email": "desk@example.com", "password": "deskpass", "role": "admin",
    })
    assert created.status_code == 201
    user_id = created.json()["id"]
    assert created.json()["role"] == "admin"

    duplicate = client.post("/admin/users", headers=headers, json={
        "name": "Again", "email": "desk@example.com", "password": "deskpass",
    })
    assert duplicate.status_code == 409

    updated = client.put(f"/admin/users/{user_id}", headers=headers, json={"role": "patient"})
    assert updated.json()["role"] == "patient"

    assert client.delete(f"/admin/users/{user_id}", headers=headers).status_code == 200
    assert client.get(f"/admin/users/{user_id}", headers=headers).status_code == 404


def test_admin_cannot_delete_self(client, admin):
    user, headers = admin
    assert client.delete(f"/admin/users/{user['id']}", headers=headers).status_code == 400


def test_doctor_management(client, admin, doctors):
    _, headers = admin

    created = client.post("/admin/doctors", headers=headers, json=NEW_DOCTOR)
    assert created.status_code == 201
    doctor = created.json()
    assert doctor["working_days"] == [0, 4]
    assert "Endocrinology" in client.get("/doctors/specialties").json()

    updated = client.put(f"/admin/doctors/{doctor['id']}", headers=headers, json={"consultation_fee": 125})
    assert updated.json()["consultation_fee"] == 125
    assert client.put(f"/admin/doctors/{doctor['id']}", headers=headers, json={}).status_code == 400

    assert client.delete(f"/admin/doctors/{doctor['id']}", headers=headers).status_code == 200
    assert client.get(f"/doctors/{doctor['id']}").status_code == 404
    assert client.delete(f"/admin/doctors/{doctor['id']}", headers=headers).status_code == 404


def test_invalid_schedule_is_rejected(client, admin):
    _, headers = admin
    response = client.post("/admin/doctors", headers=headers, json={**NEW_DOCTOR, "working_days": [7]})
    assert response.status_code == 422

    inverted = client.post("/admin/doctors", headers=headers,
                           json={**NEW_DOCTOR, "start_time": "17:00", "end_time": "09:00"})
    assert inverted.status_code == 422


@pytest.mark.parametrize("changes", [
    {"working_days": [9, -3]},
    {"start_time": "18:00", "end_time": "08:00"},
    {"start_time": "25:00"},
])
def test_invalid_schedule_update_is_rejected(client, admin, doctor_id, changes):
    _, headers = admin

    response = client.put(f"/admin/doctors/{doctor_id}", headers=headers, json=changes)

    assert response.status_code == 422
    assert client.get(f"/doctors/{doctor_id}").json()["working_days"] == [0, 1, 2, 3, 4]


def test_update_cannot_invert_stored_hours(client, admin, doctor_id):
    _, headers = admin

    response = client.put(f"/admin/doctors/{doctor_id}", headers=headers, json={"start_time": "18:00"})

    assert response.status_code == 400
    assert client.get(f"/doctors/{doctor_id}").json()["start_time"] == "09:00"


def test_update_deduplicates_working_days(client, admin, doctor_id):
    _, headers = admin
    response = client.put(f"/admin/doctors/{doctor_id}", headers=headers, json={"working_days": [4, 1, 1]})
    assert response.json()["working_days"] == [1, 4]


def test_clearing_working_days_closes_the_doctor(client, admin, patient, doctor_id):
    _, headers = admin

    response = client.put(f"/admin/doctors/{doctor_id}", headers=headers, json={"working_days": []})
    assert response.status_code == 200
    assert response.json()["working_days"] == []

    availability = client.get(f"/doctors/{doctor_id}/availability").json()
    assert availability == {"available": False, "next_available": None, "slots": []}

    _, patient_headers = patient
    booking = client.post("/appointments", headers=patient_headers, json={
        "doctor_id": doctor_id, "date_time": next_weekday_at(10).isoformat(),
    })
    assert booking.status_code == 400


def test_list_appointments_with_filters(client, admin, appointment, doctor_id):
    _, headers = admin

    everything = client.get("/admin/appointments", headers=headers).json()
    assert [a["id"] for a in everything] == [appointment["id"]]

    day = appointment["date_time"][:10]
    assert len(client.get("/admin/appointments", params={"date": day}, headers=headers).json()) == 1
    assert client.get("/admin/appointments", params={"status": "cancelled"}, headers=headers).json() == []
    assert len(client.get("/admin/appointments", params={"doctor_id": doctor_id}, headers=headers).json()) == 1


def test_status_transitions(client, admin, appointment):
    _, headers = admin
    url = f"/admin/appointments/{appointment['id']}/status"

    confirmed = client.put(url, headers=headers, json={"status": "confirmed"})
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    assert client.put(url, headers=headers, json={"status": "completed"}).status_code == 200
    assert client.put(url, headers=headers, json={"status": "scheduled"}).status_code == 409
    assert client.put(url, headers=headers, json={"status": "archived"}).status_code == 422


def test_admin_can_read_any_appointment(client, admin, appointment):
    _, headers = admin
    assert client.get(f"/appointments/{appointment['id']}", headers=headers).status_code == 200


def test_appointment_stats(client, admin, appointment):
    _, headers = admin

    body = client.get("/admin/reports/appointment-stats", headers=headers).json()

    assert body["total_appointments"] == 1
    assert body["by_status"] == {"scheduled": 1}
    assert body["by_specialty"] == {"Cardiology": 1}
    assert body["total_doctors"] == 8
    assert body["available_doctors"] == 8


def test_revenue_counts_completed_visits(client, admin, appointment):
    _, headers = admin
    day = appointment["date_time"][:10]
    client.put(f"/admin/appointments/{appointment['id']}/status", headers=headers, json={"status": "completed"})

    body = client.get("/admin/reports/revenue", params={"start": day, "end": day}, headers=headers).json()

    assert body["total_revenue"] == 150
    assert body["completed_appointments"] == 1
    assert body["days"] == [{"day": day, "appointments": 1, "revenue": 150.0}]


def test_revenue_rejects_inverted_range(client, admin):
    _, headers = admin
    response = client.get("/admin/reports/revenue", params={"start": "2024-02-01", "end": "2024-01-01"}, headers=headers)
    assert response.status_code == 400
