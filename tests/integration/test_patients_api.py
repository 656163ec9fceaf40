"""Patient profile, dashboard and health records."""
from conftest import next_weekday_at, run

PROFILE = {
    "phone": "+1 555 0100",
    "address": "12 Elm Street",
    "blood_type": "O+",
    "date_of_birth": "1990-04-12",
    "emergency_contact": {"name": "John Doe", "relationship": "Spouse", "phone": "+1 555 0101"},
    "insurance": {"provider": "HealthPlus", "policy_number": "HP-123456"},
    "allergies": ["Penicillin"],
}


def test_empty_profile(client, patient):
    _, headers = patient
    body = client.get("/patients/me", headers=headers).json()
    assert body["name"] == "Jane Doe"
    assert body["email"] == "jane@example.com"
    assert body["phone"] is None
    assert body["allergies"] == []


def test_profile_is_encrypted_at_rest(client, db, patient):
    user, headers = patient

    response = client.put("/patients/me", headers=headers, json=PROFILE)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["phone"] == "+1 555 0100"
    assert body["emergency_contact"]["phone"] == "+1 555 0101"
    assert body["insurance"]["policy_number"] == "HP-123456"

    stored = run(db.patients.find_one({"user_id": user["id"]}))
    assert stored["phone"] != "+1 555 0100"
    assert stored["address"] != "12 Elm Street"
    assert stored["emergency_contact"]["phone"] != "+1 555 0101"
    assert stored["insurance"]["policy_number"] != "HP-123456"
    assert stored["blood_type"] == "O+"


def test_profile_update_is_partial(client, patient):
    _, headers = patient
    client.put("/patients/me", headers=headers, json=PROFILE)

    body = client.put("/patients/me", headers=headers, json={"address": "7 Oak Avenue"}).json()

    assert body["address"] == "7 Oak Avenue"
    assert body["phone"] == "+1 555 0100"


def test_invalid_blood_type(client, patient):
    _, headers = patient
    assert client.put("/patients/me", headers=headers, json={"blood_type": "C+"}).status_code == 422


def test_dashboard(client, patient, doctor_id):
    _, headers = patient
    slot = next_weekday_at(9, 30, weekday=1)
    client.post("/appointments", headers=headers, json={"doctor_id": doctor_id, "date_time": slot.isoformat()})
    client.post(f"/doctors/{doctor_id}/favorite", headers=headers)

    body = client.get("/patients/me/dashboard", headers=headers).json()

    assert body["upcoming"] == 1
    assert body["past"] == 0
    assert body["favorites"] == 1
    assert body["next_appointment"]["date_time"] == slot.isoformat()


def test_records_added_by_admin_show_up_for_patient(client, patient, admin):
    user, headers = patient
    _, admin_headers = admin

    for visit_date in ("2024-01-10", "2024-03-02"):
        response = client.post(f"/admin/patients/{user['id']}/medical-history", headers=admin_headers, json={
            "visit_date": visit_date,
            "doctor": "Sarah Johnson",
            "specialty": "Cardiology",
            "diagnosis": "Hypertension",
        })
        assert response.status_code == 201, response.text
    client.post(f"/admin/patients/{user['id']}/prescriptions", headers=admin_headers, json={
        "medication": "Lisinopril",
        "dosage": "10mg",
        "frequency": "Once daily",
        "start_date": "2024-01-10",
        "prescribed_by": "Sarah Johnson",
    })
    client.post(f"/admin/patients/{user['id']}/test-results", headers=admin_headers, json={
        "test_date": "2024-01-10",
        "test_name": "Lipid Panel",
        "ordered_by": "Sarah Johnson",
    })

    history = client.get("/patients/me/medical-history", headers=headers).json()
    assert [r["visit_date"] for r in history] == ["2024-03-02", "2024-01-10"]
    assert client.get("/patients/me/prescriptions", headers=headers).json()[0]["refills"] == 0
    assert client.get("/patients/me/test-results", headers=headers).json()[0]["status"] == "Completed"


def test_records_are_private(client, patient, register, admin):
    user, _ = patient
    _, admin_headers = admin
    client.post(f"/admin/patients/{user['id']}/test-results", headers=admin_headers, json={
        "test_date": "2024-01-10", "test_name": "CBC", "ordered_by": "Sarah Johnson",
    })

    _, other = register(name="John Roe", email="john@example.com")
    assert client.get("/patients/me/test-results", headers=other).json() == []


def test_records_for_unknown_patient(client, admin):
    _, admin_headers = admin
    response = client.post("/admin/patients/not-an-id/test-results", headers=admin_headers, json={
        "test_date": "2024-01-10", "test_name": "CBC", "ordered_by": "Sarah Johnson",
    })
    assert response.status_code == 404


def test_nested_update_keeps_unsent_fields(client, db, patient):
    user, headers = patient
    client.put("/patients/me", headers=headers, json=PROFILE)

    body = client.put("/patients/me", headers=headers, json={"insurance": {"expiry_date": "2030-01-01"}}).json()

    assert body["insurance"] == {"provider": "HealthPlus", "policy_number": "HP-123456", "expiry_date": "2030-01-01"}
    assert body["emergency_contact"]["phone"] == "+1 555 0101"

    body = client.put("/patients/me", headers=headers, json={"emergency_contact": {"name": "Mary Doe"}}).json()

    assert body["emergency_contact"] == {"name": "Mary Doe", "relationship": "Spouse", "phone": "+1 555 0101"}
    stored = run(db.patients.find_one({"user_id": user["id"]}))
    assert stored["emergency_contact"]["phone"] != "+1 555 0101"


def test_nested_object_can_be_cleared(client, patient):
    _, headers = patient
    client.put("/patients/me", headers=headers, json=PROFILE)

    body = client.put("/patients/me", headers=headers, json={"insurance": None}).json()
    assert body["insurance"] is None

    body = client.put("/patients/me", headers=headers, json={"insurance": {"provider": "CarePlan"}}).json()
    assert body["insurance"]["provider"] == "CarePlan"
    assert body["insurance"]["policy_number"] is None


def test_dashboard_ignores_cancelled_visits(client, patient, doctor_id):
    _, headers = patient
    cancelled = client.post("/appointments", headers=headers, json={
        "doctor_id": doctor_id, "date_time": next_weekday_at(9, 0, weekday=1).isoformat(),
    }).json()
    client.post(f"/appointments/{cancelled['id']}/cancel", headers=headers)

    body = client.get("/patients/me/dashboard", headers=headers).json()
    assert body["upcoming"] == 0
    assert body["next_appointment"] is None

    later = next_weekday_at(14, 0, weekday=3)
    client.post("/appointments", headers=headers, json={"doctor_id": doctor_id, "date_time": later.isoformat()})

    body = client.get("/patients/me/dashboard", headers=headers).json()
    assert body["upcoming"] == 1
    assert body["next_appointment"]["date_time"] == later.isoformat()
