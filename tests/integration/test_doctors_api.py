"""Doctor catalog endpoints."""
from bson import ObjectId


def names(response):
    return [d["name"] for d in response.json()["data"]]


def test_list_defaults_to_catalog_order(client, doctors):
    response = client.get("/doctors")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 8
    assert body["page"] == 1
    assert body["limit"] == 10
    assert body["total_pages"] == 1
    assert names(response)[0] == "Sarah Johnson"


def test_each_doctor_carries_upcoming_slots(client, doctors):
    data = client.get("/doctors").json()["data"]
    assert all(len(d["available_slots"]) == 3 for d in data)
    assert all(d["is_favorite"] is False for d in data)


def test_search_and_specialty(client, doctors):
    assert names(client.get("/doctors", params={"search": "joint"})) == ["David Kim"]
    assert names(client.get("/doctors", params={"specialty": "Neurology"})) == ["Michael Chen"]
    assert client.get("/doctors", params={"specialty": "all"}).json()["total"] == 8


def test_sorting(client, doctors):
    by_experience = names(client.get("/doctors", params={"sort": "experience"}))
    assert by_experience[:2] == ["David Kim", "Robert Taylor"]

    by_name = names(client.get("/doctors", params={"sort": "name"}))
    assert by_name == sorted(by_name, key=str.lower)


def test_pagination(client, doctors):
    page = client.get("/doctors", params={"limit": 3, "page": 3}).json()
    assert len(page["data"]) == 2
    assert page["total_pages"] == 3

    beyond = client.get("/doctors", params={"limit": 3, "page": 9}).json()
    assert beyond["data"] == []
    assert beyond["total"] == 8


def test_no_matches_is_an_empty_page(client, doctors):
    body = client.get("/doctors", params={"search": "veterinary"}).json()
    assert body == {"data": [], "total": 0, "page": 1, "limit": 10, "total_pages": 0}


def test_invalid_query_values_are_rejected(client, doctors):
    assert client.get("/doctors", params={"sort": "popularity"}).status_code == 422
    assert client.get("/doctors", params={"limit": 0}).status_code == 422
    assert client.get("/doctors", params={"page": 0}).status_code == 422


def test_specialties_are_sorted_and_unique(client, doctors):
    specialties = client.get("/doctors/specialties").json()
    assert specialties == sorted(set(specialties))
    assert "Cardiology" in specialties
    assert len(specialties) == 8


def test_get_doctor(client, doctor_id):
    response = client.get(f"/doctors/{doctor_id}")
    assert response.status_code == 200
    assert response.json()["specialty"] == "Cardiology"


def test_unknown_and_malformed_ids_are_404(client, doctors):
    assert client.get(f"/doctors/{ObjectId()}").status_code == 404
    assert client.get("/doctors/not-an-id").status_code == 404


def test_availability(client, doctor_id):
    body = client.get(f"/doctors/{doctor_id}/availability").json()
    assert body["available"] is True
    assert len(body["slots"]) == 3
    assert body["next_available"] == body["slots"][0]


def test_toggle_favorite(client, doctor_id, patient):
    _, headers = patient

    first = client.post(f"/doctors/{doctor_id}/favorite", headers=headers)
    assert first.json() == {"doctor_id": doctor_id, "is_favorite": True}

    listed = client.get("/doctors", headers=headers).json()["data"]
    assert [d["is_favorite"] for d in listed if d["id"] == doctor_id] == [True]
    assert client.get(f"/doctors/{doctor_id}", headers=headers).json()["is_favorite"] is True

    second = client.post(f"/doctors/{doctor_id}/favorite", headers=headers)
    assert second.json()["is_favorite"] is False


def test_favorite_requires_login(client, doctor_id):
    assert client.post(f"/doctors/{doctor_id}/favorite").status_code == 401
